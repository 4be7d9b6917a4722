"""Tests for batchup.core.validation module."""

from __future__ import annotations

import pytest

from batchup.core.exceptions import ConfigurationError, InvalidURLError, ValidationError
from batchup.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from batchup.core.validation import (
    validate_expiry_minutes,
    validate_record_id,
    validate_server_url,
    validate_timeout,
)

# =============================================================================
# URL Validation Tests
# =============================================================================


class TestValidateServerUrl:
    """Tests for validate_server_url."""

    def test_valid_https_url(self):
        assert validate_server_url("https://materials.example.edu") == (
            "https://materials.example.edu"
        )

    def test_valid_http_url(self):
        assert validate_server_url("http://localhost:5000") == "http://localhost:5000"

    def test_strips_trailing_slash_and_whitespace(self):
        assert validate_server_url("  https://m.example.edu///  ") == "https://m.example.edu"

    @pytest.mark.parametrize(
        "url, reason",
        [
            ("", "cannot be empty"),
            ("materials.example.edu", "must include scheme"),
            ("ftp://materials.example.edu", "Unsupported scheme"),
            ("https://", "must include hostname"),
        ],
    )
    def test_invalid(self, url, reason):
        with pytest.raises(InvalidURLError, match=reason):
            validate_server_url(url)


# =============================================================================
# Timeout Validation Tests
# =============================================================================


class TestValidateTimeout:
    """Tests for validate_timeout."""

    def test_none_returns_default(self):
        assert validate_timeout(None) == DEFAULT_HTTP_TIMEOUT_SECONDS
        assert validate_timeout(None, default=60) == 60

    def test_numeric_string(self):
        assert validate_timeout("45") == 45

    def test_not_a_number(self):
        with pytest.raises(ConfigurationError, match="valid integer"):
            validate_timeout("abc")

    def test_below_one(self):
        with pytest.raises(ConfigurationError, match="at least"):
            validate_timeout(0)


# =============================================================================
# Record Validation Tests
# =============================================================================


class TestValidateExpiryMinutes:
    """Tests for validate_expiry_minutes."""

    @pytest.mark.parametrize("value", [1, 30, 60, "15"])
    def test_valid(self, value):
        assert validate_expiry_minutes(value) == int(value)

    @pytest.mark.parametrize("value", [0, 61, -5, None, "an hour"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_expiry_minutes(value)


class TestValidateRecordId:
    """Tests for validate_record_id."""

    def test_valid(self):
        assert validate_record_id(" 64f1c2ab ") == "64f1c2ab"

    @pytest.mark.parametrize("value", ["", "   ", "a/b", "a?b", "a#b"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            validate_record_id(value)
