"""Input validation helpers for batchup."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from batchup.core.exceptions import ConfigurationError, InvalidURLError, ValidationError
from batchup.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS

ALLOWED_SCHEMES = ("http", "https")
MAX_EXPIRY_MINUTES = 60


def validate_server_url(url: str) -> str:
    """Validate and normalize a server base URL.

    Args:
        url: URL to validate.

    Returns:
        URL without surrounding whitespace or trailing slashes.

    Raises:
        InvalidURLError: If the URL is empty, lacks a scheme or hostname,
            or uses an unsupported scheme.
    """
    if not url or not str(url).strip():
        raise InvalidURLError(str(url), "URL cannot be empty")

    url = str(url).strip()
    parsed = urlparse(url)

    if not parsed.scheme or "://" not in url:
        raise InvalidURLError(url, "URL must include scheme (http:// or https://)")
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidURLError(url, f"Unsupported scheme: {parsed.scheme}")
    if not parsed.hostname:
        raise InvalidURLError(url, "URL must include hostname")

    return url.rstrip("/")


def validate_timeout(
    value: Any,
    *,
    default: int = DEFAULT_HTTP_TIMEOUT_SECONDS,
    field: str = "timeout",
) -> int:
    """Validate a timeout in seconds.

    Args:
        value: Timeout value (int or numeric string). None selects the default.
        default: Value used when ``value`` is None.
        field: Setting name used in error messages.

    Returns:
        Timeout in seconds.

    Raises:
        ConfigurationError: If the value is not an integer or is below 1.
    """
    if value is None:
        return default
    try:
        timeout = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Timeout must be a valid integer: {value}", field=field, value=value
        )
    if timeout < 1:
        raise ConfigurationError(
            "Timeout must be at least 1 second", field=field, value=value
        )
    return timeout


def validate_expiry_minutes(value: Any) -> int:
    """Validate a download link lifetime in minutes (1..60)."""
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Expiry must be a whole number of minutes: {value}",
            field="expiry_minutes",
            value=value,
        )
    if not 1 <= minutes <= MAX_EXPIRY_MINUTES:
        raise ValidationError(
            f"Expiry must be between 1 and {MAX_EXPIRY_MINUTES} minutes",
            field="expiry_minutes",
            value=value,
        )
    return minutes


def validate_record_id(record_id: str) -> str:
    """Validate a record identifier used in a URL path."""
    record_id = (record_id or "").strip()
    if not record_id:
        raise ValidationError("Record ID cannot be empty", field="record_id")
    if "/" in record_id or "?" in record_id or "#" in record_id:
        raise ValidationError(
            f"Invalid record ID: {record_id}", field="record_id", value=record_id
        )
    return record_id
