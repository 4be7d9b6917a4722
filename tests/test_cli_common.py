"""Tests for CLI common helpers."""

from __future__ import annotations

from unittest.mock import MagicMock

import click
import pytest

from batchup.cli.common import Context, ExitCode, handle_errors, require_auth
from batchup.core.config import Config, Profile
from batchup.core.exceptions import ConfigurationError, StorageRejectedError


def _protected_command(ctx: Context) -> str:
    return "ok"


def _context(token: str | None) -> Context:
    ctx = Context()
    ctx.config = Config(profiles={"default": Profile(url="https://example.org")})
    ctx.auth_manager = MagicMock()
    ctx.auth_manager.get_session_token.return_value = token
    return ctx


def test_require_auth_builds_client_with_session_token():
    ctx = _context("cached-token")

    result = require_auth(_protected_command)(ctx)

    assert result == "ok"
    assert ctx.client is not None
    assert ctx.client.is_authenticated
    ctx.auth_manager.get_session_token.assert_called_once_with("https://example.org")


def test_require_auth_raises_without_token():
    ctx = _context(None)

    with pytest.raises(click.ClickException, match="Not authenticated"):
        require_auth(_protected_command)(ctx)


def test_require_auth_raises_for_missing_profile():
    ctx = _context("cached-token")
    ctx.profile_name = "ghost"

    with pytest.raises(click.ClickException, match="Profile 'ghost' not found"):
        require_auth(_protected_command)(ctx)


def test_get_profile_points_at_config_init():
    ctx = Context()
    ctx.config = Config()

    with pytest.raises(ConfigurationError, match="batchup config init"):
        ctx.get_profile()


def test_handle_errors_exits_on_batchup_error():
    @handle_errors
    def failing() -> None:
        raise StorageRejectedError("a.pdf", 403, "AccessDenied")

    with pytest.raises(SystemExit) as exc_info:
        failing()

    assert exc_info.value.code == ExitCode.GENERAL_ERROR


def test_handle_errors_passes_click_exceptions_through():
    @handle_errors
    def aborted() -> None:
        raise click.Abort()

    with pytest.raises(click.Abort):
        aborted()


def test_handle_errors_reports_unexpected_errors():
    @handle_errors
    def broken() -> None:
        raise KeyError("boom")

    with pytest.raises(SystemExit) as exc_info:
        broken()

    assert exc_info.value.code == ExitCode.GENERAL_ERROR
