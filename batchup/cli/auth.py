"""Authentication commands for batchup."""

from __future__ import annotations

import click

from batchup.core.auth import AuthManager
from batchup.core.config import Config
from batchup.core.exceptions import ConfigurationError, ProfileNotFoundError
from batchup.core.output import (
    print_error,
    print_json,
    print_key_value,
    print_success,
    print_warning,
)


def _load_profile(profile_name: str | None):
    try:
        config = Config.load()
        return config, config.get_profile(profile_name)
    except (ProfileNotFoundError, ConfigurationError) as e:
        print_error(str(e))
        raise SystemExit(1) from e


@click.group()
def auth() -> None:
    """Manage the cached session token."""
    pass


@auth.command("login")
@click.option("--profile", "-p", "profile_name", help="Profile to authenticate")
@click.option("--token", help="Bearer token (will prompt if not provided)")
@click.option("--username", "-u", help="Name shown by 'auth status'")
@click.option("--output", "-o", type=click.Choice(["table", "json"]), default="table")
def auth_login(
    profile_name: str | None,
    token: str | None,
    username: str | None,
    output: str,
) -> None:
    """Cache a session token for a profile.

    The token is issued by your identity provider; batchup stores it in
    ~/.config/batchup/.session (mode 0600) for 12 hours.

    Example:
        batchup auth login
        batchup auth login --profile staging --token "$TOKEN"
    """
    _, profile = _load_profile(profile_name)
    auth_mgr = AuthManager()

    if not token:
        token = click.prompt("Token", hide_input=True)
    token = token.strip()
    if not token:
        print_error("Token cannot be empty")
        raise SystemExit(1)

    session = auth_mgr.save_session(token=token, url=profile.url, username=username)

    if output == "json":
        print_json(
            {
                "status": "authenticated",
                "username": username,
                "url": profile.url,
                "expires_at": session.expires_at.isoformat() if session.expires_at else None,
            }
        )
    else:
        print_success(f"Session cached for {profile.url}")
        click.echo(f"Session cached until {session.expires_at}")


@auth.command("logout")
@click.option("--profile", "-p", "profile_name", help="Profile to logout")
def auth_logout(profile_name: str | None) -> None:
    """Clear cached session.

    Example:
        batchup auth logout
    """
    _load_profile(profile_name)
    auth_mgr = AuthManager()

    if auth_mgr.clear_session():
        print_success("Logged out")
    else:
        print_warning("No cached session found")

    if auth_mgr.get_token_from_env():
        print_warning("BATCHUP_TOKEN is still set in the environment")


@auth.command("status")
@click.option("--profile", "-p", "profile_name", help="Profile to check")
@click.option("--output", "-o", type=click.Choice(["table", "json"]), default="table")
def auth_status(profile_name: str | None, output: str) -> None:
    """Check authentication status.

    Example:
        batchup auth status
        batchup auth status --profile staging
    """
    config, profile = _load_profile(profile_name)
    auth_mgr = AuthManager()

    session_info = auth_mgr.get_session_info(profile.url)
    env_token = auth_mgr.get_token_from_env()

    status = {
        "url": profile.url,
        "env_token": "(set)" if env_token else "(not set)",
        "session_cached": session_info is not None,
    }

    if session_info:
        status.update(
            {
                "session_username": session_info["username"],
                "session_created": session_info["created_at"],
                "session_expires": session_info["expires_at"],
                "session_expired": session_info["is_expired"],
            }
        )

    if output == "json":
        print_json(status)
    else:
        print_key_value(status, title=f"Auth Status: {profile_name or config.default_profile}")
