"""Config commands for batchup."""

from __future__ import annotations

import click

from batchup.core.config import CONFIG_FILE, VISIBILITY_CHOICES, Config
from batchup.core.exceptions import BatchupError
from batchup.core.output import (
    OutputFormat,
    print_error,
    print_key_value,
    print_output,
    print_success,
)
from batchup.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_TRANSFER_DEADLINE_SECONDS
from batchup.core.validation import validate_server_url


def _load_config() -> Config:
    try:
        return Config.load()
    except BatchupError as e:
        print_error(f"Failed to load config: {e}")
        raise SystemExit(1) from e


def _validated_url(url: str) -> str:
    try:
        return validate_server_url(url)
    except BatchupError as e:
        print_error(str(e))
        raise SystemExit(1) from e


@click.group()
def config() -> None:
    """Manage batchup configuration."""
    pass


@config.command("init")
@click.option("--url", prompt="Metadata service URL", help="Metadata service base URL")
@click.option("--profile", default="default", help="Profile name")
@click.option(
    "--visibility",
    type=click.Choice(VISIBILITY_CHOICES),
    default="private",
    help="Default visibility for uploads",
)
@click.option("--force", is_flag=True, help="Overwrite existing config")
def config_init(url: str, profile: str, visibility: str, force: bool) -> None:
    """Create configuration file with a new profile.

    Example:
        batchup config init --url https://materials.example.edu
    """
    url = _validated_url(url)

    if CONFIG_FILE.exists() and not force:
        cfg = _load_config()
        if cfg.has_profile(profile):
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config()

    cfg.add_profile(name=profile, url=url, default_visibility=visibility)

    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value(
        {
            "profile": profile,
            "url": url,
            "default_visibility": visibility,
        }
    )


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    cfg = _load_config()

    if not cfg.profiles:
        print_error("No configuration found. Run 'batchup config init' first.")
        raise SystemExit(1)

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "output_format": cfg.output_format,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        data["profile_details"] = {name: p.to_dict() for name, p in cfg.profiles.items()}
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")

    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
                "transfer_deadline": f"{profile.transfer_deadline}s",
                "default_visibility": profile.default_visibility,
            }
        )
        click.echo()


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        batchup config use-context production
    """
    cfg = _load_config()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save()

    print_success(f"Switched to profile '{profile}'")


@config.command("add-profile")
@click.argument("name")
@click.option("--url", required=True, help="Metadata service base URL")
@click.option(
    "--timeout",
    type=click.IntRange(min=1),
    default=DEFAULT_HTTP_TIMEOUT_SECONDS,
    help="Request timeout in seconds",
)
@click.option(
    "--transfer-deadline",
    type=click.IntRange(min=1),
    default=DEFAULT_TRANSFER_DEADLINE_SECONDS,
    help="Deadline for each storage upload in seconds",
)
@click.option(
    "--visibility",
    type=click.Choice(VISIBILITY_CHOICES),
    default="private",
    help="Default visibility for uploads",
)
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
def config_add_profile(
    name: str,
    url: str,
    timeout: int,
    transfer_deadline: int,
    visibility: str,
    no_verify_ssl: bool,
) -> None:
    """Add a new profile.

    Example:
        batchup config add-profile staging --url https://staging.materials.example.edu
    """
    url = _validated_url(url)
    cfg = _load_config()

    if cfg.has_profile(name):
        print_error(f"Profile '{name}' already exists.")
        raise SystemExit(1)

    cfg.add_profile(
        name=name,
        url=url,
        timeout=timeout,
        transfer_deadline=transfer_deadline,
        default_visibility=visibility,
        verify_ssl=not no_verify_ssl,
    )
    cfg.save()

    print_success(f"Profile '{name}' added")


@config.command("remove-profile")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_remove_profile(name: str, yes: bool) -> None:
    """Remove a profile.

    Example:
        batchup config remove-profile staging
    """
    cfg = _load_config()

    if not cfg.has_profile(name):
        print_error(f"Profile '{name}' not found.")
        raise SystemExit(1)

    if name == cfg.default_profile:
        print_error("Cannot remove the default profile. Switch to another profile first.")
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Remove profile '{name}'?", abort=True)

    cfg.remove_profile(name)
    cfg.save()

    print_success(f"Profile '{name}' removed")
