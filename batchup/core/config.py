"""Configuration management for batchup.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from batchup.core.exceptions import ConfigurationError, ProfileNotFoundError
from batchup.core.timeouts import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_TRANSFER_DEADLINE_SECONDS,
)
from batchup.core.validation import validate_timeout

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "batchup"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Environment variable names
ENV_URL = "BATCHUP_URL"
ENV_TOKEN = "BATCHUP_TOKEN"
ENV_PROFILE = "BATCHUP_PROFILE"
ENV_VERIFY_SSL = "BATCHUP_VERIFY_SSL"
ENV_TIMEOUT = "BATCHUP_TIMEOUT"
ENV_TRANSFER_DEADLINE = "BATCHUP_TRANSFER_DEADLINE"

VISIBILITY_CHOICES = ("private", "public")


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Connection settings for one metadata service deployment."""

    url: str
    verify_ssl: bool = True
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    transfer_deadline: int = DEFAULT_TRANSFER_DEADLINE_SECONDS
    default_visibility: str = "private"

    def __post_init__(self) -> None:
        if self.default_visibility not in VISIBILITY_CHOICES:
            raise ConfigurationError(
                f"default_visibility must be one of {', '.join(VISIBILITY_CHOICES)}",
                field="default_visibility",
                value=self.default_visibility,
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "transfer_deadline": self.transfer_deadline,
            "default_visibility": self.default_visibility,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            url=data.get("url", ""),
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_HTTP_TIMEOUT_SECONDS),
            transfer_deadline=data.get("transfer_deadline", DEFAULT_TRANSFER_DEADLINE_SECONDS),
            default_visibility=data.get("default_visibility", "private"),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    output_format: str = "table"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.

        Raises:
            ConfigurationError: If the file exists but cannot be parsed.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")
                config.output_format = data.get("output_format", "table")

                for name, pdata in (data.get("profiles") or {}).items():
                    config.profiles[name] = Profile.from_dict(pdata or {})
            except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
                raise ConfigurationError(f"Failed to load config: {e}") from e

        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            timeout = validate_timeout(os.getenv(ENV_TIMEOUT), field=ENV_TIMEOUT)
            deadline = validate_timeout(
                os.getenv(ENV_TRANSFER_DEADLINE),
                default=DEFAULT_TRANSFER_DEADLINE_SECONDS,
                field=ENV_TRANSFER_DEADLINE,
            )

            config.profiles["default"] = Profile(
                url=url,
                verify_ssl=verify_ssl,
                timeout=timeout,
                transfer_deadline=deadline,
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file.

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(self, name: str, url: str, **settings: Any) -> Profile:
        """Add or replace a profile.

        Args:
            name: Profile name.
            url: Metadata service base URL.
            **settings: Remaining Profile fields.

        Returns:
            Created profile.
        """
        profile = Profile(url=url, **settings)
        self.profiles[name] = profile
        return profile

    def remove_profile(self, name: str) -> bool:
        """Remove a profile. Returns False if it didn't exist."""
        if name in self.profiles:
            del self.profiles[name]
            return True
        return False

    def set_default_profile(self, name: str) -> None:
        """Set the default profile.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        self.default_profile = name


def get_token() -> Optional[str]:
    """Get session token from environment variable."""
    return os.getenv(ENV_TOKEN)
