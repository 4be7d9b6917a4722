"""Session token caching for batchup.

Tokens are issued by the identity layer; batchup only stores and replays them.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

from batchup.core.config import CONFIG_DIR, ENV_TOKEN

# =============================================================================
# Constants
# =============================================================================

SESSION_CACHE_FILE = CONFIG_DIR / ".session"
SESSION_EXPIRY_HOURS = 12


# =============================================================================
# Session Cache
# =============================================================================


@dataclass
class CachedSession:
    """Cached bearer token with metadata."""

    token: str
    url: str
    created_at: datetime
    username: str | None = None
    expires_at: datetime | None = None

    def is_expired(self) -> bool:
        """Check if session has expired."""
        if self.expires_at:
            return datetime.now() >= self.expires_at
        return False

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "url": self.url,
            "username": self.username,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CachedSession:
        return cls(
            token=data["token"],
            url=data["url"],
            username=data.get("username"),
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=(
                datetime.fromisoformat(data["expires_at"]) if data.get("expires_at") else None
            ),
        )


# =============================================================================
# AuthManager
# =============================================================================


class AuthManager:
    """Stores and resolves the caller's session token."""

    def __init__(self, cache_file: Path | None = None):
        """Initialize auth manager.

        Args:
            cache_file: Path to session cache file.
        """
        self.cache_file = cache_file or SESSION_CACHE_FILE

    def get_token_from_env(self) -> str | None:
        return os.getenv(ENV_TOKEN)

    def save_session(
        self,
        token: str,
        url: str,
        username: str | None = None,
        expiry_hours: int = SESSION_EXPIRY_HOURS,
    ) -> CachedSession:
        """Save session token to cache.

        Args:
            token: Bearer token.
            url: Metadata service URL the token belongs to.
            username: Optional display name for status output.
            expiry_hours: Hours until the cached token is discarded.

        Returns:
            Cached session object.
        """
        now = datetime.now()
        session = CachedSession(
            token=token,
            url=url,
            username=username,
            created_at=now,
            expires_at=now + timedelta(hours=expiry_hours),
        )

        self.cache_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.cache_file, "w") as f:
            json.dump(session.to_dict(), f)

        # Owner read/write only
        try:
            os.chmod(self.cache_file, 0o600)
        except OSError:
            pass

        return session

    def load_session(self, url: str | None = None) -> CachedSession | None:
        """Load cached session token.

        Args:
            url: If provided, only a session for that URL is returned.

        Returns:
            Cached session if valid, None otherwise.
        """
        if not self.cache_file.exists():
            return None

        try:
            with open(self.cache_file) as f:
                data = json.load(f)
            session = CachedSession.from_dict(data)
        except (json.JSONDecodeError, KeyError, ValueError):
            self.clear_session()
            return None

        if url and session.url != url:
            return None

        if session.is_expired():
            self.clear_session()
            return None

        return session

    def clear_session(self) -> bool:
        """Clear cached session. Returns True if a cache file was removed."""
        if self.cache_file.exists():
            try:
                self.cache_file.unlink()
                return True
            except OSError:
                pass
        return False

    def get_session_token(self, url: str | None = None) -> str | None:
        """Get session token from environment or cache.

        Priority:
        1. Environment variable (BATCHUP_TOKEN)
        2. Cached session

        Args:
            url: Optional URL to match for cached session.

        Returns:
            Session token if available.
        """
        if token := self.get_token_from_env():
            return token

        if session := self.load_session(url):
            return session.token

        return None

    def get_session_info(self, url: str | None = None) -> dict | None:
        """Get session information for display."""
        session = self.load_session(url)
        if not session:
            return None

        return {
            "url": session.url,
            "username": session.username,
            "created_at": session.created_at.isoformat(),
            "expires_at": session.expires_at.isoformat() if session.expires_at else None,
            "is_expired": session.is_expired(),
        }
