"""Base service with common helpers for metadata service calls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from batchup.models.base import unwrap_envelope

if TYPE_CHECKING:
    from batchup.core.client import ApiClient


class BaseService:
    """Base class for services that talk to the metadata service."""

    def __init__(self, client: "ApiClient") -> None:
        """Initialize service with an authenticated client.

        Args:
            client: ApiClient carrying the caller's session token.
        """
        self.client = client

    @staticmethod
    def _payload(resp: httpx.Response) -> Any:
        """Decode a JSON response and strip the ``data`` envelope.

        Returns:
            Decoded payload, or None if the body is not JSON.
        """
        try:
            body = resp.json()
        except ValueError:
            return None
        return unwrap_envelope(body)

    def _build_path(self, *parts: str) -> str:
        """Build API path from parts."""
        return "/" + "/".join(p.strip("/") for p in parts if p)
