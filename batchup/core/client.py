"""HTTP transports for the metadata service and object storage.

Two distinct clients are used and never shared:

- ``ApiClient`` talks to the metadata service and attaches the caller's
  bearer token to every request.
- ``create_bare_client`` builds the client used for direct transfers to
  storage. It carries no credentials of any kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from batchup.core.exceptions import NetworkError, ServerUnreachableError
from batchup.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from batchup.core.validation import validate_server_url

# =============================================================================
# Constants
# =============================================================================

UPLOAD_URL_PATH = "/api/materials/upload-url"
CONFIRM_UPLOAD_PATH = "/api/materials/confirm-upload"
RECORDS_PATH = "/api/materials"
DOWNLOAD_URL_PATH = "/api/materials/download-url"


# =============================================================================
# ApiClient
# =============================================================================


@dataclass
class ApiClient:
    """Authenticated async client for the metadata service.

    Requests are sent once. Responses are returned whatever their status;
    classifying non-success answers is up to the caller.
    """

    base_url: str
    token: str | None = None
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    verify_ssl: bool = True
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)
    _client: httpx.AsyncClient | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                verify=self.verify_ssl,
                transport=self.transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    @property
    def is_authenticated(self) -> bool:
        """Check if client holds a session token."""
        return bool(self.token)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
    ) -> httpx.Response:
        """Send one request to the metadata service.

        Args:
            method: HTTP method.
            path: API path relative to ``base_url``.
            params: Query parameters.
            json: JSON body.

        Returns:
            HTTP response, success or not.

        Raises:
            ServerUnreachableError: If the connection could not be made.
            NetworkError: On timeouts and other transport failures.
        """
        client = self._get_client()
        try:
            return await client.request(method, path, params=params, json=json)
        except httpx.ConnectError as e:
            raise ServerUnreachableError(self.base_url) from e
        except httpx.TimeoutException as e:
            raise NetworkError(self.base_url, f"Timeout after {self.timeout}s") from e
        except httpx.TransportError as e:
            raise NetworkError(self.base_url, str(e) or type(e).__name__) from e

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> httpx.Response:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, *, json: Any | None = None) -> httpx.Response:
        return await self.request("POST", path, json=json)

    async def delete(self, path: str) -> httpx.Response:
        return await self.request("DELETE", path)


# =============================================================================
# Bare client
# =============================================================================


def create_bare_client(
    *,
    verify_ssl: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create a client for direct transfers to presigned storage URLs.

    The client has no auth, no default headers and ignores the environment
    (netrc, proxy credentials). Timeouts are left to the caller's deadline.

    Args:
        verify_ssl: Whether to verify TLS certificates.
        transport: Optional transport override (tests).

    Returns:
        Unauthenticated async HTTP client.
    """
    return httpx.AsyncClient(
        timeout=None,
        verify=verify_ssl,
        trust_env=False,
        follow_redirects=False,
        transport=transport,
    )


def response_detail(resp: httpx.Response) -> str:
    """Return the response body verbatim for use as an error detail."""
    try:
        text = resp.text
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return f"HTTP {resp.status_code}"
    if text.strip():
        return text
    return resp.reason_phrase or f"HTTP {resp.status_code}"
