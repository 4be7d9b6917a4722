"""Direct transfer of file bytes to a presigned storage URL."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from batchup.core.client import response_detail
from batchup.core.exceptions import (
    StorageRejectedError,
    TransferNetworkError,
    TransferTimeoutError,
)
from batchup.core.logging import redact_url
from batchup.core.timeouts import DEFAULT_TRANSFER_DEADLINE_SECONDS
from batchup.models.upload import Payload

logger = logging.getLogger(__name__)


class DirectTransferClient:
    """PUTs raw bytes to storage under a hard deadline.

    The HTTP client passed in must be the bare one from
    ``batchup.core.client.create_bare_client``: the destination URL carries
    its own scoped authorization and no session credentials may travel with it.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        deadline: float = DEFAULT_TRANSFER_DEADLINE_SECONDS,
    ) -> None:
        self.http = http
        self.deadline = deadline

    async def transfer(self, destination: str, payload: Payload) -> None:
        """Upload ``payload`` to ``destination``.

        The only header set is ``Content-Type``; it must match the type
        declared in the credential request or the signature check fails.
        The file is read synchronously before the deadline starts, so a very
        large file holds the event loop (and the elapsed-time ticks) meanwhile.

        Args:
            destination: Presigned PUT URL.
            payload: File bytes and declared content type.

        Raises:
            TransferTimeoutError: If the deadline passes before storage answers.
            TransferNetworkError: If storage cannot be reached.
            StorageRejectedError: If storage answers with a non-success status.
        """
        content = payload.read()
        logger.info(
            "PUT %s (%d bytes, %s) -> %s",
            payload.filename,
            len(content),
            payload.content_type,
            redact_url(destination),
        )

        start = time.monotonic()
        try:
            resp = await asyncio.wait_for(
                self.http.put(
                    destination,
                    content=content,
                    headers={"Content-Type": payload.content_type},
                ),
                timeout=self.deadline,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error("Transfer of %s cancelled after %gs", payload.filename, self.deadline)
            raise TransferTimeoutError(payload.filename, self.deadline) from e
        except httpx.TransportError as e:
            logger.error("Transfer of %s failed: %s", payload.filename, e)
            raise TransferNetworkError(payload.filename, str(e) or type(e).__name__) from e

        if not resp.is_success:
            detail = response_detail(resp)
            logger.error("Storage rejected %s: %s %s", payload.filename, resp.status_code, detail)
            raise StorageRejectedError(payload.filename, resp.status_code, detail)

        logger.info(
            "Stored %s in %.2fs (HTTP %d)",
            payload.filename,
            time.monotonic() - start,
            resp.status_code,
        )
