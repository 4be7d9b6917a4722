"""Record service: list, link and delete records that were already uploaded."""

from __future__ import annotations

import logging

from batchup.core.client import DOWNLOAD_URL_PATH, RECORDS_PATH, response_detail
from batchup.core.exceptions import RecordServiceError
from batchup.core.validation import validate_expiry_minutes, validate_record_id
from batchup.models.record import DownloadLink, RecordInfo

from .base import BaseService

logger = logging.getLogger(__name__)


class RecordService(BaseService):
    """Operations on finalized records."""

    async def list_records(self) -> list[RecordInfo]:
        """List records visible to the caller.

        Raises:
            RecordServiceError: On a non-success HTTP status.
        """
        resp = await self.client.get(RECORDS_PATH)
        if not resp.is_success:
            raise RecordServiceError("list", resp.status_code, response_detail(resp))

        payload = self._payload(resp)
        if not isinstance(payload, list):
            return []
        return [RecordInfo.model_validate(r) for r in payload if isinstance(r, dict)]

    async def get_download_link(self, record_id: str, expiry_minutes: int = 60) -> DownloadLink:
        """Get a time-limited download URL.

        Args:
            record_id: Record identifier.
            expiry_minutes: Link lifetime, 1 to 60 minutes.

        Returns:
            DownloadLink for the stored object.

        Raises:
            RecordServiceError: On a non-success status or a body without a URL.
        """
        record_id = validate_record_id(record_id)
        expiry_minutes = validate_expiry_minutes(expiry_minutes)

        resp = await self.client.get(
            self._build_path(DOWNLOAD_URL_PATH, record_id),
            params={"expiryMinutes": expiry_minutes},
        )
        if not resp.is_success:
            raise RecordServiceError("download link", resp.status_code, response_detail(resp))

        payload = self._payload(resp)
        if not isinstance(payload, dict) or not payload.get("url"):
            raise RecordServiceError(
                "download link", resp.status_code, "response did not include a URL"
            )
        return DownloadLink.model_validate(payload)

    async def delete_record(self, record_id: str) -> bool:
        """Delete a record and its stored object.

        Raises:
            RecordServiceError: On a non-success HTTP status.
        """
        record_id = validate_record_id(record_id)
        resp = await self.client.delete(self._build_path(RECORDS_PATH, record_id))
        if not resp.is_success:
            raise RecordServiceError("delete", resp.status_code, response_detail(resp))
        logger.info("Deleted record %s", record_id)
        return True
