"""Upload confirmation: finalize a record once its bytes are in storage."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from batchup.core.client import CONFIRM_UPLOAD_PATH, response_detail
from batchup.core.exceptions import ConfirmationError
from batchup.models.record import RecordInfo
from batchup.models.upload import UploadItem

from .base import BaseService

logger = logging.getLogger(__name__)


class ConfirmationClient(BaseService):
    """Tells the metadata service that a direct transfer succeeded."""

    async def confirm(self, record_id: str, item: UploadItem) -> RecordInfo:
        """Finalize the provisional record ``record_id`` with the item's metadata.

        Visibility is not sent again; it was fixed by the credential request.

        Raises:
            ConfirmationError: On a non-success HTTP status.
        """
        body = {
            "recordId": record_id,
            "name": item.display_name,
            "description": item.description,
        }
        resp = await self.client.post(CONFIRM_UPLOAD_PATH, json=body)

        if not resp.is_success:
            detail = response_detail(resp)
            logger.error("Confirmation of %s failed: %s", item.filename, detail)
            raise ConfirmationError(item.filename, resp.status_code, detail)

        payload = self._payload(resp)
        record = None
        if isinstance(payload, dict):
            try:
                record = RecordInfo.model_validate(payload)
            except PydanticValidationError:
                logger.warning("Unrecognized confirmation body for %s", item.filename)

        # A 2xx without a usable body still finalizes the record
        if record is None:
            record = RecordInfo(id=record_id, name=item.display_name, description=item.description)
        elif not record.id:
            record.id = record_id

        logger.info("Confirmed %s as record %s", item.filename, record.id)
        return record
