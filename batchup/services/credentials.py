"""Credential request: ask the metadata service where to put one file."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from batchup.core.client import UPLOAD_URL_PATH, response_detail
from batchup.core.exceptions import CredentialRequestError, IncompleteServerResponseError
from batchup.core.logging import redact_url
from batchup.models.record import REQUIRED_INSTRUCTION_FIELDS, TransferInstructions
from batchup.models.upload import UploadItem

from .base import BaseService

logger = logging.getLogger(__name__)


class CredentialRequester(BaseService):
    """Obtains a presigned destination and provisional record for an item."""

    async def request(self, item: UploadItem) -> TransferInstructions:
        """Request transfer instructions for ``item``.

        Args:
            item: Item whose extension, content type and metadata are sent.

        Returns:
            Instructions with upload URL, record ID and stored filename all set.

        Raises:
            CredentialRequestError: On a non-success HTTP status.
            IncompleteServerResponseError: If a mandatory field is absent or empty.
        """
        body = {
            "extension": item.extension,
            "contentType": item.content_type,
            "name": item.display_name,
            "description": item.description,
            "visibility": item.visibility.value,
        }
        logger.debug("Requesting upload URL for %s: %s", item.filename, body)

        resp = await self.client.post(UPLOAD_URL_PATH, json=body)

        if not resp.is_success:
            detail = response_detail(resp)
            logger.error("Upload URL request for %s failed: %s", item.filename, detail)
            raise CredentialRequestError(item.filename, resp.status_code, detail)

        payload = self._payload(resp)
        if not isinstance(payload, dict):
            raise IncompleteServerResponseError(
                item.filename, list(REQUIRED_INSTRUCTION_FIELDS.values())
            )

        try:
            instructions = TransferInstructions.model_validate(payload)
        except PydanticValidationError as e:
            bad = sorted(
                {str(err["loc"][0]) for err in e.errors() if err["loc"]}
                & set(REQUIRED_INSTRUCTION_FIELDS.values())
            )
            raise IncompleteServerResponseError(
                item.filename, bad or list(REQUIRED_INSTRUCTION_FIELDS.values())
            ) from e

        missing = instructions.missing_fields()
        if missing:
            logger.error(
                "Incomplete upload instructions for %s: missing %s", item.filename, missing
            )
            raise IncompleteServerResponseError(item.filename, missing)

        logger.info(
            "Upload URL for %s: %s (record %s)",
            item.filename,
            redact_url(instructions.upload_url or ""),
            instructions.record_id,
        )
        return instructions
