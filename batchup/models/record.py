"""Metadata service payload models."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BeforeValidator,
    Field,
    ValidatorFunctionWrapHandler,
    WrapValidator,
)
from pydantic import ValidationError as PydanticValidationError

from .base import BaseModel

# Wire names of the fields a credential response must carry
REQUIRED_INSTRUCTION_FIELDS = {
    "upload_url": "uploadUrl",
    "record_id": "recordId",
    "stored_filename": "storedFilename",
}


def _id_to_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


LooseId = Annotated[str | None, BeforeValidator(_id_to_str)]


def _none_if_invalid(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    try:
        return handler(value)
    except PydanticValidationError:
        return None


# Optional hints; a malformed value is dropped rather than failing the response
OptionalInt = Annotated[int | None, WrapValidator(_none_if_invalid)]
OptionalDatetime = Annotated[datetime | None, WrapValidator(_none_if_invalid)]


class TransferInstructions(BaseModel):
    """Answer to a credential request.

    Fields are parsed leniently so that a response missing any of them can
    be reported by name instead of failing validation outright.
    """

    upload_url: str | None = Field(None, alias="uploadUrl", description="Presigned PUT URL")
    record_id: LooseId = Field(None, alias="recordId", description="Provisional record ID")
    stored_filename: str | None = Field(
        None, alias="storedFilename", description="Object name chosen by the service"
    )
    expires_in: OptionalInt = Field(None, alias="expiresIn", description="URL lifetime (s)")
    expires_at: OptionalDatetime = Field(None, alias="expiresAt")

    def missing_fields(self) -> list[str]:
        """Return wire names of mandatory fields that are absent or empty."""
        return [
            wire for attr, wire in REQUIRED_INSTRUCTION_FIELDS.items() if not getattr(self, attr)
        ]


class RecordInfo(BaseModel):
    """A record as returned by confirmation and listing calls."""

    id: LooseId = Field(None, validation_alias=AliasChoices("id", "_id", "recordId"))
    name: str | None = None
    description: str | None = None
    stored_filename: str | None = Field(
        None, validation_alias=AliasChoices("storedFilename", "filename")
    )
    content_type: str | None = Field(None, validation_alias=AliasChoices("contentType"))
    visibility: str | None = None
    size: int | None = None
    owner: str | None = None


class DownloadLink(BaseModel):
    """Time-limited download URL for a stored record."""

    url: str
    filename: str | None = None
    expires_in: int | None = Field(None, alias="expiresIn")
    expires_at: datetime | None = Field(None, alias="expiresAt")
    cached: bool | None = None
