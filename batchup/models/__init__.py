"""Data models for batchup.

Pydantic models for metadata service payloads and the upload data model.
"""

from __future__ import annotations

from .base import BaseModel, unwrap_envelope
from .progress import BatchResult, ElapsedReport, ItemProgress
from .record import DownloadLink, RecordInfo, TransferInstructions
from .upload import (
    BatchSession,
    BatchStatus,
    ItemStatus,
    Payload,
    UploadItem,
    Visibility,
)

__all__ = [
    # Base
    "BaseModel",
    "unwrap_envelope",
    # Wire payloads
    "TransferInstructions",
    "RecordInfo",
    "DownloadLink",
    # Upload
    "Payload",
    "UploadItem",
    "Visibility",
    "ItemStatus",
    "BatchSession",
    "BatchStatus",
    # Progress
    "ItemProgress",
    "ElapsedReport",
    "BatchResult",
]
