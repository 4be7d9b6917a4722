"""Service layer for batchup.

Service classes wrapping the metadata service endpoints, plus the batch
upload orchestrator built on top of them.
"""

from __future__ import annotations

from .base import BaseService
from .confirmation import ConfirmationClient
from .credentials import CredentialRequester
from .elapsed import ElapsedTimeReporter
from .records import RecordService
from .uploads import UploadOrchestrator, upload_batch

__all__ = [
    "BaseService",
    "CredentialRequester",
    "ConfirmationClient",
    "RecordService",
    "ElapsedTimeReporter",
    "UploadOrchestrator",
    "upload_batch",
]
