"""batchup - batch file uploads through presigned storage URLs.

Each file goes through three steps against a metadata service:
- request a presigned upload URL and a record id
- PUT the bytes straight to object storage
- confirm the upload so the record is finalized

Files are sent one at a time and the batch stops at the first failure.
"""

__version__ = "0.1.0"

from batchup.core.client import ApiClient
from batchup.core.config import Config, Profile
from batchup.core.exceptions import (
    AuthenticationError,
    BatchupError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    PreconditionError,
    UploadError,
    ValidationError,
)
from batchup.models.upload import BatchSession, Payload, Visibility
from batchup.services.uploads import UploadOrchestrator, upload_batch

__all__ = [
    "__version__",
    "ApiClient",
    "Config",
    "Profile",
    "BatchSession",
    "Payload",
    "Visibility",
    "UploadOrchestrator",
    "upload_batch",
    "BatchupError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "PreconditionError",
    "UploadError",
    "ValidationError",
]
