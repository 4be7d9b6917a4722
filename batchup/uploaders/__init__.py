"""Upload helpers for batchup.

- File selection (paths, directories and YAML manifests) into a batch
- Direct transfer of bytes to a presigned storage URL

Use `UploadOrchestrator` from `batchup.services.uploads` as the public API.
"""

from batchup.uploaders.common import (
    ACCEPTED_EXTENSIONS,
    build_batch,
    collect_files,
    load_manifest,
)
from batchup.uploaders.direct import DirectTransferClient

__all__ = [
    "ACCEPTED_EXTENSIONS",
    "build_batch",
    "collect_files",
    "load_manifest",
    "DirectTransferClient",
]
