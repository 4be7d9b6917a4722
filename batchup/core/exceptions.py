"""Exception hierarchy for batchup.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class BatchupError(Exception):
    """Base exception for all batchup errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BatchupError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(BatchupError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class PreconditionError(ValidationError):
    """A batch cannot be submitted in its current state."""

    def __init__(self, reason: str):
        super().__init__(f"Cannot start upload: {reason}")
        self.reason = reason


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(BatchupError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS, timeouts)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(BatchupError):
    """No usable session, or the session was rejected."""

    def __init__(self, url: str | None = None, reason: str = ""):
        msg = "Authentication failed"
        if url:
            msg = f"{msg} for {url}"
        if reason:
            msg = f"{msg}: {reason}"
        details = {"url": url} if url else {}
        super().__init__(msg, details)
        self.url = url
        self.reason = reason


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(BatchupError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """A single file failed one phase of the upload protocol.

    Every subclass names the file in its message so that it can be shown
    to the user as-is.
    """

    phase = "upload"

    def __init__(
        self,
        message: str,
        filename: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"file": filename, "phase": self.phase}
        if details:
            full_details.update(details)
        super().__init__("upload", message, full_details)
        self.filename = filename


class IncompleteServerResponseError(UploadError):
    """Credential request succeeded but omitted mandatory fields."""

    phase = "credentials"

    def __init__(self, filename: str, missing: list[str]):
        super().__init__(
            f'Server returned incomplete transfer instructions for "{filename}"',
            filename,
            {"missing": ",".join(missing)},
        )
        self.missing = missing


class CredentialRequestError(UploadError):
    """Credential request returned a non-success status."""

    phase = "credentials"

    def __init__(self, filename: str, status_code: int, detail: str):
        super().__init__(
            f'Could not obtain an upload URL for "{filename}": {status_code} - {detail}',
            filename,
            {"status_code": status_code},
        )
        self.status_code = status_code
        self.detail = detail


class TransferTimeoutError(UploadError):
    """Direct transfer did not finish within the deadline."""

    phase = "transfer"

    def __init__(self, filename: str, limit: float):
        super().__init__(
            f'Timeout: uploading "{filename}" took longer than {limit:g} seconds. '
            "Check your connection and the file size.",
            filename,
        )
        self.limit = limit


class TransferNetworkError(UploadError):
    """Direct transfer failed below the HTTP layer."""

    phase = "transfer"

    def __init__(self, filename: str, cause: str | None = None):
        super().__init__(
            f'Network error while uploading "{filename}". '
            "Check that the storage backend is reachable.",
            filename,
            {"cause": cause} if cause else None,
        )
        self.cause = cause


class StorageRejectedError(UploadError):
    """Storage backend answered the direct transfer with a non-success status."""

    phase = "transfer"

    def __init__(self, filename: str, status_code: int, detail: str):
        super().__init__(
            f'Storage rejected "{filename}": {status_code} - {detail}',
            filename,
            {"status_code": status_code},
        )
        self.status_code = status_code
        self.detail = detail


class ConfirmationError(UploadError):
    """Finalizing the record returned a non-success status."""

    phase = "confirmation"

    def __init__(self, filename: str, status_code: int, detail: str):
        super().__init__(
            f'Could not confirm upload of "{filename}": {status_code} - {detail}',
            filename,
            {"status_code": status_code},
        )
        self.status_code = status_code
        self.detail = detail


class RecordServiceError(OperationError):
    """Record listing, download link or delete request failed."""

    def __init__(self, operation: str, status_code: int, detail: str):
        super().__init__(
            operation,
            f"Record {operation} failed: {status_code} - {detail}",
            {"status_code": status_code},
        )
        self.status_code = status_code
        self.detail = detail


# =============================================================================
# Batch State Errors
# =============================================================================


class ItemLockedError(BatchupError):
    """An item past Pending cannot be edited or removed."""

    def __init__(self, filename: str, state: str):
        super().__init__(
            f'"{filename}" can no longer be changed',
            {"file": filename, "state": state},
        )
        self.filename = filename
        self.state = state


class InvalidTransitionError(BatchupError):
    """An item state change that skips or reverses a protocol phase."""

    def __init__(self, filename: str, current: str, target: str):
        super().__init__(
            f'Invalid state change for "{filename}": {current} -> {target}',
            {"file": filename},
        )
        self.filename = filename
        self.current = current
        self.target = target
