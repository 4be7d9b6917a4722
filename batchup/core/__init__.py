"""Core modules for batchup."""

from batchup.core.auth import AuthManager
from batchup.core.client import ApiClient, create_bare_client
from batchup.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from batchup.core.exceptions import (
    AuthenticationError,
    BatchupError,
    ConfigurationError,
    ConfirmationError,
    ConnectionError,
    CredentialRequestError,
    IncompleteServerResponseError,
    NetworkError,
    OperationError,
    PreconditionError,
    RecordServiceError,
    StorageRejectedError,
    TransferNetworkError,
    TransferTimeoutError,
    UploadError,
    ValidationError,
)
from batchup.core.logging import LogContext, get_audit_logger, redact_url, setup_logging
from batchup.core.output import (
    OutputFormat,
    console,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from batchup.core.validation import (
    validate_expiry_minutes,
    validate_record_id,
    validate_server_url,
    validate_timeout,
)

__all__ = [
    # Exceptions
    "BatchupError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ValidationError",
    "PreconditionError",
    "OperationError",
    "UploadError",
    "IncompleteServerResponseError",
    "CredentialRequestError",
    "TransferTimeoutError",
    "TransferNetworkError",
    "StorageRejectedError",
    "ConfirmationError",
    "RecordServiceError",
    # Validation
    "validate_server_url",
    "validate_timeout",
    "validate_expiry_minutes",
    "validate_record_id",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "ApiClient",
    "create_bare_client",
    # Auth
    "AuthManager",
    # Output
    "OutputFormat",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "get_audit_logger",
    "setup_logging",
    "redact_url",
    "LogContext",
]
