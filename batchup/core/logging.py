"""Logging utilities for batchup.

Provides per-item log context and an audit trail for finished uploads.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

# =============================================================================
# Constants
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
AUDIT_LOGGER_NAME = "batchup.audit"


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure logging for batchup.

    Args:
        level: Base logging level.
        quiet: If True, only show errors.
        verbose: If True, show debug messages.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )

    # httpx logs every request URL at INFO, presigned query strings included
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def redact_url(url: str) -> str:
    """Drop the query string and fragment from a URL before logging it."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


# =============================================================================
# Log Context
# =============================================================================


class LogContext:
    """Context manager that logs start, completion and failure of an operation."""

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        **context: Any,
    ):
        self.operation = operation
        self.logger = logger or logging.getLogger(__name__)
        self.context = context
        self.start_time: Optional[datetime] = None

    def _ctx_str(self) -> str:
        return ", ".join(f"{k}={v}" for k, v in self.context.items())

    def __enter__(self) -> "LogContext":
        self.start_time = datetime.now()
        self.logger.info("Starting %s (%s)", self.operation, self._ctx_str())
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        duration = (datetime.now() - self.start_time).total_seconds() if self.start_time else 0

        if exc_type:
            self.logger.error(
                "%s failed after %.2fs: %s",
                self.operation,
                duration,
                exc_val,
            )
        else:
            self.logger.info("%s completed in %.2fs", self.operation, duration)


# =============================================================================
# Audit Logger
# =============================================================================


class AuditLogger:
    """Logger for the audit trail of uploaded files."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def log_upload(
        self,
        filename: str,
        *,
        record_id: Optional[str] = None,
        visibility: Optional[str] = None,
        success: bool = True,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Log the outcome of one file upload.

        Args:
            filename: Local file name.
            record_id: Record identifier issued by the metadata service.
            visibility: Requested visibility.
            success: Whether the upload completed.
            details: Additional details (failure phase, message).
        """
        audit_record: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "operation": "upload",
            "file": filename,
            "success": success,
        }

        if record_id:
            audit_record["record_id"] = record_id
        if visibility:
            audit_record["visibility"] = visibility
        if details:
            audit_record["details"] = details

        level = logging.INFO if success else logging.WARNING
        self.logger.log(level, "AUDIT: %s", audit_record)


def get_audit_logger() -> AuditLogger:
    return AuditLogger()
