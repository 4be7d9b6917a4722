"""Upload data model: files, their protocol state, and the batch they belong to.

An ``UploadItem`` moves strictly forward through the protocol phases::

    PENDING -> REQUESTING_CREDENTIALS -> TRANSFERRING -> CONFIRMING -> COMPLETED

and may drop to ``FAILED`` from any active phase. ``BatchSession`` holds the
ordered items of one submission together with the batch-level status.
"""

from __future__ import annotations

import itertools
import mimetypes
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from batchup.core.exceptions import (
    BatchupError,
    InvalidTransitionError,
    ItemLockedError,
    ValidationError,
)
from batchup.models.record import RecordInfo

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class Visibility(str, Enum):
    """Where the stored object lives. Public needs an elevated role server-side."""

    PRIVATE = "private"
    PUBLIC = "public"


class ItemStatus(Enum):
    """Protocol phase of one upload item."""

    PENDING = "pending"
    REQUESTING_CREDENTIALS = "requesting_credentials"
    TRANSFERRING = "transferring"
    CONFIRMING = "confirming"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.COMPLETED, ItemStatus.FAILED)

    @property
    def is_active(self) -> bool:
        """True while a protocol call for this item may be in flight."""
        return self not in (ItemStatus.PENDING, ItemStatus.COMPLETED, ItemStatus.FAILED)


_NEXT_STATUS = {
    ItemStatus.PENDING: ItemStatus.REQUESTING_CREDENTIALS,
    ItemStatus.REQUESTING_CREDENTIALS: ItemStatus.TRANSFERRING,
    ItemStatus.TRANSFERRING: ItemStatus.CONFIRMING,
    ItemStatus.CONFIRMING: ItemStatus.COMPLETED,
}


class BatchStatus(Enum):
    """Lifecycle of a batch submission."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"


# =============================================================================
# Payload
# =============================================================================


def guess_content_type(filename: str) -> str:
    """Guess a MIME type from the file name, falling back to octet-stream."""
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or DEFAULT_CONTENT_TYPE


def default_display_name(filename: str) -> str:
    """File name minus its last extension; the full name when there is none."""
    stem, dot, _ = filename.rpartition(".")
    return stem if dot and stem else filename


@dataclass(frozen=True)
class Payload:
    """The bytes of one selected file plus what the protocol needs to know about them."""

    filename: str
    content_type: str
    path: Path | None = None
    data: bytes | None = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path: Path, content_type: str | None = None) -> Payload:
        path = Path(path)
        if not path.is_file():
            raise ValidationError(f"Not a file: {path}", field="path", value=str(path))
        return cls(
            filename=path.name,
            content_type=content_type or guess_content_type(path.name),
            path=path,
        )

    @classmethod
    def from_bytes(cls, filename: str, data: bytes, content_type: str | None = None) -> Payload:
        return cls(
            filename=filename,
            content_type=content_type or guess_content_type(filename),
            data=data,
        )

    @property
    def extension(self) -> str:
        """Text after the last dot, without the dot. Empty when there is none."""
        _, dot, ext = self.filename.rpartition(".")
        return ext if dot else ""

    @property
    def size(self) -> int:
        if self.data is not None:
            return len(self.data)
        if self.path is not None:
            return self.path.stat().st_size
        return 0

    def read(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValidationError(f"No content for {self.filename}")
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise ValidationError(f"Cannot read {self.path}: {e}", field="path") from e


# =============================================================================
# UploadItem
# =============================================================================


class UploadItem:
    """One selected file with its editable metadata and protocol state.

    Metadata can only be changed while the item is pending.
    """

    def __init__(
        self,
        item_id: int,
        payload: Payload,
        *,
        display_name: str | None = None,
        description: str = "",
        visibility: Visibility = Visibility.PRIVATE,
    ) -> None:
        self.id = item_id
        self.payload = payload
        self._display_name = display_name or default_display_name(payload.filename)
        self._description = description or ""
        self._visibility = Visibility(visibility)
        self.status = ItemStatus.PENDING
        self.failure: BatchupError | None = None
        self.record: RecordInfo | None = None
        self.record_id: str | None = None

    def __repr__(self) -> str:
        return f"UploadItem(id={self.id}, filename={self.filename!r}, status={self.status.value})"

    @property
    def filename(self) -> str:
        return self.payload.filename

    @property
    def content_type(self) -> str:
        return self.payload.content_type

    @property
    def extension(self) -> str:
        return self.payload.extension

    # -- editable metadata --------------------------------------------------

    def _ensure_editable(self) -> None:
        if self.status is not ItemStatus.PENDING:
            raise ItemLockedError(self.filename, self.status.value)

    @property
    def display_name(self) -> str:
        return self._display_name

    @display_name.setter
    def display_name(self, value: str) -> None:
        self._ensure_editable()
        self._display_name = value

    @property
    def description(self) -> str:
        return self._description

    @description.setter
    def description(self, value: str) -> None:
        self._ensure_editable()
        self._description = value or ""

    @property
    def visibility(self) -> Visibility:
        return self._visibility

    @visibility.setter
    def visibility(self, value: Visibility | str) -> None:
        self._ensure_editable()
        self._visibility = Visibility(value)

    # -- state --------------------------------------------------------------

    @property
    def failure_reason(self) -> str | None:
        return str(self.failure) if self.failure is not None else None

    def advance(self) -> ItemStatus:
        """Move to the next protocol phase and return it."""
        target = _NEXT_STATUS.get(self.status)
        if target is None:
            raise InvalidTransitionError(self.filename, self.status.value, "next phase")
        self.status = target
        return target

    def fail(self, error: BatchupError) -> None:
        if not self.status.is_active:
            raise InvalidTransitionError(
                self.filename, self.status.value, ItemStatus.FAILED.value
            )
        self.status = ItemStatus.FAILED
        self.failure = error

    def copy_pending(self, item_id: int) -> UploadItem:
        """Fresh pending item with the same file and metadata."""
        return UploadItem(
            item_id,
            self.payload,
            display_name=self._display_name,
            description=self._description,
            visibility=self._visibility,
        )


# =============================================================================
# BatchSession
# =============================================================================


@dataclass
class BatchSession:
    """Ordered set of items submitted together."""

    items: list[UploadItem] = field(default_factory=list)
    status: BatchStatus = BatchStatus.IDLE
    started_at: datetime | None = None
    failed_item: UploadItem | None = None
    failure: BatchupError | None = None
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    def __len__(self) -> int:
        return len(self.items)

    def _ensure_not_running(self, action: str) -> None:
        if self.status is BatchStatus.RUNNING:
            raise ValidationError(f"Cannot {action} while the batch is running")

    def add(
        self,
        payload: Payload,
        *,
        display_name: str | None = None,
        description: str = "",
        visibility: Visibility | str = Visibility.PRIVATE,
    ) -> UploadItem:
        """Append a pending item for ``payload``."""
        self._ensure_not_running("add files")
        item = UploadItem(
            next(self._ids),
            payload,
            display_name=display_name,
            description=description,
            visibility=Visibility(visibility),
        )
        self.items.append(item)
        return item

    def add_path(self, path: Path, **metadata) -> UploadItem:
        return self.add(Payload.from_path(path), **metadata)

    def remove(self, item: UploadItem) -> None:
        """Drop a pending item from the batch."""
        self._ensure_not_running("remove files")
        if item.status is not ItemStatus.PENDING:
            raise ItemLockedError(item.filename, item.status.value)
        self.items.remove(item)

    def get(self, item_id: int) -> UploadItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def progress(self) -> dict[int, ItemStatus]:
        """Status of every item, keyed by item id."""
        return {item.id: item.status for item in self.items}

    def pending_items(self) -> list[UploadItem]:
        return [item for item in self.items if item.status is ItemStatus.PENDING]

    def remaining(self) -> BatchSession:
        """New idle batch holding the pending items, for resubmission."""
        fresh = BatchSession()
        for item in self.pending_items():
            fresh.items.append(item.copy_pending(next(fresh._ids)))
        return fresh

    # -- lifecycle, driven by the orchestrator ---------------------------------

    def start(self) -> None:
        self.status = BatchStatus.RUNNING
        self.started_at = datetime.now()

    def abort(self, item: UploadItem, error: BatchupError) -> None:
        self.status = BatchStatus.ABORTED
        self.failed_item = item
        self.failure = error

    def succeed(self) -> None:
        self.status = BatchStatus.SUCCEEDED

    def clear(self) -> None:
        """Discard all items so the batch can accept new files."""
        self.items.clear()
