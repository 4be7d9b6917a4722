"""Progress models for tracking batch upload status."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from batchup.core.exceptions import BatchupError
from batchup.models.record import RecordInfo
from batchup.models.upload import BatchStatus, ItemStatus


@dataclass
class ItemProgress:
    """One state change of one item, as reported to progress callbacks."""

    item_id: int
    filename: str
    status: ItemStatus
    index: int
    total: int
    message: str = ""
    error: Optional[str] = None

    @property
    def position(self) -> str:
        return f"{self.index}/{self.total}"

    @property
    def has_errors(self) -> bool:
        return self.status == ItemStatus.FAILED


@dataclass
class ElapsedReport:
    """Wall-clock time since the batch started running."""

    elapsed: float
    slow: bool = False

    @property
    def formatted(self) -> str:
        """Elapsed time as ``m:ss``."""
        seconds = int(self.elapsed)
        return f"{seconds // 60}:{seconds % 60:02d}"


@dataclass
class BatchResult:
    """Outcome of one orchestrator run."""

    status: BatchStatus
    total: int
    duration: float
    records: List[RecordInfo] = field(default_factory=list)
    completed_files: List[str] = field(default_factory=list)
    failed_file: Optional[str] = None
    error: Optional[BatchupError] = None
    pending_files: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status == BatchStatus.SUCCEEDED

    @property
    def succeeded(self) -> int:
        return len(self.completed_files)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "total": self.total,
            "succeeded": self.succeeded,
            "duration": round(self.duration, 2),
            "completed": self.completed_files,
            "records": [r.to_dict() for r in self.records],
            "failed_file": self.failed_file,
            "error": str(self.error) if self.error else None,
            "pending": self.pending_files,
        }
