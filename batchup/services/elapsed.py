"""Elapsed-time reporting while a batch runs.

Purely observational: the reporter never touches the batch or the
orchestrator, it only computes elapsed time and hands it to a callback.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable

from batchup.core.timeouts import (
    DEFAULT_ELAPSED_INTERVAL_SECONDS,
    SLOW_UPLOAD_THRESHOLD_SECONDS,
)
from batchup.models.progress import ElapsedReport

logger = logging.getLogger(__name__)

SLOW_UPLOAD_ADVISORY = "Upload is taking longer than expected"


class ElapsedTimeReporter:
    """Ticks on a fixed interval on the running event loop."""

    def __init__(
        self,
        callback: Callable[[ElapsedReport], None] | None = None,
        *,
        interval: float = DEFAULT_ELAPSED_INTERVAL_SECONDS,
        threshold: float = SLOW_UPLOAD_THRESHOLD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.callback = callback
        self.interval = interval
        self.threshold = threshold
        self._clock = clock
        self._started: float | None = None
        self._task: asyncio.Task | None = None
        self.elapsed = 0.0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_slow(self) -> bool:
        """True once elapsed time is past the advisory threshold."""
        return self.elapsed > self.threshold

    @property
    def advisory(self) -> str | None:
        return SLOW_UPLOAD_ADVISORY if self.is_slow else None

    def report(self) -> ElapsedReport:
        """Recompute elapsed time now."""
        if self._started is not None:
            self.elapsed = self._clock() - self._started
        return ElapsedReport(elapsed=self.elapsed, slow=self.is_slow)

    def start(self) -> None:
        """Start ticking. Must be called from inside a running event loop."""
        if self.running:
            return
        self._started = self._clock()
        self.elapsed = 0.0
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> ElapsedReport:
        """Stop ticking and return the final elapsed time."""
        final = self.report()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        return final

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            report = self.report()
            if self.callback is None:
                continue
            try:
                self.callback(report)
            except Exception:
                # Callback errors never reach the orchestrator
                logger.exception("Elapsed-time callback failed")
