"""Batch upload orchestration.

``UploadOrchestrator`` drives every item of a batch, in order and one at a
time, through the three-phase protocol:

1. request transfer credentials from the metadata service,
2. PUT the bytes straight to storage,
3. confirm the upload so the record is finalized.

The first failure aborts the batch. Items after the failed one stay
pending and are never attempted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from batchup.core.client import ApiClient, create_bare_client
from batchup.core.exceptions import BatchupError, OperationError, PreconditionError
from batchup.core.logging import LogContext, get_audit_logger
from batchup.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_TRANSFER_DEADLINE_SECONDS
from batchup.models.progress import BatchResult, ElapsedReport, ItemProgress
from batchup.models.upload import BatchSession, BatchStatus, ItemStatus, UploadItem
from batchup.uploaders.direct import DirectTransferClient

from .confirmation import ConfirmationClient
from .credentials import CredentialRequester
from .elapsed import ElapsedTimeReporter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ItemProgress], None]

_PHASE_MESSAGES = {
    ItemStatus.REQUESTING_CREDENTIALS: "Requesting upload URL",
    ItemStatus.TRANSFERRING: "Uploading to storage",
    ItemStatus.CONFIRMING: "Confirming upload",
    ItemStatus.COMPLETED: "Completed",
}


class UploadOrchestrator:
    """Runs a batch through credential request, direct transfer and confirmation.

    The orchestrator holds two transports: ``api_client`` (session token
    attached) for the metadata service, and the bare client inside
    ``transfer_client`` for storage.
    """

    def __init__(
        self,
        api_client: ApiClient,
        transfer_client: DirectTransferClient,
        *,
        progress_callback: ProgressCallback | None = None,
        elapsed_callback: Callable[[ElapsedReport], None] | None = None,
        reporter: ElapsedTimeReporter | None = None,
        requester: CredentialRequester | None = None,
        confirmer: ConfirmationClient | None = None,
    ) -> None:
        self.api_client = api_client
        self.transfer_client = transfer_client
        self.requester = requester or CredentialRequester(api_client)
        self.confirmer = confirmer or ConfirmationClient(api_client)
        self.reporter = reporter or ElapsedTimeReporter(elapsed_callback)
        self.progress_callback = progress_callback
        self.audit = get_audit_logger()

    # =========================================================================
    # Public API
    # =========================================================================

    def check_preconditions(self, batch: BatchSession) -> None:
        """Reject a submission that cannot start. Leaves the batch untouched.

        Raises:
            PreconditionError: If the batch is running, aborted, empty, holds
                non-pending items, or there is no session.
        """
        if batch.status is BatchStatus.RUNNING:
            raise PreconditionError("an upload is already running")
        if batch.status is BatchStatus.ABORTED:
            raise PreconditionError(
                "this batch was aborted; resubmit the remaining files as a new batch"
            )
        if not batch.items:
            raise PreconditionError("no files selected")
        if any(item.status is not ItemStatus.PENDING for item in batch.items):
            raise PreconditionError("batch contains files that were already processed")
        if not self.api_client.is_authenticated:
            raise PreconditionError("not signed in")

    async def run(self, batch: BatchSession) -> BatchResult:
        """Upload every item of ``batch`` in order, stopping at the first failure.

        On success the batch ends ``SUCCEEDED`` and its items are cleared.
        On failure it ends ``ABORTED`` with the failed item and error
        recorded; later items stay pending.

        Args:
            batch: Idle batch of pending items.

        Returns:
            BatchResult describing what was uploaded and what was not.

        Raises:
            PreconditionError: If the batch cannot be submitted.
        """
        self.check_preconditions(batch)

        items = list(batch.items)
        total = len(items)
        start = time.monotonic()

        batch.start()
        self.reporter.start()
        logger.info("Starting batch of %d file(s)", total)

        current: UploadItem | None = None
        try:
            for index, item in enumerate(items, start=1):
                current = item
                try:
                    await self._process(item, index, total)
                except BatchupError as e:
                    self._fail(batch, item, e, index, total)
                    break
            else:
                batch.succeed()
        except BaseException:
            if current is not None and current.status.is_active:
                self._fail(
                    batch,
                    current,
                    OperationError("upload", f'Upload of "{current.filename}" was interrupted'),
                    items.index(current) + 1,
                    total,
                )
            raise
        finally:
            await self.reporter.stop()

        result = self._result(batch, items, time.monotonic() - start)
        if batch.status is BatchStatus.SUCCEEDED:
            logger.info("Batch succeeded: %d file(s) in %.2fs", total, result.duration)
            batch.clear()
        else:
            logger.warning(
                "Batch aborted at %s; %d file(s) not attempted",
                result.failed_file,
                len(result.pending_files),
            )
        return result

    # =========================================================================
    # Per-item protocol
    # =========================================================================

    async def _process(self, item: UploadItem, index: int, total: int) -> None:
        with LogContext("upload", logger, file=item.filename, item=item.id, position=index):
            self._advance(item, index, total)
            instructions = await self.requester.request(item)
            item.record_id = instructions.record_id

            self._advance(item, index, total)
            await self.transfer_client.transfer(instructions.upload_url, item.payload)

            self._advance(item, index, total)
            item.record = await self.confirmer.confirm(instructions.record_id, item)

            self._advance(item, index, total)

        self.audit.log_upload(
            item.filename,
            record_id=item.record.id if item.record else item.record_id,
            visibility=item.visibility.value,
        )

    def _advance(self, item: UploadItem, index: int, total: int) -> None:
        status = item.advance()
        self._emit(item, index, total, f"{_PHASE_MESSAGES[status]}: {item.filename}")

    def _fail(
        self,
        batch: BatchSession,
        item: UploadItem,
        error: BatchupError,
        index: int,
        total: int,
    ) -> None:
        phase = item.status.value
        item.fail(error)
        batch.abort(item, error)
        self._emit(item, index, total, str(error.message), error=str(error))
        self.audit.log_upload(
            item.filename,
            record_id=item.record_id,
            visibility=item.visibility.value,
            success=False,
            details={"phase": phase, "error": error.message},
        )

    def _emit(
        self,
        item: UploadItem,
        index: int,
        total: int,
        message: str,
        error: str | None = None,
    ) -> None:
        if self.progress_callback is None:
            return
        self.progress_callback(
            ItemProgress(
                item_id=item.id,
                filename=item.filename,
                status=item.status,
                index=index,
                total=total,
                message=message,
                error=error,
            )
        )

    @staticmethod
    def _result(batch: BatchSession, items: list[UploadItem], duration: float) -> BatchResult:
        completed = [item for item in items if item.status is ItemStatus.COMPLETED]
        return BatchResult(
            status=batch.status,
            total=len(items),
            duration=duration,
            records=[item.record for item in completed if item.record is not None],
            completed_files=[item.filename for item in completed],
            failed_file=batch.failed_item.filename if batch.failed_item else None,
            error=batch.failure,
            pending_files=[item.filename for item in items if item.status is ItemStatus.PENDING],
        )


async def upload_batch(
    batch: BatchSession,
    *,
    base_url: str,
    token: str | None,
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS,
    transfer_deadline: float = DEFAULT_TRANSFER_DEADLINE_SECONDS,
    verify_ssl: bool = True,
    progress_callback: ProgressCallback | None = None,
    elapsed_callback: Callable[[ElapsedReport], None] | None = None,
) -> BatchResult:
    """Build both transports, run ``batch`` and close the transports.

    Args:
        batch: Idle batch of pending items.
        base_url: Metadata service base URL.
        token: Caller's bearer token.
        timeout: Metadata service request timeout in seconds.
        transfer_deadline: Deadline for each direct transfer in seconds.
        verify_ssl: Whether to verify TLS certificates.
        progress_callback: Receives every item state change.
        elapsed_callback: Receives elapsed-time ticks while running.

    Returns:
        BatchResult of the run.
    """
    async with ApiClient(
        base_url=base_url, token=token, timeout=timeout, verify_ssl=verify_ssl
    ) as api_client, create_bare_client(verify_ssl=verify_ssl) as bare:
        orchestrator = UploadOrchestrator(
            api_client,
            DirectTransferClient(bare, deadline=transfer_deadline),
            progress_callback=progress_callback,
            elapsed_callback=elapsed_callback,
        )
        return await orchestrator.run(batch)
