"""Upload command for batchup."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import click

from batchup.cli.common import Context, ExitCode, global_options, handle_errors, require_auth
from batchup.core.client import ApiClient, create_bare_client
from batchup.core.config import Profile
from batchup.core.output import (
    OutputFormat,
    console,
    create_progress,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
)
from batchup.models.progress import BatchResult, ElapsedReport, ItemProgress
from batchup.models.upload import BatchSession, ItemStatus, Visibility
from batchup.services.elapsed import SLOW_UPLOAD_ADVISORY
from batchup.services.uploads import UploadOrchestrator
from batchup.uploaders.common import build_batch
from batchup.uploaders.direct import DirectTransferClient

_STATUS_STYLES = {
    ItemStatus.PENDING: "[dim]pending[/dim]",
    ItemStatus.REQUESTING_CREDENTIALS: "[cyan]requesting URL[/cyan]",
    ItemStatus.TRANSFERRING: "[cyan]uploading[/cyan]",
    ItemStatus.CONFIRMING: "[cyan]confirming[/cyan]",
    ItemStatus.COMPLETED: "[green]completed[/green]",
    ItemStatus.FAILED: "[red]failed[/red]",
}


async def _run_batch(
    client: ApiClient,
    batch: BatchSession,
    profile: Profile,
    *,
    show_progress: bool,
) -> BatchResult:
    """Run the batch with one progress line per item."""
    async with client, create_bare_client(verify_ssl=profile.verify_ssl) as bare:
        transfer = DirectTransferClient(bare, deadline=profile.transfer_deadline)

        if not show_progress:
            return await UploadOrchestrator(client, transfer).run(batch)

        with create_progress() as progress:
            tasks = {
                item.id: progress.add_task(
                    f"{item.filename} [dim]({item.display_name})[/dim]",
                    total=1,
                    status=_STATUS_STYLES[item.status],
                )
                for item in batch.items
            }
            warned = False

            def on_progress(update: ItemProgress) -> None:
                progress.update(
                    tasks[update.item_id],
                    status=_STATUS_STYLES[update.status],
                    completed=1 if update.status.is_terminal else 0,
                )

            def on_elapsed(report: ElapsedReport) -> None:
                nonlocal warned
                if report.slow and not warned:
                    warned = True
                    progress.console.print(
                        f"[yellow]{SLOW_UPLOAD_ADVISORY} ({report.formatted} elapsed)[/yellow]"
                    )

            orchestrator = UploadOrchestrator(
                client,
                transfer,
                progress_callback=on_progress,
                elapsed_callback=on_elapsed,
            )
            return await orchestrator.run(batch)


def _print_result(ctx: Context, result: BatchResult) -> None:
    if ctx.output_format == OutputFormat.JSON:
        print_json(result.to_dict())
        return

    if ctx.quiet:
        for record in result.records:
            click.echo(record.id)
        return

    rows = [
        {
            "id": r.id or "",
            "name": r.name or "",
            "stored_filename": r.stored_filename or "",
            "visibility": r.visibility or "",
        }
        for r in result.records
    ]
    if rows:
        print_table(
            rows,
            ["id", "name", "stored_filename", "visibility"],
            title="Uploaded",
            column_labels={
                "id": "Record",
                "name": "Name",
                "stored_filename": "Stored As",
                "visibility": "Visibility",
            },
        )

    if result.success:
        print_success(f"Uploaded {result.succeeded} file(s) in {result.duration:.1f}s")
        return

    print_error(f"Upload aborted at {result.failed_file}: {result.error}")
    if result.pending_files:
        print_warning("Not uploaded: " + ", ".join(result.pending_files))


@click.command("upload")
@click.argument(
    "paths",
    nargs=-1,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--manifest",
    "-m",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML list of {path, name, description, visibility} entries",
)
@click.option("--name", "display_name", help="Display name (single file only)")
@click.option("--description", "-d", default="", help="Description for every file")
@click.option("--public", is_flag=True, help="Store files publicly (needs elevated role)")
@global_options
@require_auth
@handle_errors
def upload(
    ctx: Context,
    paths: tuple[Path, ...],
    manifest: Optional[Path],
    display_name: Optional[str],
    description: str,
    public: bool,
) -> None:
    """Upload files as one batch.

    Files are sent one at a time in the order given. The batch stops at
    the first failure; files after it are not uploaded.

    Example:
        batchup upload notes.pdf slides.pdf
        batchup upload ./handouts --description "Week 3"
        batchup upload photo.png --name "Lab setup" --public
        batchup upload --manifest uploads.yaml
    """
    if not paths and manifest is None:
        raise click.UsageError("Provide FILE arguments or --manifest.")

    profile = ctx.get_profile()
    visibility = Visibility.PUBLIC if public else Visibility(profile.default_visibility)

    batch = build_batch(
        paths,
        manifest=manifest,
        display_name=display_name,
        description=description,
        visibility=visibility,
    )

    show_progress = not ctx.quiet and ctx.output_format == OutputFormat.TABLE
    if show_progress:
        console.print(f"Uploading {len(batch)} file(s) to {profile.url}")

    result = asyncio.run(
        _run_batch(ctx.get_client(), batch, profile, show_progress=show_progress)
    )

    _print_result(ctx, result)
    if not result.success:
        raise SystemExit(ExitCode.GENERAL_ERROR)
