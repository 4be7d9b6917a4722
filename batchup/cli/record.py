"""Record commands for batchup."""

from __future__ import annotations

import asyncio

import click

from batchup.cli.common import Context, global_options, handle_errors, require_auth
from batchup.core.output import (
    OutputFormat,
    print_json,
    print_key_value,
    print_output,
    print_success,
)
from batchup.core.validation import MAX_EXPIRY_MINUTES
from batchup.services.records import RecordService


async def _list(ctx: Context) -> list[dict]:
    async with ctx.get_client() as client:
        records = await RecordService(client).list_records()
    return [r.to_dict() for r in records]


async def _link(ctx: Context, record_id: str, expiry_minutes: int) -> dict:
    async with ctx.get_client() as client:
        link = await RecordService(client).get_download_link(record_id, expiry_minutes)
    return link.to_dict()


async def _delete(ctx: Context, record_id: str) -> bool:
    async with ctx.get_client() as client:
        return await RecordService(client).delete_record(record_id)


@click.group()
def record() -> None:
    """Manage uploaded records."""
    pass


@record.command("list")
@global_options
@require_auth
@handle_errors
def record_list(ctx: Context) -> None:
    """List records visible to you.

    Example:
        batchup record list
        batchup record list -o json
    """
    rows = asyncio.run(_list(ctx))

    print_output(
        rows,
        format=ctx.output_format,
        columns=["id", "name", "stored_filename", "visibility", "size"],
        column_labels={
            "id": "ID",
            "name": "Name",
            "stored_filename": "Stored As",
            "visibility": "Visibility",
            "size": "Size",
        },
        quiet=ctx.quiet,
        id_field="id",
    )


@record.command("url")
@click.argument("record_id")
@click.option(
    "--expiry-minutes",
    type=click.IntRange(1, MAX_EXPIRY_MINUTES),
    default=MAX_EXPIRY_MINUTES,
    show_default=True,
    help="Link lifetime in minutes",
)
@global_options
@require_auth
@handle_errors
def record_url(ctx: Context, record_id: str, expiry_minutes: int) -> None:
    """Print a time-limited download URL for a record.

    Example:
        batchup record url 64f1c2 --expiry-minutes 10
    """
    link = asyncio.run(_link(ctx, record_id, expiry_minutes))

    if ctx.quiet:
        click.echo(link["url"])
    elif ctx.output_format == OutputFormat.JSON:
        print_json(link)
    else:
        print_key_value(link, title=f"Download link: {record_id}")


@record.command("delete")
@click.argument("record_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@global_options
@require_auth
@handle_errors
def record_delete(ctx: Context, record_id: str, yes: bool) -> None:
    """Delete a record and its stored file.

    Example:
        batchup record delete 64f1c2 --yes
    """
    if not yes:
        click.confirm(f"Delete record '{record_id}'?", abort=True)

    asyncio.run(_delete(ctx, record_id))
    print_success(f"Deleted record {record_id}")
