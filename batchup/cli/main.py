"""Main CLI entry point for batchup."""

from __future__ import annotations

import click

from batchup import __version__
from batchup.cli.auth import auth
from batchup.cli.config_cmd import config
from batchup.cli.record import record
from batchup.cli.upload import upload

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="batchup")
def cli() -> None:
    """batchup - upload files in batches through presigned storage URLs.

    Each file is registered with the metadata service, sent straight to
    storage, then confirmed. A batch stops at the first failed file.

    Get started:

      batchup config init        # Create config file

      batchup auth login         # Cache your token

      batchup upload *.pdf       # Upload files

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Commands
# =============================================================================

cli.add_command(config)
cli.add_command(auth)
cli.add_command(upload)
cli.add_command(record)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
