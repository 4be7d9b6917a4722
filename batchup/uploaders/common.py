"""File selection helpers: expand paths and read upload manifests into a batch."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import yaml

from batchup.core.exceptions import ValidationError
from batchup.models.upload import BatchSession, Visibility

logger = logging.getLogger(__name__)

# Extensions picked up when a directory is given; explicit files are never filtered
ACCEPTED_EXTENSIONS = {".pdf", ".jpg", ".jpeg", ".png", ".docx", ".mp3", ".mp4"}


def collect_files(paths: Iterable[Path]) -> list[Path]:
    """Expand files and directories into an ordered list of files.

    Files are kept in the order given. Each directory contributes its
    accepted files (non-recursive, hidden files skipped) sorted by name.

    Raises:
        ValidationError: If a path does not exist.
    """
    files: list[Path] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            found = sorted(
                p
                for p in path.iterdir()
                if p.is_file()
                and not p.name.startswith(".")
                and p.suffix.lower() in ACCEPTED_EXTENSIONS
            )
            if not found:
                logger.warning("No uploadable files in %s", path)
            files.extend(found)
        elif path.is_file():
            files.append(path)
        else:
            raise ValidationError(f"File not found: {path}", field="path", value=str(path))
    return files


def load_manifest(manifest_path: Path) -> list[dict[str, Any]]:
    """Read a YAML upload manifest.

    The manifest is a list of mappings with ``path`` (required, relative to
    the manifest's directory) and optional ``name``, ``description`` and
    ``visibility``.

    Raises:
        ValidationError: If the manifest is unreadable or malformed.
    """
    try:
        with open(manifest_path) as f:
            data = yaml.safe_load(f) or []
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"Failed to read manifest {manifest_path}: {e}") from e

    if not isinstance(data, list):
        raise ValidationError("Manifest must be a list of entries", field="manifest")

    base = Path(manifest_path).parent
    entries: list[dict[str, Any]] = []
    for idx, raw in enumerate(data, start=1):
        if not isinstance(raw, dict) or not raw.get("path"):
            raise ValidationError(f"Manifest entry {idx} needs a 'path'", field="manifest")
        visibility = raw.get("visibility", Visibility.PRIVATE.value)
        if visibility not in {v.value for v in Visibility}:
            raise ValidationError(
                f"Manifest entry {idx}: unknown visibility", field="visibility", value=visibility
            )
        path = Path(raw["path"]).expanduser()
        entries.append(
            {
                "path": path if path.is_absolute() else base / path,
                "display_name": raw.get("name"),
                "description": raw.get("description") or "",
                "visibility": visibility,
            }
        )
    return entries


def build_batch(
    paths: Sequence[Path] = (),
    *,
    manifest: Path | None = None,
    display_name: str | None = None,
    description: str = "",
    visibility: Visibility | str = Visibility.PRIVATE,
) -> BatchSession:
    """Create an idle batch from a manifest and/or plain paths.

    Manifest entries come first, then ``paths`` with the shared metadata.

    Raises:
        ValidationError: If ``display_name`` is given for more than one file,
            or no files were selected.
    """
    batch = BatchSession()

    if manifest is not None:
        for entry in load_manifest(manifest):
            path = entry.pop("path")
            batch.add_path(path, **entry)

    files = collect_files(paths)
    if display_name and len(files) != 1:
        raise ValidationError("--name can only be used with a single file", field="name")

    for path in files:
        batch.add_path(
            path,
            display_name=display_name,
            description=description,
            visibility=visibility,
        )

    if not batch.items:
        raise ValidationError("No files selected")
    return batch
