"""
Bulk export of batch results.

Two ways out: a single zip archive holding every produced file, or the
files written one by one into a directory.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Iterable

from emoteresize.types import ProcessedFile, ResultGroup

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME = "resized_img.zip"


def iter_files(groups: Iterable[ResultGroup]) -> list[ProcessedFile]:
    """Flatten result groups into one list, group order then file order."""
    return [f for group in groups for f in group.files]


def _archive_entries(groups: Iterable[ResultGroup]) -> dict[str, bytes]:
    # Same-named files replace earlier ones but keep the first position.
    entries: dict[str, bytes] = {}
    for f in iter_files(groups):
        entries[f.name] = f.data
    return entries


def build_archive(groups: Iterable[ResultGroup]) -> bytes:
    """Return a zip archive with one entry per produced file."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in _archive_entries(groups).items():
            zf.writestr(name, data)
    return buf.getvalue()


def write_archive(
    groups: Iterable[ResultGroup],
    path: str | Path = DEFAULT_ARCHIVE_NAME,
) -> Path:
    """Write ``build_archive(groups)`` to *path* and return the path."""
    path = Path(path)
    if path.parent != Path("."):
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_archive(groups))
    logger.info("Wrote archive %s (%d bytes).", path, path.stat().st_size)
    return path


def write_files(groups: Iterable[ResultGroup], directory: str | Path) -> list[Path]:
    """Write every produced file into *directory*; returns the paths written."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for f in iter_files(groups):
        target = directory / f.name
        target.write_bytes(f.data)
        written.append(target)
    logger.info("Wrote %d file(s) to %s.", len(written), directory)
    return written
