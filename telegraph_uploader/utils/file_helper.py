"""Filesystem helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable

from ..errors import ScanError
from ..platforms.base import UploadTask


def ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def write_text(path: Path, data: str, *, encoding: str = "utf-8") -> None:
    ensure_parent(path)
    with path.open("w", encoding=encoding) as fp:
        fp.write(data)


def write_text_atomic(path: Path, data: str, *, encoding: str = "utf-8") -> None:
    """Write ``data`` to a sibling temp file, then move it over ``path``."""

    ensure_parent(path)
    with tempfile.NamedTemporaryFile(
        "w", encoding=encoding, delete=False, dir=str(path.parent), suffix=".tmp"
    ) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_path = Path(tmp.name)
    try:
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def scan_images(directory: Path, allowed_extensions: Iterable[str]) -> list[UploadTask]:
    """List image files in ``directory`` sorted by name."""

    if not directory.is_dir():
        raise ScanError(f"Image directory {directory} does not exist")
    allowed = {ext.lower() for ext in allowed_extensions}
    tasks = [
        UploadTask(filename=entry.name, path=entry)
        for entry in sorted(directory.iterdir(), key=lambda p: p.name)
        if entry.is_file() and entry.suffix.lower() in allowed
    ]
    if not tasks:
        raise ScanError(
            f"No supported image files found in {directory}",
            details={"extensions": sorted(allowed)},
        )
    return tasks
