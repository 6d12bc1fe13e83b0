from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from telegraph_uploader.platforms import UploadOutcome


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_telegraph_uploader_handler", False):
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
    """A directory with two images and one file that must be ignored."""
    directory = tmp_path / "images"
    directory.mkdir()
    (directory / "b.jpg").write_bytes(b"\xff\xd8jpeg")
    (directory / "a.png").write_bytes(b"\x89PNGdata")
    (directory / "notes.txt").write_text("not an image", encoding="utf-8")
    return directory


@pytest.fixture
def sample_outcomes() -> list[UploadOutcome]:
    return [
        UploadOutcome.success("a.png", "https://host/a", retries=0),
        UploadOutcome.success("b.jpg", "https://host/b", retries=1),
    ]
