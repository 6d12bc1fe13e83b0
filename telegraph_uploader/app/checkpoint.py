"""Persistence helpers for upload outcomes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from ..errors import CheckpointIOError
from ..platforms.base import UploadOutcome
from ..utils.file_helper import write_text_atomic


class CheckpointStore:
    """Stores the ordered outcome list of one run as a JSON array."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> list[UploadOutcome] | None:
        if not self.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise CheckpointIOError(
                "Could not read checkpoint", details={"path": str(self._path), "reason": str(exc)}
            ) from exc
        except json.JSONDecodeError as exc:
            raise CheckpointIOError(
                "Checkpoint is not valid JSON", details={"path": str(self._path), "reason": str(exc)}
            ) from exc

        if not isinstance(data, list):
            raise CheckpointIOError(
                "Checkpoint must hold a JSON array", details={"path": str(self._path)}
            )
        try:
            return [UploadOutcome.from_dict(item) for item in data]
        except (AttributeError, TypeError, ValueError) as exc:
            raise CheckpointIOError(
                "Checkpoint holds an invalid outcome",
                details={"path": str(self._path), "reason": str(exc)},
            ) from exc

    def save(self, outcomes: Sequence[UploadOutcome]) -> Path:
        payload = json.dumps(
            [outcome.to_dict() for outcome in outcomes], ensure_ascii=False, indent=2
        )
        try:
            write_text_atomic(self._path, payload + "\n")
        except OSError as exc:
            raise CheckpointIOError(
                "Could not write checkpoint", details={"path": str(self._path), "reason": str(exc)}
            ) from exc
        return self._path

    def delete(self) -> None:
        if self._path.exists():
            self._path.unlink()


__all__ = ["CheckpointStore"]
