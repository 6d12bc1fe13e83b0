"""Error taxonomy for the uploader."""

from __future__ import annotations

import json
from typing import Any, Mapping


class UploaderError(RuntimeError):
    """Base class for errors raised by the uploader."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        try:
            detail_repr = json.dumps(self.details, ensure_ascii=False)
        except TypeError:
            detail_repr = str(self.details)
        return f"{base} | details: {detail_repr}"


class ConfigError(UploaderError):
    """Raised when the configuration file is missing or invalid."""


class ScanError(UploaderError):
    """Raised when the image directory is missing or holds no images."""


class UploadError(UploaderError):
    """Raised by a single upload attempt; retryable."""


class UploadCancelled(UploaderError):
    """Raised when an upload run is cancelled before all tasks settle."""


class CheckpointIOError(UploaderError):
    """Raised when the checkpoint cannot be read or written."""


class AccountCreationError(UploaderError):
    """Raised when Telegraph refuses to create an account."""


class PageCreationError(UploaderError):
    """Raised when Telegraph refuses to create a page."""


class PageEditError(UploaderError):
    """Raised when Telegraph refuses to edit a page."""


__all__ = [
    "UploaderError",
    "ConfigError",
    "ScanError",
    "UploadError",
    "UploadCancelled",
    "CheckpointIOError",
    "AccountCreationError",
    "PageCreationError",
    "PageEditError",
]
