"""Platform integration package."""

from __future__ import annotations

from .base import (
    STATUS_ERROR,
    STATUS_SUCCESS,
    DocumentClient,
    ImageUploader,
    PublishedDocument,
    UploadOutcome,
    UploadTask,
)

__all__ = [
    "STATUS_ERROR",
    "STATUS_SUCCESS",
    "DocumentClient",
    "ImageUploader",
    "PublishedDocument",
    "UploadOutcome",
    "UploadTask",
]
