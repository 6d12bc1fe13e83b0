"""Image host adapters."""

from __future__ import annotations

from .uploader import ImageHostUploader

__all__ = ["ImageHostUploader"]
