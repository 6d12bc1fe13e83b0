"""Image host upload implementation."""

from __future__ import annotations

import json
import mimetypes

import requests

from telegraph_uploader.errors import UploadError
from telegraph_uploader.platforms.base import ImageUploader, UploadTask


class ImageHostUploader(ImageUploader):
    """Uploads single images to a Telegraph-compatible image host."""

    def __init__(self, base_url: str, *, timeout: float = 60.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def upload_url(self) -> str:
        return f"{self._base_url}/upload"

    def upload(self, task: UploadTask) -> str:
        mime_type = mimetypes.guess_type(task.filename)[0] or "application/octet-stream"

        try:
            with task.path.open("rb") as stream:
                files = {"file": (task.filename, stream, mime_type)}
                response = requests.post(self.upload_url, files=files, timeout=self._timeout)
                response.raise_for_status()
        except requests.RequestException as exc:
            raise UploadError(
                "Image upload request failed",
                details={"file": task.filename, "reason": str(exc)},
            ) from exc
        except OSError as exc:
            raise UploadError(
                "Could not read image file",
                details={"path": str(task.path), "reason": str(exc)},
            ) from exc

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise UploadError(
                "Could not parse image host response",
                details={"file": task.filename, "response": response.text[:200]},
            ) from exc

        src = None
        if isinstance(data, list) and data and isinstance(data[0], dict):
            src = data[0].get("src")
        if not src or not isinstance(src, str):
            raise UploadError(
                "Image host response has no 'src'",
                details={"file": task.filename, "response": data},
            )

        return f"{self._base_url}{src}"
