"""Base contracts for the image host and the document service."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@dataclass(frozen=True, slots=True)
class UploadTask:
    """One file queued for upload."""

    filename: str
    path: Path


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    """Terminal result of a task's upload attempts."""

    filename: str
    status: str
    url: str | None = None
    error: str | None = None
    retries: int = 0

    @classmethod
    def success(cls, filename: str, url: str, *, retries: int) -> "UploadOutcome":
        return cls(filename=filename, status=STATUS_SUCCESS, url=url, retries=retries)

    @classmethod
    def failure(cls, filename: str, error: str, *, retries: int) -> "UploadOutcome":
        return cls(filename=filename, status=STATUS_ERROR, error=error, retries=retries)

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UploadOutcome":
        status = str(data.get("status", ""))
        if status not in {STATUS_SUCCESS, STATUS_ERROR}:
            raise ValueError(f"Invalid outcome status: {status!r}")
        filename = data.get("filename")
        if not filename:
            raise ValueError("Outcome is missing 'filename'")
        url = data.get("url")
        if status == STATUS_SUCCESS and not url:
            raise ValueError(f"Successful outcome for {filename} has no url")
        if status == STATUS_ERROR and url:
            raise ValueError(f"Failed outcome for {filename} must not carry a url")
        retries = int(data.get("retries", 0))
        if retries < 0:
            raise ValueError(f"Outcome for {filename} has negative retries: {retries}")
        error = data.get("error")
        return cls(
            filename=str(filename),
            status=status,
            url=str(url) if url else None,
            error=str(error) if error else None,
            retries=retries,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "filename": self.filename,
            "url": self.url,
            "status": self.status,
            "retries": self.retries,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True, slots=True)
class PublishedDocument:
    """A Telegraph page after both assembly phases."""

    access_token: str
    path: str
    url: str
    title: str
    content: tuple[Mapping[str, Any], ...]


class ImageUploader(Protocol):
    """Uploads one file to the image host."""

    def upload(self, task: UploadTask) -> str:
        """Return the durable URL of the uploaded file or raise ``UploadError``."""


class DocumentClient(Protocol):
    """Creates accounts and pages on the document service."""

    def create_account(self, short_name: str, author_name: str) -> str:
        """Return a fresh access token."""

    def create_page(
        self,
        access_token: str,
        title: str,
        content: Sequence[Mapping[str, Any]],
        *,
        return_content: bool = False,
    ) -> str:
        """Create a page and return its public URL."""

    def edit_page(
        self,
        access_token: str,
        path: str,
        title: str,
        content: Sequence[Mapping[str, Any]],
        *,
        author_name: str,
        author_url: str,
    ) -> str:
        """Rewrite an existing page and return its public URL."""
