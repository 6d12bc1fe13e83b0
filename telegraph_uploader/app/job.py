"""Runs one upload-and-publish batch end to end."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from ..platforms.base import DocumentClient, ImageUploader, PublishedDocument, UploadOutcome
from ..services import DocumentAssembly, SummaryRenderer
from ..settings import AppConfig
from ..utils.file_helper import scan_images
from ..utils.logging import get_logger
from .checkpoint import CheckpointStore
from .pipeline import ProgressCallback, UploadPipeline

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class JobReport:
    """What a finished run hands back to the command line."""

    outcomes: tuple[UploadOutcome, ...]
    checkpoint_path: Path
    summary_path: Path | None
    document: PublishedDocument | None

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)


def run_job(
    config: AppConfig,
    *,
    uploader: ImageUploader,
    document_client: DocumentClient,
    cancel_event: threading.Event | None = None,
    progress: ProgressCallback | None = None,
) -> JobReport:
    """Upload, checkpoint, assemble the page and write the summary, in that order."""

    store = CheckpointStore(config.checkpoint_path)
    pipeline = UploadPipeline(
        uploader,
        store,
        config.upload,
        progress=progress,
        cancel_event=cancel_event,
        retry_failed=config.checkpoint.retry_failed,
    )

    outcomes = pipeline.resume()
    if outcomes is None:
        tasks = scan_images(config.app.image_dir, config.upload.allowed_extensions)
        outcomes = pipeline.execute(tasks)
    frozen = tuple(outcomes)

    assembly = DocumentAssembly(
        document_client,
        config.telegraph,
        page_id=config.app.page_id,
        title=config.app.title,
    )
    document = assembly.assemble(frozen)

    summary_path: Path | None = None
    if document is not None:
        LOGGER.info("Final page URL: %s", document.url, extra={"event": "job.published"})
        renderer = SummaryRenderer(config.app.title, config.summary.author)
        summary_path = renderer.write(
            config.summary_path,
            frozen,
            document.access_token,
            document.url,
            html=config.summary.html,
        )

    return JobReport(
        outcomes=frozen,
        checkpoint_path=store.path,
        summary_path=summary_path,
        document=document,
    )


__all__ = ["JobReport", "run_job"]
