"""Bounded-concurrency upload pipeline with retry and checkpointing."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Sequence

from ..errors import UploadCancelled, UploadError
from ..platforms.base import ImageUploader, UploadOutcome, UploadTask
from ..settings import UploadSettings
from ..utils.logging import get_logger
from .checkpoint import CheckpointStore

LOGGER = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


def log_progress(done: int, total: int) -> None:
    percent = round(done / total * 100) if total else 100
    LOGGER.info(
        "Progress: %d/%d (%d%%)",
        done,
        total,
        percent,
        extra={"event": "upload.progress", "done": done, "total": total},
    )


class UploadPipeline:
    """Uploads a batch of files through a fixed-size worker pool.

    Each worker drives one task through its retry loop until it succeeds or
    exhausts ``max_retries``; only then does it pick up the next task. The
    resulting outcomes keep the order of the input tasks and are written to
    the checkpoint exactly once, after every task has settled.
    """

    def __init__(
        self,
        uploader: ImageUploader,
        store: CheckpointStore,
        settings: UploadSettings,
        *,
        progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
        retry_failed: bool = False,
    ) -> None:
        self._uploader = uploader
        self._store = store
        self._settings = settings
        self._progress = progress or log_progress
        self._cancel = cancel_event or threading.Event()
        self._retry_failed = retry_failed

    def run(self, tasks: Sequence[UploadTask]) -> list[UploadOutcome]:
        stored = self.resume()
        if stored is not None:
            return stored
        return self.execute(tasks)

    def resume(self) -> list[UploadOutcome] | None:
        """Return the checkpointed outcomes, or ``None`` when a fresh run is needed."""

        stored = self._store.load()
        if stored is None:
            return None
        if self._retry_failed and not any(outcome.succeeded for outcome in stored):
            LOGGER.warning(
                "Checkpoint holds no successful uploads; retrying the batch",
                extra={"event": "checkpoint.retry", "path": str(self._store.path)},
            )
            return None
        LOGGER.info(
            "Checkpoint found; skipping uploads",
            extra={
                "event": "checkpoint.resume",
                "path": str(self._store.path),
                "outcomes": len(stored),
            },
        )
        return stored

    def execute(self, tasks: Sequence[UploadTask]) -> list[UploadOutcome]:
        tasks = list(tasks)
        total = len(tasks)
        LOGGER.info(
            "Found %d images, starting upload",
            total,
            extra={"event": "upload.start", "concurrency": self._settings.concurrency},
        )

        slots: list[UploadOutcome | None] = [None] * total
        done = 0
        workers = max(1, min(self._settings.concurrency, total))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upload") as executor:
            futures: dict[Future[UploadOutcome | None], int] = {
                executor.submit(self._process, index, task, total): index
                for index, task in enumerate(tasks)
            }
            try:
                for future in as_completed(futures):
                    outcome = future.result()
                    if outcome is None:
                        continue
                    slots[futures[future]] = outcome
                    done += 1
                    self._progress(done, total)
            except KeyboardInterrupt:
                LOGGER.warning("Interrupted; waiting for in-flight uploads to stop")
                self._cancel.set()
                executor.shutdown(wait=True, cancel_futures=True)
            except BaseException:
                self._cancel.set()
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        outcomes = [outcome for outcome in slots if outcome is not None]
        if len(outcomes) != total:
            raise UploadCancelled(
                "Upload run cancelled before all tasks settled",
                details={"settled": len(outcomes), "total": total},
            )

        self._store.save(outcomes)
        LOGGER.info(
            "Checkpoint written",
            extra={"event": "checkpoint.save", "path": str(self._store.path)},
        )
        return outcomes

    def _process(self, index: int, task: UploadTask, total: int) -> UploadOutcome | None:
        retries = 0
        while not self._cancel.is_set():
            suffix = f" (retry {retries})" if retries else ""
            LOGGER.info("[%d/%d] Uploading %s%s", index + 1, total, task.filename, suffix)
            try:
                url = self._uploader.upload(task)
            except Exception as exc:
                if isinstance(exc, UploadError):
                    reason = str(exc)
                else:
                    reason = f"{type(exc).__name__}: {exc}"
                    LOGGER.debug("Unexpected upload exception", exc_info=True)
                if retries >= self._settings.max_retries:
                    LOGGER.error(
                        "%s: exceeded max retries (%d)",
                        task.filename,
                        self._settings.max_retries,
                        extra={"event": "upload.exhausted", "error": reason},
                    )
                    return UploadOutcome.failure(task.filename, reason, retries=retries)
                LOGGER.warning(
                    "%s: upload failed, retrying in %.1fs",
                    task.filename,
                    self._settings.retry_delay,
                    extra={"event": "upload.retry", "error": reason, "retries": retries},
                )
                if self._cancel.wait(self._settings.retry_delay):
                    return None
                retries += 1
                continue
            return UploadOutcome.success(task.filename, url, retries=retries)
        return None


__all__ = ["UploadPipeline", "ProgressCallback", "log_progress"]
