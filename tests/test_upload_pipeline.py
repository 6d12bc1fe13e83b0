"""Tests for the bounded-concurrency upload pipeline."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from telegraph_uploader.app.checkpoint import CheckpointStore
from telegraph_uploader.app.pipeline import UploadPipeline
from telegraph_uploader.errors import UploadCancelled, UploadError
from telegraph_uploader.platforms import UploadOutcome, UploadTask
from telegraph_uploader.settings import UploadSettings


class ScriptedUploader:
    """Fails each file a scripted number of times before succeeding."""

    def __init__(
        self,
        failures: dict[str, int] | None = None,
        *,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._failures = dict(failures or {})
        self._delays = dict(delays or {})
        self._lock = threading.Lock()
        self.calls: list[str] = []

    def upload(self, task: UploadTask) -> str:
        with self._lock:
            self.calls.append(task.filename)
            remaining = self._failures.get(task.filename, 0)
            if remaining > 0:
                self._failures[task.filename] = remaining - 1
        time.sleep(self._delays.get(task.filename, 0))
        if remaining > 0:
            raise UploadError(f"boom {task.filename}")
        return f"https://host/file/{task.filename}"


class ExplodingUploader:
    def upload(self, task: UploadTask) -> str:  # pragma: no cover - must never run
        raise AssertionError("upload should not be called when resuming")


def _settings(**overrides: object) -> UploadSettings:
    values: dict[str, object] = {
        "base_url": "https://host",
        "concurrency": 3,
        "max_retries": 2,
        "retry_delay": 0,
    }
    values.update(overrides)
    return UploadSettings(**values)  # type: ignore[arg-type]


def _tasks(tmp_path: Path, count: int) -> list[UploadTask]:
    return [UploadTask(filename=f"img_{i:02d}.png", path=tmp_path / f"img_{i:02d}.png") for i in range(count)]


def _store(tmp_path: Path) -> CheckpointStore:
    return CheckpointStore(tmp_path / "out" / "album.json")


def test_outcomes_follow_input_order(tmp_path: Path) -> None:
    tasks = _tasks(tmp_path, 7)
    # Earlier tasks take longer, so completion order is the reverse of input order.
    delays = {task.filename: (len(tasks) - i) * 0.01 for i, task in enumerate(tasks)}
    pipeline = UploadPipeline(ScriptedUploader(delays=delays), _store(tmp_path), _settings())

    outcomes = pipeline.execute(tasks)

    assert len(outcomes) == len(tasks)
    assert [outcome.filename for outcome in outcomes] == [task.filename for task in tasks]
    assert all(outcome.succeeded for outcome in outcomes)
    assert outcomes[0].url == "https://host/file/img_00.png"


def test_success_after_exactly_max_retries_failures(tmp_path: Path) -> None:
    tasks = _tasks(tmp_path, 1)
    uploader = ScriptedUploader({"img_00.png": 2})
    pipeline = UploadPipeline(uploader, _store(tmp_path), _settings(max_retries=2))

    [outcome] = pipeline.execute(tasks)

    assert outcome.status == "success"
    assert outcome.retries == 2
    assert outcome.error is None
    assert uploader.calls == ["img_00.png"] * 3


def test_exhausted_task_records_error_without_aborting_siblings(tmp_path: Path) -> None:
    tasks = _tasks(tmp_path, 4)
    uploader = ScriptedUploader({"img_01.png": 3})
    pipeline = UploadPipeline(uploader, _store(tmp_path), _settings(max_retries=2))

    outcomes = pipeline.execute(tasks)

    failed = outcomes[1]
    assert failed.status == "error"
    assert failed.retries == 2
    assert failed.url is None
    assert "boom img_01.png" in (failed.error or "")
    assert [outcome.status for i, outcome in enumerate(outcomes) if i != 1] == ["success"] * 3
    assert uploader.calls.count("img_01.png") == 3


class BrokenPipeUploader(ScriptedUploader):
    def upload(self, task: UploadTask) -> str:
        if task.filename == "img_01.png":
            with self._lock:
                self.calls.append(task.filename)
            raise ConnectionResetError("connection reset by peer")
        return super().upload(task)


def test_unexpected_exception_is_recorded_as_failure(tmp_path: Path) -> None:
    uploader = BrokenPipeUploader()
    store = _store(tmp_path)
    pipeline = UploadPipeline(uploader, store, _settings(concurrency=1, max_retries=1))

    outcomes = pipeline.execute(_tasks(tmp_path, 3))

    assert [outcome.status for outcome in outcomes] == ["success", "error", "success"]
    assert outcomes[1].retries == 1
    assert "ConnectionResetError" in (outcomes[1].error or "")
    assert uploader.calls.count("img_01.png") == 2
    assert store.load() == outcomes


def test_execute_writes_checkpoint_once_settled(tmp_path: Path) -> None:
    store = _store(tmp_path)
    pipeline = UploadPipeline(ScriptedUploader(), store, _settings())

    outcomes = pipeline.execute(_tasks(tmp_path, 3))

    assert store.exists()
    assert store.load() == outcomes


def test_existing_checkpoint_skips_all_uploads(tmp_path: Path) -> None:
    store = _store(tmp_path)
    stored = [
        UploadOutcome.failure("img_00.png", "boom", retries=2),
        UploadOutcome.failure("img_01.png", "boom", retries=2),
    ]
    store.save(stored)

    pipeline = UploadPipeline(ExplodingUploader(), store, _settings())
    outcomes = pipeline.run(_tasks(tmp_path, 5))

    assert outcomes == stored


def test_retry_failed_reruns_all_error_checkpoint(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.save([UploadOutcome.failure("img_00.png", "boom", retries=2)])
    uploader = ScriptedUploader()

    pipeline = UploadPipeline(uploader, store, _settings(), retry_failed=True)
    outcomes = pipeline.run(_tasks(tmp_path, 2))

    assert sorted(uploader.calls) == ["img_00.png", "img_01.png"]
    assert all(outcome.succeeded for outcome in outcomes)
    assert store.load() == outcomes


def test_retry_failed_keeps_partially_successful_checkpoint(tmp_path: Path) -> None:
    store = _store(tmp_path)
    stored = [
        UploadOutcome.success("img_00.png", "https://host/a", retries=0),
        UploadOutcome.failure("img_01.png", "boom", retries=2),
    ]
    store.save(stored)

    pipeline = UploadPipeline(ExplodingUploader(), store, _settings(), retry_failed=True)

    assert pipeline.run(_tasks(tmp_path, 2)) == stored


class TrackingUploader:
    """Records how many uploads overlap; the first wave meets at a barrier."""

    def __init__(self, parties: int) -> None:
        self._lock = threading.Lock()
        self._barrier = threading.Barrier(parties, timeout=5)
        self._parties = parties
        self._calls = 0
        self.in_flight = 0
        self.max_in_flight = 0

    def upload(self, task: UploadTask) -> str:
        with self._lock:
            self._calls += 1
            first_wave = self._calls <= self._parties
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if first_wave:
                self._barrier.wait()
            time.sleep(0.01)
        finally:
            with self._lock:
                self.in_flight -= 1
        return f"https://host/{task.filename}"


def test_concurrency_never_exceeds_limit(tmp_path: Path) -> None:
    uploader = TrackingUploader(parties=3)
    pipeline = UploadPipeline(uploader, _store(tmp_path), _settings(concurrency=3))

    outcomes = pipeline.execute(_tasks(tmp_path, 12))

    assert len(outcomes) == 12
    assert uploader.max_in_flight == 3


def test_progress_reported_once_per_settled_task(tmp_path: Path) -> None:
    events: list[tuple[int, int]] = []
    pipeline = UploadPipeline(
        ScriptedUploader({"img_02.png": 1}),
        _store(tmp_path),
        _settings(),
        progress=lambda done, total: events.append((done, total)),
    )

    pipeline.execute(_tasks(tmp_path, 5))

    assert events == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]


def test_cancelled_run_raises_and_skips_checkpoint(tmp_path: Path) -> None:
    cancel = threading.Event()
    cancel.set()
    uploader = ScriptedUploader()
    store = _store(tmp_path)
    pipeline = UploadPipeline(uploader, store, _settings(), cancel_event=cancel)

    with pytest.raises(UploadCancelled):
        pipeline.execute(_tasks(tmp_path, 3))

    assert uploader.calls == []
    assert not store.exists()


class CancellingUploader:
    def __init__(self, cancel: threading.Event) -> None:
        self._cancel = cancel
        self.calls = 0

    def upload(self, task: UploadTask) -> str:
        self.calls += 1
        self._cancel.set()
        raise UploadError("host unavailable")


def test_cancel_interrupts_retry_wait(tmp_path: Path) -> None:
    cancel = threading.Event()
    uploader = CancellingUploader(cancel)
    store = _store(tmp_path)
    pipeline = UploadPipeline(
        uploader,
        store,
        _settings(concurrency=1, retry_delay=30),
        cancel_event=cancel,
    )

    started = time.monotonic()
    with pytest.raises(UploadCancelled):
        pipeline.execute(_tasks(tmp_path, 1))

    assert time.monotonic() - started < 5
    assert uploader.calls == 1
    assert not store.exists()


class GatedUploader(ScriptedUploader):
    """Holds the second file until the run is cancelled."""

    def __init__(self, cancel: threading.Event) -> None:
        super().__init__()
        self._cancel = cancel

    def upload(self, task: UploadTask) -> str:
        if task.filename == "img_01.png":
            with self._lock:
                self.calls.append(task.filename)
            self._cancel.wait(5)
            raise UploadError("interrupted")
        return super().upload(task)


def test_keyboard_interrupt_cancels_queued_tasks(tmp_path: Path) -> None:
    cancel = threading.Event()
    uploader = GatedUploader(cancel)
    store = _store(tmp_path)

    def interrupt(done: int, total: int) -> None:
        raise KeyboardInterrupt

    pipeline = UploadPipeline(
        uploader,
        store,
        _settings(concurrency=1, retry_delay=30),
        progress=interrupt,
        cancel_event=cancel,
    )

    with pytest.raises(UploadCancelled):
        pipeline.execute(_tasks(tmp_path, 3))

    assert cancel.is_set()
    assert uploader.calls[0] == "img_00.png"
    assert "img_02.png" not in uploader.calls
    assert not store.exists()
