"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from telegraph_uploader.app import cli
from telegraph_uploader.platforms import UploadOutcome, UploadTask

from .stubs import StubDocumentClient


class _Uploader:
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        pass

    def upload(self, task: UploadTask) -> str:
        return f"https://host/{task.filename}"


@pytest.fixture
def config_path(tmp_path: Path, image_dir: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
[app]
page_id = "album"
title = "My Album"
image_dir = "{image_dir.as_posix()}"

[upload]
retry_delay = 0
""",
        encoding="utf-8",
    )
    return path


def _patch_clients(monkeypatch: pytest.MonkeyPatch, client: StubDocumentClient) -> None:
    monkeypatch.setattr(cli, "ImageHostUploader", _Uploader)
    monkeypatch.setattr(cli, "TelegraphApiClient", lambda *args, **kwargs: client)


def test_run_succeeds_and_writes_dated_log(
    monkeypatch: pytest.MonkeyPatch, config_path: Path, tmp_path: Path
) -> None:
    _patch_clients(monkeypatch, StubDocumentClient())

    code = cli.main(["--config", str(config_path), "--log-plain", "run"])

    assert code == cli.EXIT_OK
    output_dir = tmp_path / "output"
    assert (output_dir / "album.json").exists()
    assert (output_dir / "album.md").exists()
    logs = list((output_dir / "logs").glob("*-album.log"))
    assert len(logs) == 1
    assert "Upload finished: 2/2 images succeeded" in logs[0].read_text(encoding="utf-8")


def test_run_overrides_page_id(
    monkeypatch: pytest.MonkeyPatch, config_path: Path, tmp_path: Path
) -> None:
    _patch_clients(monkeypatch, StubDocumentClient())

    code = cli.main(["--config", str(config_path), "run", "--page-id", "other", "--title", "T"])

    assert code == cli.EXIT_OK
    assert (tmp_path / "output" / "other.json").exists()


def test_remote_failure_exits_non_zero(
    monkeypatch: pytest.MonkeyPatch, config_path: Path, tmp_path: Path
) -> None:
    _patch_clients(monkeypatch, StubDocumentClient(fail_on="edit"))

    code = cli.main(["--config", str(config_path), "run"])

    assert code == cli.EXIT_FAILURE
    assert (tmp_path / "output" / "album.json").exists()
    assert not (tmp_path / "output" / "album.md").exists()


def test_config_error_exits_with_usage_code(tmp_path: Path) -> None:
    assert cli.main(["--config", str(tmp_path / "missing.toml"), "run"]) == cli.EXIT_USAGE


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([]) == cli.EXIT_USAGE
    assert "telegraph-uploader" in capsys.readouterr().err


def test_inspect_and_clean(
    config_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    checkpoint = tmp_path / "output" / "album.json"
    checkpoint.parent.mkdir(parents=True, exist_ok=True)
    outcomes = [
        UploadOutcome.success("a.png", "https://host/a", retries=0),
        UploadOutcome.failure("b.jpg", "boom", retries=3),
    ]
    checkpoint.write_text(json.dumps([o.to_dict() for o in outcomes]), encoding="utf-8")

    assert cli.main(["--config", str(config_path), "inspect"]) == cli.EXIT_OK
    out = capsys.readouterr().out
    printed = json.loads(out[out.index("[\n  {") :])
    assert [item["status"] for item in printed] == ["success", "error"]

    assert cli.main(["--config", str(config_path), "inspect", "--format", "table"]) == cli.EXIT_OK
    table = capsys.readouterr().out
    assert "https://host/a" in table
    assert "boom" in table

    summary = tmp_path / "output" / "album.md"
    summary.write_text("# old", encoding="utf-8")
    assert cli.main(["--config", str(config_path), "clean", "--outputs"]) == cli.EXIT_OK
    assert not checkpoint.exists()
    assert not summary.exists()

    assert cli.main(["--config", str(config_path), "inspect"]) == cli.EXIT_OK
    assert "<no-checkpoint>" in capsys.readouterr().out
