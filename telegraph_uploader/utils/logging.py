"""Logging helpers."""

from __future__ import annotations

import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "asctime",
    "taskName",
}

_PLAIN_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
_HANDLER_MARKER = "_telegraph_uploader_handler"


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }

        extras = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extras:
            data.update(extras)

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, ensure_ascii=False, default=str)


def dated_log_path(log_dir: Path, page_id: str, *, today: date | None = None) -> Path:
    """Return the log file for ``page_id`` partitioned by calendar day."""

    day = (today or date.today()).isoformat()
    return log_dir / f"{day}-{page_id}.log"


def configure_logging(
    *,
    level: int = logging.INFO,
    structured: bool | None = None,
    log_file: Path | None = None,
) -> None:
    """Configure root logging with optional JSON output and a persistent log file."""

    root = logging.getLogger()
    root.setLevel(level)

    formatter: logging.Formatter
    if structured:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(_PLAIN_FORMAT)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    setattr(stream_handler, _HANDLER_MARKER, True)
    root.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        # The persistent log stays line-oriented regardless of console mode.
        file_handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
        setattr(file_handler, _HANDLER_MARKER, True)
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "dated_log_path", "get_logger", "JsonFormatter"]
