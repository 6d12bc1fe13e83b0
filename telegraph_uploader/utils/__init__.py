"""Utility exports."""

from .file_helper import ensure_parent, scan_images, write_text, write_text_atomic
from .logging import configure_logging, dated_log_path, get_logger

__all__ = [
    "ensure_parent",
    "scan_images",
    "write_text",
    "write_text_atomic",
    "configure_logging",
    "dated_log_path",
    "get_logger",
]
