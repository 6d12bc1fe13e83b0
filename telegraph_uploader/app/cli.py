"""Command-line interface for the Telegraph image uploader."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Callable, Sequence

from ..errors import ConfigError, UploadCancelled, UploaderError
from ..platforms.imagehost import ImageHostUploader
from ..platforms.telegraph import TelegraphApiClient
from ..settings import AppConfig, load_config
from ..utils.logging import configure_logging, dated_log_path, get_logger
from .checkpoint import CheckpointStore
from .job import run_job

LOGGER = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    handler: Callable[[argparse.Namespace, AppConfig], int] | None = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    level = logging.DEBUG if args.verbose else logging.INFO
    try:
        config = _load(args)
    except ConfigError as exc:
        configure_logging(level=level, structured=not args.log_plain)
        LOGGER.error("Configuration error: %s", exc, extra={"event": "cli.error"})
        return EXIT_USAGE

    configure_logging(
        level=level,
        structured=not args.log_plain,
        log_file=dated_log_path(config.paths.log_dir, config.app.page_id),
    )

    try:
        return handler(args, config)
    except UploadCancelled as exc:
        LOGGER.error("Run cancelled: %s", exc, extra={"event": "cli.cancelled"})
        return EXIT_CANCELLED
    except KeyboardInterrupt:
        LOGGER.error("Run interrupted", extra={"event": "cli.cancelled"})
        return EXIT_CANCELLED
    except UploaderError as exc:
        LOGGER.error(
            "Run failed: %s",
            exc,
            extra={"event": "cli.error", "error_type": type(exc).__name__},
        )
        return EXIT_FAILURE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="telegraph-uploader",
        description="Upload a directory of images and publish them as a Telegraph page",
    )
    parser.add_argument("--config", help="Path to configuration file", default=None)
    parser.add_argument(
        "--log-plain",
        action="store_true",
        help="Use plain-text logs instead of JSON",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Upload images and publish the page")
    run_parser.add_argument("--image-dir", dest="image_dir", help="Directory holding the images")
    run_parser.add_argument("--page-id", dest="page_id", help="Run identifier used for output names")
    run_parser.add_argument("--title", help="Final page title")
    run_parser.add_argument(
        "--concurrency",
        type=int,
        help="Maximum number of uploads in flight",
    )
    run_parser.add_argument(
        "--retry-failed",
        dest="retry_failed",
        action="store_true",
        default=None,
        help="Re-run uploads when the checkpoint holds only failures",
    )
    run_parser.set_defaults(handler=_handle_run)

    inspect_parser = subparsers.add_parser("inspect", help="Show the stored checkpoint")
    inspect_parser.add_argument("--page-id", dest="page_id", help="Run identifier to inspect")
    inspect_parser.add_argument(
        "--format",
        choices=("json", "table"),
        default="json",
        help="Output format for checkpoint inspection",
    )
    inspect_parser.set_defaults(handler=_handle_inspect)

    clean_parser = subparsers.add_parser("clean", help="Delete the stored checkpoint")
    clean_parser.add_argument("--page-id", dest="page_id", help="Run identifier to clean")
    clean_parser.add_argument(
        "--outputs",
        action="store_true",
        help="Also remove the generated summary files",
    )
    clean_parser.set_defaults(handler=_handle_clean)

    return parser


def _load(args: argparse.Namespace) -> AppConfig:
    config = load_config(args.config)
    return config.with_overrides(
        image_dir=getattr(args, "image_dir", None),
        page_id=getattr(args, "page_id", None),
        title=getattr(args, "title", None),
        concurrency=getattr(args, "concurrency", None),
        retry_failed=getattr(args, "retry_failed", None),
    )


def _handle_run(args: argparse.Namespace, config: AppConfig) -> int:
    LOGGER.info(
        "Program started",
        extra={"event": "cli.command", "command": "run", "page_id": config.app.page_id},
    )
    uploader = ImageHostUploader(config.upload.base_url, timeout=config.upload.timeout)
    client = TelegraphApiClient(config.telegraph.api_url, timeout=config.telegraph.timeout)

    report = run_job(config, uploader=uploader, document_client=client)

    LOGGER.info(
        "Upload finished: %d/%d images succeeded",
        report.succeeded,
        report.total,
        extra={"event": "cli.summary", "succeeded": report.succeeded, "total": report.total},
    )
    LOGGER.info("JSON result: %s", report.checkpoint_path.resolve())
    if report.summary_path is not None:
        LOGGER.info("Markdown file: %s", report.summary_path.resolve())
    LOGGER.info("Program exited normally", extra={"event": "cli.command", "command": "run"})
    return EXIT_OK


def _handle_inspect(args: argparse.Namespace, config: AppConfig) -> int:
    store = CheckpointStore(config.checkpoint_path)
    outcomes = store.load()
    if outcomes is None:
        LOGGER.warning(
            "No checkpoint recorded",
            extra={"event": "cli.command", "command": "inspect", "path": str(store.path)},
        )
        print("<no-checkpoint>")
        return EXIT_OK

    if args.format == "table":
        width = max((len(outcome.filename) for outcome in outcomes), default=8)
        print("File".ljust(width), "Status ", "Retries", "URL / Error", sep="  ")
        for outcome in outcomes:
            detail = outcome.url if outcome.succeeded else outcome.error
            print(
                outcome.filename.ljust(width),
                outcome.status.ljust(7),
                str(outcome.retries).ljust(7),
                detail or "",
                sep="  ",
            )
    else:
        print(json.dumps([outcome.to_dict() for outcome in outcomes], ensure_ascii=False, indent=2))
    return EXIT_OK


def _handle_clean(args: argparse.Namespace, config: AppConfig) -> int:
    store = CheckpointStore(config.checkpoint_path)
    store.delete()
    LOGGER.info(
        "Cleared checkpoint",
        extra={"event": "cli.command", "command": "clean", "path": str(store.path)},
    )

    if args.outputs:
        for path in (config.summary_path, config.summary_path.with_suffix(".html")):
            if path.exists():
                path.unlink()
        LOGGER.info(
            "Removed generated outputs",
            extra={"event": "cli.command", "command": "clean", "path": str(config.summary_path)},
        )
    return EXIT_OK


__all__ = ["main"]
