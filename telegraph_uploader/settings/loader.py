"""Helpers for loading configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable

try:  # pragma: no cover - Python 3.11+ includes tomllib
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older versions
    import tomli as tomllib  # type: ignore[no-redef]

from ..errors import ConfigError

DEFAULT_CONFIG_NAME = "config.toml"
CONFIG_ENV_VAR = "TELEGRAPH_UPLOADER_CONFIG"

DEFAULT_ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
DEFAULT_IMAGE_HOST = "https://im.gurl.eu.org"
DEFAULT_TELEGRAPH_API = "https://api.telegra.ph"
DEFAULT_AUTHOR = "Kafu Chino"
DEFAULT_SHORT_NAME = "BocchiUploader"
DEFAULT_AUTHOR_URL = "https://github.com/etsuyou/telegraph-img-uploader"


@dataclass(frozen=True, slots=True)
class AppSettings:
    page_id: str
    title: str
    image_dir: Path


@dataclass(frozen=True, slots=True)
class PathSettings:
    output_dir: Path
    log_dir: Path

    def checkpoint_for(self, page_id: str) -> Path:
        return self.output_dir / f"{page_id}.json"

    def summary_for(self, page_id: str) -> Path:
        return self.output_dir / f"{page_id}.md"


@dataclass(frozen=True, slots=True)
class UploadSettings:
    base_url: str = DEFAULT_IMAGE_HOST
    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS
    concurrency: int = 10
    max_retries: int = 10
    retry_delay: float = 10.0
    timeout: float = 60.0


@dataclass(frozen=True, slots=True)
class TelegraphSettings:
    api_url: str = DEFAULT_TELEGRAPH_API
    short_name: str = DEFAULT_SHORT_NAME
    author_name: str = DEFAULT_AUTHOR
    author_url: str = DEFAULT_AUTHOR_URL
    timeout: float = 30.0


@dataclass(frozen=True, slots=True)
class SummarySettings:
    author: str = DEFAULT_AUTHOR
    html: bool = False


@dataclass(frozen=True, slots=True)
class CheckpointSettings:
    retry_failed: bool = False


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Immutable configuration built once at startup."""

    app: AppSettings
    paths: PathSettings
    upload: UploadSettings = field(default_factory=UploadSettings)
    telegraph: TelegraphSettings = field(default_factory=TelegraphSettings)
    summary: SummarySettings = field(default_factory=SummarySettings)
    checkpoint: CheckpointSettings = field(default_factory=CheckpointSettings)

    @property
    def checkpoint_path(self) -> Path:
        return self.paths.checkpoint_for(self.app.page_id)

    @property
    def summary_path(self) -> Path:
        return self.paths.summary_for(self.app.page_id)

    def with_overrides(
        self,
        *,
        image_dir: str | os.PathLike[str] | None = None,
        page_id: str | None = None,
        title: str | None = None,
        concurrency: int | None = None,
        retry_failed: bool | None = None,
    ) -> "AppConfig":
        """Return a copy with command-line overrides applied."""

        app = self.app
        if image_dir is not None:
            app = replace(app, image_dir=Path(image_dir).expanduser().resolve())
        if page_id:
            app = replace(app, page_id=_validate_page_id(page_id))
        if title:
            app = replace(app, title=title)

        upload = self.upload
        if concurrency is not None:
            upload = replace(upload, concurrency=_positive_int(concurrency, "upload.concurrency"))

        checkpoint = self.checkpoint
        if retry_failed is not None:
            checkpoint = replace(checkpoint, retry_failed=retry_failed)

        return replace(self, app=app, upload=upload, checkpoint=checkpoint)


def _to_path(value: str | None, *, base: Path, fallback: Path) -> Path:
    if not value:
        return fallback
    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else base / candidate


def _config_path(explicit: str | os.PathLike[str] | None = None) -> Path:
    candidate: Path
    if explicit:
        candidate = Path(explicit)
    else:
        env_value = os.environ.get(CONFIG_ENV_VAR)
        candidate = Path(env_value) if env_value else Path.cwd() / DEFAULT_CONFIG_NAME
    return candidate.expanduser().resolve()


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with path.open("rb") as fp:
            return tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc


def _ensure_directories(paths: Iterable[Path]) -> None:
    for directory in paths:
        directory.mkdir(parents=True, exist_ok=True)


def _validate_page_id(value: Any) -> str:
    page_id = str(value or "").strip()
    if not page_id:
        raise ConfigError("app.page_id must be a non-empty string")
    if "/" in page_id or "\\" in page_id:
        raise ConfigError("app.page_id must not contain path separators", details={"page_id": page_id})
    return page_id


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer", details={"value": value}) from exc
    if number < 1:
        raise ConfigError(f"{name} must be at least 1", details={"value": number})
    return number


def _non_negative(value: Any, name: str, cast: type = float) -> Any:
    try:
        number = cast(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number", details={"value": value}) from exc
    if number < 0:
        raise ConfigError(f"{name} must not be negative", details={"value": number})
    return number


def _boolean(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false", details={"value": value})
    return value


def _extensions(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_ALLOWED_EXTENSIONS
    if isinstance(raw, str) or not isinstance(raw, (list, tuple)):
        raise ConfigError("upload.allowed_extensions must be a list", details={"value": raw})
    normalized = []
    for item in raw:
        ext = str(item).strip().lower()
        if not ext:
            continue
        normalized.append(ext if ext.startswith(".") else f".{ext}")
    if not normalized:
        raise ConfigError("upload.allowed_extensions must not be empty")
    return tuple(normalized)


def load_config(
    config_path: str | os.PathLike[str] | None = None, *, create_dirs: bool = True
) -> AppConfig:
    path = _config_path(config_path)
    data = _load_toml(path)
    base = path.parent

    app_section = data.get("app", {})
    paths_section = data.get("paths", {})
    upload_section = data.get("upload", {})
    telegraph_section = data.get("telegraph", {})
    summary_section = data.get("summary", {})
    checkpoint_section = data.get("checkpoint", {})

    page_id = _validate_page_id(app_section.get("page_id"))
    title = str(app_section.get("title") or page_id)
    image_dir = _to_path(app_section.get("image_dir"), base=base, fallback=base / "images")

    output_dir = _to_path(paths_section.get("output_dir"), base=base, fallback=base / "output")
    log_dir = _to_path(paths_section.get("log_dir"), base=base, fallback=output_dir / "logs")

    if create_dirs:
        _ensure_directories((output_dir, log_dir))

    upload_settings = UploadSettings(
        base_url=str(upload_section.get("base_url", DEFAULT_IMAGE_HOST)).rstrip("/"),
        allowed_extensions=_extensions(upload_section.get("allowed_extensions")),
        concurrency=_positive_int(upload_section.get("concurrency", 10), "upload.concurrency"),
        max_retries=_non_negative(upload_section.get("max_retries", 10), "upload.max_retries", int),
        retry_delay=_non_negative(upload_section.get("retry_delay", 10), "upload.retry_delay"),
        timeout=_non_negative(upload_section.get("timeout", 60), "upload.timeout"),
    )

    telegraph_settings = TelegraphSettings(
        api_url=str(telegraph_section.get("api_url", DEFAULT_TELEGRAPH_API)).rstrip("/"),
        short_name=str(telegraph_section.get("short_name", DEFAULT_SHORT_NAME)),
        author_name=str(telegraph_section.get("author_name", DEFAULT_AUTHOR)),
        author_url=str(telegraph_section.get("author_url", DEFAULT_AUTHOR_URL)),
        timeout=_non_negative(telegraph_section.get("timeout", 30), "telegraph.timeout"),
    )

    summary_settings = SummarySettings(
        author=str(summary_section.get("author", telegraph_settings.author_name)),
        html=_boolean(summary_section.get("html", False), "summary.html"),
    )

    return AppConfig(
        app=AppSettings(page_id=page_id, title=title, image_dir=image_dir),
        paths=PathSettings(output_dir=output_dir, log_dir=log_dir),
        upload=upload_settings,
        telegraph=telegraph_settings,
        summary=summary_settings,
        checkpoint=CheckpointSettings(
            retry_failed=_boolean(
                checkpoint_section.get("retry_failed", False), "checkpoint.retry_failed"
            )
        ),
    )
