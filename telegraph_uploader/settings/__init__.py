"""Settings package exports."""

from .loader import (
    AppConfig,
    AppSettings,
    CheckpointSettings,
    PathSettings,
    SummarySettings,
    TelegraphSettings,
    UploadSettings,
    load_config,
)

__all__ = [
    "AppConfig",
    "AppSettings",
    "CheckpointSettings",
    "PathSettings",
    "SummarySettings",
    "TelegraphSettings",
    "UploadSettings",
    "load_config",
]
