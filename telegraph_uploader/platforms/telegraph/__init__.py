"""Telegraph platform adapters."""

from __future__ import annotations

from .api import TelegraphApiClient

__all__ = ["TelegraphApiClient"]
