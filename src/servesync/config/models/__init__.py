"""Configuration domain models."""

from __future__ import annotations

from .api_settings import APISettings, SourceSettings
from .app_settings import LoggingSettings
from .cache_settings import CacheSettings
from .settings import Settings
from .sync_settings import PaginationSettings, SyncSettings

__all__ = [
    "APISettings",
    "CacheSettings",
    "LoggingSettings",
    "PaginationSettings",
    "Settings",
    "SourceSettings",
    "SyncSettings",
]
