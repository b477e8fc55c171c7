"""servesync Configuration Module

Unified access to configuration models and settings management:
- Settings: Main configuration facade
- Loader functions: get_config, load_settings, reload_config
- Domain models: API, source, cache, sync, pagination and logging settings
"""

from __future__ import annotations

from .models import (
    APISettings,
    CacheSettings,
    LoggingSettings,
    PaginationSettings,
    Settings,
    SourceSettings,
    SyncSettings,
)
from .loader import get_config, load_settings, reload_config

__all__ = [
    "APISettings",
    "CacheSettings",
    "LoggingSettings",
    "PaginationSettings",
    "Settings",
    "SourceSettings",
    "SyncSettings",
    "get_config",
    "load_settings",
    "reload_config",
]
