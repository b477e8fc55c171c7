"""servesync Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from servesync.config.models.api_settings import APISettings
from servesync.config.models.app_settings import LoggingSettings
from servesync.config.models.cache_settings import CacheSettings
from servesync.config.models.sync_settings import PaginationSettings, SyncSettings


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Values come from (highest priority first) the TOML file, ``SERVESYNC_*``
    environment variables and the model defaults. Nested fields use ``__``,
    e.g. ``SERVESYNC_API__PRIMARY__TIMEOUT=20``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVESYNC_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file.

        The API key is written to the file; only logs and reprs mask it.
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True, exclude_unset=False)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)


__all__ = ["Settings"]
