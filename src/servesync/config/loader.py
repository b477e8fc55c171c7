"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from an optional .env file
- Configuration file loading from TOML
- Thread-safe singleton access to the Settings instance
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from servesync.config.models.settings import Settings
from servesync.shared.constants import Application
from servesync.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    create_config_error,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("config/config.toml"),
    Path("config.toml"),
    Path.home() / Application.HOME_DIR / "config.toml",
)


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking to keep the common read path lock-free.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance, loading it if necessary."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()

        return self._instance

    def reload_config(self, config_path: str | Path | None = None) -> Settings:
        """Reload the global settings instance from configuration files."""
        with self._lock:
            self._instance = load_settings(config_path)

        return self._instance

    def reset(self) -> None:
        """Drop the cached instance so the next access reloads."""
        with self._lock:
            self._instance = None


def _load_env_file(env_file: Path = Path(".env")) -> None:
    """Load environment variables from a .env file if one exists.

    Variables already present in the process environment win.
    """
    if env_file.exists():
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment from %s", env_file)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML file. If None, the default
            locations are searched and the first existing file is used.

    Returns:
        Settings instance

    Raises:
        ApplicationError: CONFIG_MISSING if an explicit path does not exist,
            CONFIG_INVALID if the values fail validation or the file cannot
            be parsed.
    """
    _load_env_file()

    path: Path | None = None
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ApplicationError(
                code=ErrorCode.CONFIG_MISSING,
                message=f"Configuration file not found: {path}",
                context=ErrorContext(
                    operation="load_config",
                    additional_data={"config_path": str(path)},
                ),
            )
    else:
        path = next((candidate for candidate in DEFAULT_CONFIG_PATHS if candidate.exists()), None)

    try:
        if path is None:
            return Settings()
        logger.debug("Loading configuration from %s", path)
        return Settings.from_toml_file(path)
    except ValidationError as e:
        raise create_config_error(
            f"Invalid configuration: {e.error_count()} validation error(s)",
            config_path=str(path) if path else None,
            original_error=e,
        ) from e
    except (OSError, ValueError) as e:
        # toml.TomlDecodeError is a ValueError
        raise create_config_error(
            f"Failed to read configuration: {e}",
            config_path=str(path) if path else None,
            original_error=e,
        ) from e


_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _loader.get_config()


def reload_config(config_path: str | Path | None = None) -> Settings:
    """Reload the global settings instance from configuration files."""
    return _loader.reload_config(config_path)


__all__ = [
    "DEFAULT_CONFIG_PATHS",
    "SettingsLoader",
    "get_config",
    "load_settings",
    "reload_config",
]
