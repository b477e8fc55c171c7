"""
CLI Context Management Module

Global CLI state set by the main callback and read by command handlers,
held in a ContextVar.
"""

from __future__ import annotations

import contextvars
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from servesync.config import Settings, get_config, load_settings
from servesync.shared.logging import setup_structured_logger


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CliContext(BaseModel):
    """
    CLI context model for managing global state.

    Attributes:
        verbose: Verbosity level (0 = normal, 1+ = verbose)
        log_level: Logging level
        config_path: Explicit TOML configuration file
    """

    verbose: int = Field(default=0, ge=0, description="Verbosity level")
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")
    config_path: Optional[Path] = Field(default=None, description="Configuration file")

    def is_verbose(self) -> bool:
        return self.verbose > 0

    def get_effective_log_level(self) -> str:
        """Verbose mode forces DEBUG."""
        if self.is_verbose():
            return LogLevel.DEBUG.value
        return self.log_level.value


_cli_context: contextvars.ContextVar[Optional[CliContext]] = contextvars.ContextVar(
    "cli_context",
    default=None,
)


def get_cli_context() -> CliContext:
    """Return the current CLI context, or defaults if none was set."""
    context = _cli_context.get()
    return context if context is not None else CliContext()


def set_cli_context(context: CliContext) -> None:
    _cli_context.set(context)


def clear_cli_context() -> None:
    _cli_context.set(None)


def load_cli_settings() -> Settings:
    """Load settings for a command and attach the configured log file.

    Uses the --config file when one was given, else the default search.
    """
    context = get_cli_context()
    if context.config_path is not None:
        settings = load_settings(context.config_path)
    else:
        settings = get_config()

    if settings.logging.file:
        setup_structured_logger(
            level=context.get_effective_log_level(),
            log_file=settings.logging.file,
            use_rich_console=settings.logging.console_output,
        )
    return settings


__all__ = [
    "CliContext",
    "LogLevel",
    "clear_cli_context",
    "get_cli_context",
    "load_cli_settings",
    "set_cli_context",
]
