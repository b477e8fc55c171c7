"""Logging configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoggingSettings(BaseModel):
    """Logging configuration.

    Console output goes through Rich; the optional file is JSON lines.
    """

    level: str = Field(default="INFO", description="Logging level")
    file: str | None = Field(default=None, description="Optional JSON log file path")
    console_output: bool = Field(default=True, description="Use the Rich console handler")


__all__ = ["LoggingSettings"]
