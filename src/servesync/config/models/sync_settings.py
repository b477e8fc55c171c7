"""Synchronization configuration models.

Pagination defaults and the background freshness monitor timings.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from servesync.shared.constants import FreshnessMonitorConfig, Pagination


class PaginationSettings(BaseModel):
    """Pagination window defaults."""

    default_limit: int = Field(default=Pagination.DEFAULT_LIMIT, gt=0)
    max_limit: int = Field(default=Pagination.MAX_LIMIT, gt=0)

    @model_validator(mode="after")
    def _check_limits(self) -> PaginationSettings:
        if self.default_limit > self.max_limit:
            msg = f"default_limit ({self.default_limit}) exceeds max_limit ({self.max_limit})"
            raise ValueError(msg)
        return self


class SyncSettings(BaseModel):
    """Background freshness monitor configuration."""

    enabled: bool = Field(default=True, description="Run the background freshness monitor")
    poll_interval: float = Field(
        default=FreshnessMonitorConfig.POLL_INTERVAL,
        gt=0,
        description="Seconds between background checks",
    )
    initial_delay: float = Field(
        default=FreshnessMonitorConfig.INITIAL_DELAY,
        ge=0,
        description="Seconds before the first background check",
    )
    probe_limit: int = Field(
        default=FreshnessMonitorConfig.PROBE_LIMIT,
        gt=0,
        description="Window size of the count probe",
    )
    max_backoff: float = Field(
        default=FreshnessMonitorConfig.MAX_BACKOFF,
        gt=0,
        description="Upper bound for the delay after a failed check",
    )
    circuit_threshold: int = Field(
        default=FreshnessMonitorConfig.CIRCUIT_THRESHOLD,
        gt=0,
        description="Consecutive failures before the monitor's circuit opens",
    )


__all__ = [
    "PaginationSettings",
    "SyncSettings",
]
