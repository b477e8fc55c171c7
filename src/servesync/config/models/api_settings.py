"""API configuration models.

This module contains the configuration for the case-management API and
for each data-source adapter in the fallback chain.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from servesync.shared.constants import NetworkConfig, PagingStyle, SourcePaths


class SourceSettings(BaseModel):
    """Configuration for one data-source adapter.

    ``priority`` orders the fallback chain (lower is tried first). The
    retry fields feed the adapter's RetryPolicy.
    """

    enabled: bool = Field(default=True, description="Include this adapter in the chain")
    priority: int = Field(default=0, ge=0, description="Position in the fallback chain")
    path: str = Field(
        default=SourcePaths.PRIMARY,
        description="Path template; '{resource}' is replaced by the list resource",
    )
    timeout: float = Field(
        default=NetworkConfig.PRIMARY_TIMEOUT,
        gt=0,
        description="Hard timeout in seconds for a single request",
    )
    retry_attempts: int = Field(
        default=NetworkConfig.DEFAULT_RETRIES,
        ge=0,
        description="Retries on transient failures before advancing the chain",
    )
    retry_delay: float = Field(
        default=NetworkConfig.RETRY_STEP,
        ge=0,
        description="Linear backoff step in seconds (1s, 2s, 3s, ...)",
    )
    paging: Literal["page", "offset"] = Field(
        default=PagingStyle.PAGE,
        description="Query parameter style for the pagination window",
    )
    server_side_filters: bool = Field(
        default=True,
        description="Forward status/priority/client/server filters as query parameters",
    )


def _primary_source() -> SourceSettings:
    return SourceSettings(priority=0, path=SourcePaths.PRIMARY)


def _legacy_source() -> SourceSettings:
    return SourceSettings(
        priority=1,
        path=SourcePaths.LEGACY,
        timeout=NetworkConfig.SECONDARY_TIMEOUT,
        server_side_filters=False,
    )


def _sample_source() -> SourceSettings:
    return SourceSettings(
        priority=2,
        path="",
        timeout=NetworkConfig.SECONDARY_TIMEOUT,
        retry_attempts=0,
        server_side_filters=False,
    )


class APISettings(BaseModel):
    """Case-management API configuration.

    Security: api_key is masked in __repr__.
    """

    base_url: str = Field(
        default=NetworkConfig.DEFAULT_BASE_URL,
        description="Base URL of the dashboard API",
    )
    api_key: str = Field(
        default="",
        repr=False,
        description="Bearer token sent to the HTTP adapters",
    )
    user_agent: str = Field(default=NetworkConfig.USER_AGENT, description="User-Agent header")

    primary: SourceSettings = Field(default_factory=_primary_source)
    legacy: SourceSettings = Field(default_factory=_legacy_source)
    sample: SourceSettings = Field(default_factory=_sample_source)

    def __repr__(self) -> str:
        """Representation that never exposes the API key."""
        masked_key = "****" if self.api_key else "[empty]"
        return (
            f"APISettings(base_url={self.base_url!r}, api_key={masked_key}, "
            f"primary_timeout={self.primary.timeout}, legacy_timeout={self.legacy.timeout})"
        )


__all__ = [
    "APISettings",
    "SourceSettings",
]
