"""Cache configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from servesync.shared.constants import Cache


class CacheSettings(BaseModel):
    """List cache configuration.

    TTL is a single configuration constant; it is never derived per entry.
    """

    ttl: float = Field(
        default=Cache.TTL,
        gt=0,
        description="Cache time-to-live in seconds",
    )


__all__ = ["CacheSettings"]
