"""In-memory list cache.

One entry per cache key, overwritten in place on every accepted write.
Entries expire logically once older than the TTL; nothing is evicted.
Writes are guarded by a monotonic request generation so a slow, stale
response can never replace a newer one.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from servesync.core.pagination import FetchWindow, FilterItems
from servesync.core.records import JobRecord
from servesync.shared.constants import Cache

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheKey:
    """Identity of a cached window.

    Always (resource, offset, limit, filters); never a page number, so a
    limit change can not make two different windows share an entry.
    """

    resource: str
    offset: int
    limit: int
    filters: FilterItems = ()

    @classmethod
    def for_window(cls, resource: str, window: FetchWindow) -> CacheKey:
        return cls(resource, window.offset, window.limit, window.filters)

    def __str__(self) -> str:
        filters = ",".join(f"{name}={value}" for name, value in self.filters)
        return f"{self.resource}[{self.offset}:{self.offset + self.limit}]{{{filters}}}"


class CacheEntry(BaseModel):
    """A cached window of records.

    Attributes:
        key: Window this entry belongs to
        records: Records of the window, in upstream order
        total: Total record count reported upstream
        fetched_at: Store clock value when the entry was written
        source: Name of the adapter that produced the data
        mock: The data is demo/sample data
        generation: Request generation that produced the entry
    """

    model_config = ConfigDict(frozen=True)

    key: CacheKey
    records: tuple[JobRecord, ...] = ()
    total: int = Field(default=0, ge=0)
    fetched_at: float = 0.0
    source: str = ""
    mock: bool = False
    generation: int = Field(default=0, ge=0)


CacheListener = Callable[[CacheKey, CacheEntry], None]


class CacheStore:
    """Keyed store of CacheEntry with TTL-aware freshness.

    Args:
        ttl: Time-to-live in seconds
        clock: Monotonic clock; injectable for tests
    """

    def __init__(self, ttl: float = Cache.TTL, clock: Clock = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._listeners: list[CacheListener] = []
        self._generation = 0

    def now(self) -> float:
        return self._clock()

    def next_generation(self) -> int:
        """Allocate the generation for a new request."""
        self._generation += 1
        return self._generation

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def is_fresh(self, entry: CacheEntry, ttl: Optional[float] = None) -> bool:
        ttl = self.ttl if ttl is None else ttl
        return (self._clock() - entry.fetched_at) < ttl

    def get_fresh(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return the entry for ``key`` only if it is still fresh."""
        entry = self._entries.get(key)
        if entry is not None and self.is_fresh(entry):
            return entry
        return None

    def age(self, entry: CacheEntry) -> float:
        """Seconds since the entry was written."""
        return max(0.0, self._clock() - entry.fetched_at)

    def put(self, key: CacheKey, entry: CacheEntry) -> bool:
        """Store ``entry`` unless it is older than what is already stored.

        Returns:
            True if the write was applied.
        """
        current = self._entries.get(key)
        if current is not None and (
            entry.generation < current.generation or entry.fetched_at < current.fetched_at
        ):
            logger.debug(
                "Rejected stale write for %s (generation %d < %d)",
                key,
                entry.generation,
                current.generation,
            )
            return False

        self._entries[key] = entry
        self._notify(key, entry)
        return True

    def invalidate(self, key: CacheKey) -> None:
        """Mark one entry stale without removing it."""
        entry = self._entries.get(key)
        if entry is not None:
            self._entries[key] = entry.model_copy(update={"fetched_at": Cache.CLEARED_TIMESTAMP})

    def clear(self) -> None:
        """Mark every entry stale (the manual "clear cache" action)."""
        for key in list(self._entries):
            self.invalidate(key)
        logger.info("Cache cleared (%d entries marked stale)", len(self._entries))

    def reset(self) -> None:
        """Drop every entry; called when the owning view goes away."""
        self._entries.clear()

    def subscribe(self, listener: CacheListener) -> Callable[[], None]:
        """Call ``listener(key, entry)`` after every applied write.

        Returns:
            A function removing the listener.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def keys(self) -> list[CacheKey]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _notify(self, key: CacheKey, entry: CacheEntry) -> None:
        for listener in list(self._listeners):
            try:
                listener(key, entry)
            except Exception:
                logger.exception("Cache listener failed for %s", key)


__all__ = ["CacheEntry", "CacheKey", "CacheListener", "CacheStore", "Clock"]
