"""Observable sync status.

Produced only by the fetch path and the freshness monitor, consumed by
list views (and the CLI) through subscriptions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncStatus:
    """Snapshot of the synchronization state of one list.

    Attributes:
        is_syncing: A user-driven load is in flight
        is_polling: The freshness monitor is running
        last_sync: Clock value of the last successful load or check
        next_sync: Clock value of the next scheduled background check
        error: Message of the last failed load, cleared by the next success
        consecutive_failures: Failed background checks in a row
        circuit_open: The monitor's circuit breaker is open
        source: Adapter that produced the displayed data
        using_sample_data: The displayed data is demo data
    """

    is_syncing: bool = False
    is_polling: bool = False
    last_sync: Optional[float] = None
    next_sync: Optional[float] = None
    error: Optional[str] = None
    consecutive_failures: int = 0
    circuit_open: bool = False
    source: Optional[str] = None
    using_sample_data: bool = False


StatusListener = Callable[[SyncStatus], None]


class SyncStatusStore:
    """Holds the current SyncStatus and notifies subscribers on change."""

    def __init__(self, initial: Optional[SyncStatus] = None) -> None:
        self._status = initial or SyncStatus()
        self._listeners: list[StatusListener] = []

    @property
    def snapshot(self) -> SyncStatus:
        return self._status

    def update(self, **changes: Any) -> SyncStatus:
        """Apply field changes; listeners run only if the snapshot changed."""
        updated = replace(self._status, **changes)
        if updated != self._status:
            self._status = updated
            for listener in list(self._listeners):
                try:
                    listener(updated)
                except Exception:
                    logger.exception("Sync status listener failed")
        return self._status

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe


__all__ = ["StatusListener", "SyncStatus", "SyncStatusStore"]
