"""Background freshness monitor.

A passive, low-frequency poller. Each check asks the primary source for a
bounded probe window and compares its total with the cached total of the
window currently on screen. The probe is the displayed window itself when
that is a first page, otherwise the first ``probe_limit`` records with the
displayed filters. On a mismatch the probe window's entry is replaced and
``on_change`` fires once; other windows are left alone. Failures are
logged and swallowed; they slow the monitor down through a circuit
breaker and never reach the user.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Optional

from servesync.config.models.sync_settings import SyncSettings
from servesync.core.pagination import FetchWindow
from servesync.services.cache_store import CacheEntry, CacheKey
from servesync.services.fetch_orchestrator import FetchOrchestrator, Sleep
from servesync.services.state_machine import MonitorCircuitBreaker
from servesync.services.status import SyncStatusStore
from servesync.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    ServeSyncError,
    SourceStructuralError,
)
from servesync.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[CacheKey, CacheEntry], None]


class FreshnessMonitor:
    """Detects upstream changes to the displayed window.

    Args:
        orchestrator: Fetch orchestrator owning the cache and the chain
        current_key: Returns the key of the most recently displayed window
        settings: Monitor timings
        status: Sync status store
        circuit: Circuit breaker; built from ``settings`` when omitted
        sleep: Awaitable sleep; injectable for tests
    """

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        current_key: Callable[[], Optional[CacheKey]],
        *,
        settings: Optional[SyncSettings] = None,
        status: Optional[SyncStatusStore] = None,
        circuit: Optional[MonitorCircuitBreaker] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.settings = settings or SyncSettings()
        self._orchestrator = orchestrator
        self._store = orchestrator.store
        self._current_key = current_key
        self.status = status or orchestrator.status
        self.circuit = circuit or MonitorCircuitBreaker(
            poll_interval=self.settings.poll_interval,
            threshold=self.settings.circuit_threshold,
            max_backoff=self.settings.max_backoff,
        )
        self._sleep = sleep or asyncio.sleep
        self._on_change: Optional[ChangeCallback] = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(
        self,
        on_change: Optional[ChangeCallback] = None,
        poll_interval: Optional[float] = None,
        max_checks: Optional[int] = None,
    ) -> None:
        """Start polling on the running event loop.

        Args:
            on_change: Called with (key, entry) once per detected change
            poll_interval: Override of the configured interval in seconds
            max_checks: Stop after this many checks (None runs until stop())

        Raises:
            ApplicationError: MONITOR_ALREADY_RUNNING
        """
        if self.is_running:
            raise ApplicationError(
                code=ErrorCode.MONITOR_ALREADY_RUNNING,
                message="Freshness monitor is already running",
                context=ErrorContext(operation="start_monitor"),
            )
        if poll_interval is not None:
            self.circuit.poll_interval = poll_interval
        self._on_change = on_change
        self._task = asyncio.get_running_loop().create_task(self._run(max_checks))
        self.status.update(is_polling=True)
        logger.info(
            "Freshness monitor started (interval %.0fs, first check in %.0fs)",
            self.circuit.poll_interval,
            self.settings.initial_delay,
        )

    async def stop(self) -> None:
        """Stop polling and wait for the loop to exit."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
        self.status.update(is_polling=False, next_sync=None)
        logger.debug("Freshness monitor stopped")

    async def wait(self) -> None:
        """Wait until a monitor started with ``max_checks`` finishes."""
        if self._task is not None:
            await self._task

    async def _run(self, max_checks: Optional[int]) -> None:
        delay = self.settings.initial_delay
        checks = 0
        try:
            while max_checks is None or checks < max_checks:
                self.status.update(next_sync=self._store.now() + delay)
                await self._sleep(delay)
                await self.check_now()
                checks += 1
                delay = self.circuit.next_delay()
        finally:
            self.status.update(is_polling=False, next_sync=None)

    async def check_now(self) -> bool:
        """Run one freshness check.

        Returns:
            True if a cache entry was replaced and ``on_change`` fired.
        """
        displayed_key = self._current_key()
        if displayed_key is None:
            return False
        displayed = self._store.get(displayed_key)
        if displayed is None:
            return False
        if self.status.snapshot.is_syncing:
            logger.debug("Skipping freshness check, a load is in flight")
            return False

        # A displayed first page is probed as is so its own entry is replaced
        probe_limit = displayed_key.limit if displayed_key.offset == 0 else self.settings.probe_limit
        probe_window = FetchWindow(offset=0, limit=probe_limit, filters=displayed_key.filters)
        probe_key = self._orchestrator.key_for(probe_window)
        baseline = self._baseline(displayed, self._store.get(probe_key))

        if self.circuit.begin_check():
            logger.info("Freshness monitor circuit half-open, sending trial check")

        generation = self._store.next_generation()
        primary = self._orchestrator.chain.primary
        try:
            probe = await self._orchestrator.fetch_once(primary, probe_window)
        except ServeSyncError as e:
            self._record_failure(e)
            return False

        self.circuit.handle_success()
        self.status.update(
            last_sync=self._store.now(),
            consecutive_failures=0,
            circuit_open=False,
        )
        if probe.total == baseline.total:
            return False

        entry = CacheEntry(
            key=probe_key,
            records=probe.records,
            total=probe.total,
            fetched_at=self._store.now(),
            source=primary.name,
            mock=probe.mock,
            generation=generation,
        )
        if not self._store.put(probe_key, entry):
            return False

        logger.info(
            "Upstream change detected for %s: total %d -> %d",
            probe_key,
            baseline.total,
            entry.total,
        )
        self._notify(probe_key, entry)
        return True

    @staticmethod
    def _baseline(displayed: CacheEntry, probed: Optional[CacheEntry]) -> CacheEntry:
        """The newest entry the upstream total is compared against."""
        if probed is not None and probed.generation > displayed.generation:
            return probed
        return displayed

    def _record_failure(self, error: ServeSyncError) -> None:
        self.circuit.handle_failure(network=not isinstance(error, SourceStructuralError))
        log_operation_error(
            logger,
            error,
            operation="freshness_check",
            additional_context={"consecutive_failures": self.circuit.consecutive_failures},
            level=logging.WARNING,
        )
        if self.circuit.is_open:
            logger.warning(
                "Freshness monitor circuit open after %d failures; next check in %.0fs",
                self.circuit.consecutive_failures,
                self.circuit.next_delay(),
            )
        self.status.update(
            consecutive_failures=self.circuit.consecutive_failures,
            circuit_open=self.circuit.is_open,
        )

    def _notify(self, key: CacheKey, entry: CacheEntry) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(key, entry)
        except Exception:
            logger.exception("Freshness change callback failed")


__all__ = ["ChangeCallback", "FreshnessMonitor"]
