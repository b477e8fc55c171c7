"""List sync controller.

One parameterized controller per list view (jobs, invoices, clients). It
owns the pagination state, the cache store, the fetch orchestrator and the
freshness monitor for that view, and exposes the operations a list page
needs. Each page is a thin consumer of this class.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from typing import Optional

from servesync.config.models.sync_settings import PaginationSettings, SyncSettings
from servesync.core.pagination import PaginationState
from servesync.core.records import JobRecord
from servesync.core.view import SortSpec, get_profile, view
from servesync.services.cache_store import CacheEntry, CacheKey, CacheStore, Clock
from servesync.services.fetch_orchestrator import FetchOrchestrator, Sleep
from servesync.services.freshness_monitor import FreshnessMonitor
from servesync.services.session_manager import AsyncSessionManager
from servesync.services.sources.chain import FallbackChain
from servesync.services.status import SyncStatus, SyncStatusStore
from servesync.shared.constants import Cache
from servesync.shared.errors import ErrorCode, create_validation_error

logger = logging.getLogger(__name__)

EntryCallback = Callable[[CacheEntry], None]


class ListSyncController:
    """Resilient, cached, paginated access to one list resource.

    Args:
        resource: List resource ("jobs", "invoices", "clients")
        chain: Fallback chain of data sources for the resource
        ttl: Cache time-to-live in seconds
        sync_settings: Freshness monitor settings
        pagination_settings: Default and maximum page size
        clock: Monotonic clock for the cache; injectable for tests
        sleep: Awaitable sleep for backoff and polling; injectable for tests
        session_manager: HTTP session closed together with the controller
    """

    def __init__(
        self,
        resource: str,
        chain: FallbackChain,
        *,
        ttl: float = Cache.TTL,
        sync_settings: Optional[SyncSettings] = None,
        pagination_settings: Optional[PaginationSettings] = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        session_manager: Optional[AsyncSessionManager] = None,
    ) -> None:
        self.resource = resource
        self.profile = get_profile(resource)
        self.pagination_settings = pagination_settings or PaginationSettings()

        self.store = CacheStore(ttl=ttl, clock=clock)
        self.status_store = SyncStatusStore()
        self.chain = chain
        self.orchestrator = FetchOrchestrator(
            resource,
            chain,
            self.store,
            status=self.status_store,
            sleep=sleep,
        )
        self.monitor = FreshnessMonitor(
            self.orchestrator,
            self.displayed_key,
            settings=sync_settings,
            status=self.status_store,
            sleep=sleep,
        )
        self._session_manager = session_manager

        self.pagination = PaginationState(limit=self.pagination_settings.default_limit)
        self.search_term = ""
        self.sort: SortSpec = self.profile.default_sort

        self._displayed: Optional[CacheEntry] = None
        self._load_task: Optional[asyncio.Task[CacheEntry]] = None
        self._on_change: Optional[EntryCallback] = None

    # State

    @property
    def status(self) -> SyncStatus:
        return self.status_store.snapshot

    @property
    def displayed(self) -> Optional[CacheEntry]:
        """Entry currently shown by the view, if any."""
        return self._displayed

    def displayed_key(self) -> Optional[CacheKey]:
        return self._displayed.key if self._displayed is not None else None

    def records(self) -> list[JobRecord]:
        """Displayed records after search, client-side filters and sort."""
        if self._displayed is None:
            return []
        return view(
            self._displayed.records,
            self.search_term,
            self.sort.field,
            self.sort.direction,
            profile=self.profile,
            filters=self.pagination.window.filter_map,
        )

    def cache_age(self) -> Optional[float]:
        """Age in seconds of the displayed entry."""
        if self._displayed is None:
            return None
        return self.store.age(self._displayed)

    # Loading

    async def load(self, force_refresh: bool = False) -> Optional[CacheEntry]:
        """Resolve the current window.

        A load started while another is in flight cancels the older one.

        Returns:
            The resolved entry, or None if this load was superseded.

        Raises:
            FetchError: Every source failed
        """
        self._cancel_inflight()

        task = asyncio.ensure_future(
            self.orchestrator.resolve(self.pagination.window, force_refresh)
        )
        self._load_task = task
        try:
            entry = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug("Load of %s superseded", self.orchestrator.key_for(self.pagination.window))
            return None
        finally:
            if self._load_task is task:
                self._load_task = None

        self._displayed = entry
        self.pagination = self.pagination.with_total(entry.total)
        return entry

    def _cancel_inflight(self) -> None:
        task, self._load_task = self._load_task, None
        if task is not None and not task.done():
            task.cancel()

    async def refresh(self) -> Optional[CacheEntry]:
        """Manual retry/refresh action."""
        return await self.load(force_refresh=True)

    # Navigation

    async def next_page(self) -> Optional[CacheEntry]:
        self.pagination = self.pagination.next_page()
        return await self.load()

    async def prev_page(self) -> Optional[CacheEntry]:
        self.pagination = self.pagination.prev_page()
        return await self.load()

    async def first_page(self) -> Optional[CacheEntry]:
        self.pagination = self.pagination.first_page()
        return await self.load()

    async def last_page(self) -> Optional[CacheEntry]:
        self.pagination = self.pagination.last_page()
        return await self.load()

    async def go_to_page(self, page: int) -> Optional[CacheEntry]:
        self.pagination = self.pagination.go_to_page(page)
        return await self.load()

    async def set_limit(self, limit: int) -> Optional[CacheEntry]:
        self.pagination = self.pagination.set_limit(limit, self.pagination_settings.max_limit)
        return await self.load()

    async def set_filters(self, filters: Mapping[str, Optional[str]]) -> Optional[CacheEntry]:
        self.pagination = self.pagination.set_filters(filters)
        return await self.load()

    # View (no network)

    def set_search(self, term: str) -> list[JobRecord]:
        self.search_term = term
        return self.records()

    def toggle_sort(self, field_name: str) -> list[JobRecord]:
        if field_name not in self.profile.sort_fields:
            raise create_validation_error(
                f"Unknown sort field '{field_name}' for {self.resource}",
                field="sort_field",
                operation="toggle_sort",
                code=ErrorCode.INVALID_SORT_FIELD,
            )
        self.sort = self.sort.toggle(field_name)
        return self.records()

    def clear_cache(self) -> None:
        """Mark every cached window stale; the next load refetches."""
        self.store.clear()

    # Background monitoring

    def start_monitoring(
        self,
        on_change: Optional[EntryCallback] = None,
        poll_interval: Optional[float] = None,
        max_checks: Optional[int] = None,
    ) -> None:
        self._on_change = on_change
        self.monitor.start(self._handle_change, poll_interval=poll_interval, max_checks=max_checks)

    async def stop_monitoring(self) -> None:
        await self.monitor.stop()

    def _handle_change(self, key: CacheKey, entry: CacheEntry) -> None:
        # Pagination total only moves on explicit loads
        if key == self.displayed_key():
            self._displayed = entry
        if self._on_change is not None:
            self._on_change(entry)

    # Lifecycle

    async def close(self) -> None:
        """Stop background work and release the cache and network resources."""
        self._cancel_inflight()
        await self.monitor.stop()
        self.store.reset()
        self._displayed = None
        await self.chain.aclose()
        if self._session_manager is not None:
            await self._session_manager.close()

    async def __aenter__(self) -> ListSyncController:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


__all__ = ["EntryCallback", "ListSyncController"]
