"""Fetch orchestrator.

Resolves a pagination window to a cache entry: a fresh cached entry is
returned without any network call; otherwise the fallback chain is walked
with per-adapter timeouts and retries until one adapter succeeds.

Failure handling per adapter:

- SourceTransientError: retried on the same adapter using its RetryPolicy,
  then the chain advances.
- SourceStructuralError: the chain advances immediately, no backoff.
- Hard timeout: the attempt is aborted and the chain advances, no retry.
- asyncio.CancelledError (navigation, superseded load): propagates
  untouched; nothing is written to the cache.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Optional

from servesync.core.pagination import FetchWindow
from servesync.services.cache_store import CacheEntry, CacheKey, CacheStore
from servesync.services.sources.base import DataSource
from servesync.services.sources.chain import FallbackChain
from servesync.services.sources.models import SourcePage
from servesync.services.status import SyncStatusStore
from servesync.shared.errors import (
    ErrorCode,
    FetchError,
    SourceError,
    SourceTimeoutError,
    SourceTransientError,
)
from servesync.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class FetchOrchestrator:
    """Resolves windows of one list resource through cache and fallback chain.

    Args:
        resource: List resource ("jobs", "invoices", "clients")
        chain: Ordered data sources
        store: Cache store shared with the freshness monitor
        status: Sync status store to report progress to
        sleep: Awaitable sleep used for retry backoff; injectable for tests
    """

    def __init__(
        self,
        resource: str,
        chain: FallbackChain,
        store: CacheStore,
        *,
        status: Optional[SyncStatusStore] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.resource = resource
        self.chain = chain
        self.store = store
        self.status = status or SyncStatusStore()
        self._sleep = sleep

    def key_for(self, window: FetchWindow) -> CacheKey:
        return CacheKey.for_window(self.resource, window)

    async def resolve(self, window: FetchWindow, force_refresh: bool = False) -> CacheEntry:
        """Return the cache entry for ``window``, fetching it if needed.

        Args:
            window: Requested pagination window
            force_refresh: Skip the cache even if the entry is fresh

        Returns:
            The cached or freshly fetched entry

        Raises:
            FetchError: Every adapter in the chain failed
            asyncio.CancelledError: The caller cancelled the load
        """
        key = self.key_for(window)

        if not force_refresh:
            cached = self.store.get_fresh(key)
            if cached is not None:
                logger.debug("Cache hit for %s (age %.1fs)", key, self.store.age(cached))
                self.status.update(source=cached.source, using_sample_data=cached.mock)
                return cached

        generation = self.store.next_generation()
        log_operation_start(logger, "resolve", {"key": str(key), "force_refresh": force_refresh})
        self.status.update(is_syncing=True)
        start = time.perf_counter()

        try:
            entry = await self._resolve_through_chain(key, window, generation)
        except FetchError as e:
            self.status.update(is_syncing=False, error=e.message)
            log_operation_error(logger, e, operation="resolve")
            raise
        except asyncio.CancelledError:
            self.status.update(is_syncing=False)
            logger.debug("Load of %s cancelled", key)
            raise

        self.status.update(
            is_syncing=False,
            error=None,
            last_sync=self.store.now(),
            source=entry.source,
            using_sample_data=entry.mock,
        )
        log_operation_success(
            logger,
            "resolve",
            (time.perf_counter() - start) * 1000,
            result_info={"source": entry.source, "records": len(entry.records), "total": entry.total},
            context={"key": str(key)},
        )
        return entry

    async def _resolve_through_chain(
        self,
        key: CacheKey,
        window: FetchWindow,
        generation: int,
    ) -> CacheEntry:
        attempted: list[str] = []
        last_error: Optional[SourceError] = None

        for source in self.chain:
            attempted.append(source.name)
            try:
                page = await self.fetch_with_retry(source, window)
            except SourceError as e:
                last_error = e
                log_operation_error(logger, e, operation="resolve", level=logging.WARNING)
                continue

            if source is not self.chain.primary:
                logger.info("Served %s from fallback source '%s'", key, source.name)

            entry = CacheEntry(
                key=key,
                records=page.records,
                total=page.total,
                fetched_at=self.store.now(),
                source=source.name,
                mock=page.mock,
                generation=generation,
            )
            if not self.store.put(key, entry):
                # A newer request already stored this window
                stored = self.store.get(key)
                return stored if stored is not None else entry
            return entry

        message = last_error.message if last_error is not None else "No data source available"
        raise FetchError(
            message,
            attempted_sources=attempted,
            last_error=last_error,
            resource=self.resource,
        )

    async def fetch_with_retry(self, source: DataSource, window: FetchWindow) -> SourcePage:
        """Fetch from one adapter, retrying transient failures.

        Raises:
            SourceError: The adapter failed for good
        """
        delays = list(source.retry_policy.delays())
        retry = 0
        while True:
            try:
                return await self.fetch_once(source, window)
            except SourceTransientError as e:
                if retry >= len(delays):
                    raise
                delay = delays[retry]
                retry += 1
                logger.info(
                    "Transient failure from '%s' (%s); retry %d/%d in %.1fs",
                    source.name,
                    e.message,
                    retry,
                    len(delays),
                    delay,
                )
                await self._sleep(delay)

    async def fetch_once(self, source: DataSource, window: FetchWindow) -> SourcePage:
        """One attempt under the adapter's hard timeout.

        Raises:
            SourceTimeoutError: The timeout expired
            SourceError: The adapter failed
        """
        timeout = source.retry_policy.timeout
        try:
            return await asyncio.wait_for(source.fetch(window), timeout)
        except asyncio.TimeoutError:
            raise SourceTimeoutError(
                ErrorCode.SOURCE_TIMEOUT,
                f"'{source.name}' did not respond within {timeout:g}s",
                source=source.name,
            ) from None


__all__ = ["FetchOrchestrator", "Sleep"]
