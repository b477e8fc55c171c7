"""Builds list controllers from settings."""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from servesync.config.models.settings import Settings
from servesync.services.cache_store import Clock
from servesync.services.controller import ListSyncController
from servesync.services.fetch_orchestrator import Sleep
from servesync.services.retry_policy import RetryPolicy
from servesync.services.session_manager import AsyncSessionManager
from servesync.services.sources.base import DataSource
from servesync.services.sources.chain import FallbackChain
from servesync.services.sources.http_source import HttpDataSource
from servesync.services.sources.sample_source import SampleDataSource
from servesync.shared.constants import Resources, SourceNames
from servesync.shared.errors import ErrorCode, create_validation_error


def build_sources(
    resource: str,
    settings: Settings,
    session_manager: AsyncSessionManager,
) -> list[DataSource]:
    """Create the enabled data sources for ``resource``."""
    api = settings.api
    sources: list[DataSource] = []

    for name, source_settings in ((SourceNames.PRIMARY, api.primary), (SourceNames.LEGACY, api.legacy)):
        if not source_settings.enabled:
            continue
        sources.append(
            HttpDataSource(
                name,
                session_manager,
                base_url=api.base_url,
                path=source_settings.path,
                resource=resource,
                priority=source_settings.priority,
                retry_policy=RetryPolicy.from_settings(source_settings),
                paging=source_settings.paging,
                server_side_filters=source_settings.server_side_filters,
                api_key=api.api_key,
            )
        )

    if api.sample.enabled:
        sources.append(
            SampleDataSource(
                SourceNames.SAMPLE,
                resource=resource,
                priority=api.sample.priority,
                retry_policy=RetryPolicy.from_settings(api.sample),
            )
        )
    return sources


def build_controller(
    resource: str,
    settings: Optional[Settings] = None,
    session_manager: Optional[AsyncSessionManager] = None,
    *,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> ListSyncController:
    """Create a ListSyncController for ``resource``.

    When no session manager is given the controller creates and owns one,
    closing it in ``close()``.

    Raises:
        DomainError: UNKNOWN_RESOURCE
        ApplicationError: EMPTY_FALLBACK_CHAIN when every source is disabled
    """
    if resource not in Resources.ALL:
        raise create_validation_error(
            f"Unknown resource '{resource}'. Expected one of: {', '.join(Resources.ALL)}",
            field="resource",
            operation="build_controller",
            code=ErrorCode.UNKNOWN_RESOURCE,
        )
    settings = settings or Settings()
    owned_session = session_manager is None
    session_manager = session_manager or AsyncSessionManager(settings.api.user_agent)

    chain = FallbackChain(build_sources(resource, settings, session_manager))
    return ListSyncController(
        resource,
        chain,
        ttl=settings.cache.ttl,
        sync_settings=settings.sync,
        pagination_settings=settings.pagination,
        clock=clock,
        sleep=sleep,
        session_manager=session_manager if owned_session else None,
    )


__all__ = ["build_controller", "build_sources"]
