"""Ordered fallback chain of data sources."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from servesync.services.sources.base import DataSource
from servesync.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)


class FallbackChain:
    """Data sources sorted by priority, tried in order until one succeeds.

    Sorting is stable, so sources with equal priority keep the order they
    were given in.

    Raises:
        ApplicationError: EMPTY_FALLBACK_CHAIN when no source is given
    """

    def __init__(self, sources: Iterable[DataSource]) -> None:
        self._sources = sorted(sources, key=lambda source: source.priority)
        if not self._sources:
            raise ApplicationError(
                code=ErrorCode.EMPTY_FALLBACK_CHAIN,
                message="A fallback chain needs at least one data source",
                context=ErrorContext(operation="build_chain"),
            )

    @property
    def primary(self) -> DataSource:
        return self._sources[0]

    @property
    def names(self) -> list[str]:
        return [source.name for source in self._sources]

    def __iter__(self) -> Iterator[DataSource]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    async def aclose(self) -> None:
        """Close every source, logging failures."""
        for source in self._sources:
            try:
                await source.aclose()
            except Exception:
                logger.exception("Failed to close data source %s", source.name)


__all__ = ["FallbackChain"]
