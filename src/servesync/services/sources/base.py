"""Data source adapter contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from servesync.core.pagination import FetchWindow
from servesync.services.retry_policy import RetryPolicy
from servesync.services.sources.models import SourcePage
from servesync.shared.constants import Resources


class DataSource(ABC):
    """One entry of the fallback chain.

    Adapters are stateless apart from their network resources. ``fetch``
    raises a SourceError subclass on failure; the fetch orchestrator owns
    timeouts and retries.

    Args:
        name: Adapter name recorded as the cache entry's source
        resource: List resource served ("jobs", "invoices", "clients")
        priority: Position in the chain, lower first
        retry_policy: Retry and timeout policy for this adapter
    """

    def __init__(
        self,
        name: str,
        *,
        resource: str = Resources.JOBS,
        priority: int = 0,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.name = name
        self.resource = resource
        self.priority = priority
        self.retry_policy = retry_policy or RetryPolicy()

    @abstractmethod
    async def fetch(self, window: FetchWindow) -> SourcePage:
        """Fetch one window of records."""

    async def aclose(self) -> None:
        """Release adapter resources."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


__all__ = ["DataSource"]
