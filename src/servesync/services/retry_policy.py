"""Retry policy objects.

Retry behavior is data passed into the fetch orchestrator, one policy per
data-source adapter, instead of control flow inlined in the fetch loop.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from servesync.config.models.api_settings import SourceSettings
from servesync.shared.constants import NetworkConfig

BackoffFn = Callable[[int], float]


def linear_backoff(step: float = NetworkConfig.RETRY_STEP) -> BackoffFn:
    """Backoff growing by ``step`` per retry: step, 2*step, 3*step, ...

    Example:
        >>> backoff = linear_backoff(1.0)
        >>> [backoff(n) for n in (1, 2, 3)]
        [1.0, 2.0, 3.0]
    """

    def _backoff(retry: int) -> float:
        return step * retry

    return _backoff


@dataclass(frozen=True)
class RetryPolicy:
    """How one adapter is retried.

    Attributes:
        max_retries: Retries after the first attempt on transient failures
        backoff: Maps the 1-based retry number to a wait in seconds
        timeout: Hard timeout in seconds for each attempt
    """

    max_retries: int = NetworkConfig.DEFAULT_RETRIES
    backoff: BackoffFn = field(default_factory=linear_backoff)
    timeout: float = NetworkConfig.PRIMARY_TIMEOUT

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delays(self) -> Iterator[float]:
        """Waits inserted before each retry, in order."""
        for retry in range(1, self.max_retries + 1):
            yield self.backoff(retry)

    @classmethod
    def from_settings(cls, settings: SourceSettings) -> RetryPolicy:
        return cls(
            max_retries=settings.retry_attempts,
            backoff=linear_backoff(settings.retry_delay),
            timeout=settings.timeout,
        )

    @classmethod
    def single_attempt(cls, timeout: float) -> RetryPolicy:
        """Policy without retries, used by the freshness monitor."""
        return cls(max_retries=0, timeout=timeout)


__all__ = ["BackoffFn", "RetryPolicy", "linear_backoff"]
