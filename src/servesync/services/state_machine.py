"""Circuit breaker state machine for the background freshness monitor.

The monitor is a best-effort signal, so repeated failures must slow it
down instead of competing with user-driven fetches for the primary
source. This state machine decides how long to wait before the next
check and whether that check is a half-open trial.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from servesync.shared.constants import FreshnessMonitorConfig


class CircuitState(Enum):
    """Circuit states for the freshness monitor."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class MonitorCircuitBreaker:
    """Consecutive-failure circuit breaker with backoff.

    Args:
        poll_interval: Normal delay between checks in seconds
        threshold: Consecutive failures that open the circuit
        max_backoff: Upper bound for the delay after a network failure
        multiplier: Factor applied to the interval while backing off
    """

    def __init__(
        self,
        poll_interval: float = FreshnessMonitorConfig.POLL_INTERVAL,
        threshold: int = FreshnessMonitorConfig.CIRCUIT_THRESHOLD,
        max_backoff: float = FreshnessMonitorConfig.MAX_BACKOFF,
        multiplier: float = FreshnessMonitorConfig.BACKOFF_MULTIPLIER,
    ):
        self.poll_interval = poll_interval
        self.threshold = threshold
        self.max_backoff = max_backoff
        self.multiplier = multiplier

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._last_failure_was_network = False

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def is_open(self) -> bool:
        """True while the circuit is open or waiting on its half-open trial."""
        return self._state is not CircuitState.CLOSED

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def begin_check(self) -> bool:
        """Mark the start of a check.

        Returns:
            True if this check is a half-open trial.
        """
        if self._state is CircuitState.OPEN:
            self._state = CircuitState.HALF_OPEN
        return self._state is CircuitState.HALF_OPEN

    def handle_success(self) -> None:
        """A check completed; close the circuit."""
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._last_failure_was_network = False

    def handle_failure(self, *, network: bool = True) -> None:
        """A check failed.

        Args:
            network: The failure was a transport problem (as opposed to a
                structurally bad response)
        """
        self._consecutive_failures += 1
        self._last_failure_was_network = network

        if self._state is CircuitState.HALF_OPEN:
            # Failed trial, stay open
            self._state = CircuitState.OPEN
        elif self._consecutive_failures >= self.threshold:
            self._state = CircuitState.OPEN

    def next_delay(self) -> float:
        """Seconds to wait before the next check."""
        if self.is_open:
            return self.poll_interval * self.multiplier
        if self._last_failure_was_network:
            return min(self.poll_interval * self.multiplier, self.max_backoff)
        return self.poll_interval

    def reset(self) -> None:
        """Reset to CLOSED and forget failures."""
        self.handle_success()

    def get_stats(self) -> dict[str, Any]:
        """Current statistics for logging."""
        return {
            "state": self._state.value,
            "consecutive_failures": self._consecutive_failures,
            "next_delay": self.next_delay(),
        }


__all__ = ["CircuitState", "MonitorCircuitBreaker"]
