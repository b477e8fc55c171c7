"""
Pytest configuration and shared fixtures for servesync tests.

Time is always injected: ``FakeClock`` drives the cache TTL and
``RecordingSleep`` replaces ``asyncio.sleep`` for backoff and polling, so
no test waits for real.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Generator
from typing import Optional, Union

import pytest

from servesync.core.pagination import FetchWindow
from servesync.core.records import JobRecord
from servesync.services.retry_policy import RetryPolicy
from servesync.services.sources.base import DataSource
from servesync.services.sources.models import SourcePage
from servesync.shared.errors import ErrorCode, SourceStructuralError, SourceTransientError
from servesync.shared.logging import ROOT_LOGGER_NAME

Outcome = Union[int, SourcePage, BaseException]


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records each delay.

    When a clock is given, the clock is advanced by the requested delay.
    """

    def __init__(self, clock: Optional[FakeClock] = None) -> None:
        self.delays: list[float] = []
        self.clock = clock

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.clock is not None:
            self.clock.advance(delay)
        await asyncio.sleep(0)


def make_records(count: int, start: int = 0, prefix: str = "job") -> tuple[JobRecord, ...]:
    """Build ``count`` simple job records numbered from ``start``."""
    return tuple(
        JobRecord(
            id=f"{prefix}-{index}",
            job_number=f"J-{index:04d}",
            recipient_name=f"Recipient {index}",
            status="pending",
        )
        for index in range(start, start + count)
    )


def make_page(window: FetchWindow, total: int, *, mock: bool = False) -> SourcePage:
    """Page of ``window`` out of a list of ``total`` records."""
    count = max(0, min(window.limit, total - window.offset))
    return SourcePage(records=make_records(count, start=window.offset), total=total, mock=mock)


def transient(source: str, message: str = "connection reset") -> SourceTransientError:
    return SourceTransientError(ErrorCode.SOURCE_NETWORK_ERROR, message, source=source)


def structural(source: str, message: str = "bad request", status: int = 400) -> SourceStructuralError:
    return SourceStructuralError(ErrorCode.SOURCE_HTTP_ERROR, message, source=source, status=status)


class ScriptedSource(DataSource):
    """Data source replaying scripted outcomes.

    Each call consumes the next outcome: an int is the upstream total, a
    SourcePage is returned as is and an exception is raised. Once the
    script is exhausted, pages of ``total`` records are served.
    """

    def __init__(
        self,
        name: str = "primary",
        *,
        priority: int = 0,
        total: int = 10,
        outcomes: Optional[list[Outcome]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        mock: bool = False,
    ) -> None:
        super().__init__(
            name,
            priority=priority,
            retry_policy=retry_policy or RetryPolicy(timeout=5.0),
        )
        self.total = total
        self.outcomes: list[Outcome] = list(outcomes or [])
        self.mock = mock
        self.calls: list[FetchWindow] = []
        self.closed = False

    async def fetch(self, window: FetchWindow) -> SourcePage:
        self.calls.append(window)
        await asyncio.sleep(0)
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            if isinstance(outcome, SourcePage):
                return outcome
            return make_page(window, outcome, mock=self.mock)
        return make_page(window, self.total, mock=self.mock)

    async def aclose(self) -> None:
        self.closed = True


class HangingSource(DataSource):
    """Data source that never answers until cancelled."""

    def __init__(self, name: str = "primary", *, priority: int = 0, timeout: float = 0.05) -> None:
        super().__init__(name, priority=priority, retry_policy=RetryPolicy(timeout=timeout))
        self.calls: list[FetchWindow] = []
        self.cancelled = 0

    async def fetch(self, window: FetchWindow) -> SourcePage:
        self.calls.append(window)
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        raise AssertionError("unreachable")


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None, None, None]:
    """Undo handler changes made by CLI tests so caplog sees package records."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep(clock: FakeClock) -> RecordingSleep:
    return RecordingSleep(clock)


@pytest.fixture
def window() -> FetchWindow:
    return FetchWindow(offset=0, limit=50)

