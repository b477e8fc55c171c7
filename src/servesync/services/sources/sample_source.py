"""Static sample-data source, the last entry of the fallback chain.

Serves a small demo data set so the dashboard stays usable when every live
source is down. Pages are always flagged ``mock``.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from servesync.core.pagination import FetchWindow
from servesync.core.records import JobRecord
from servesync.services.retry_policy import RetryPolicy
from servesync.services.sources.base import DataSource
from servesync.services.sources.models import SourcePage
from servesync.shared.constants import Resources, SourceNames
from servesync.shared.errors import ErrorCode, SourceStructuralError

_DAY = timedelta(days=1)


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def sample_jobs(now: datetime) -> list[dict[str, Any]]:
    """Demo jobs; dates are relative to ``now``."""
    return [
        {
            "id": "demo-1",
            "job_number": "DEMO-001",
            "recipient_name": "John Smith",
            "client_company": "Demo Law Firm",
            "client_name": "Sarah Johnson",
            "status": "pending",
            "priority": "routine",
            "created_at": _iso(now - _DAY),
            "due_date": _iso(now + 7 * _DAY),
            "amount": 125.0,
            "server_name": None,
            "attempt_count": 0,
        },
        {
            "id": "demo-2",
            "job_number": "DEMO-002",
            "recipient_name": "Jane Doe",
            "client_company": "Demo Law Firm",
            "client_name": "Sarah Johnson",
            "status": "assigned",
            "priority": "rush",
            "created_at": _iso(now - 2 * _DAY),
            "due_date": _iso(now + 3 * _DAY),
            "amount": 175.0,
            "server_name": "Mike Wilson",
            "attempt_count": 1,
        },
        {
            "id": "demo-3",
            "job_number": "DEMO-003",
            "recipient_name": "Robert Brown",
            "client_company": "Demo Law Firm",
            "client_name": "Sarah Johnson",
            "status": "served",
            "priority": "routine",
            "created_at": _iso(now - 3 * _DAY),
            "due_date": _iso(now - _DAY),
            "amount": 100.0,
            "server_name": "Lisa Davis",
            "attempt_count": 2,
        },
    ]


def sample_invoices(now: datetime) -> list[dict[str, Any]]:
    """Demo invoices; dates are relative to ``now``."""
    return [
        {
            "id": "demo-inv-1",
            "invoice_number": "INV-DEMO-001",
            "client": {"name": "Sarah Johnson", "company": "Demo Law Firm"},
            "status": "sent",
            "total": 300.0,
            "created_at": _iso(now - 5 * _DAY),
        },
        {
            "id": "demo-inv-2",
            "invoice_number": "INV-DEMO-002",
            "client": {"name": "Sarah Johnson", "company": "Demo Law Firm"},
            "status": "paid",
            "total": 100.0,
            "created_at": _iso(now - 10 * _DAY),
        },
    ]


def sample_clients(now: datetime) -> list[dict[str, Any]]:
    """Demo clients; dates are relative to ``now``."""
    return [
        {
            "id": "demo-client-1",
            "name": "Sarah Johnson",
            "company": "Demo Law Firm",
            "email": "sarah.johnson@example.com",
            "created_at": _iso(now - 30 * _DAY),
        },
    ]


SAMPLE_DATA: dict[str, Callable[[datetime], list[dict[str, Any]]]] = {
    Resources.JOBS: sample_jobs,
    Resources.INVOICES: sample_invoices,
    Resources.CLIENTS: sample_clients,
}


class SampleDataSource(DataSource):
    """Serves the built-in demo data set, sliced to the requested window."""

    def __init__(
        self,
        name: str = SourceNames.SAMPLE,
        *,
        resource: str = Resources.JOBS,
        priority: int = 2,
        retry_policy: Optional[RetryPolicy] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        super().__init__(
            name,
            resource=resource,
            priority=priority,
            retry_policy=retry_policy or RetryPolicy(max_retries=0),
        )
        self._now = now

    async def fetch(self, window: FetchWindow) -> SourcePage:
        factory = SAMPLE_DATA.get(self.resource)
        if factory is None:
            raise SourceStructuralError(
                ErrorCode.SOURCE_NO_DATA,
                f"No sample data for resource '{self.resource}'",
                source=self.name,
            )

        raw = factory(self._now())
        selected = raw[window.offset : window.offset + window.limit]
        return SourcePage(
            records=tuple(JobRecord.model_validate(item) for item in selected),
            total=len(raw),
            mock=True,
        )


__all__ = ["SAMPLE_DATA", "SampleDataSource"]
