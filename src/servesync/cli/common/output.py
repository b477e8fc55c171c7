"""
CLI Output Helpers

Rich tables for list windows and the JSON envelope used by --json.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import orjson
from rich.console import Console
from rich.table import Table

from servesync.core.pagination import PaginationState
from servesync.core.records import JobRecord, resolve_text
from servesync.services.cache_store import CacheEntry
from servesync.shared.constants import JobFields, Resources

# (header, aliases) per resource
COLUMNS: dict[str, tuple[tuple[str, tuple[str, ...]], ...]] = {
    Resources.JOBS: (
        ("Job #", JobFields.JOB_NUMBER),
        ("Recipient", JobFields.SORT_RECIPIENT),
        ("Client", JobFields.SORT_CLIENT),
        ("Status", JobFields.SORT_STATUS),
        ("Priority", JobFields.SORT_PRIORITY),
        ("Server", JobFields.SORT_SERVER),
        ("Received", JobFields.SORT_RECEIVED),
    ),
    Resources.INVOICES: (
        ("Invoice #", ("invoice_number", "number")),
        ("Client", ("client.company", "client_company", "client.name", "client_name")),
        ("Status", ("status",)),
        ("Total", ("total", "amount")),
        ("Created", ("created_at", "issued_date")),
    ),
    Resources.CLIENTS: (
        ("Name", ("name",)),
        ("Company", ("company",)),
        ("Email", ("email",)),
    ),
}


def format_json_output(
    success: bool,
    command: str,
    data: Optional[Any] = None,
    errors: Optional[list[str]] = None,
) -> bytes:
    """Format command output as a JSON envelope.

    Returns:
        Indented, key-sorted JSON bytes
    """
    errors = errors or []
    payload = {
        "success": success and not errors,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
    }
    return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2, default=str)


def record_rows(resource: str, records: list[JobRecord]) -> list[list[str]]:
    columns = COLUMNS.get(resource, ())
    return [[resolve_text(record, aliases, "-") for _, aliases in columns] for record in records]


def build_table(resource: str, records: list[JobRecord]) -> Table:
    table = Table(title=resource.capitalize(), header_style="bold cyan")
    for header, _ in COLUMNS.get(resource, ()):
        table.add_column(header)
    for row in record_rows(resource, records):
        table.add_row(*row)
    return table


def describe_window(entry: CacheEntry, pagination: PaginationState, age: float) -> str:
    """One-line summary shown under the table."""
    pages = max(pagination.total_pages, 1)
    return (
        f"Page {pagination.page} of {pages} ({entry.total} total) | "
        f"source: {entry.source} | cached data ({age:.0f}s old)"
    )


def print_window(
    console: Console,
    resource: str,
    records: list[JobRecord],
    entry: CacheEntry,
    pagination: PaginationState,
    age: float,
) -> None:
    if entry.mock:
        console.print("[yellow]Using sample data: live sources are unavailable.[/yellow]")
    console.print(build_table(resource, records))
    console.print(describe_window(entry, pagination, age), style="dim")


def window_payload(
    resource: str,
    records: list[JobRecord],
    entry: CacheEntry,
    pagination: PaginationState,
) -> dict[str, Any]:
    return {
        "resource": resource,
        "source": entry.source,
        "mock": entry.mock,
        "total": entry.total,
        "offset": pagination.offset,
        "limit": pagination.limit,
        "page": pagination.page,
        "total_pages": pagination.total_pages,
        "records": [record.model_dump() for record in records],
    }


__all__ = [
    "COLUMNS",
    "build_table",
    "describe_window",
    "format_json_output",
    "print_window",
    "record_rows",
    "window_payload",
]
