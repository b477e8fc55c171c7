"""Filter/sort engine.

``view()`` is a pure function over an already fetched record set. It never
touches the network or the cache, and it is idempotent: applying it to its
own output with the same arguments returns the same list.
"""

from __future__ import annotations

import locale
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional

from servesync.core.records import JobRecord, resolve_field, resolve_text, safe_string
from servesync.shared.constants import (
    ClientFields,
    FilterValues,
    InvoiceFields,
    JobFields,
    JobSortFields,
    Resources,
    SortDirection,
)
from servesync.shared.errors import ErrorCode, create_validation_error

_EARLIEST = float("-inf")


@dataclass(frozen=True)
class SortField:
    """How one sortable column is resolved.

    Attributes:
        aliases: Dotted paths tried in order
        default: Value used when every alias is empty
        is_date: Compare as parsed timestamps instead of strings
    """

    aliases: tuple[str, ...]
    default: str = ""
    is_date: bool = False


@dataclass(frozen=True)
class SortSpec:
    """Current sort column and direction.

    Example:
        >>> SortSpec("status").toggle("status").direction
        'desc'
        >>> SortSpec("status", "desc").toggle("client").direction
        'asc'
    """

    field: Optional[str] = None
    direction: str = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC

    def toggle(self, field_name: str) -> SortSpec:
        """Flip direction for the same field, reset to ascending for a new one."""
        if field_name == self.field:
            flipped = SortDirection.ASC if self.descending else SortDirection.DESC
            return replace(self, direction=flipped)
        return SortSpec(field=field_name, direction=SortDirection.ASC)


@dataclass(frozen=True)
class ViewProfile:
    """Per-resource search, sort and filter configuration."""

    searchable: tuple[tuple[str, ...], ...]
    sort_fields: Mapping[str, SortField]
    filter_fields: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    default_sort: SortSpec = field(default_factory=SortSpec)


JOB_PROFILE = ViewProfile(
    searchable=JobFields.SEARCHABLE,
    sort_fields={
        JobSortFields.RECIPIENT: SortField(JobFields.SORT_RECIPIENT, "unknown recipient"),
        JobSortFields.CLIENT: SortField(JobFields.SORT_CLIENT, "unknown client"),
        JobSortFields.STATUS: SortField(JobFields.SORT_STATUS, "pending"),
        JobSortFields.PRIORITY: SortField(JobFields.SORT_PRIORITY, "medium"),
        JobSortFields.SERVER: SortField(JobFields.SORT_SERVER, "unassigned"),
        JobSortFields.RECEIVED_DATE: SortField(JobFields.SORT_RECEIVED, is_date=True),
    },
    filter_fields={
        JobFields.STATUS: ("status",),
        JobFields.PRIORITY: ("priority",),
        JobFields.CLIENT_ID: ("client_id", "client.id"),
        JobFields.SERVER_ID: ("server_id", "server.id"),
    },
    default_sort=SortSpec(JobSortFields.RECEIVED_DATE, SortDirection.DESC),
)

INVOICE_PROFILE = ViewProfile(
    searchable=InvoiceFields.SEARCHABLE,
    sort_fields={
        "invoice_number": SortField(("invoice_number", "number")),
        "client": SortField(("client.company", "client_company", "client.name", "client_name")),
        "status": SortField(("status",), "draft"),
        "created_at": SortField(("created_at", "issued_date"), is_date=True),
    },
    filter_fields={
        "status": ("status",),
        "client_id": ("client_id", "client.id"),
    },
    default_sort=SortSpec("created_at", SortDirection.DESC),
)

CLIENT_PROFILE = ViewProfile(
    searchable=ClientFields.SEARCHABLE,
    sort_fields={
        "name": SortField(("name",)),
        "company": SortField(("company",)),
        "email": SortField(("email",)),
        "created_at": SortField(("created_at",), is_date=True),
    },
    default_sort=SortSpec("name", SortDirection.ASC),
)

PROFILES: dict[str, ViewProfile] = {
    Resources.JOBS: JOB_PROFILE,
    Resources.INVOICES: INVOICE_PROFILE,
    Resources.CLIENTS: CLIENT_PROFILE,
}


def get_profile(resource: str) -> ViewProfile:
    """Return the view profile for a list resource."""
    try:
        return PROFILES[resource]
    except KeyError:
        raise create_validation_error(
            f"Unknown resource '{resource}'. Expected one of: {', '.join(Resources.ALL)}",
            field="resource",
            operation="get_profile",
            code=ErrorCode.UNKNOWN_RESOURCE,
        ) from None


def parse_timestamp(value: Any) -> float:
    """Parse an ISO-8601 date into a POSIX timestamp.

    Missing or unparsable values return -inf so they sort as earliest.
    Naive datetimes are taken as UTC.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, str) or not value.strip():
        return _EARLIEST
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return _EARLIEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def matches_search(record: JobRecord, term: str, profile: ViewProfile) -> bool:
    """Case-insensitive substring match over the profile's searchable fields."""
    needle = term.strip().casefold()
    if not needle:
        return True
    return any(
        needle in resolve_text(record, aliases).casefold() for aliases in profile.searchable
    )


def matches_filters(
    record: JobRecord,
    filters: Mapping[str, Optional[str]],
    profile: ViewProfile,
) -> bool:
    """Apply exact-match client-side filters.

    ``"all"`` and empty values disable a filter; ``"unassigned"`` matches
    records whose field is empty.
    """
    for name, wanted in filters.items():
        if wanted in (None, "") or wanted == FilterValues.ALL:
            continue
        aliases = profile.filter_fields.get(name, (name,))
        actual = safe_string(resolve_field(record, aliases))
        if wanted == FilterValues.UNASSIGNED and not actual:
            continue
        if actual != str(wanted):
            return False
    return True


def sort_key(record: JobRecord, sort_field: SortField) -> Any:
    """Build the comparison key for one record."""
    value = resolve_field(record, sort_field.aliases)
    if sort_field.is_date:
        return parse_timestamp(value)
    text = safe_string(value) or sort_field.default
    return locale.strxfrm(text.casefold())


def view(
    records: Sequence[JobRecord],
    search_term: str = "",
    sort_field: Optional[str] = None,
    sort_direction: str = SortDirection.ASC,
    *,
    profile: ViewProfile = JOB_PROFILE,
    filters: Optional[Mapping[str, Optional[str]]] = None,
) -> list[JobRecord]:
    """Derive the displayed list from a cached record set.

    Args:
        records: Records of the current window
        search_term: Free-text search; empty keeps every record
        sort_field: Name of a sortable field of ``profile``; None keeps input order
        sort_direction: ``"asc"`` or ``"desc"``
        profile: Resource profile (jobs by default)
        filters: Optional client-side exact-match filters

    Returns:
        A new list; the input is not modified.

    Raises:
        DomainError: INVALID_SORT_FIELD for a field the profile does not know
    """
    selected = [
        record
        for record in records
        if matches_search(record, search_term, profile)
        and (not filters or matches_filters(record, filters, profile))
    ]

    if sort_field is None:
        return selected

    spec = profile.sort_fields.get(sort_field)
    if spec is None:
        raise create_validation_error(
            f"Unknown sort field '{sort_field}'. Expected one of: "
            f"{', '.join(sorted(profile.sort_fields))}",
            field="sort_field",
            operation="view",
            code=ErrorCode.INVALID_SORT_FIELD,
        )
    if sort_direction not in (SortDirection.ASC, SortDirection.DESC):
        raise create_validation_error(
            f"Unknown sort direction '{sort_direction}'",
            field="sort_direction",
            operation="view",
        )

    # sorted() is stable for reverse=True as well, so re-sorting is a no-op
    return sorted(
        selected,
        key=lambda record: sort_key(record, spec),
        reverse=sort_direction == SortDirection.DESC,
    )


__all__ = [
    "CLIENT_PROFILE",
    "INVOICE_PROFILE",
    "JOB_PROFILE",
    "PROFILES",
    "SortField",
    "SortSpec",
    "ViewProfile",
    "get_profile",
    "matches_filters",
    "matches_search",
    "parse_timestamp",
    "view",
]
