"""Data source response models.

Every adapter returns a SourcePage, whatever its wire format. The upstream
payload shape is ``{<resource>: [...], total, mock?, error?, response_time_ms?}``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from servesync.core.records import JobRecord
from servesync.shared.errors import ErrorCode, SourceStructuralError


class SourcePage(BaseModel):
    """One window of records returned by a data source.

    Attributes:
        records: Records of the requested window
        total: Total number of records available upstream
        mock: Demo data served in place of live data
        error: Upstream error message accompanying a (possibly empty) page
        response_time_ms: Upstream-reported or measured response time
    """

    model_config = ConfigDict(frozen=True)

    records: tuple[JobRecord, ...] = ()
    total: int = Field(default=0, ge=0)
    mock: bool = False
    error: Optional[str] = None
    response_time_ms: Optional[int] = None


def parse_source_payload(payload: Any, collection_field: str, *, source: str) -> SourcePage:
    """Validate a decoded payload into a SourcePage.

    Args:
        payload: Decoded JSON body
        collection_field: Key of the record array ("jobs", "invoices", ...)
        source: Adapter name, used in error context

    Returns:
        The parsed page. ``total`` falls back to the record count when the
        payload reports none.

    Raises:
        SourceStructuralError: The payload has no record array, contains
            invalid records, or signals an error without any records.
    """
    if not isinstance(payload, dict):
        raise SourceStructuralError(
            ErrorCode.SOURCE_INVALID_PAYLOAD,
            f"Expected a JSON object, got {type(payload).__name__}",
            source=source,
        )

    raw_records = payload.get(collection_field)
    if not isinstance(raw_records, list):
        raise SourceStructuralError(
            ErrorCode.SOURCE_INVALID_PAYLOAD,
            f"Response has no '{collection_field}' array",
            source=source,
        )

    error = payload.get("error")
    if error and not raw_records:
        raise SourceStructuralError(
            ErrorCode.SOURCE_NO_DATA,
            f"Source reported no data: {error}",
            source=source,
        )

    try:
        records = tuple(JobRecord.model_validate(item) for item in raw_records)
    except ValidationError as e:
        raise SourceStructuralError(
            ErrorCode.SOURCE_INVALID_PAYLOAD,
            f"Invalid record in '{collection_field}': {e.error_count()} validation error(s)",
            source=source,
            original_error=e,
        ) from e

    total = payload.get("total")
    if not isinstance(total, int) or isinstance(total, bool) or total <= 0:
        total = len(records)

    response_time = payload.get("response_time_ms")
    return SourcePage(
        records=records,
        total=total,
        mock=bool(payload.get("mock", False)),
        error=str(error) if error else None,
        response_time_ms=int(response_time) if isinstance(response_time, (int, float)) else None,
    )


__all__ = ["SourcePage", "parse_source_payload"]
