"""List record model and field resolution helpers.

Records coming from the case-management API are treated as opaque: only
``id`` is modelled explicitly, everything else is kept as extra fields and
read through dotted alias paths. The upstream service has renamed fields
over time (``recipient_name`` vs ``defendant_name`` vs ``recipient.name``),
so every logical field resolves through an ordered alias list.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

# Keys tried, in order, when a nested object is displayed as a string
_DISPLAY_KEYS = ("name", "title", "value", "text")


class JobRecord(BaseModel):
    """Immutable record fetched from a data source.

    Used for jobs, invoices and clients alike; only the identifier is
    required. Unknown fields are preserved as extras.

    Example:
        >>> record = JobRecord(id=7, recipient={"name": "John Smith"})
        >>> record.id
        '7'
        >>> record.lookup("recipient.name")
        'John Smith'
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def lookup(self, path: str) -> Any:
        """Return the value at a dotted path, or None if any segment is missing."""
        parts = path.split(".")
        if parts[0] == "id":
            current: Any = self.id
        else:
            current = (self.model_extra or {}).get(parts[0])
        for part in parts[1:]:
            if not isinstance(current, dict):
                return None
            current = current.get(part)
        return current


def safe_string(value: Any, fallback: str = "") -> str:
    """Coerce a record value to a display string.

    Numbers and booleans are stringified; objects are displayed through
    their first non-empty ``name``/``title``/``value``/``text`` key.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        for key in _DISPLAY_KEYS:
            nested = value.get(key)
            if nested:
                return safe_string(nested, fallback)
        return fallback
    return fallback


def resolve_field(record: JobRecord, aliases: Iterable[str]) -> Any:
    """Return the first non-empty value among ``aliases``."""
    for alias in aliases:
        value = record.lookup(alias)
        if value not in (None, "", [], {}):
            return value
    return None


def resolve_text(record: JobRecord, aliases: Iterable[str], default: str = "") -> str:
    """Resolve ``aliases`` and coerce the result with :func:`safe_string`."""
    text = safe_string(resolve_field(record, aliases))
    return text or default


__all__ = [
    "JobRecord",
    "resolve_field",
    "resolve_text",
    "safe_string",
]
