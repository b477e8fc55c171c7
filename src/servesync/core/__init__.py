"""Pure building blocks: records, pagination state and the filter/sort engine."""

from .pagination import FetchWindow, PaginationState, normalize_filters
from .records import JobRecord, resolve_field, resolve_text, safe_string
from .view import SortSpec, ViewProfile, get_profile, view

__all__ = [
    "FetchWindow",
    "JobRecord",
    "PaginationState",
    "SortSpec",
    "ViewProfile",
    "get_profile",
    "normalize_filters",
    "resolve_field",
    "resolve_text",
    "safe_string",
    "view",
]
