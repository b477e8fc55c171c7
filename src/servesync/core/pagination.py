"""Pagination state and fetch windows.

``PaginationState`` is pure data: every transition returns a new state.
Transitions that change the limit or the active filters reset the offset
to zero; only the page-navigation transitions move it elsewhere.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Optional

from servesync.shared.constants import FilterValues, Pagination
from servesync.shared.errors import ErrorCode, create_validation_error

FilterItems = tuple[tuple[str, str], ...]


def normalize_filters(filters: Optional[Mapping[str, Optional[str]]]) -> FilterItems:
    """Turn a filter mapping into a sorted, hashable tuple.

    Empty values and ``"all"`` mean "no filter" and are dropped, so two
    mappings selecting the same records normalize to the same tuple.
    """
    if not filters:
        return ()
    return tuple(
        sorted(
            (name, str(value))
            for name, value in filters.items()
            if value not in (None, "") and str(value) != FilterValues.ALL
        )
    )


def _validate_window(offset: int, limit: int) -> None:
    if offset < 0:
        raise create_validation_error(
            f"offset must be >= 0, got {offset}",
            field="offset",
            operation="pagination",
            code=ErrorCode.INVALID_PAGINATION,
        )
    if limit <= 0:
        raise create_validation_error(
            f"limit must be > 0, got {limit}",
            field="limit",
            operation="pagination",
            code=ErrorCode.INVALID_PAGINATION,
        )


@dataclass(frozen=True)
class FetchWindow:
    """The slice of a list requested from a data source.

    Attributes:
        offset: Index of the first record
        limit: Maximum number of records
        filters: Normalized server-side filters
    """

    offset: int = 0
    limit: int = Pagination.DEFAULT_LIMIT
    filters: FilterItems = ()

    def __post_init__(self) -> None:
        _validate_window(self.offset, self.limit)

    @property
    def page(self) -> int:
        """1-based page number for page-style adapters."""
        return self.offset // self.limit + 1

    @property
    def filter_map(self) -> dict[str, str]:
        return dict(self.filters)


@dataclass(frozen=True)
class PaginationState:
    """Current pagination window plus the last known total.

    Example:
        >>> state = PaginationState(limit=50).with_total(120)
        >>> state.total_pages, state.has_next
        (3, True)
        >>> state.next_page().page
        2
    """

    offset: int = 0
    limit: int = Pagination.DEFAULT_LIMIT
    total: int = 0
    filters: FilterItems = ()

    def __post_init__(self) -> None:
        _validate_window(self.offset, self.limit)

    @property
    def page(self) -> int:
        return self.offset // self.limit + 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total > 0 else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def window(self) -> FetchWindow:
        return FetchWindow(offset=self.offset, limit=self.limit, filters=self.filters)

    # Page navigation

    def next_page(self) -> PaginationState:
        if not self.has_next:
            return self
        return replace(self, offset=self.offset + self.limit)

    def prev_page(self) -> PaginationState:
        if not self.has_prev:
            return self
        return replace(self, offset=max(0, self.offset - self.limit))

    def first_page(self) -> PaginationState:
        return replace(self, offset=0)

    def last_page(self) -> PaginationState:
        if self.total_pages == 0:
            return self.first_page()
        return replace(self, offset=(self.total_pages - 1) * self.limit)

    def go_to_page(self, page: int) -> PaginationState:
        """Jump to a 1-based page, clamped to the known page range."""
        last = max(self.total_pages, 1)
        page = min(max(page, 1), last)
        return replace(self, offset=(page - 1) * self.limit)

    # Window changes (reset offset)

    def set_limit(self, limit: int, max_limit: int = Pagination.MAX_LIMIT) -> PaginationState:
        if limit <= 0 or limit > max_limit:
            raise create_validation_error(
                f"limit must be between 1 and {max_limit}, got {limit}",
                field="limit",
                operation="set_limit",
                code=ErrorCode.INVALID_PAGINATION,
            )
        return replace(self, offset=0, limit=limit)

    def set_filters(self, filters: Optional[Mapping[str, Optional[str]]]) -> PaginationState:
        return replace(self, offset=0, filters=normalize_filters(filters))

    def with_total(self, total: int) -> PaginationState:
        """Record the total reported by an explicit load."""
        return replace(self, total=max(0, total))


__all__ = [
    "FetchWindow",
    "FilterItems",
    "PaginationState",
    "normalize_filters",
]
