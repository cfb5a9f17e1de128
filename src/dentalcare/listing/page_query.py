"""Paging, sorting and search input normalization.

Every raw input is defaulted or clamped, never rejected: listing endpoints
must stay available no matter what the client sends.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_SORT_FIELD = "id"

SORT_ASC = "asc"
SORT_DESC = "desc"


def _as_int(raw: int | str | None, default: int) -> int:
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class PageQuery:
    """Canonical, immutable paging/sorting/search descriptor."""

    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: str = SORT_ASC
    search_text: str = ""

    @classmethod
    def normalize(
        cls,
        page: int | str | None = None,
        size: int | str | None = None,
        sort_by: str | None = None,
        sort_direction: str | None = None,
        search: str | None = None,
        *,
        default_sort: str = DEFAULT_SORT_FIELD,
    ) -> PageQuery:
        """Build a PageQuery from raw request values.

        page           -> max(0, page)
        size           -> clamped to [1, MAX_PAGE_SIZE]
        sort_by        -> default_sort when absent or empty
        sort_direction -> "desc" only for a case-insensitive "desc", else "asc"
        search         -> "" when absent
        """
        page_index = max(0, _as_int(page, 0))
        page_size = min(max(1, _as_int(size, DEFAULT_PAGE_SIZE)), MAX_PAGE_SIZE)
        direction = (
            SORT_DESC
            if sort_direction is not None and str(sort_direction).lower() == SORT_DESC
            else SORT_ASC
        )
        return cls(
            page_index=page_index,
            page_size=page_size,
            sort_field=sort_by or default_sort,
            sort_direction=direction,
            search_text=search if search is not None else "",
        )

    @property
    def offset(self) -> int:
        return self.page_index * self.page_size

    @property
    def descending(self) -> bool:
        return self.sort_direction == SORT_DESC


@dataclass(frozen=True)
class Page(Generic[T]):
    """A window of results plus the total number of matching rows."""

    items: Sequence[T]
    total_elements: int
    page_index: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.page_size) if self.page_size else 0
