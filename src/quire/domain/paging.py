"""Pagination arithmetic shared by list, search and tag queries."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .content import ContentItem

# SQLite INTEGER is a signed 64-bit value
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1


@dataclass
class PagedResult:
    """One page of items plus the counts needed to walk the rest."""

    items: list[ContentItem]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "total_count": self.total_count,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_previous": self.has_previous,
        }


def coerce_int(value: Any, default: int | None = None) -> int | None:
    """Read an integer from JSON or query-string input.

    Accepts ints and strings of digits; booleans, floats with a fraction,
    values SQLite cannot store and anything else give `default`.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if in_sqlite_range(number) else default


def in_sqlite_range(value: int) -> bool:
    return SQLITE_INT_MIN <= value <= SQLITE_INT_MAX


def clamp_pagination(
    page: Any, page_size: Any, default_page_size: int, max_page_size: int
) -> tuple[int, int]:
    """Normalize requested paging.

    A page below 1 becomes 1. A page size outside [1, max_page_size]
    becomes the default size.
    """
    page_num = coerce_int(page, 1)
    if page_num is None or page_num < 1:
        page_num = 1

    size = coerce_int(page_size, default_page_size)
    if size is None or size < 1 or size > max_page_size:
        size = default_page_size

    return page_num, size
