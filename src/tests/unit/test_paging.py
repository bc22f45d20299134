"""Tests for pagination helpers."""

import pytest

from quire.domain import PagedResult
from quire.domain.paging import clamp_pagination, coerce_int


class TestPagedResult:
    """Test derived page counts."""

    @pytest.mark.parametrize(
        "total, page, size, pages, has_next, has_previous",
        [
            (0, 1, 20, 0, False, False),
            (1, 1, 20, 1, False, False),
            (20, 1, 20, 1, False, False),
            (21, 1, 20, 2, True, False),
            (21, 2, 20, 2, False, True),
            (45, 2, 10, 5, True, True),
        ],
    )
    def test_counts(self, total, page, size, pages, has_next, has_previous):
        result = PagedResult(items=[], total_count=total, page=page, page_size=size)

        assert result.total_pages == pages
        assert result.has_next is has_next
        assert result.has_previous is has_previous

    def test_offset(self):
        assert PagedResult(items=[], total_count=0, page=3, page_size=10).offset == 20

    def test_to_dict_keys(self):
        data = PagedResult(items=[], total_count=3, page=1, page_size=2).to_dict()

        assert data == {
            "items": [],
            "total_count": 3,
            "page": 1,
            "page_size": 2,
            "total_pages": 2,
            "has_next": True,
            "has_previous": False,
        }


class TestClampPagination:
    """Out-of-range paging falls back to sane values."""

    @pytest.mark.parametrize(
        "page, size, expected",
        [
            (1, 20, (1, 20)),
            (None, None, (1, 20)),
            (0, 10, (1, 10)),
            (-5, 10, (1, 10)),
            (2, 0, (2, 20)),
            (2, 101, (2, 20)),
            (2, 100, (2, 100)),
            ("3", "15", (3, 15)),
            ("abc", "xyz", (1, 20)),
            (True, 10, (1, 10)),
            (2**64, 2**64, (1, 20)),
        ],
    )
    def test_clamp(self, page, size, expected):
        assert clamp_pagination(page, size, 20, 100) == expected


class TestCoerceInt:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (5, 5),
            (5.0, 5),
            (5.5, None),
            (" 7 ", 7),
            ("7a", None),
            (True, None),
            (None, None),
            ([1], None),
            (2**63 - 1, 2**63 - 1),
            (-(2**63), -(2**63)),
            (2**63, None),
            (str(2**64), None),
            (-(2**63) - 1, None),
        ],
    )
    def test_coerce(self, value, expected):
        assert coerce_int(value) == expected
