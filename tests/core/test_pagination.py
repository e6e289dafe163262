"""
Tests for page normalisation and pagination metadata.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select

from edutrack.core.pagination import (
    PageParams,
    normalize_page,
    paginate,
    pagination_meta,
    single_page_meta,
)
from edutrack.modules.rooms.models import Room


class TestNormalizePage:
    def test_defaults(self):
        assert normalize_page(None, None) == PageParams(page=1, limit=10)

    def test_limit_is_capped(self):
        assert normalize_page(2, 500).limit == 100

    def test_non_positive_values_are_clamped(self):
        params = normalize_page(0, 0)
        assert params.page == 1
        assert params.limit == 10

        assert normalize_page(-3, -1) == PageParams(page=1, limit=1)

    def test_offset(self):
        assert PageParams(page=3, limit=20).offset == 40


def test_pagination_meta_rounds_pages_up():
    assert pagination_meta(PageParams(page=1, limit=10), 21) == {
        "page": 1,
        "limit": 10,
        "total": 21,
        "pages": 3,
    }


def test_pagination_meta_empty():
    assert pagination_meta(PageParams(), 0)["pages"] == 0


def test_single_page_meta():
    assert single_page_meta(4) == {"page": 1, "limit": 4, "total": 4, "pages": 1}
    assert single_page_meta(0)["pages"] == 0


@pytest.mark.asyncio
async def test_paginate_counts_then_fetches(mock_db):
    """Test that paginate returns the page rows with the full count."""
    rows = [MagicMock(spec=Room), MagicMock(spec=Room)]
    count_result = MagicMock()
    count_result.scalar_one.return_value = 12
    rows_result = MagicMock()
    rows_result.scalars.return_value.unique.return_value.all.return_value = rows
    mock_db.execute = AsyncMock(side_effect=[count_result, rows_result])

    items, total = await paginate(mock_db, select(Room), PageParams(page=2, limit=2))

    assert total == 12
    assert items == rows
    assert mock_db.execute.await_count == 2
