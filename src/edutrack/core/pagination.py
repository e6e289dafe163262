"""
Pagination Helpers

Normalizes ``page``/``limit`` query values and applies them to SQLAlchemy
selects. ``page`` is 1-based; ``limit`` is clamped to 1..100 and defaults to 10.
"""

import math
from dataclasses import dataclass
from typing import Any

from fastapi import Query
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def normalize_page(page: int | None, limit: int | None) -> PageParams:
    """Clamp raw values into a valid page request."""
    page = max(1, page or 1)
    limit = min(MAX_LIMIT, max(1, limit or DEFAULT_LIMIT))
    return PageParams(page=page, limit=limit)


def page_params(
    page: int = Query(1, description="Page number (1-based)"),
    limit: int = Query(DEFAULT_LIMIT, description="Items per page (max 100)"),
) -> PageParams:
    """FastAPI dependency for list endpoints."""
    return normalize_page(page, limit)


def pagination_meta(params: PageParams, total: int) -> dict[str, int]:
    return {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "pages": math.ceil(total / params.limit) if total else 0,
    }


async def paginate(
    db: AsyncSession,
    query: Select,
    params: PageParams,
) -> tuple[list[Any], int]:
    """
    Execute a select for one page and count the full result.

    Returns:
        Tuple of (rows for the page, total count)
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar_one()

    result = await db.execute(query.offset(params.offset).limit(params.limit))
    return list(result.scalars().unique().all()), total


def single_page_meta(total: int) -> dict[str, int]:
    """Metadata for an unpaginated listing returned as one page."""
    return {"page": 1, "limit": total, "total": total, "pages": 1 if total else 0}
