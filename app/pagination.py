from dataclasses import dataclass
from typing import Any

from fastapi import Query
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas import Pagination

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Items per page"),
) -> PageParams:
    return PageParams(page=page, limit=limit)


async def paginate(db: AsyncSession, stmt: Select, params: PageParams) -> dict[str, Any]:
    """Run `stmt` for one page and count the rows it would return overall.

    Returns the keyword arguments of a `PaginatedResponse`.
    """
    total = await db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    result = await db.execute(stmt.limit(params.limit).offset(params.offset))
    return {
        "data": result.scalars().all(),
        "pagination": Pagination.build(params.page, params.limit, total or 0),
    }


LIKE_ESCAPE = "\\"


def contains_pattern(search: str) -> str:
    """LIKE pattern matching `search` anywhere, with its own wildcards taken literally.

    Use together with ``escape=LIKE_ESCAPE``.
    """
    escaped = (
        search.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
