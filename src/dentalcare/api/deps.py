from __future__ import annotations

from typing import AsyncIterator, Callable

from fastapi import Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db import get_session_factory, open_session
from ..listing import PageQuery


async def get_session() -> AsyncIterator[AsyncSession]:
    async with open_session() as session:
        yield session


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


def page_query_params(default_sort: str = "id") -> Callable[..., PageQuery]:
    """
    Build a dependency turning listing query params into a PageQuery.

    Params arrive as raw strings so malformed values are defaulted by
    PageQuery.normalize instead of being rejected with a 422.
    """

    def _dependency(
        page: str | None = Query(default=None),
        size: str | None = Query(default=None),
        sort_by: str | None = Query(default=None, alias="sortBy"),
        sort_direction: str | None = Query(default=None, alias="sortDirection"),
        search: str | None = Query(default=None),
    ) -> PageQuery:
        return PageQuery.normalize(
            page=page,
            size=size,
            sort_by=sort_by,
            sort_direction=sort_direction,
            search=search,
            default_sort=default_sort,
        )

    return _dependency
