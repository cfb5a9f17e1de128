from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dentalcare.core.errors import NotFoundError
from dentalcare.models import Appointment, User
from dentalcare.listing.page_query import Page, PageQuery
from dentalcare.listing.search import ENTITY_SPECS, EntitySpec, build_search_predicate

_log = logging.getLogger("dentalcare.listing")

DEFAULT_SEARCH_LIMIT = 200


class EntityListQuery:
    """Read queries over a single entity collection.

    The session is supplied by the caller and only ever used for reads.
    """

    def __init__(self, session: AsyncSession, *, search_limit: int = DEFAULT_SEARCH_LIMIT) -> None:
        self._session = session
        self._search_limit = search_limit

    async def execute(self, entity_type: str, query: PageQuery) -> Page[Any]:
        spec = ENTITY_SPECS[entity_type]
        predicate = build_search_predicate(spec, query.search_text)

        total = (
            await self._session.execute(
                select(func.count()).select_from(spec.model).where(predicate)
            )
        ).scalar_one()

        items: list[Any] = []
        if query.offset < total:
            stmt = (
                select(spec.model)
                .where(predicate)
                .order_by(*_ordering(spec, query))
                .offset(query.offset)
                .limit(query.page_size)
            )
            items = list((await self._session.execute(stmt)).scalars().all())

        _log.debug(
            "list %s page=%d size=%d sort=%s %s total=%d",
            entity_type,
            query.page_index,
            query.page_size,
            query.sort_field,
            query.sort_direction,
            total,
        )
        return Page(
            items=tuple(items),
            total_elements=total,
            page_index=query.page_index,
            page_size=query.page_size,
        )

    async def search_only(self, entity_type: str, text: str | None) -> list[Any]:
        """Unpaginated matches for typeahead, capped at ``search_limit`` rows."""
        spec = ENTITY_SPECS[entity_type]
        stmt = (
            select(spec.model)
            .where(build_search_predicate(spec, text or ""))
            .order_by(spec.natural_key)
            .limit(self._search_limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def get(self, entity_type: str, entity_id: int) -> Any:
        spec = ENTITY_SPECS[entity_type]
        row = await self._session.get(spec.model, entity_id)
        if row is None:
            raise NotFoundError(spec.model.__name__, entity_id)
        return row

    # ── calendar and role lookups ────────────────────────────────────────────

    async def appointments_on(self, day: dt.date) -> list[Appointment]:
        return await self._appointments(Appointment.date == day)

    async def appointments_between(self, start: dt.date, end: dt.date) -> list[Appointment]:
        """Appointments dated within [start, end], both ends inclusive."""
        return await self._appointments(Appointment.date.between(start, end))

    async def appointments_for_patient(self, patient_id: int) -> list[Appointment]:
        return await self._appointments(Appointment.patient_id == patient_id)

    async def users_with_roles(self, roles: Iterable[str]) -> list[User]:
        wanted = sorted(set(roles))
        if not wanted:
            return []
        stmt = select(User).where(User.role.in_(wanted)).order_by(User.name, User.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def _appointments(self, criterion: Any) -> list[Appointment]:
        stmt = (
            select(Appointment)
            .where(criterion)
            .order_by(Appointment.date, Appointment.start_time, Appointment.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())


def _ordering(spec: EntitySpec, query: PageQuery) -> list[Any]:
    column = spec.sort_column(query.sort_field)
    order = [column.desc() if query.descending else column.asc()]
    if column is not spec.natural_key:
        # tie-breaker keeps page windows stable
        order.append(spec.natural_key.asc())
    return order
