from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from dentalcare.core.errors import NotFoundError
from dentalcare.listing.search import ENTITY_SPECS


class EntityRepository:
    """Create/update/delete passthroughs; each call commits its own unit of work."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, entity_type: str, values: dict[str, Any]) -> Any:
        model = ENTITY_SPECS[entity_type].model
        row = model(**values)
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        await self._session.commit()
        return row

    async def update(self, entity_type: str, entity_id: int, values: dict[str, Any]) -> Any:
        row = await self._require(entity_type, entity_id)
        for key, value in values.items():
            setattr(row, key, value)
        await self._session.flush()
        await self._session.refresh(row)
        await self._session.commit()
        return row

    async def delete(self, entity_type: str, entity_id: int) -> None:
        row = await self._require(entity_type, entity_id)
        await self._session.delete(row)
        await self._session.commit()

    async def _require(self, entity_type: str, entity_id: int) -> Any:
        model = ENTITY_SPECS[entity_type].model
        row = await self._session.get(model, entity_id)
        if row is None:
            raise NotFoundError(model.__name__, entity_id)
        return row
