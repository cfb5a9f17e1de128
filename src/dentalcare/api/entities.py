# src/dentalcare/api/entities.py
#
# Listing, typeahead search, lookup and write passthroughs for the four entity
# collections. Annotations must stay evaluated here: FastAPI reads the closure
# variables (schemas) from the endpoint signatures.
from typing import Any, Callable, List, Type

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from dentalcare.api import schemas
from dentalcare.api.deps import get_session, page_query_params
from dentalcare.api.lookups import appointments_router, users_router
from dentalcare.listing import EntityListQuery, PageQuery
from dentalcare.listing.entity_query import DEFAULT_SEARCH_LIMIT
from dentalcare.repositories import EntityRepository


def entity_router(
    entity_type: str,
    in_schema: Type[BaseModel],
    out_schema: Type[BaseModel],
    mapper: Callable[[Any], BaseModel],
    *,
    default_sort: str = "id",
    search_limit: int = DEFAULT_SEARCH_LIMIT,
) -> APIRouter:
    router = APIRouter(prefix=f"/{entity_type}", tags=[entity_type])
    page_params = page_query_params(default_sort)

    @router.get("", response_model=schemas.PageOut[out_schema])
    async def list_entities(
        query: PageQuery = Depends(page_params),
        session: AsyncSession = Depends(get_session),
    ):
        page = await EntityListQuery(session).execute(entity_type, query)
        return schemas.page_out(page, mapper)

    @router.get("/search", response_model=List[out_schema])
    async def search_entities(
        query: str = Query(default=""),
        session: AsyncSession = Depends(get_session),
    ):
        rows = await EntityListQuery(session, search_limit=search_limit).search_only(entity_type, query)
        return [mapper(r) for r in rows]

    @router.get("/{entity_id}", response_model=out_schema)
    async def get_entity(entity_id: int, session: AsyncSession = Depends(get_session)):
        return mapper(await EntityListQuery(session).get(entity_type, entity_id))

    @router.post("", response_model=out_schema, status_code=201)
    async def create_entity(payload: in_schema, session: AsyncSession = Depends(get_session)):
        row = await EntityRepository(session).create(entity_type, payload.model_dump())
        return mapper(row)

    @router.put("/{entity_id}", response_model=out_schema)
    async def update_entity(
        entity_id: int,
        payload: in_schema,
        session: AsyncSession = Depends(get_session),
    ):
        row = await EntityRepository(session).update(entity_type, entity_id, payload.model_dump())
        return mapper(row)

    @router.delete("/{entity_id}")
    async def delete_entity(entity_id: int, session: AsyncSession = Depends(get_session)):
        await EntityRepository(session).delete(entity_type, entity_id)
        return {"deleted": entity_id}

    return router


def build_entity_routers(search_limit: int = DEFAULT_SEARCH_LIMIT) -> list[APIRouter]:
    return [
        appointments_router,
        users_router,
        entity_router(
            "patients", schemas.PatientIn, schemas.PatientOut, schemas.patient_out,
            search_limit=search_limit,
        ),
        entity_router(
            "appointments", schemas.AppointmentIn, schemas.AppointmentOut, schemas.appointment_out,
            search_limit=search_limit,
        ),
        entity_router(
            "medicines", schemas.MedicineIn, schemas.MedicineOut, schemas.medicine_out,
            default_sort="name",
            search_limit=search_limit,
        ),
        entity_router(
            "users", schemas.UserIn, schemas.UserOut, schemas.user_out,
            search_limit=search_limit,
        ),
    ]
