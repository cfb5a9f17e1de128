# src/dentalcare/api/lookups.py
#
# Calendar, per-patient and role lookups. These routers are mounted ahead of
# the generic entity routers so fixed paths win over "/{entity_id}".
from __future__ import annotations

import datetime as dt
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dentalcare.api import schemas
from dentalcare.api.deps import get_session
from dentalcare.listing import EntityListQuery, month_bounds, week_bounds

DENTIST_ROLES = ("dentist",)

appointments_router = APIRouter(prefix="/appointments", tags=["appointments"])
users_router = APIRouter(prefix="/users", tags=["users"])


@appointments_router.get("/by-date", response_model=List[schemas.AppointmentOut])
async def appointments_by_date(
    date: dt.date = Query(...),
    session: AsyncSession = Depends(get_session),
):
    rows = await EntityListQuery(session).appointments_on(date)
    return [schemas.appointment_out(a) for a in rows]


@appointments_router.get("/range", response_model=List[schemas.AppointmentOut])
async def appointments_in_range(
    start: dt.date = Query(...),
    end: dt.date = Query(...),
    session: AsyncSession = Depends(get_session),
):
    rows = await EntityListQuery(session).appointments_between(start, end)
    return [schemas.appointment_out(a) for a in rows]


@appointments_router.get("/by-month", response_model=List[schemas.AppointmentOut])
async def appointments_by_month(
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
    session: AsyncSession = Depends(get_session),
):
    start, end = month_bounds(year, month)
    rows = await EntityListQuery(session).appointments_between(start, end)
    return [schemas.appointment_out(a) for a in rows]


@appointments_router.get("/by-week", response_model=List[schemas.AppointmentOut])
async def appointments_by_week(
    date: dt.date = Query(...),
    session: AsyncSession = Depends(get_session),
):
    start, end = week_bounds(date)
    rows = await EntityListQuery(session).appointments_between(start, end)
    return [schemas.appointment_out(a) for a in rows]


@appointments_router.get("/by-patient/{patient_id}", response_model=List[schemas.AppointmentOut])
async def appointments_by_patient(patient_id: int, session: AsyncSession = Depends(get_session)):
    rows = await EntityListQuery(session).appointments_for_patient(patient_id)
    return [schemas.appointment_out(a) for a in rows]


@users_router.get("/dentists", response_model=List[schemas.UserOut])
async def dentists(session: AsyncSession = Depends(get_session)):
    rows = await EntityListQuery(session).users_with_roles(DENTIST_ROLES)
    return [schemas.user_out(u) for u in rows]


@users_router.get("/by-role", response_model=List[schemas.UserOut])
async def users_by_role(
    role: List[str] = Query(default=[]),
    session: AsyncSession = Depends(get_session),
):
    rows = await EntityListQuery(session).users_with_roles(role)
    return [schemas.user_out(u) for u in rows]
