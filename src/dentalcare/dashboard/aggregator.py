"""
src/dentalcare/dashboard/aggregator.py

Dashboard statistics snapshot.

Nine independent read queries (counts, top-N lists, group-bys) run
concurrently, each on its own session, and are merged into one frozen
DashboardSnapshot. The snapshot is all-or-nothing: if any sub-query fails the
others are cancelled and the original storage error propagates unchanged.
"""
from __future__ import annotations

import asyncio
import datetime as dt
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dentalcare.models import Appointment, Patient, User

_log = logging.getLogger("dentalcare.dashboard")

UPCOMING_STATUSES = ("scheduled", "confirmed")
DEFAULT_TOP_N = 5


@dataclass(frozen=True)
class StatisticItem:
    name: str
    value: int


@dataclass(frozen=True)
class UpcomingAppointment:
    id: int
    patient_id: int
    patient_name: str
    dentist_name: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    status: str
    type: str
    treatment_type: str | None


@dataclass(frozen=True)
class RecentPatient:
    id: int
    first_name: str
    last_name: str
    phone: str | None
    last_visit: dt.date | None


@dataclass(frozen=True)
class DashboardSnapshot:
    as_of: dt.date
    today_appointments: int
    total_appointments: int
    total_patients: int
    total_users: int
    upcoming_appointments: tuple[UpcomingAppointment, ...]
    recent_patients: tuple[RecentPatient, ...]
    appointments_by_type: tuple[StatisticItem, ...]
    appointments_by_status: tuple[StatisticItem, ...]
    treatments_by_type: tuple[StatisticItem, ...]


def _grouped(column: Any, *criteria: Any) -> Select:
    return (
        select(column, func.count())
        .where(*criteria)
        .group_by(column)
        .order_by(column)
    )


class DashboardAggregator:
    """Builds a DashboardSnapshot from a session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        top_n: int = DEFAULT_TOP_N,
    ) -> None:
        self._session_factory = session_factory
        self._top_n = top_n

    async def snapshot(self, as_of: dt.datetime | dt.date | None = None) -> DashboardSnapshot:
        if as_of is None:
            as_of = dt.datetime.now()
        day = as_of.date() if isinstance(as_of, dt.datetime) else as_of

        start = time.perf_counter()
        (
            today,
            total_appointments,
            total_patients,
            total_users,
            upcoming,
            recent,
            by_type,
            by_status,
            by_treatment,
        ) = await _gather_all(
            self._scalar(select(func.count()).select_from(Appointment).where(Appointment.date == day)),
            self._scalar(select(func.count()).select_from(Appointment)),
            self._scalar(select(func.count()).select_from(Patient)),
            self._scalar(select(func.count()).select_from(User)),
            self._upcoming_appointments(day),
            self._recent_patients(),
            self._statistics(_grouped(Appointment.type)),
            self._statistics(_grouped(Appointment.status)),
            self._statistics(_grouped(Appointment.treatment_type, Appointment.treatment_type.is_not(None))),
        )

        _log.info(
            "dashboard snapshot as_of=%s ms=%.2f",
            day.isoformat(),
            (time.perf_counter() - start) * 1000.0,
        )

        return DashboardSnapshot(
            as_of=day,
            today_appointments=today,
            total_appointments=total_appointments,
            total_patients=total_patients,
            total_users=total_users,
            upcoming_appointments=upcoming,
            recent_patients=recent,
            appointments_by_type=by_type,
            appointments_by_status=by_status,
            treatments_by_type=by_treatment,
        )

    # ── sub-queries ──────────────────────────────────────────────────────────

    async def _run(self, fn: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
        async with self._session_factory() as session:
            return await fn(session)

    async def _scalar(self, stmt: Select) -> int:
        async def _fn(session: AsyncSession) -> int:
            return int((await session.execute(stmt)).scalar_one())

        return await self._run(_fn)

    async def _statistics(self, stmt: Select) -> tuple[StatisticItem, ...]:
        async def _fn(session: AsyncSession) -> tuple[StatisticItem, ...]:
            rows = (await session.execute(stmt)).all()
            return tuple(StatisticItem(name=str(r[0]), value=int(r[1])) for r in rows)

        return await self._run(_fn)

    async def _upcoming_appointments(self, day: dt.date) -> tuple[UpcomingAppointment, ...]:
        stmt = (
            select(
                Appointment.id,
                Appointment.patient_id,
                Appointment.patient_name,
                Appointment.dentist_name,
                Appointment.date,
                Appointment.start_time,
                Appointment.end_time,
                Appointment.status,
                Appointment.type,
                Appointment.treatment_type,
            )
            .where(Appointment.date >= day, Appointment.status.in_(UPCOMING_STATUSES))
            .order_by(Appointment.date.asc(), Appointment.start_time.asc(), Appointment.id.asc())
            .limit(self._top_n)
        )

        async def _fn(session: AsyncSession) -> tuple[UpcomingAppointment, ...]:
            rows = (await session.execute(stmt)).all()
            return tuple(
                UpcomingAppointment(
                    id=r.id,
                    patient_id=r.patient_id,
                    patient_name=r.patient_name,
                    dentist_name=r.dentist_name,
                    date=r.date,
                    start_time=r.start_time,
                    end_time=r.end_time,
                    status=r.status,
                    type=r.type,
                    treatment_type=r.treatment_type,
                )
                for r in rows
            )

        return await self._run(_fn)

    async def _recent_patients(self) -> tuple[RecentPatient, ...]:
        stmt = (
            select(
                Patient.id,
                Patient.first_name,
                Patient.last_name,
                Patient.phone,
                Patient.last_visit,
            )
            .order_by(Patient.created_at.desc(), Patient.id.desc())
            .limit(self._top_n)
        )

        async def _fn(session: AsyncSession) -> tuple[RecentPatient, ...]:
            rows = (await session.execute(stmt)).all()
            return tuple(
                RecentPatient(
                    id=r.id,
                    first_name=r.first_name,
                    last_name=r.last_name,
                    phone=r.phone,
                    last_visit=r.last_visit,
                )
                for r in rows
            )

        return await self._run(_fn)


async def _gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently; on the first failure cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException as exc:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        _log.debug("dashboard snapshot aborted: %s", exc)
        raise
