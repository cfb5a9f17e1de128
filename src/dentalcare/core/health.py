"""
src/dentalcare/core/health.py

GET /health/live   process is up, always 200
GET /health/ready  the store answers and every mapped table exists

Readiness goes through the same session factory the request handlers use, so
a store that accepts connections but was never migrated is reported as not
ready instead of failing on the first listing request.
"""
from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import inspect
from sqlalchemy.orm import Session

import dentalcare.db as _db_module
from dentalcare.models import Base

_log = logging.getLogger("dentalcare.health")

router = APIRouter(tags=["health"])

_DB_PING_TIMEOUT = 3.0  # seconds


def _missing_tables(session: Session) -> list[str]:
    present = set(inspect(session.connection()).get_table_names())
    return sorted(set(Base.metadata.tables) - present)


def _not_ready(db: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"status": "error", "probe": "ready", "db": db, **extra},
    )


@router.get("/health/live")
async def health_live() -> JSONResponse:
    return JSONResponse(status_code=200, content={"status": "ok", "probe": "live"})


@router.get("/health/ready")
async def health_ready() -> JSONResponse:
    try:
        async with asyncio.timeout(_DB_PING_TIMEOUT):
            async with _db_module.get_session_factory()() as session:
                missing = await session.run_sync(_missing_tables)
    except TimeoutError:
        _log.error("readiness: schema check timed out after %.1fs", _DB_PING_TIMEOUT)
        return _not_ready("timeout")
    except Exception as exc:
        _log.error("readiness: store unreachable: %s", exc)
        return _not_ready("unreachable")

    if missing:
        _log.warning("readiness: schema not migrated, missing=%s", missing)
        return _not_ready("schema_missing", missing=missing)

    return JSONResponse(
        status_code=200,
        content={"status": "ok", "probe": "ready", "db": "reachable", "tables": len(Base.metadata.tables)},
    )
