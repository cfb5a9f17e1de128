from __future__ import annotations

import sys
import asyncio
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import get_settings


# ─────────────────────────────────────────
# Windows Event Loop Fix (psycopg3 async)
# ─────────────────────────────────────────

def _fix_windows_event_loop() -> None:
    """
    Psycopg async on Windows is not compatible with ProactorEventLoop.
    Force SelectorEventLoop.
    """
    if sys.platform.startswith("win"):
        asyncio.set_event_loop_policy(
            asyncio.WindowsSelectorEventLoopPolicy()
        )


_fix_windows_event_loop()


# ─────────────────────────────────────────
# Engine & Session Factory
# ─────────────────────────────────────────

@lru_cache
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(),
        expire_on_commit=False,
        autoflush=False,
    )


# ─────────────────────────────────────────
# Request Session
# ─────────────────────────────────────────

@asynccontextmanager
async def open_session() -> AsyncIterator[AsyncSession]:
    """
    Request-scoped session.

    Reads never commit; the implicit transaction is rolled back on close.
    Write passthroughs commit their own unit of work.
    """
    async with get_session_factory()() as session:
        yield session
