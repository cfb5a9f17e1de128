import asyncio
import os
import sys

# ---- FIX WINDOWS + PSYCOPG ASYNC ----
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Settings are read lazily; give the app factory a URL it accepts.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./dentalcare-test.db")

import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from dentalcare.api.deps import get_session, get_sessionmaker
from dentalcare.api.main import create_app
from dentalcare.models import Base


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'dentalcare.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def seed(session_factory):
    """Insert ORM rows in one committed transaction and return them."""

    async def _seed(*rows):
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows

    return _seed


@pytest.fixture
def app(session_factory) -> FastAPI:
    app = create_app()

    async def _session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_sessionmaker] = lambda: session_factory
    return app
