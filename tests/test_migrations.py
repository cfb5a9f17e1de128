"""
Alembic migrations apply cleanly to an empty database and roll back fully.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

from dentalcare.config import get_settings

REPO = Path(__file__).resolve().parents[1]


@pytest.fixture
def alembic_db(tmp_path, monkeypatch):
    path = tmp_path / "migrated.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
    get_settings.cache_clear()

    cfg = Config()
    cfg.set_main_option("script_location", str(REPO / "alembic"))

    yield cfg, path
    get_settings.cache_clear()


def _tables(path: Path) -> set[str]:
    with sqlite3.connect(path) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type IN ('table', 'index')").fetchall()
    return {r[0] for r in rows}


def test_upgrade_creates_schema(alembic_db):
    cfg, path = alembic_db

    command.upgrade(cfg, "head")

    names = _tables(path)
    assert {"patients", "appointments", "medicines", "users", "alembic_version"} <= names
    assert {"ix_patients_created_at", "ix_appointments_date_start"} <= names


def test_downgrade_drops_schema(alembic_db):
    cfg, path = alembic_db

    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    names = _tables(path)
    assert not names & {"patients", "appointments", "medicines", "users"}
