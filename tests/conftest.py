"""
pytest fixtures shared by the pagedquery tests.

Every database is in-memory SQLite:
- sqlite3 (DB-API wrapper), with a trace of the executed statements
- a SQLAlchemy sync engine (textual SQL and Select wrappers)
- an aiosqlite async engine (async wrappers and the FastAPI demo)
"""

import os
import sqlite3
from dataclasses import dataclass, field
from typing import List

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session

# Set test environment before importing app modules
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

from pagedquery.main import app
from pagedquery.core.db.base import Base
from pagedquery.core.db.engine import (
    create_engine_for,
    create_session_factory,
    create_tables,
    get_db_util,
)
from pagedquery.modules.items.models import Item

GROUPS = "abcde"
ROW_COUNT = 25
ITEM_CATEGORIES = ["books", "games", "music"]


def seed_rows():
    """(id, name, grp) for ids 1..25; every group holds 5 rows."""
    return [(i, f"row{i}", GROUPS[i % 5]) for i in range(1, ROW_COUNT + 1)]


def make_items(count: int) -> List[Item]:
    return [
        Item(name=f"item{i}", category=ITEM_CATEGORIES[i % 3])
        for i in range(1, count + 1)
    ]


@dataclass
class TracedConnection:
    conn: sqlite3.Connection
    statements: List[str] = field(default_factory=list)


@pytest.fixture
def sqlite_db():
    """sqlite3 connection with table t (25 rows) and a statement trace."""
    conn = sqlite3.connect(":memory:")
    conn.execute(
        "CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT NOT NULL, grp TEXT NOT NULL)"
    )
    conn.executemany("INSERT INTO t (id, name, grp) VALUES (?, ?, ?)", seed_rows())
    conn.commit()

    traced = TracedConnection(conn=conn)
    conn.set_trace_callback(traced.statements.append)
    yield traced
    conn.close()


@pytest.fixture
def sync_engine():
    """SQLAlchemy engine with table t (25 rows) and the item table."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(
            text("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT, grp TEXT)")
        )
        conn.execute(
            text("INSERT INTO t (id, name, grp) VALUES (:id, :name, :grp)"),
            [{"id": i, "name": n, "grp": g} for i, n, g in seed_rows()],
        )
    yield engine
    engine.dispose()


@pytest.fixture
def executed(sync_engine):
    """Statements sent to the sync engine's cursor, in order."""
    statements = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(sync_engine, "before_cursor_execute", _record)
    yield statements
    event.remove(sync_engine, "before_cursor_execute", _record)


@pytest.fixture
def orm_session(sync_engine):
    """Session on the sync engine with 12 items."""
    with Session(sync_engine) as session:
        session.add_all(make_items(12))
        session.commit()
        yield session


@pytest_asyncio.fixture
async def async_engine():
    """Fresh in-memory aiosqlite database with the item table."""
    engine = create_engine_for("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine):
    """AsyncSession with 12 items."""
    session_factory = create_session_factory(async_engine)
    async with session_factory() as session:
        session.add_all(make_items(12))
        await session.commit()
        yield session


@pytest_asyncio.fixture
async def client(async_engine):
    """HTTP client for the demo app, bound to the test database."""
    session_factory = create_session_factory(async_engine)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_util] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
