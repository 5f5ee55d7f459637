"""
Async database engine for the demo service.

SQLite goes through aiosqlite; in-memory databases share one connection
(StaticPool) so every session sees the same tables.
"""

from typing import AsyncGenerator
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

from pagedquery.core.config import config as settings
from pagedquery.core.db.base import Base


def _get_engine_options(database_url: str) -> dict:
    """
    Get engine options based on database type.
    SQLite requires special handling for async and concurrency.
    """
    is_sqlite = database_url.startswith("sqlite")

    options = {
        "echo": False,
    }

    if is_sqlite:
        if ":memory:" in database_url:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["poolclass"] = NullPool

    return options


def create_engine_for(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url, **_get_engine_options(database_url))


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,  # Manual control over flushing
    )


database_url = settings.database_url

engine = create_engine_for(database_url)

AsyncSessionLocal = create_session_factory(engine)


async def get_db_util() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency for FastAPI.

    Commits when the request handler returns, rolls back on any exception.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create all tables registered on Base.metadata."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database_connection(session: AsyncSession) -> bool:
    """
    Verify database connection is working.
    Useful for health checks and startup validation.
    """
    result = await session.execute(text("SELECT 1"))
    return result.scalar() == 1
