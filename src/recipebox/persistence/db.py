"""Engine and session plumbing for the recipe store.

PostgreSQL is reached through asyncpg; SQLite (aiosqlite) serves local runs
and the test suite. Nothing here is global: the lifespan or the CLI builds an
engine, and the repository receives a session factory bound to it.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.ext.asyncio import create_async_engine as _create_async_engine

from recipebox.persistence.tables import Base

logger = logging.getLogger(__name__)

SessionFactory = async_sessionmaker[AsyncSession]

SERVER_POOL_OPTIONS = {
    "pool_size": 10,
    "max_overflow": 20,
    "pool_timeout": 30,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Build an async engine; pool options are skipped for SQLite."""
    pool_options = {} if database_url.startswith("sqlite") else SERVER_POOL_OPTIONS
    return _create_async_engine(database_url, echo=echo, **pool_options)


def create_session_factory(engine: AsyncEngine) -> SessionFactory:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_context(session_factory: SessionFactory) -> AsyncIterator[AsyncSession]:
    """One unit of work: commit on clean exit, roll back if the body raises."""
    async with session_factory() as session:
        try:
            yield session
        except BaseException:
            await session.rollback()
            raise
        await session.commit()


async def init_db(engine: AsyncEngine) -> None:
    """Create the ``recipes`` table when it is missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    await engine.dispose()


async def health_check(session_factory: SessionFactory) -> bool:
    """``SELECT 1`` round trip; False when the database does not answer."""
    try:
        async with session_context(session_factory) as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Store health check failed: {e}")
        return False
    return True
