"""Construction and teardown of the store, cache and coordinator.

The application lifespan and the CLI both build their collaborators here,
once, and pass the resulting coordinator along explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from recipebox.cache.redis import RecipeCache, close_redis, connect_redis
from recipebox.config import Settings
from recipebox.coordinator import RecipeCoordinator
from recipebox.persistence.db import close_db, create_engine, create_session_factory, init_db
from recipebox.persistence.repositories import RecipeRepository

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


def build_coordinator(
    session_factory: async_sessionmaker[AsyncSession],
    redis_client: Redis,
    settings: Settings,
) -> RecipeCoordinator:
    """Wire a coordinator from already-open store and cache handles."""
    store = RecipeRepository(
        session_factory,
        timeout=settings.store_timeout,
        strict_decode=settings.strict_decode,
    )
    cache = RecipeCache(
        redis_client,
        ttl=settings.cache_ttl,
        timeout=settings.cache_timeout,
        key_prefix=settings.cache_key_prefix,
    )
    return RecipeCoordinator(store, cache)


@dataclass
class Runtime:
    """Open connections and the coordinator built on them."""

    engine: AsyncEngine
    redis: Redis
    coordinator: RecipeCoordinator

    async def close(self) -> None:
        await close_redis(self.redis)
        await close_db(self.engine)


async def open_runtime(settings: Settings) -> Runtime:
    """Connect to the store and cache, creating tables if needed."""
    engine = create_engine(settings.database_url, echo=False)
    try:
        await init_db(engine)
    except BaseException:
        await close_db(engine)
        raise
    redis_client = connect_redis(settings.redis_url)
    coordinator = build_coordinator(create_session_factory(engine), redis_client, settings)
    logger.info("Connected to store and cache")
    return Runtime(engine=engine, redis=redis_client, coordinator=coordinator)


@asynccontextmanager
async def runtime_context(settings: Settings) -> AsyncIterator[Runtime]:
    runtime = await open_runtime(settings)
    try:
        yield runtime
    finally:
        await runtime.close()
