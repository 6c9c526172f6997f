"""Shared fixtures: a SQLite-backed store, a fakeredis cache and a coordinator over both."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import fakeredis
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from recipebox.cache.redis import RecipeCache
from recipebox.coordinator import RecipeCoordinator
from recipebox.core.ids import new_recipe_id
from recipebox.core.model import Recipe
from recipebox.persistence.db import close_db, create_engine, create_session_factory, init_db
from recipebox.persistence.repositories import RecipeRepository

BASE_TIME = datetime(2026, 1, 10, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'recipes.db'}")
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> RecipeRepository:
    return RecipeRepository(session_factory)


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    """Isolated in-memory Redis server per test."""
    return fakeredis.FakeServer()


@pytest_asyncio.fixture
async def redis_client(
    redis_server: fakeredis.FakeServer,
) -> AsyncIterator[fakeredis.FakeAsyncRedis]:
    client = fakeredis.FakeAsyncRedis(server=redis_server)
    yield client
    await client.aclose()


@pytest.fixture
def cache(redis_client: fakeredis.FakeAsyncRedis) -> RecipeCache:
    return RecipeCache(redis_client)


@pytest.fixture
def coordinator(store: RecipeRepository, cache: RecipeCache) -> RecipeCoordinator:
    return RecipeCoordinator(store, cache)


@pytest.fixture
def make_recipe() -> Callable[..., Recipe]:
    """Build recipes with increasing publication times."""
    counter = {"n": 0}

    def _make(name: str = "Pancakes", tags: list[str] | None = None, **overrides: object) -> Recipe:
        counter["n"] += 1
        fields: dict[str, object] = {
            "id": new_recipe_id(),
            "name": name,
            "tags": tags or [],
            "ingredients": ["flour", "milk"],
            "instructions": ["mix", "fry"],
            "published_at": BASE_TIME + timedelta(minutes=counter["n"]),
        }
        fields.update(overrides)
        return Recipe(**fields)

    return _make
