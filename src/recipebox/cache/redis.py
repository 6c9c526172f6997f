"""Redis cache implementation for RecipeBox.

Provides async Redis operations for caching the recipe snapshot.
Uses the redis-py async client for connection pooling. The client is
created by the application lifespan (or the CLI) and owned by it.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from recipebox.cache.keys import CacheKeys
from recipebox.core.errors import CacheError
from recipebox.observability.metrics import record_cache_error, record_cache_operation

if TYPE_CHECKING:
    from redis.asyncio import Redis

T = TypeVar("T")

# No expiry: snapshots live until a write invalidates them
DEFAULT_TTL = 0

DEFAULT_TIMEOUT = 1.0


def connect_redis(redis_url: str) -> Redis:
    """Create a Redis client with its own connection pool."""
    return redis.from_url(  # type: ignore[no-untyped-call]
        redis_url,
        decode_responses=False,  # We're storing bytes
    )


async def close_redis(client: Redis) -> None:
    """Close Redis connections."""
    await client.aclose()


class RecipeCache:
    """Cache operations for the recipe snapshot.

    A miss is ``None``; a transport failure or timeout raises ``CacheError``
    so callers never confuse an unhealthy cache with an empty one.
    """

    def __init__(
        self,
        client: Redis,
        ttl: int = DEFAULT_TTL,
        timeout: float = DEFAULT_TIMEOUT,
        key_prefix: str | None = None,
    ):
        self.client = client
        self.ttl = ttl
        self.timeout = timeout
        self.all_key = CacheKeys.recipes_all(key_prefix)

    async def _call(self, operation: str, call: Awaitable[T]) -> T:
        start = time.perf_counter()
        try:
            return await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            record_cache_error(operation)
            raise CacheError(f"Cache {operation} timed out after {self.timeout}s") from exc
        except (RedisError, OSError) as exc:
            record_cache_error(operation)
            raise CacheError(f"Cache {operation} failed: {exc}") from exc
        finally:
            record_cache_operation(operation, time.perf_counter() - start)

    # -------------------------------------------------------------------------
    # Generic key operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> bytes | None:
        """Cached bytes for ``key``, or None on a miss."""
        value = await self._call("get", self.client.get(key))
        if isinstance(value, str):
            return value.encode()
        return value

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        """Store ``value``; a ttl of 0 or None means no expiry."""
        expiry = self.ttl if ttl is None else ttl
        await self._call("set", self.client.set(key, value, ex=expiry or None))

    async def delete(self, key: str) -> None:
        await self._call("delete", self.client.delete(key))

    async def exists(self, key: str) -> bool:
        return bool(await self._call("exists", self.client.exists(key)))

    # -------------------------------------------------------------------------
    # Recipe snapshot
    # -------------------------------------------------------------------------

    async def get_all(self) -> bytes | None:
        """Get the cached snapshot of every recipe."""
        return await self.get(self.all_key)

    async def set_all(self, snapshot: bytes) -> None:
        """Cache the snapshot of every recipe with the configured TTL."""
        await self.set(self.all_key, snapshot)

    async def delete_all(self) -> None:
        """Invalidate the snapshot of every recipe."""
        await self.delete(self.all_key)

    async def has_all(self) -> bool:
        return await self.exists(self.all_key)

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await self._call("ping", self.client.ping())
            return True
        except CacheError:
            return False
