"""Cache layer for RecipeBox.

Provides Redis caching with the cache-aside pattern:
- One snapshot of the whole collection under a well-known key
- No expiry by default; every write deletes the snapshot
- Transport failures are errors, never misses
"""

from recipebox.cache.keys import CacheKeys
from recipebox.cache.redis import RecipeCache, close_redis, connect_redis

__all__ = [
    "CacheKeys",
    "RecipeCache",
    "connect_redis",
    "close_redis",
]
