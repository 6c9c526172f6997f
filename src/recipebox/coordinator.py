"""Cache-aside coordination between the recipe store and the Redis snapshot.

Read path (``list_all``):
    cache hit  -> return the snapshot as-is (no freshness check)
    cache miss -> read the store, write the snapshot, return
    cache down -> read the store, leave the cache alone

Write paths (``create``, ``update``, ``delete``, ``import_many``):
    mutate the store first, then delete the snapshot; never the reverse.

Point lookups and tag search bypass the cache entirely and always read the
store, so ``find_by_id`` is fresh even when ``list_all`` is stale.

Known weak spot: a reader that read the store before a concurrent write
committed can still write its (old) snapshot after the writer's delete.
With several processes sharing one Redis there is no cross-process
coherence either. Both are accepted for a single coarse snapshot key;
the next write clears them.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import TypeAdapter, ValidationError

from recipebox.cache.redis import RecipeCache
from recipebox.core.errors import CacheError, RecordNotFound
from recipebox.core.model import Recipe, RecipeDraft, recipes_to_bytes
from recipebox.core.search import filter_by_tag
from recipebox.observability.metrics import (
    record_cache_hit,
    record_cache_invalidation,
    record_cache_miss,
)
from recipebox.persistence.repositories import RecipeRepository

logger = logging.getLogger(__name__)

_snapshot_adapter = TypeAdapter(list[Recipe])


class CacheState(str, Enum):
    """Whether the collection snapshot currently exists in the cache."""

    ABSENT = "absent"
    PRESENT = "present"


class RecipeCoordinator:
    """Mediates every recipe read and write between store and cache."""

    def __init__(self, store: RecipeRepository, cache: RecipeCache):
        self.store = store
        self.cache = cache

    # -------------------------------------------------------------------------
    # Cached read path
    # -------------------------------------------------------------------------

    async def list_all(self) -> list[Recipe]:
        """Every recipe, served from the snapshot when one exists.

        Raises:
            StoreError: If the snapshot is unavailable and the store fails.
                The cache is not touched in that case.
        """
        cache_usable = True
        try:
            snapshot = await self.cache.get_all()
        except CacheError as e:
            logger.warning(f"Cache read failed, falling back to store: {e}")
            snapshot = None
            cache_usable = False

        if snapshot is not None:
            recipes = self._decode_snapshot(snapshot)
            if recipes is not None:
                logger.info("Request to Redis")
                record_cache_hit()
                return recipes

        record_cache_miss()
        logger.info("Request to store")
        recipes = await self.store.find()

        if cache_usable:
            try:
                await self.cache.set_all(recipes_to_bytes(recipes))
            except CacheError as e:
                logger.warning(f"Cache repopulation failed: {e}")

        return recipes

    def _decode_snapshot(self, snapshot: bytes) -> list[Recipe] | None:
        """Decode a cached snapshot; None if it is unreadable (treated as a miss)."""
        try:
            return _snapshot_adapter.validate_json(snapshot)
        except ValidationError as e:
            logger.warning(
                f"Discarding unreadable cache snapshot {self.cache.all_key}: "
                f"{e.error_count()} error(s)"
            )
            return None

    # -------------------------------------------------------------------------
    # Uncached reads
    # -------------------------------------------------------------------------

    async def find_by_id(self, recipe_id: str) -> Recipe:
        """Recipe by identifier, always read from the store.

        Raises:
            RecordNotFound: If no recipe has this identifier.
        """
        recipe = await self.store.find_one(recipe_id)
        if recipe is None:
            raise RecordNotFound(recipe_id)
        return recipe

    async def search_by_tag(self, tag: str) -> list[Recipe]:
        """Recipes carrying ``tag`` (case-insensitive), always read from the store."""
        recipes = await self.store.find()
        return filter_by_tag(recipes, tag)

    # -------------------------------------------------------------------------
    # Write path: store first, then invalidate
    # -------------------------------------------------------------------------

    async def create(self, draft: RecipeDraft) -> Recipe:
        """Insert a recipe and invalidate the snapshot.

        If the insert fails the error propagates and the cache is untouched.
        """
        recipe = await self.store.insert(draft)
        await self._invalidate("create")
        return recipe

    async def update(self, recipe_id: str, draft: RecipeDraft) -> None:
        """Overwrite name, tags, ingredients and instructions.

        An unknown identifier is a successful no-op and still invalidates.
        """
        await self.store.update_fields(recipe_id, draft.update_fields())
        await self._invalidate("update")

    async def delete(self, recipe_id: str) -> None:
        """Remove a recipe; an unknown identifier is a successful no-op."""
        await self.store.delete(recipe_id)
        await self._invalidate("delete")

    async def import_many(self, recipes: list[Recipe]) -> int:
        """Bulk-insert pre-identified recipes (seeding) and invalidate."""
        inserted = await self.store.insert_many(recipes)
        await self._invalidate("import")
        return inserted

    async def _invalidate(self, operation: str) -> None:
        """Delete the snapshot after a successful store write.

        A failure is logged and counted but does not fail the write. Without
        a TTL the stale snapshot stays until the next successful invalidation.
        """
        logger.info("Remove data from Redis")
        try:
            await self.cache.delete_all()
        except CacheError as e:
            record_cache_invalidation(operation, succeeded=False)
            logger.error(
                f"Cache invalidation after {operation} failed; "
                f"{self.cache.all_key} may serve stale data: {e}"
            )
            return
        record_cache_invalidation(operation)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    async def cache_state(self) -> CacheState:
        """Probe the cache for the snapshot.

        Raises:
            CacheError: If the cache cannot be reached.
        """
        if await self.cache.has_all():
            return CacheState.PRESENT
        return CacheState.ABSENT
