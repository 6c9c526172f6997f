"""Cache key schema for RecipeBox.

Key format: {prefix}:recipes:all

The whole recipe collection is cached as one snapshot under a single
well-known key, so there is exactly one key to invalidate on any write.
"""

from __future__ import annotations


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    PREFIX = "recipebox"

    @classmethod
    def recipes_all(cls, prefix: str | None = None) -> str:
        """Key for the serialized snapshot of every recipe."""
        return f"{prefix or cls.PREFIX}:recipes:all"
