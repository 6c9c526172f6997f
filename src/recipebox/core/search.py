"""In-memory tag filtering over a full recipe set.

Search always runs against a fresh store read; nothing here touches the cache.
"""

from __future__ import annotations

from collections.abc import Iterable

from recipebox.core.model import Recipe


def matches_tag(recipe: Recipe, tag: str) -> bool:
    """True when any of the recipe's tags equals ``tag`` ignoring case."""
    wanted = tag.casefold()
    return any(t.casefold() == wanted for t in recipe.tags)


def filter_by_tag(recipes: Iterable[Recipe], tag: str) -> list[Recipe]:
    """Recipes carrying ``tag``, in input order."""
    return [recipe for recipe in recipes if matches_tag(recipe, tag)]
