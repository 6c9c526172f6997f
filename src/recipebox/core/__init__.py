"""Recipe domain: models, identifiers, search and errors."""

from recipebox.core.errors import (
    CacheError,
    RecipeBoxError,
    RecordDecodeError,
    RecordNotFound,
    StoreError,
)
from recipebox.core.model import Recipe, RecipeDraft, recipes_to_bytes
from recipebox.core.search import filter_by_tag, matches_tag

__all__ = [
    "Recipe",
    "RecipeDraft",
    "recipes_to_bytes",
    "filter_by_tag",
    "matches_tag",
    "RecipeBoxError",
    "RecordNotFound",
    "StoreError",
    "RecordDecodeError",
    "CacheError",
]
