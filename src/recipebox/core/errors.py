"""Domain errors raised by the store, cache and coordinator layers.

These never carry HTTP semantics; the API layer maps them to responses.
"""

from __future__ import annotations


class RecipeBoxError(Exception):
    """Base class for all RecipeBox domain errors."""


class RecordNotFound(RecipeBoxError):
    """No recipe matches the requested identifier."""

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with identifier '{recipe_id}' not found")


class StoreError(RecipeBoxError):
    """The document store is unreachable or an operation failed."""


class RecordDecodeError(StoreError):
    """A stored document could not be decoded into a Recipe."""

    def __init__(self, row_id: str, reason: str):
        self.row_id = row_id
        self.reason = reason
        super().__init__(f"Stored recipe '{row_id}' is malformed: {reason}")


class CacheError(RecipeBoxError):
    """The cache is unreachable, timed out, or returned an error.

    Distinct from a miss, which is reported as ``None``.
    """
