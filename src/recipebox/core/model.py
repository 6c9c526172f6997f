"""Recipe domain models.

``Recipe`` is the stored and served shape. ``RecipeDraft`` is what clients
send on create and update; it never carries ``id`` or ``publishedAt``.
"""

from __future__ import annotations

from datetime import datetime

import orjson
from pydantic import BaseModel, Field

SNAPSHOT_OPTIONS = orjson.OPT_NON_STR_KEYS | orjson.OPT_UTC_Z


class RecipeDraft(BaseModel):
    """Client-supplied recipe fields.

    Unknown keys (including ``id`` and ``publishedAt``) are dropped so a
    client can never choose an identifier or a publication time.
    """

    model_config = {"extra": "ignore"}

    name: str
    tags: list[str] = Field(default_factory=list)
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)

    def update_fields(self) -> dict[str, object]:
        """Fields written by an update; id and publishedAt are never included."""
        return {
            "name": self.name,
            "tags": list(self.tags),
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
        }


class Recipe(BaseModel):
    """A stored recipe."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    id: str
    name: str
    tags: list[str] = Field(default_factory=list)
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    published_at: datetime = Field(alias="publishedAt")

    @classmethod
    def from_draft(cls, draft: RecipeDraft, recipe_id: str, published_at: datetime) -> Recipe:
        return cls(
            id=recipe_id,
            name=draft.name,
            tags=list(draft.tags),
            ingredients=list(draft.ingredients),
            instructions=list(draft.instructions),
            published_at=published_at,
        )

    def to_doc(self) -> dict[str, object]:
        """JSON-compatible document as stored and served."""
        return self.model_dump(mode="json", by_alias=True)


def recipes_to_bytes(recipes: list[Recipe]) -> bytes:
    """Serialize a recipe sequence to canonical JSON bytes."""
    return orjson.dumps([recipe.to_doc() for recipe in recipes], option=SNAPSHOT_OPTIONS)
