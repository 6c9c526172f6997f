"""Recipes API router.

Endpoints:
- GET    /recipes                 - List all recipes (cached snapshot)
- GET    /recipes/search?tag=...  - Recipes with a tag, case-insensitive (store)
- GET    /recipes/{id}            - Get one recipe (store)
- POST   /recipes                 - Create a recipe
- PUT    /recipes/{id}            - Update a recipe
- DELETE /recipes/{id}            - Delete a recipe

Everything except the plain listing requires the API key.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from recipebox.api.deps import CoordinatorDep
from recipebox.core.model import Recipe, RecipeDraft
from recipebox.security.deps import require_api_key

router = APIRouter(prefix="/recipes", tags=["Recipes"])

_auth = [Depends(require_api_key)]


@router.get("", response_model=list[Recipe])
async def list_recipes(coordinator: CoordinatorDep) -> list[Recipe]:
    """List every recipe, served from the cache when a snapshot exists."""
    return await coordinator.list_all()


@router.get("/search", response_model=list[Recipe], dependencies=_auth)
async def search_recipes(
    coordinator: CoordinatorDep,
    tag: str = Query("", description="Tag to match, ignoring case"),
) -> list[Recipe]:
    """Recipes carrying ``tag``; an empty list when nothing matches."""
    return await coordinator.search_by_tag(tag)


@router.get("/{recipe_id}", response_model=Recipe, dependencies=_auth)
async def get_recipe(recipe_id: str, coordinator: CoordinatorDep) -> Recipe:
    """Get a recipe by identifier, always read from the store."""
    return await coordinator.find_by_id(recipe_id)


@router.post("", response_model=Recipe, dependencies=_auth)
async def create_recipe(draft: RecipeDraft, coordinator: CoordinatorDep) -> Recipe:
    """Create a recipe; the server assigns ``id`` and ``publishedAt``."""
    return await coordinator.create(draft)


@router.put("/{recipe_id}", dependencies=_auth)
async def update_recipe(
    recipe_id: str, draft: RecipeDraft, coordinator: CoordinatorDep
) -> dict[str, str]:
    """Update a recipe. Unknown identifiers succeed without effect."""
    await coordinator.update(recipe_id, draft)
    return {"message": "Recipe has been updated"}


@router.delete("/{recipe_id}", dependencies=_auth)
async def delete_recipe(recipe_id: str, coordinator: CoordinatorDep) -> dict[str, str]:
    """Delete a recipe. Unknown identifiers succeed without effect."""
    await coordinator.delete(recipe_id)
    return {"message": "Recipe has been deleted"}
