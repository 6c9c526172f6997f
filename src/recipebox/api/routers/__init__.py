"""API routers for RecipeBox."""

from recipebox.api.routers import health, metrics, recipes

__all__ = [
    "health",
    "metrics",
    "recipes",
]
