"""Middleware for the RecipeBox API."""

from recipebox.api.middleware.correlation import CorrelationMiddleware

__all__ = [
    "CorrelationMiddleware",
]
