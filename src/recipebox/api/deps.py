"""Shared FastAPI dependencies for RecipeBox routers.

The coordinator is built once per application (see ``recipebox.api.app``)
and stored on ``app.state``; handlers receive it through ``CoordinatorDep``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from recipebox.coordinator import RecipeCoordinator


def get_coordinator(request: Request) -> RecipeCoordinator:
    """FastAPI dependency returning the application's coordinator."""
    coordinator: RecipeCoordinator = request.app.state.coordinator
    return coordinator


CoordinatorDep = Annotated[RecipeCoordinator, Depends(get_coordinator)]
