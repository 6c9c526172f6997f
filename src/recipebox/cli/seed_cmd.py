"""CLI command for seeding the store from a JSON file.

Usage:
    recipebox seed recipes.json

The file holds a JSON array of recipe objects. Entries without an ``id`` get
a fresh one and entries without ``publishedAt`` are stamped with the current
time. The cached snapshot is invalidated once the insert commits.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import orjson
import typer
from pydantic import ValidationError

from recipebox.config import settings
from recipebox.core.errors import StoreError
from recipebox.core.ids import new_recipe_id, utc_now
from recipebox.core.model import Recipe
from recipebox.observability.logging import LogContext
from recipebox.runtime import runtime_context

logger = logging.getLogger(__name__)

app = typer.Typer(help="Seed the recipe store from a JSON file")


def load_seed_file(path: Path) -> list[Recipe]:
    """Parse a seed file into recipes, filling in missing ids and timestamps.

    Raises:
        ValueError: If the file is not a JSON array of valid recipe objects.
    """
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of recipes")

    now = utc_now()
    recipes: list[Recipe] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Entry {index} is not an object")
        doc: dict[str, Any] = {"publishedAt": now, **item}
        doc["id"] = str(doc.get("id") or new_recipe_id())
        try:
            recipes.append(Recipe.model_validate(doc))
        except ValidationError as exc:
            raise ValueError(f"Entry {index} is not a valid recipe: {exc}") from exc
    return recipes


async def seed_recipes(recipes: list[Recipe]) -> int:
    async with runtime_context(settings) as runtime:
        return await runtime.coordinator.import_many(recipes)


@app.callback(invoke_without_command=True)
def seed(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON file containing an array of recipes",
    ),
) -> None:
    """Insert every recipe from PATH into the store."""
    try:
        recipes = load_seed_file(path)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    with LogContext(request_id="seed"):
        logger.info(f"Seeding {len(recipes)} recipes from {path}")
        try:
            inserted = asyncio.run(seed_recipes(recipes))
        except StoreError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1)

    typer.echo(f"Inserted recipes: {inserted}")
