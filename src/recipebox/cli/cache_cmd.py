"""CLI command for dropping the cached recipe snapshot.

Usage:
    recipebox flush-cache
"""

from __future__ import annotations

import asyncio

import typer

from recipebox.cache.redis import RecipeCache, close_redis, connect_redis
from recipebox.config import settings
from recipebox.core.errors import CacheError

app = typer.Typer(help="Drop the cached recipe snapshot")


async def flush_snapshot() -> str:
    """Delete the snapshot key and return its name."""
    client = connect_redis(settings.redis_url)
    try:
        cache = RecipeCache(
            client, timeout=settings.cache_timeout, key_prefix=settings.cache_key_prefix
        )
        await cache.delete_all()
        return cache.all_key
    finally:
        await close_redis(client)


@app.callback(invoke_without_command=True)
def flush_cache() -> None:
    """Delete the snapshot so the next listing reads the store."""
    try:
        key = asyncio.run(flush_snapshot())
    except CacheError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Removed {key}")
