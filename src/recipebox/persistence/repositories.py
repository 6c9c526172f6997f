"""Repository over the recipes document collection.

Every method runs in its own session and commits it, so each store call is
atomic on its own and there are no multi-call transactions. Database errors,
refused connections and timeouts surface as ``StoreError``.

Decoding is lenient by default: a stored document that fails validation is
skipped (logged and counted) and the rest of the traversal continues. With
``strict_decode`` the first malformed document fails the traversal instead.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recipebox.core.errors import RecordDecodeError, StoreError
from recipebox.core.ids import new_recipe_id, utc_now
from recipebox.core.model import Recipe, RecipeDraft
from recipebox.observability.metrics import record_decode_error
from recipebox.persistence.db import health_check, session_context
from recipebox.persistence.tables import RecipeTable

logger = logging.getLogger(__name__)

T = TypeVar("T")

UPDATABLE_FIELDS = frozenset({"name", "tags", "ingredients", "instructions"})

DEFAULT_TIMEOUT = 5.0


def decode_document(row_id: str, doc: Any) -> Recipe:
    """Decode one stored document; the row key is authoritative for ``id``.

    Raises:
        RecordDecodeError: If the document is not a valid recipe.
    """
    if not isinstance(doc, dict):
        raise RecordDecodeError(row_id, f"expected an object, got {type(doc).__name__}")
    try:
        return Recipe.model_validate({**doc, "id": row_id})
    except ValidationError as exc:
        raise RecordDecodeError(row_id, f"{exc.error_count()} validation error(s)") from exc


class RecipeRepository:
    """Store adapter for recipe documents."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = DEFAULT_TIMEOUT,
        strict_decode: bool = False,
    ):
        self.session_factory = session_factory
        self.timeout = timeout
        self.strict_decode = strict_decode

    async def _run(self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run ``work`` in a fresh committed session, bounded by the store timeout."""

        async def _in_session() -> T:
            async with session_context(self.session_factory) as session:
                return await work(session)

        try:
            return await asyncio.wait_for(_in_session(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise StoreError(f"Store {operation} timed out after {self.timeout}s") from exc
        except (SQLAlchemyError, OSError) as exc:
            raise StoreError(f"Store {operation} failed: {exc}") from exc

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def find(self) -> list[Recipe]:
        """All recipes in publication order.

        Raises:
            StoreError: If the store is unreachable, or, with strict decoding,
                if any stored document is malformed.
        """

        async def work(session: AsyncSession) -> list[Recipe]:
            stmt = select(RecipeTable.id, RecipeTable.doc).order_by(
                RecipeTable.published_at, RecipeTable.id
            )
            result = await session.execute(stmt)
            return self._decode_rows(result.all())

        return await self._run("find", work)

    def _decode_rows(self, rows: Iterable[Any]) -> list[Recipe]:
        recipes: list[Recipe] = []
        for row in rows:
            try:
                recipes.append(decode_document(row.id, row.doc))
            except RecordDecodeError as exc:
                record_decode_error()
                if self.strict_decode:
                    raise
                logger.warning(f"Skipping malformed recipe document: {exc}")
        return recipes

    async def find_one(self, recipe_id: str) -> Recipe | None:
        """Recipe by identifier, or None if absent.

        A malformed document raises ``RecordDecodeError`` whatever the decode
        policy, since there is nothing else to return.
        """

        async def work(session: AsyncSession) -> Recipe | None:
            stmt = select(RecipeTable.id, RecipeTable.doc).where(RecipeTable.id == recipe_id)
            result = await session.execute(stmt)
            row = result.first()
            if row is None:
                return None
            try:
                return decode_document(row.id, row.doc)
            except RecordDecodeError:
                record_decode_error()
                raise

        return await self._run("find_one", work)

    async def count(self) -> int:
        async def work(session: AsyncSession) -> int:
            result = await session.execute(select(func.count()).select_from(RecipeTable))
            return int(result.scalar_one())

        return await self._run("count", work)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def insert(self, draft: RecipeDraft) -> Recipe:
        """Insert a new recipe, assigning its identifier and publication time."""
        recipe = Recipe.from_draft(draft, recipe_id=new_recipe_id(), published_at=utc_now())

        async def work(session: AsyncSession) -> Recipe:
            session.add(_to_row(recipe))
            await session.flush()
            return recipe

        return await self._run("insert", work)

    async def insert_many(self, recipes: list[Recipe]) -> int:
        """Insert already-identified recipes in one transaction (seeding)."""

        async def work(session: AsyncSession) -> int:
            session.add_all([_to_row(recipe) for recipe in recipes])
            await session.flush()
            return len(recipes)

        return await self._run("insert_many", work)

    async def update_fields(self, recipe_id: str, fields: dict[str, Any]) -> None:
        """Set the given fields on the matching recipe.

        Matching is by identifier equality; an unknown identifier matches
        nothing and is not an error. ``id`` and ``publishedAt`` cannot be set.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        async def work(session: AsyncSession) -> None:
            stmt = select(RecipeTable).where(RecipeTable.id == recipe_id).with_for_update()
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
            if row is None:
                logger.debug(f"Update matched no recipe: {recipe_id}")
                return
            # Reassign so the JSON column is marked dirty
            row.doc = {**row.doc, **fields}
            await session.flush()

        await self._run("update", work)

    async def delete(self, recipe_id: str) -> None:
        """Remove the matching recipe; an unknown identifier is not an error."""

        async def work(session: AsyncSession) -> None:
            await session.execute(delete(RecipeTable).where(RecipeTable.id == recipe_id))

        await self._run("delete", work)

    async def health_check(self) -> bool:
        return await health_check(self.session_factory)


def _to_row(recipe: Recipe) -> RecipeTable:
    doc = recipe.to_doc()
    doc.pop("id", None)
    return RecipeTable(id=recipe.id, doc=doc, published_at=recipe.published_at)
