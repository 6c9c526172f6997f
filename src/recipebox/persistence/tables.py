"""SQLAlchemy ORM models for recipe persistence.

Each recipe is stored as one JSON document keyed by its identifier:
- doc: JSONB on PostgreSQL, generic JSON elsewhere (SQLite for local runs)
- published_at: copied out of the document for ordering
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

DocumentType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class RecipeTable(Base):
    """Recipes collection."""

    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    doc: Mapped[dict[str, Any]] = mapped_column(DocumentType, nullable=False)

    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (Index("ix_recipes_published_at", "published_at"),)
