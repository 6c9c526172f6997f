"""Persistence layer for RecipeBox.

This module provides:
- Async engine and session factory (PostgreSQL or SQLite)
- SQLAlchemy ORM model storing one JSON document per recipe
- Repository acting as the document store adapter
"""

from recipebox.persistence.db import close_db, create_engine, create_session_factory, init_db
from recipebox.persistence.repositories import RecipeRepository
from recipebox.persistence.tables import RecipeTable

__all__ = [
    # DB
    "create_engine",
    "create_session_factory",
    "init_db",
    "close_db",
    # Tables
    "RecipeTable",
    # Repositories
    "RecipeRepository",
]
