from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4


def new_recipe_id() -> str:
    """Random 32-character hex identifier; never reused after deletion."""
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(UTC)
