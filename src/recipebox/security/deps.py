"""FastAPI security dependencies for RecipeBox.

Access control is a binary gate: a request is authorized when its
``X-API-KEY`` header equals the configured key. With no key configured
the gate is open.

Usage:
    @router.post("", dependencies=[Depends(require_api_key)])
    async def create(...):
        ...
"""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Header, Request

from recipebox.api.errors import UnauthorizedError
from recipebox.config import Settings


def is_authorized(provided: str | None, expected: str | None) -> bool:
    """Compare the presented key with the configured one in constant time."""
    if not expected:
        return True
    if not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


async def require_api_key(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="X-API-KEY")] = None,
) -> None:
    """Reject the request with 401 unless it carries the configured API key."""
    app_settings: Settings = request.app.state.settings
    if not is_authorized(x_api_key, app_settings.api_key):
        raise UnauthorizedError()
