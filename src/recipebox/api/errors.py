"""Error responses for the RecipeBox API.

Every error body has the shape ``{"error": "<text>", "code": "<Code>"}``.
Domain errors from the coordinator are mapped here; nothing below the API
layer knows about HTTP status codes.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from recipebox.core.errors import RecordNotFound, StoreError

logger = logging.getLogger(__name__)


class ErrorBody(BaseModel):
    """Error response payload."""

    model_config = {"extra": "forbid"}

    error: str
    code: str


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(self, status_code: int, code: str, text: str):
        self.code = code
        self.text = text
        super().__init__(status_code=status_code, detail=text)

    def to_body(self) -> ErrorBody:
        return ErrorBody(error=self.text, code=self.code)


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, text: str):
        super().__init__(status_code=400, code="BadRequest", text=text)


class UnauthorizedError(ApiError):
    """Missing or invalid API key (401)."""

    def __init__(self, text: str = "API key not provided or invalid"):
        super().__init__(status_code=401, code="Unauthorized", text=text)


class NotFoundError(ApiError):
    """Resource not found (404)."""

    def __init__(self, resource_type: str, identifier: str):
        super().__init__(
            status_code=404,
            code="NotFound",
            text=f"{resource_type} with identifier '{identifier}' not found",
        )


class InternalServerError(ApiError):
    """Internal server error (500)."""

    def __init__(
        self,
        text: str = "An unexpected error occurred",
        code: str = "InternalServerError",
    ):
        super().__init__(status_code=500, code=code, text=text)


def _response(error: ApiError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_body().model_dump())


async def api_exception_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Exception handler for API errors."""
    return _response(exc)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies and parameters as 400."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        text = f"{location}: {first.get('msg', 'invalid value')}"
    else:
        text = "Invalid request"
    return _response(BadRequestError(text))


async def not_found_handler(request: Request, exc: RecordNotFound) -> JSONResponse:
    return _response(NotFoundError("Recipe", exc.recipe_id))


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Store failures are reported without leaking driver details."""
    logger.error(f"Store error on {request.method} {request.url.path}: {exc}")
    return _response(
        InternalServerError("Error while accessing the recipe store", code="StoreError")
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _response(InternalServerError())
