"""RecipeBox HTTP application.

``create_app`` mounts the routers on one FastAPI instance. Domain errors
leave as ``{"error", "code"}`` bodies. The module-level ``app`` is what
``uvicorn recipebox.api.app:app`` serves.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from recipebox.api.errors import (
    ApiError,
    api_exception_handler,
    generic_exception_handler,
    not_found_handler,
    store_error_handler,
    validation_exception_handler,
)
from recipebox.api.middleware import CorrelationMiddleware
from recipebox.api.routers import health, recipes
from recipebox.api.routers import metrics as metrics_router
from recipebox.config import Settings, settings
from recipebox.coordinator import RecipeCoordinator
from recipebox.core.errors import RecordNotFound, StoreError
from recipebox.observability import configure_logging
from recipebox.observability.metrics import MetricsMiddleware, get_metrics
from recipebox.runtime import runtime_context

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the store and Redis for the app's lifetime.

    An injected coordinator is used as is and never closed here.
    """
    app_settings: Settings = app.state.settings

    configure_logging(json_format=app_settings.env != "dev", level=app_settings.log_level)
    get_metrics()

    logger.info(f"Starting RecipeBox ({app_settings.env})")

    if app.state.coordinator is not None:
        yield
        logger.info("RecipeBox shutdown complete")
        return

    async with runtime_context(app_settings) as runtime:
        app.state.coordinator = runtime.coordinator
        logger.info("RecipeBox startup complete")
        yield
        logger.info("Shutting down RecipeBox")

    app.state.coordinator = None
    logger.info("RecipeBox shutdown complete")


def create_app(
    app_settings: Settings | None = None,
    coordinator: RecipeCoordinator | None = None,
) -> FastAPI:
    """Build the API.

    ``app_settings`` overrides the environment-derived settings. A given
    ``coordinator`` is served directly instead of one built at startup.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="RecipeBox",
        description="Recipe collection API with a cache-aside Redis snapshot",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.coordinator = coordinator

    # CorrelationMiddleware is innermost so its context covers handler logs
    app.add_middleware(CorrelationMiddleware)
    if app_settings.enable_metrics:
        app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_exception_handler))
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, validation_exception_handler)
    )
    app.add_exception_handler(RecordNotFound, cast(ExceptionHandler, not_found_handler))
    app.add_exception_handler(StoreError, cast(ExceptionHandler, store_error_handler))
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    if app_settings.enable_metrics:
        app.include_router(metrics_router.router)
    app.include_router(recipes.router)

    return app


app = create_app()
