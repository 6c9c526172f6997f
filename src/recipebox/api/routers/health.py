"""Health probes.

- ``/health/live``: the process is up; touches nothing.
- ``/health/ready``: the store and Redis both answer within ``CHECK_TIMEOUT``.

A failing cache makes the instance unready.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import Enum

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel

from recipebox.api.deps import CoordinatorDep

router = APIRouter(prefix="/health", tags=["health"])

CHECK_TIMEOUT = 5.0


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Outcome of one dependency probe."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None


class Readiness(BaseModel):
    status: HealthStatus
    components: list[ComponentHealth]


async def check_component(name: str, probe: Callable[[], Awaitable[bool]]) -> ComponentHealth:
    """Run ``probe`` under ``CHECK_TIMEOUT``; a timeout counts as unhealthy."""
    started = time.monotonic()
    try:
        healthy = await asyncio.wait_for(probe(), timeout=CHECK_TIMEOUT)
        message = None if healthy else f"{name} check failed"
    except asyncio.TimeoutError:
        healthy, message = False, f"{name} check timed out"
    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
        latency_ms=round((time.monotonic() - started) * 1000, 2),
        message=message,
    )


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready", response_model=Readiness, responses={503: {"model": Readiness}})
async def ready(coordinator: CoordinatorDep) -> ORJSONResponse:
    """200 when the store and Redis are reachable, 503 otherwise."""
    components = await asyncio.gather(
        check_component("store", coordinator.store.health_check),
        check_component("redis", coordinator.cache.health_check),
    )
    healthy = all(c.status is HealthStatus.HEALTHY for c in components)
    readiness = Readiness(
        status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
        components=list(components),
    )
    return ORJSONResponse(
        content=readiness.model_dump(mode="json", exclude_none=True),
        status_code=200 if healthy else 503,
    )
