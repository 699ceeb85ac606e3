"""Health check endpoints."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Request

from livetap import __version__
from livetap.api.schemas import HealthResponse
from livetap.core.exceptions import CacheError

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    operation_id="getHealth",
    summary="Health check",
    description="Check the health status of the API and its dependencies.",
)
async def health_check(request: Request) -> HealthResponse:
    """Check API health status."""
    services: dict[str, Literal["up", "down", "unknown"]] = {}
    overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"

    client = getattr(request.app.state, "livetap_client", None)
    if client is None:
        overall_status = "unhealthy"
        services["resolver"] = "down"
    else:
        services["resolver"] = "up"

    # Check Redis
    redis = client.redis if client is not None else None
    if redis is None:
        services["redis"] = "unknown"
    else:
        try:
            services["redis"] = "up" if await redis.ping() else "down"
        except CacheError:
            services["redis"] = "down"
        if services["redis"] == "down" and overall_status == "healthy":
            overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        services=services,
    )


@router.get(
    "/ready",
    operation_id="getReady",
    summary="Readiness check",
    description="Check if the API is ready to serve traffic.",
)
async def readiness_check(request: Request) -> dict[str, bool]:
    """Check if API is ready to serve traffic."""
    client = getattr(request.app.state, "livetap_client", None)
    ready = client is not None and len(client.plugin_names()) > 0

    return {"ready": ready}
