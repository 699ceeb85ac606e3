"""API route modules."""

from livetap.api.routes.health import router as health_router
from livetap.api.routes.live import router as live_router

__all__ = [
    "health_router",
    "live_router",
]
