"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from livetap import __version__
from livetap.api.routes import health_router, live_router
from livetap.client import LivetapClient
from livetap.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Handles startup and shutdown of the livetap client.
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Initializing livetap client...")
    async with LivetapClient(settings) as client:
        app.state.livetap_client = client
        logger.info(f"Application startup complete, plugins: {', '.join(client.plugin_names())}")

        yield

        logger.info("Shutting down application...")

    logger.info("Application shutdown complete")


def create_app(
    *,
    title: str = "Livetap API",
    description: str = "Live stream resolution and manifest API",
    version: str = __version__,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Build the API app; CORS origins default to the configured ones."""
    app = FastAPI(
        title=title,
        description=description,
        version=version,
        lifespan=lifespan,
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Configure CORS
    if cors_origins is None:
        cors_origins = get_settings().cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(live_router, prefix="/api/v1")

    return app


# For uvicorn direct execution
app = create_app()
