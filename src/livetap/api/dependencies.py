"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from livetap.client import LivetapClient
from livetap.config import LivetapSettings, get_settings


async def get_livetap_client(request: Request) -> LivetapClient:
    """Get the livetap client from app state."""
    return request.app.state.livetap_client


# Type aliases for cleaner dependency injection
Settings = Annotated[LivetapSettings, Depends(get_settings)]
Client = Annotated[LivetapClient, Depends(get_livetap_client)]
