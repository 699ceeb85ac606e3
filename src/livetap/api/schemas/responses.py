"""Response schemas for API endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from livetap.api.schemas.base import APIBaseSchema
from livetap.core.types import ChannelHealth, PluginCapability


class LiveInfoResponse(APIBaseSchema):
    """A channel's current resolution."""

    source_url: str
    live_url: str
    extra_info: str = ""
    created_at: datetime


class StatusResponse(APIBaseSchema):
    """Health record of a channel."""

    source_url: str
    status: ChannelHealth
    message: str = ""
    last_checked_at: datetime | None = None
    retry_count: int = 0
    cooldown_multiplier: int = 1


class PluginResponse(APIBaseSchema):
    """A registered resolution plugin."""

    name: str
    capabilities: list[PluginCapability] = Field(default_factory=list)


class PluginListResponse(APIBaseSchema):
    """All registered resolution plugins."""

    default_strategy: str
    plugins: list[PluginResponse]


class WarmUpResponse(APIBaseSchema):
    """Acknowledgement of scheduled warm-ups."""

    scheduled: int


# Health
class HealthResponse(APIBaseSchema):
    """Health check response."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    services: dict[str, Literal["up", "down", "unknown"]] = Field(default_factory=dict)
