"""Domain models for channels, resolutions and health records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .types import ChannelHealth


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class LiveInfo(BaseModel):
    """Result of a successful resolution, as held by the resolution cache."""

    model_config = ConfigDict(frozen=True)

    live_url: str = Field(..., description="Directly fetchable stream manifest URL")
    extra_info: str = Field(
        default="",
        description="Opaque plugin state handed back to the plugin on re-resolution",
    )
    created_at: datetime = Field(default_factory=utcnow, description="When it was resolved")


class ChannelStatus(BaseModel):
    """Health record of a single channel, keyed by its source URL."""

    status: ChannelHealth = Field(default=ChannelHealth.OK)
    last_checked_at: datetime | None = Field(
        default=None, description="Time of the most recent status transition"
    )
    retry_count: int = Field(default=0, ge=0, description="Consecutive failed reparses")
    cooldown_multiplier: int = Field(
        default=1, ge=1, description="Backoff multiplier applied to the base cooldown"
    )
    message: str = Field(default="", description="Human readable diagnostic")


class ChannelConfig(BaseModel):
    """Channel configuration as supplied by the channel store."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(..., description="Channel source URL")
    parser: str = Field(default="", description="Resolution strategy name")
    proxy_url: str = Field(default="", description="Proxy hint for outbound requests")
    name: str | None = Field(default=None, description="Display name")
    extra: dict[str, Any] = Field(default_factory=dict, description="Plugin specific config")


class ManifestResult(BaseModel):
    """Manifest body together with the stream URL it was served from."""

    body: str
    stream_url: str
    synthetic: bool = Field(
        default=False, description="True when the body is a generated fallback playlist"
    )
