"""Request schemas for API endpoints."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from livetap.api.schemas.base import APIBaseSchema
from livetap.core.models import ChannelConfig


class ChannelRequest(APIBaseSchema):
    """A channel as identified by its source URL, strategy and proxy hint."""

    url: Annotated[
        str,
        Field(
            min_length=1,
            max_length=4096,
            description="Channel source URL",
        ),
    ]

    parser: Annotated[
        str,
        Field(
            default="",
            description="Resolution strategy name. Empty selects the default strategy.",
        ),
    ]

    proxy_url: Annotated[
        str,
        Field(
            default="",
            description="Proxy used for outbound requests (http, https or socks5 URL).",
        ),
    ]

    def to_channel(self) -> ChannelConfig:
        return ChannelConfig(url=self.url, parser=self.parser, proxy_url=self.proxy_url)


class ResolveRequest(ChannelRequest):
    """Request to resolve a channel to its stream URL."""

    force: Annotated[
        bool,
        Field(
            default=False,
            description="Bypass cache and cooldown and resolve now.",
        ),
    ]


class WarmUpRequest(APIBaseSchema):
    """Channels to resolve in the background."""

    channels: Annotated[
        list[ChannelRequest],
        Field(
            min_length=1,
            description="Channels whose resolutions should be refreshed.",
        ),
    ]
