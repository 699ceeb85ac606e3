"""Passthrough plugin for channels whose source URL is already a stream."""

from __future__ import annotations

from typing import ClassVar

from livetap.core.models import LiveInfo
from livetap.plugins.base import AbstractResolverPlugin


class DirectResolver(AbstractResolverPlugin):
    """Serves the configured URL as-is."""

    NAME: ClassVar[str] = "direct"

    async def resolve(self, source_url: str, proxy_url: str, extra_info: str) -> LiveInfo:
        return LiveInfo(live_url=source_url, extra_info=extra_info)
