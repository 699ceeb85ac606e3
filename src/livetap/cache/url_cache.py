"""Resolution cache: source URL to last successful LiveInfo.

The cache enforces no freshness of its own. A failed re-resolution never
evicts, so the last known good stream URL stays servable.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import ValidationError

from livetap.cache.keys import CacheKeys
from livetap.core.models import LiveInfo

if TYPE_CHECKING:
    from livetap.cache.client import AsyncRedisClient

logger = logging.getLogger(__name__)


@runtime_checkable
class LiveInfoCache(Protocol):
    """Storage contract shared by the cache backends."""

    async def load(self, source_url: str) -> LiveInfo | None:
        """Return the cached resolution, or None on a miss."""
        ...

    async def store(self, source_url: str, info: LiveInfo) -> None:
        """Replace the cached resolution (last writer wins)."""
        ...


class MemoryLiveInfoCache:
    """Process-local cache backed by a dict."""

    def __init__(self) -> None:
        self._entries: dict[str, LiveInfo] = {}

    async def load(self, source_url: str) -> LiveInfo | None:
        return self._entries.get(source_url)

    async def store(self, source_url: str, info: LiveInfo) -> None:
        self._entries[source_url] = info

    def __contains__(self, source_url: object) -> bool:
        return source_url in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class RedisLiveInfoCache:
    """
    Cache shared between processes through Redis.

    Entries never expire; a failed re-resolution must not lose the last
    known stream URL.
    """

    def __init__(self, client: "AsyncRedisClient") -> None:
        self._client = client

    async def load(self, source_url: str) -> LiveInfo | None:
        data = await self._client.get_json(CacheKeys.live_info(source_url))
        if not isinstance(data, dict):
            return None
        try:
            return LiveInfo.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Discarding malformed cache entry for {source_url}: {e}")
            return None

    async def store(self, source_url: str, info: LiveInfo) -> None:
        await self._client.set_json(
            CacheKeys.live_info(source_url),
            info.model_dump(mode="json"),
        )
