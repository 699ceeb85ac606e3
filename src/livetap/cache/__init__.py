"""Resolution cache backends."""

from .client import AsyncRedisClient
from .keys import CacheKeys
from .url_cache import LiveInfoCache, MemoryLiveInfoCache, RedisLiveInfoCache

__all__ = [
    "AsyncRedisClient",
    "CacheKeys",
    "LiveInfoCache",
    "MemoryLiveInfoCache",
    "RedisLiveInfoCache",
]
