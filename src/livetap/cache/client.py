"""Redis connection for the shared resolution cache."""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from livetap.core.exceptions import CacheError


class AsyncRedisClient:
    """
    JSON documents under expiring Redis keys.

    Every Redis failure surfaces as CacheError, so callers handle a single
    exception type regardless of what went wrong on the wire.
    """

    def __init__(
        self,
        redis_url: str,
        *,
        max_connections: int = 20,
        socket_timeout: float = 5.0,
    ) -> None:
        self._redis_url = redis_url
        self._max_connections = max_connections
        self._socket_timeout = socket_timeout
        self._redis: aioredis.Redis | None = None

    async def connect(self) -> None:
        """Create the connection pool; connections are opened on first use."""
        self._redis = aioredis.from_url(
            self._redis_url,
            max_connections=self._max_connections,
            socket_timeout=self._socket_timeout,
            socket_connect_timeout=self._socket_timeout,
            decode_responses=True,
        )

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    def _connection(self) -> aioredis.Redis:
        if self._redis is None:
            raise CacheError("Redis client is not connected")
        return self._redis

    async def ping(self) -> bool:
        try:
            return bool(await self._connection().ping())
        except RedisError as e:
            raise CacheError(f"Redis ping failed: {e}") from e

    async def get_json(self, key: str) -> Any | None:
        """Decoded document stored under key, None when absent or not JSON."""
        try:
            raw = await self._connection().get(key)
        except RedisError as e:
            raise CacheError(f"Redis get failed: {e}", {"key": key}) from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a document, replacing any previous one; expires after ttl seconds if given."""
        try:
            await self._connection().set(key, json.dumps(value, default=str), ex=ttl)
        except RedisError as e:
            raise CacheError(f"Redis set failed: {e}", {"key": key}) from e

    async def __aenter__(self) -> "AsyncRedisClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
