"""Main library client for standalone usage."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from livetap.cache.url_cache import MemoryLiveInfoCache, RedisLiveInfoCache
from livetap.config import LivetapSettings
from livetap.core.exceptions import CacheError, LivetapError
from livetap.core.models import ChannelConfig, ChannelStatus, LiveInfo, ManifestResult
from livetap.net.fetcher import HttpFetcher
from livetap.plugins.registry import PluginRegistry
from livetap.services.manifest import ManifestService
from livetap.services.probe import FFprobeDurationProber
from livetap.services.resolution import ResolutionService
from livetap.services.status import StatusStore

if TYPE_CHECKING:
    from livetap.cache.client import AsyncRedisClient
    from livetap.cache.url_cache import LiveInfoCache
    from livetap.core.types import PluginCapability
    from livetap.services.probe import DurationProber

logger = logging.getLogger(__name__)


class LivetapClient:
    """
    Main client for the livetap library.

    Wires the plugin registry, resolution cache, status store, outbound HTTP
    and duration probing together, and exposes the resolution and manifest
    operations without requiring the web server.

    Usage:
        async with LivetapClient() as client:
            # Resolve a channel to its stream URL
            info = await client.resolve("https://www.youtube.com/watch?v=abc")

            # Resolve and fetch the playable manifest in one go
            result = await client.live_manifest(ChannelConfig(url=...))

    Collaborators can be injected; anything not given is built from settings.
    """

    def __init__(
        self,
        settings: LivetapSettings | None = None,
        *,
        use_cache: bool = True,
        registry: PluginRegistry | None = None,
        cache: "LiveInfoCache | None" = None,
        status_store: StatusStore | None = None,
        fetcher: HttpFetcher | None = None,
        prober: "DurationProber | None" = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Application settings. If not provided, loaded from environment.
            use_cache: Whether to use the Redis resolution cache if configured.
            registry: Plugin registry (built-in plugins when omitted)
            cache: Resolution cache (Redis or in-memory when omitted)
            status_store: Channel status store
            fetcher: Outbound HTTP fetcher
            prober: Duration prober (ffprobe when omitted)
        """
        self._settings = settings or LivetapSettings()
        self._use_cache = use_cache
        self._registry = registry
        self._cache = cache
        self._status = status_store
        self._fetcher = fetcher
        self._prober = prober
        self._redis: AsyncRedisClient | None = None
        self._resolution: ResolutionService | None = None
        self._manifests: ManifestService | None = None
        self._background: set[asyncio.Task] = set()

    async def __aenter__(self) -> LivetapClient:
        """Initialize resources on context entry."""
        await self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Clean up resources on context exit."""
        await self.close()

    @property
    def settings(self) -> LivetapSettings:
        return self._settings

    @property
    def registry(self) -> PluginRegistry:
        self._ensure_initialized()
        return self._registry

    @property
    def redis(self) -> "AsyncRedisClient | None":
        """Redis client backing the cache, if one is connected."""
        return self._redis

    async def _initialize(self) -> None:
        """Initialize client resources."""
        settings = self._settings

        if self._registry is None:
            self._registry = PluginRegistry.with_defaults(settings)

        if self._cache is None:
            self._cache = await self._create_cache()

        if self._status is None:
            self._status = StatusStore(
                max_cooldown_multiplier=settings.max_cooldown_multiplier,
                max_cooldown_seconds=settings.max_cooldown_seconds,
            )

        if self._fetcher is None:
            self._fetcher = HttpFetcher(
                timeout=settings.http_timeout,
                user_agent=settings.user_agent,
                default_device=settings.default_device,
                max_clients=settings.max_http_clients,
            )

        if self._prober is None:
            self._prober = FFprobeDurationProber(
                settings.ffprobe_path,
                timeout=settings.probe_timeout,
            )

        self._resolution = ResolutionService(
            self._registry,
            self._cache,
            self._status,
            default_strategy=settings.default_strategy,
            resolve_timeout=settings.resolve_timeout,
        )
        self._manifests = ManifestService(
            self._resolution,
            self._registry,
            self._cache,
            self._status,
            self._fetcher,
            self._prober,
            timeout=settings.http_timeout,
            max_manifest_bytes=settings.max_manifest_bytes,
            max_retry_count=settings.max_retry_count,
        )

    async def _create_cache(self) -> "LiveInfoCache":
        """Redis-backed cache when configured and reachable, in-memory otherwise."""
        if self._use_cache and self._settings.redis_url:
            from livetap.cache.client import AsyncRedisClient

            client = AsyncRedisClient(str(self._settings.redis_url))
            try:
                await client.connect()
                await client.ping()
            except (CacheError, ValueError) as e:
                logger.warning(f"Failed to initialize Redis cache, using memory: {e}")
                await client.close()
            else:
                logger.info("Redis cache initialized")
                self._redis = client
                return RedisLiveInfoCache(client)

        return MemoryLiveInfoCache()

    async def close(self) -> None:
        """Cancel pending warm-ups and close all resources."""
        pending = list(self._background)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        if self._registry is not None:
            await self._registry.close_all()

        if self._fetcher is not None:
            await self._fetcher.close()

        if self._redis:
            await self._redis.close()
            self._redis = None

        self._resolution = None
        self._manifests = None

    def _ensure_initialized(self) -> None:
        """Ensure client is initialized."""
        if self._resolution is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with LivetapClient() as client:'"
            )

    async def resolve(
        self,
        source_url: str,
        proxy_url: str = "",
        strategy: str = "",
    ) -> LiveInfo:
        """
        Resolve a channel, serving the cached stream URL when there is one.

        Raises:
            CoolingDownError: not cached and inside the backoff window
            PluginNotFoundError: unknown strategy
            PluginFailureError: the plugin failed
        """
        self._ensure_initialized()
        return await self._resolution.resolve(source_url, proxy_url, strategy)

    async def fetch_manifest(
        self,
        source_url: str,
        stream_url: str,
        proxy_url: str = "",
        strategy: str = "",
        *,
        query: Iterable[tuple[str, str]] | None = None,
        is_retry: bool = False,
    ) -> ManifestResult:
        """Fetch the manifest behind a resolved stream URL."""
        self._ensure_initialized()
        return await self._manifests.fetch_manifest(
            source_url,
            stream_url,
            proxy_url,
            strategy,
            query=query,
            is_retry=is_retry,
        )

    async def live_manifest(
        self,
        channel: ChannelConfig,
        query: Iterable[tuple[str, str]] | None = None,
    ) -> ManifestResult:
        """Resolve a channel and fetch its manifest."""
        info = await self.resolve(channel.url, channel.proxy_url, channel.parser)
        return await self.fetch_manifest(
            channel.url,
            info.live_url,
            channel.proxy_url,
            channel.parser,
            query=query,
        )

    def get_status(self, source_url: str) -> ChannelStatus:
        """Snapshot of a channel's health record."""
        self._ensure_initialized()
        return self._status.get_status(source_url)

    async def update_url_cache_single(
        self,
        channel: ChannelConfig,
        reset_cooldown: bool = True,
    ) -> LiveInfo:
        """Force a fresh resolution of a configured channel."""
        self._ensure_initialized()
        return await self._resolution.update_url_cache_single(channel, reset_cooldown)

    def warm_up(self, channel: ChannelConfig) -> asyncio.Task:
        """
        Schedule a background resolution of a channel.

        The returned task never raises; failures are logged. Callers are not
        expected to await it.
        """
        self._ensure_initialized()
        task = asyncio.get_running_loop().create_task(self._warm_up(channel))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _warm_up(self, channel: ChannelConfig) -> None:
        try:
            info = await self.update_url_cache_single(channel, reset_cooldown=True)
        except LivetapError as e:
            logger.warning(f"Warm-up of {channel.url} failed: {e.message}")
        else:
            logger.debug(f"Warmed up {channel.url} -> {info.live_url}")

    def provides_sub_channels(self, strategy: str) -> bool:
        """Whether channels using a strategy can expose sub-channels."""
        self._ensure_initialized()
        return self._registry.provides_sub_channels(self._resolution.strategy_name(strategy))

    def plugin_names(self) -> list[str]:
        """Registered strategy names."""
        self._ensure_initialized()
        return self._registry.names()

    def plugin_capabilities(self, name: str) -> frozenset["PluginCapability"]:
        self._ensure_initialized()
        return self._registry.capabilities(name)


# Convenience function for one-off resolutions
async def resolve(
    source_url: str,
    proxy_url: str = "",
    strategy: str = "",
    *,
    settings: LivetapSettings | None = None,
) -> LiveInfo:
    """
    Resolve a channel (convenience function).

    For multiple resolutions, use LivetapClient so the cache and status
    records are shared.
    """
    async with LivetapClient(settings, use_cache=False) as client:
        return await client.resolve(source_url, proxy_url, strategy)
