"""Resolution service: cache lookup, cooldown, plugin dispatch, bookkeeping."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from livetap.core.exceptions import CoolingDownError, PluginFailureError
from livetap.core.models import LiveInfo
from livetap.core.types import ChannelHealth

if TYPE_CHECKING:
    from livetap.cache.url_cache import LiveInfoCache
    from livetap.core.models import ChannelConfig
    from livetap.plugins.base import ResolverPlugin
    from livetap.plugins.registry import PluginRegistry
    from livetap.services.status import StatusStore

logger = logging.getLogger(__name__)


class ResolutionService:
    """
    Resolves channel source URLs to stream URLs.

    Two entry points:
    1. ``resolve`` serves cached results and otherwise resolves only when the
       channel is outside its cooldown window
    2. ``force_resolve`` always invokes the plugin; used for reparses and
       configuration changes

    Only ``force_resolve`` touches the cooldown multiplier: it doubles it when
    the plugin fails, and resets it after a success when asked to.
    """

    def __init__(
        self,
        registry: "PluginRegistry",
        cache: "LiveInfoCache",
        status_store: "StatusStore",
        *,
        default_strategy: str = "youtube",
        resolve_timeout: float = 30.0,
    ) -> None:
        """
        Initialize the resolution service.

        Args:
            registry: Registry of resolution plugins
            cache: Resolution cache backend
            status_store: Per-channel health records
            default_strategy: Strategy used when a channel names none
            resolve_timeout: Upper bound for one plugin call in seconds
        """
        self._registry = registry
        self._cache = cache
        self._status = status_store
        self._default_strategy = default_strategy
        self._resolve_timeout = resolve_timeout

    def strategy_name(self, strategy: str | None) -> str:
        """Effective strategy, falling back to the default for empty names."""
        return strategy or self._default_strategy

    async def resolve(
        self,
        source_url: str,
        proxy_url: str = "",
        strategy: str = "",
    ) -> LiveInfo:
        """
        Return the cached resolution or resolve the channel.

        Raises:
            CoolingDownError: cache miss inside the cooldown window
            PluginNotFoundError: unknown strategy
            PluginFailureError: the plugin failed
        """
        info = await self._cache.load(source_url)
        if info is not None:
            return info

        logger.info(f"Cache miss for {source_url}")
        if self._status.is_cooling_down(source_url):
            retry_after = self._status.remaining_cooldown(source_url)
            logger.debug(f"{source_url} is cooling down for another {retry_after:.1f}s")
            raise CoolingDownError(source_url, retry_after)

        return await self.force_resolve(source_url, proxy_url, strategy, reset_cooldown=True)

    async def force_resolve(
        self,
        source_url: str,
        proxy_url: str = "",
        strategy: str = "",
        *,
        reset_cooldown: bool,
    ) -> LiveInfo:
        """
        Invoke the plugin regardless of cache and cooldown state.

        On success the new result replaces the cached one. On failure the
        cached result is left in place so the last known good URL stays
        servable.
        """
        name = self.strategy_name(strategy)
        plugin = self._registry.get(name)

        previous = await self._cache.load(source_url)
        extra_info = previous.extra_info if previous is not None else ""

        try:
            info = await self._call_plugin(name, plugin, source_url, proxy_url, extra_info)
        except PluginFailureError as e:
            multiplier = self._status.double_cooldown(source_url)
            self._status.update_status(source_url, ChannelHealth.ERROR, e.message)
            logger.warning(
                f"Resolving {source_url} with {name} failed: {e.message} "
                f"(cooldown multiplier {multiplier})"
            )
            raise

        await self._cache.store(source_url, info)
        if reset_cooldown:
            self._status.reset_cooldown(source_url)
            self._status.reset_retry(source_url)
            self._status.update_status(source_url, ChannelHealth.OK, "Live!")

        return info

    async def update_url_cache_single(
        self,
        channel: "ChannelConfig",
        reset_cooldown: bool = True,
    ) -> LiveInfo:
        """Force a resolution for a configured channel."""
        return await self.force_resolve(
            channel.url,
            channel.proxy_url,
            channel.parser,
            reset_cooldown=reset_cooldown,
        )

    async def _call_plugin(
        self,
        name: str,
        plugin: "ResolverPlugin",
        source_url: str,
        proxy_url: str,
        extra_info: str,
    ) -> LiveInfo:
        """Run one plugin call under the timeout, normalizing failures."""
        start = time.monotonic()
        try:
            async with asyncio.timeout(self._resolve_timeout):
                info = await plugin.resolve(source_url, proxy_url, extra_info)
        except PluginFailureError:
            raise
        except TimeoutError:
            raise PluginFailureError(
                f"Resolution timed out after {self._resolve_timeout:g}s",
                plugin=name,
            ) from None
        except Exception as e:
            logger.exception(f"Plugin {name} raised while resolving {source_url}")
            raise PluginFailureError(str(e) or type(e).__name__, plugin=name) from e

        if not isinstance(info, LiveInfo) or not info.live_url:
            raise PluginFailureError("Plugin returned no stream URL", plugin=name)

        duration = time.monotonic() - start
        logger.info(f"Resolved {source_url} with {name} in {duration:.2f}s")
        return info
