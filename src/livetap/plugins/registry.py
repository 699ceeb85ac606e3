"""Plugin registry mapping strategy names to resolution plugins."""

from __future__ import annotations

from typing import TYPE_CHECKING

from livetap.core.exceptions import PluginNotFoundError
from livetap.core.types import PluginCapability
from livetap.plugins.base import (
    CAPABILITY_PROTOCOLS,
    PluginConfig,
    ResolverPlugin,
    plugin_capabilities,
)

if TYPE_CHECKING:
    from livetap.config import LivetapSettings


class PluginRegistry:
    """
    Lookup from a strategy name to a resolution plugin instance.

    Plugins are registered once at startup; afterwards the registry is only
    read, so concurrent lookups need no locking.
    """

    def __init__(self) -> None:
        self._plugins: dict[str, ResolverPlugin] = {}

    def register(self, name: str, plugin: ResolverPlugin) -> None:
        """Register a plugin under a strategy name."""
        if not isinstance(plugin, ResolverPlugin):
            raise TypeError(f"{type(plugin).__name__} does not implement resolve()")
        self._plugins[name] = plugin

    def get(self, name: str) -> ResolverPlugin:
        """Return the plugin registered under ``name``."""
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginNotFoundError(name) from None

    def names(self) -> list[str]:
        """Registered strategy names, sorted."""
        return sorted(self._plugins)

    def capabilities(self, name: str) -> frozenset[PluginCapability]:
        """Optional capabilities of the named plugin."""
        return plugin_capabilities(self.get(name))

    def has_capability(self, name: str, capability: PluginCapability) -> bool:
        """Whether the named plugin implements a capability; False when unknown."""
        plugin = self._plugins.get(name)
        if plugin is None:
            return False
        return isinstance(plugin, CAPABILITY_PROTOCOLS[capability])

    def provides_sub_channels(self, name: str) -> bool:
        """Whether channels using this strategy can expose sub-channels."""
        return self.has_capability(name, PluginCapability.CHANNEL_PROVIDER)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    @classmethod
    def with_defaults(cls, settings: "LivetapSettings") -> "PluginRegistry":
        """Create a registry holding the built-in plugins."""
        from livetap.plugins.direct import DirectResolver
        from livetap.plugins.youtube import YtDlpResolver

        registry = cls()
        registry.register(DirectResolver.NAME, DirectResolver())

        youtube = YtDlpResolver(
            command=settings.ytdl_cmd,
            args=settings.ytdl_args,
            config=PluginConfig(timeout=settings.resolve_timeout),
        )
        registry.register(YtDlpResolver.NAME, youtube)
        registry.register("yt-dlp", youtube)

        return registry

    async def close_all(self) -> None:
        """Close plugins that hold resources, once each."""
        seen: set[int] = set()
        for plugin in self._plugins.values():
            if id(plugin) in seen:
                continue
            seen.add(id(plugin))
            close = getattr(plugin, "close", None)
            if close is not None:
                await close()
