"""Resolution plugins and the registry that dispatches to them."""

from livetap.plugins.base import (
    AbstractResolverPlugin,
    ChannelProvider,
    HealthChecker,
    PluginConfig,
    ResolverPlugin,
    StreamTransformer,
    plugin_capabilities,
)
from livetap.plugins.direct import DirectResolver
from livetap.plugins.registry import PluginRegistry
from livetap.plugins.youtube import YtDlpResolver

__all__ = [
    # Contracts
    "AbstractResolverPlugin",
    "ChannelProvider",
    "HealthChecker",
    "PluginConfig",
    "ResolverPlugin",
    "StreamTransformer",
    "plugin_capabilities",
    # Built-in plugins
    "DirectResolver",
    "YtDlpResolver",
    # Registry
    "PluginRegistry",
]
