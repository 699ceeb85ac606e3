"""Livetap - live stream URL resolution, caching and health-checked manifest serving."""

from livetap.client import LivetapClient, resolve
from livetap.core.models import ChannelConfig, ChannelStatus, LiveInfo, ManifestResult
from livetap.core.types import ChannelHealth, DeviceProfile, PluginCapability
from livetap.plugins.base import (
    ChannelProvider,
    HealthChecker,
    ResolverPlugin,
    StreamTransformer,
)

__version__ = "0.1.0"
__all__ = [
    # Client
    "LivetapClient",
    "resolve",
    # Types
    "ChannelHealth",
    "DeviceProfile",
    "PluginCapability",
    # Models
    "ChannelConfig",
    "ChannelStatus",
    "LiveInfo",
    "ManifestResult",
    # Plugin contracts
    "ChannelProvider",
    "HealthChecker",
    "ResolverPlugin",
    "StreamTransformer",
    # Version
    "__version__",
]
