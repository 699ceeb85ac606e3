"""Core types, models, and utilities."""

from .exceptions import (
    CacheError,
    CoolingDownError,
    HealthCheckError,
    LivetapError,
    NotFoundError,
    PluginFailureError,
    PluginNotFoundError,
    ProbeError,
    ResolutionError,
    StreamUnavailableError,
    StreamUnhealthyError,
)
from .manifest import (
    MANIFEST_MARKER,
    fallback_manifest,
    forward_query,
    is_manifest_content_type,
    is_routing_param,
    is_valid_m3u,
    vod_manifest,
)
from .models import ChannelConfig, ChannelStatus, LiveInfo, ManifestResult
from .types import ChannelHealth, DeviceProfile, PluginCapability

__all__ = [
    # Types
    "ChannelHealth",
    "DeviceProfile",
    "PluginCapability",
    # Models
    "ChannelConfig",
    "ChannelStatus",
    "LiveInfo",
    "ManifestResult",
    # Manifest helpers
    "MANIFEST_MARKER",
    "fallback_manifest",
    "forward_query",
    "is_manifest_content_type",
    "is_routing_param",
    "is_valid_m3u",
    "vod_manifest",
    # Exceptions
    "CacheError",
    "CoolingDownError",
    "HealthCheckError",
    "LivetapError",
    "NotFoundError",
    "PluginFailureError",
    "PluginNotFoundError",
    "ProbeError",
    "ResolutionError",
    "StreamUnavailableError",
    "StreamUnhealthyError",
]
