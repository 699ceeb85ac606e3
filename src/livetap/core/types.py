"""Core enums and type definitions."""

from enum import StrEnum


class ChannelHealth(StrEnum):
    """Externally visible health classification of a channel."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class DeviceProfile(StrEnum):
    """Client fingerprints the fetcher can present to upstream servers."""

    CHROME = "chrome"
    SAFARI = "safari"
    FIREFOX = "firefox"
    IPHONE = "iphone"
    IPAD = "ipad"
    ANDROID = "android"


class PluginCapability(StrEnum):
    """Optional capabilities a resolution plugin may implement."""

    TRANSFORMER = "transformer"
    HEALTH_CHECK = "health_check"
    CHANNEL_PROVIDER = "channel_provider"
