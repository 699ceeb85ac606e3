"""Custom exception hierarchy for livetap."""

from typing import Any


class LivetapError(Exception):
    """Base exception for all livetap errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(LivetapError):
    """Resource not found."""

    pass


class PluginNotFoundError(NotFoundError):
    """No resolution plugin is registered under the requested name."""

    def __init__(self, name: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(f"Resolution plugin not found: {name!r}", details)
        self.name = name


class ResolutionError(LivetapError):
    """Failed to resolve a channel to a stream URL."""

    pass


class CoolingDownError(ResolutionError):
    """Resolution skipped because the channel's cooldown window has not elapsed."""

    def __init__(
        self,
        source_url: str,
        retry_after: float,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__("parser cooling down", details)
        self.source_url = source_url
        self.retry_after = retry_after


class PluginFailureError(ResolutionError):
    """A resolution plugin raised or timed out."""

    def __init__(
        self,
        message: str,
        plugin: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.plugin = plugin


class StreamUnhealthyError(LivetapError):
    """A resolved stream URL did not yield a healthy manifest."""

    pass


class StreamUnavailableError(StreamUnhealthyError):
    """Transport failure or non-2xx response while fetching a manifest."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class HealthCheckError(StreamUnhealthyError):
    """A plugin health check declared the manifest unhealthy."""

    pass


class ProbeError(LivetapError):
    """Media duration probing failed."""

    pass


class CacheError(LivetapError):
    """Cache operation failed."""

    pass
