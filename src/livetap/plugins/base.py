"""Resolution plugin contracts.

Every plugin implements the mandatory ``resolve`` capability. The optional
capabilities are separate protocols discovered with ``isinstance`` so a plugin
opts in simply by defining the method.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from livetap.core.types import PluginCapability

if TYPE_CHECKING:
    import httpx

    from livetap.core.models import ChannelConfig, LiveInfo


@runtime_checkable
class ResolverPlugin(Protocol):
    """Turns a channel source URL into a playable stream URL."""

    async def resolve(
        self,
        source_url: str,
        proxy_url: str,
        extra_info: str,
    ) -> "LiveInfo":
        """
        Resolve a channel.

        Args:
            source_url: Channel source URL
            proxy_url: Proxy hint, empty for a direct connection
            extra_info: ``extra_info`` of the previous resolution, or ""

        Returns:
            The fresh resolution
        """
        ...


@runtime_checkable
class StreamTransformer(Protocol):
    """Decorates the manifest request before it is sent."""

    def decorate(self, request: "httpx.Request", live_info: "LiveInfo") -> None:
        ...


@runtime_checkable
class HealthChecker(Protocol):
    """Checks a syntactically valid manifest; raises HealthCheckError when unhealthy."""

    async def check(self, body: str, live_info: "LiveInfo | None") -> None:
        ...


@runtime_checkable
class ChannelProvider(Protocol):
    """Exposes resolvable sub-channels of a logical channel."""

    async def sub_channels(self, source_url: str, proxy_url: str) -> list["ChannelConfig"]:
        ...


CAPABILITY_PROTOCOLS: dict[PluginCapability, type] = {
    PluginCapability.TRANSFORMER: StreamTransformer,
    PluginCapability.HEALTH_CHECK: HealthChecker,
    PluginCapability.CHANNEL_PROVIDER: ChannelProvider,
}


def plugin_capabilities(plugin: object) -> frozenset[PluginCapability]:
    """Optional capabilities implemented by a plugin instance."""
    return frozenset(
        capability
        for capability, protocol in CAPABILITY_PROTOCOLS.items()
        if isinstance(plugin, protocol)
    )


class PluginConfig(BaseModel):
    """Configuration for a built-in plugin."""

    timeout: float = Field(default=30.0, gt=0, description="Resolution timeout in seconds")


class AbstractResolverPlugin(ABC):
    """
    Convenience base class for plugins shipped with livetap.

    Third-party plugins only need to satisfy ResolverPlugin.
    """

    NAME: ClassVar[str]

    def __init__(self, config: PluginConfig | None = None) -> None:
        self.config = config or PluginConfig()

    @property
    def name(self) -> str:
        return self.NAME

    @abstractmethod
    async def resolve(
        self,
        source_url: str,
        proxy_url: str,
        extra_info: str,
    ) -> "LiveInfo":
        ...

    async def close(self) -> None:
        """Release plugin resources."""

    async def __aenter__(self) -> "AbstractResolverPlugin":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
