"""Unit test fixtures: fake plugins, fake prober and wired services."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx
import pytest

from livetap.cache.url_cache import MemoryLiveInfoCache
from livetap.core.exceptions import HealthCheckError, ProbeError
from livetap.core.models import LiveInfo
from livetap.net.fetcher import HttpFetcher
from livetap.plugins.registry import PluginRegistry
from livetap.services.manifest import ManifestService
from livetap.services.resolution import ResolutionService
from livetap.services.status import StatusStore

# ============================================================================
# Fake Plugins
# ============================================================================


class FakePlugin:
    """
    Resolver returning queued outcomes.

    Each outcome is a stream URL or an exception to raise. The last outcome
    repeats once the queue is drained.
    """

    def __init__(self, *outcomes: str | BaseException, delay: float = 0.0) -> None:
        self.outcomes = list(outcomes)
        self.delay = delay
        self.calls: list[tuple[str, str, str]] = []

    async def resolve(self, source_url: str, proxy_url: str, extra_info: str) -> LiveInfo:
        self.calls.append((source_url, proxy_url, extra_info))
        await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return LiveInfo(live_url=outcome, extra_info=f"call-{len(self.calls)}")


class FakeTransformerPlugin(FakePlugin):
    """Resolver that signs manifest requests with its extra info."""

    def decorate(self, request: httpx.Request, live_info: LiveInfo) -> None:
        request.headers["x-live-token"] = live_info.extra_info


class FakeHealthPlugin(FakePlugin):
    """Resolver whose health check rejects playlists containing a marker."""

    def __init__(self, *outcomes: str | BaseException, unhealthy_marker: str = "#STALE") -> None:
        super().__init__(*outcomes)
        self.unhealthy_marker = unhealthy_marker
        self.checked: list[str] = []

    async def check(self, body: str, live_info: LiveInfo | None) -> None:
        self.checked.append(body)
        if self.unhealthy_marker in body:
            raise HealthCheckError("Playlist is stale")


class FakeProviderPlugin(FakePlugin):
    """Resolver exposing sub-channels."""

    async def sub_channels(self, source_url: str, proxy_url: str) -> list:
        return []


class FakeProber:
    """Duration prober returning a fixed duration or raising ProbeError."""

    def __init__(self, duration: float = 0.0, fail: bool = False) -> None:
        self.duration = duration
        self.fail = fail
        self.probed: list[str] = []

    async def probe(self, url: str) -> float:
        self.probed.append(url)
        if self.fail:
            raise ProbeError("ffprobe failed")
        return self.duration


# ============================================================================
# Factory Fixtures
# ============================================================================


@pytest.fixture
def make_plugin() -> Callable[..., FakePlugin]:
    """Factory fixture for fake resolver plugins."""
    return FakePlugin


@pytest.fixture
def make_transformer_plugin() -> Callable[..., FakeTransformerPlugin]:
    return FakeTransformerPlugin


@pytest.fixture
def make_health_plugin() -> Callable[..., FakeHealthPlugin]:
    return FakeHealthPlugin


@pytest.fixture
def make_provider_plugin() -> Callable[..., FakeProviderPlugin]:
    return FakeProviderPlugin


@pytest.fixture
def make_prober() -> Callable[..., FakeProber]:
    return FakeProber


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def registry() -> PluginRegistry:
    """Empty plugin registry; tests register the plugins they need."""
    return PluginRegistry()


@pytest.fixture
def cache() -> MemoryLiveInfoCache:
    return MemoryLiveInfoCache()


@pytest.fixture
def status_store(clock) -> StatusStore:
    """Status store driven by the fake clock."""
    return StatusStore(clock=clock)


@pytest.fixture
def resolution_service(
    registry: PluginRegistry,
    cache: MemoryLiveInfoCache,
    status_store: StatusStore,
) -> ResolutionService:
    return ResolutionService(
        registry,
        cache,
        status_store,
        default_strategy="fake",
        resolve_timeout=5.0,
    )


@pytest.fixture
async def fetcher():
    """Outbound HTTP fetcher, closed after the test."""
    async with HttpFetcher(timeout=5.0) as http:
        yield http


@pytest.fixture
def prober() -> FakeProber:
    """Prober reporting no duration."""
    return FakeProber()


@pytest.fixture
def manifest_service(
    resolution_service: ResolutionService,
    registry: PluginRegistry,
    cache: MemoryLiveInfoCache,
    status_store: StatusStore,
    fetcher: HttpFetcher,
    prober: FakeProber,
) -> ManifestService:
    return ManifestService(
        resolution_service,
        registry,
        cache,
        status_store,
        fetcher,
        prober,
        timeout=5.0,
        max_manifest_bytes=64 * 1024,
        max_retry_count=3,
    )
