"""Integration test fixtures: an assembled app with scripted plugins."""

from __future__ import annotations

from typing import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from livetap.client import LivetapClient
from livetap.config import LivetapSettings
from livetap.core.exceptions import PluginFailureError, ProbeError
from livetap.core.models import LiveInfo
from livetap.plugins.registry import PluginRegistry

# ============================================================================
# Scripted Plugins
# ============================================================================


class ScriptedPlugin:
    """Resolver mapping source URLs to stream URLs; unknown URLs are offline."""

    def __init__(self, streams: dict[str, str]) -> None:
        self.streams = streams
        self.calls: list[str] = []

    async def resolve(self, source_url: str, proxy_url: str, extra_info: str) -> LiveInfo:
        self.calls.append(source_url)
        try:
            return LiveInfo(live_url=self.streams[source_url], extra_info=extra_info)
        except KeyError:
            raise PluginFailureError("This channel is not currently live", plugin="scripted") from None


class UnknownDurationProber:
    """Prober for resources whose duration cannot be determined."""

    async def probe(self, url: str) -> float:
        raise ProbeError(f"No duration for {url}")


@pytest.fixture
def streams() -> dict[str, str]:
    """Source URL to stream URL mapping served by the scripted plugin."""
    return {
        "https://www.youtube.com/watch?v=live123": "https://cdn.example.com/hls/live123/index.m3u8",
        "https://www.youtube.com/watch?v=vod456": "https://cdn.example.com/video/vod456.mp4",
    }


@pytest.fixture
def scripted_plugin(streams: dict[str, str]) -> ScriptedPlugin:
    return ScriptedPlugin(streams)


# ============================================================================
# FastAPI Test Client Fixtures
# ============================================================================


@pytest.fixture
async def livetap_client(mock_settings: LivetapSettings, scripted_plugin: ScriptedPlugin):
    """Initialized library client with the scripted plugin as default strategy."""
    registry = PluginRegistry()
    registry.register("fake", scripted_plugin)

    async with LivetapClient(
        mock_settings,
        registry=registry,
        prober=UnknownDurationProber(),
    ) as client:
        yield client


@pytest.fixture
async def test_app(livetap_client: LivetapClient):
    """Create test FastAPI application with the client in app state."""
    from fastapi import FastAPI

    from livetap.api.routes import health_router, live_router

    # Create a minimal app for testing
    app = FastAPI()
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(live_router, prefix="/api/v1")

    app.state.livetap_client = livetap_client

    return app


@pytest.fixture
async def test_client(test_app) -> AsyncIterator[AsyncClient]:
    """Create async HTTP client for testing API routes."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
