"""Shared test fixtures for all tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import respx

from livetap.config import LivetapSettings
from livetap.core.models import ChannelConfig, LiveInfo

# ============================================================================
# Test Data Constants
# ============================================================================


SOURCE_URL = "https://www.youtube.com/watch?v=live123"
STREAM_URL = "https://cdn.example.com/hls/live123/index.m3u8"

PLAYLIST = (
    "#EXTM3U\n"
    "#EXT-X-VERSION:3\n"
    "#EXT-X-TARGETDURATION:6\n"
    "#EXT-X-MEDIA-SEQUENCE:1042\n"
    "#EXTINF:6.000,\n"
    "segment1042.ts\n"
    "#EXTINF:6.000,\n"
    "segment1043.ts\n"
)


# ============================================================================
# Clock
# ============================================================================


class FakeClock:
    """Manually advanced clock for cooldown tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock."""
    return FakeClock()


# ============================================================================
# HTTP Mocking Fixtures
# ============================================================================


@pytest.fixture
def respx_mock():
    """Provide a respx mock router for HTTP mocking.

    Use this when you need fine-grained control over mocked responses.
    The mock is automatically started and stopped by respx.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_channel() -> ChannelConfig:
    """Create a sample channel using the test plugin."""
    return ChannelConfig(url=SOURCE_URL, parser="fake", name="Test Live")


@pytest.fixture
def sample_live_info() -> LiveInfo:
    """Create a sample resolution."""
    return LiveInfo(live_url=STREAM_URL, extra_info="session=abc")


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def mock_settings() -> LivetapSettings:
    """Create settings for testing without external services."""
    return LivetapSettings(
        redis_url=None,
        default_strategy="fake",
        http_timeout=5.0,
        resolve_timeout=5.0,
        probe_timeout=5.0,
        max_retry_count=3,
        debug=True,
        log_level="DEBUG",
    )


@pytest.fixture
def sample_playlist() -> str:
    """A live media playlist as served by a CDN."""
    return PLAYLIST
