"""Tests for API schemas."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from livetap.api.schemas import (
    ChannelRequest,
    LiveInfoResponse,
    ResolveRequest,
    StatusResponse,
    WarmUpRequest,
)
from livetap.api.schemas.base import to_camel_case
from livetap.core.types import ChannelHealth


class TestCamelCase:
    """Tests for the alias generator."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("url", "url"),
            ("proxy_url", "proxyUrl"),
            ("last_checked_at", "lastCheckedAt"),
        ],
    )
    def test_to_camel_case(self, value: str, expected: str):
        assert to_camel_case(value) == expected


class TestRequests:
    """Tests for request parsing."""

    def test_resolve_request_accepts_camel_case(self):
        request = ResolveRequest.model_validate(
            {"url": "https://youtu.be/x", "proxyUrl": "socks5://127.0.0.1:1080", "force": True}
        )

        assert request.proxy_url == "socks5://127.0.0.1:1080"
        assert request.parser == ""
        assert request.force is True

    def test_resolve_request_requires_url(self):
        with pytest.raises(ValidationError):
            ResolveRequest.model_validate({"url": ""})

    def test_to_channel(self):
        request = ChannelRequest(url="https://youtu.be/x", parser="youtube", proxy_url="http://p:8080")
        channel = request.to_channel()

        assert channel.url == "https://youtu.be/x"
        assert channel.parser == "youtube"
        assert channel.proxy_url == "http://p:8080"

    def test_warm_up_requires_channels(self):
        with pytest.raises(ValidationError):
            WarmUpRequest.model_validate({"channels": []})


class TestResponses:
    """Tests for response serialization."""

    def test_live_info_serializes_camel_case(self):
        response = LiveInfoResponse(
            source_url="https://youtu.be/x",
            live_url="https://cdn.example.com/live.m3u8",
            created_at=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        )
        data = response.model_dump(by_alias=True)

        assert data["sourceUrl"] == "https://youtu.be/x"
        assert data["liveUrl"] == "https://cdn.example.com/live.m3u8"
        assert data["extraInfo"] == ""

    def test_status_response(self):
        data = StatusResponse(source_url="https://youtu.be/x", status=ChannelHealth.ERROR).model_dump(
            by_alias=True, mode="json"
        )

        assert data["status"] == "error"
        assert data["lastCheckedAt"] is None
        assert data["cooldownMultiplier"] == 1
