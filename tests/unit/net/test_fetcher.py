"""Tests for the pooled HTTP fetcher."""

from __future__ import annotations

import asyncio

import pytest
from httpx import Response

from livetap.config import DEFAULT_USER_AGENT
from livetap.core.types import DeviceProfile
from livetap.net.fetcher import DEVICE_HEADERS, HttpFetcher, parse_device

URL = "https://cdn.example.com/live.m3u8"


class TestDeviceProfiles:
    """Tests for header presets."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("iphone", DeviceProfile.IPHONE),
            ("Android", DeviceProfile.ANDROID),
            (DeviceProfile.SAFARI, DeviceProfile.SAFARI),
            ("", DeviceProfile.CHROME),
            (None, DeviceProfile.CHROME),
            ("smart-fridge", DeviceProfile.CHROME),
        ],
    )
    def test_parse_device(self, value, expected: DeviceProfile):
        assert parse_device(value) == expected

    def test_every_profile_has_presets(self):
        assert set(DEVICE_HEADERS) == set(DeviceProfile)

    def test_chrome_uses_configured_user_agent(self):
        fetcher = HttpFetcher(user_agent="livetap-test/1.0")

        assert fetcher.device_headers()["user-agent"] == "livetap-test/1.0"

    def test_mobile_profile_overrides_user_agent(self):
        fetcher = HttpFetcher()
        headers = fetcher.device_headers(DeviceProfile.IPHONE)

        assert "iPhone" in headers["user-agent"]
        assert headers["sec-fetch-mode"] == "navigate"

    def test_default_device(self):
        fetcher = HttpFetcher(default_device="android")

        assert "Android" in fetcher.device_headers()["user-agent"]


class TestClientPool:
    """Tests for per-proxy, per-device client reuse."""

    async def test_same_key_reuses_client(self):
        async with HttpFetcher() as fetcher:
            assert fetcher._get_client("", "chrome") is fetcher._get_client("", DeviceProfile.CHROME)

    async def test_distinct_keys_get_distinct_clients(self):
        async with HttpFetcher() as fetcher:
            direct = fetcher._get_client("", None)
            proxied = fetcher._get_client("http://proxy.example.com:8080", None)
            mobile = fetcher._get_client("", DeviceProfile.IPHONE)

            assert len({id(direct), id(proxied), id(mobile)}) == 3

    async def test_unusable_proxy_falls_back_to_direct(self):
        async with HttpFetcher() as fetcher:
            client = fetcher._get_client("ftp://proxy.example.com:21", None)

            assert client.is_closed is False

    async def test_pool_is_bounded(self):
        fetcher = HttpFetcher(max_clients=2)
        first = fetcher._get_client("http://proxy1.example.com:8080", None)
        for i in range(2, 20):
            fetcher._get_client(f"http://proxy{i}.example.com:8080", None)

        assert len(fetcher._clients) == 2

        await fetcher.close()
        assert first.is_closed is True

    async def test_least_recently_used_is_evicted(self):
        async with HttpFetcher(max_clients=2) as fetcher:
            direct = fetcher._get_client("", None)
            proxied = fetcher._get_client("http://proxy1.example.com:8080", None)
            fetcher._get_client("", None)

            fetcher._get_client("http://proxy2.example.com:8080", None)
            await asyncio.sleep(0)

            assert fetcher._get_client("", None) is direct
            assert ("http://proxy1.example.com:8080", DeviceProfile.CHROME) not in fetcher._clients
            assert proxied.is_closed is True

    async def test_close_closes_clients(self):
        fetcher = HttpFetcher()
        client = fetcher._get_client("", None)

        await fetcher.close()

        assert client.is_closed is True
        assert fetcher._get_client("", None) is not client
        await fetcher.close()


class TestRequests:
    """Tests for outbound requests."""

    async def test_get_sends_profile_headers(self, respx_mock):
        route = respx_mock.get(URL).mock(return_value=Response(200, text="#EXTM3U"))

        async with HttpFetcher(user_agent=DEFAULT_USER_AGENT) as fetcher:
            response = await fetcher.get(URL)

        assert response.text == "#EXTM3U"
        assert route.calls.last.request.headers["user-agent"] == DEFAULT_USER_AGENT

    async def test_build_request_extra_headers(self, respx_mock):
        route = respx_mock.get(URL).mock(return_value=Response(200))

        async with HttpFetcher() as fetcher:
            request = fetcher.build_request("GET", URL, headers={"referer": "https://www.example.com/"})
            response = await fetcher.send(request, stream=True)
            await response.aclose()

        sent = route.calls.last.request
        assert sent.headers["referer"] == "https://www.example.com/"
        assert "user-agent" in sent.headers

    async def test_follows_redirects(self, respx_mock):
        respx_mock.get(URL).mock(
            return_value=Response(302, headers={"Location": "https://edge.example.com/live.m3u8"})
        )
        respx_mock.get("https://edge.example.com/live.m3u8").mock(return_value=Response(200, text="#EXTM3U"))

        async with HttpFetcher() as fetcher:
            response = await fetcher.get(URL)

        assert response.status_code == 200
        assert str(response.url) == "https://edge.example.com/live.m3u8"
