"""Outbound HTTP with per-proxy connection pools and device header profiles."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Any

import httpx

from livetap.config import DEFAULT_USER_AGENT
from livetap.core.types import DeviceProfile

logger = logging.getLogger(__name__)

_SAFARI_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Safari/605.1.15"
)
_FIREFOX_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0"

_IOS_DOCUMENT_HEADERS = {
    "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "sec-fetch-site": "same-origin",
    "sec-fetch-dest": "document",
    "accept-language": "zh-CN,zh-Hans;q=0.9",
    "sec-fetch-mode": "navigate",
}

DEVICE_HEADERS: dict[DeviceProfile, dict[str, str]] = {
    DeviceProfile.CHROME: {},
    DeviceProfile.SAFARI: {"user-agent": _SAFARI_UA},
    DeviceProfile.FIREFOX: {"user-agent": _FIREFOX_UA},
    DeviceProfile.IPHONE: {
        **_IOS_DOCUMENT_HEADERS,
        "user-agent": (
            "Mozilla/5.0 (iPhone; CPU iPhone OS 14_0 like Mac OS X) AppleWebKit/603.1.30 "
            "(KHTML, like Gecko) Version/12.0.0 Mobile/15A5370a Safari/602.1"
        ),
    },
    DeviceProfile.IPAD: {
        **_IOS_DOCUMENT_HEADERS,
        "user-agent": (
            "Mozilla/5.0 (iPad; CPU iPhone OS 14_3 like Mac OS X) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/14.0.2 Mobile/15E148 Safari/604.1"
        ),
    },
    DeviceProfile.ANDROID: {
        "pragma": "no-cache",
        "cache-control": "no-cache",
        "sec-ch-ua": '"Not/A)Brand";v="8", "Chromium";v="126", "Google Chrome";v="126"',
        "sec-ch-ua-mobile": "?1",
        "sec-ch-ua-platform": '"Android"',
        "upgrade-insecure-requests": "1",
        "user-agent": (
            "Mozilla/5.0 (Linux; Android 8.0.0; SM-G955U Build/R16NW) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/116.0.0.0 Mobile Safari/537.36"
        ),
        "accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
            "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
        ),
        "sec-fetch-site": "same-origin",
        "sec-fetch-mode": "navigate",
        "sec-fetch-user": "?1",
        "sec-fetch-dest": "document",
        "accept-language": "zh-CN,zh;q=0.9,en;q=0.8,zh-TW;q=0.7,it;q=0.6",
    },
}


def parse_device(value: str | DeviceProfile | None) -> DeviceProfile:
    """Map a free-form device name to a profile, defaulting to chrome."""
    if isinstance(value, DeviceProfile):
        return value
    try:
        return DeviceProfile((value or "").lower())
    except ValueError:
        return DeviceProfile.CHROME


class HttpFetcher:
    """
    Pooled outbound HTTP client.

    One httpx.AsyncClient is kept per (proxy URL, device profile) pair so that
    connections and cookies are reused. An empty proxy URL dials directly;
    http(s) proxies are used as forward/CONNECT proxies and socks5 URLs go
    through httpx's SOCKS support.

    At most ``max_clients`` pools are kept; the least recently used one is
    closed when a new pair needs room.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        default_device: str | DeviceProfile = DeviceProfile.CHROME,
        max_clients: int = 32,
    ) -> None:
        self._timeout = timeout
        self._user_agent = user_agent
        self._default_device = parse_device(default_device)
        self._max_clients = max(1, max_clients)
        self._clients: OrderedDict[tuple[str, DeviceProfile], httpx.AsyncClient] = OrderedDict()
        self._closing: set[asyncio.Task] = set()

    def device_headers(self, device: str | DeviceProfile | None = None) -> dict[str, str]:
        """Default headers presented for a device profile."""
        profile = parse_device(device) if device else self._default_device
        return {"user-agent": self._user_agent, **DEVICE_HEADERS[profile]}

    def _get_client(
        self,
        proxy_url: str = "",
        device: str | DeviceProfile | None = None,
    ) -> httpx.AsyncClient:
        """Get or create the pooled client for a proxy and device."""
        profile = parse_device(device) if device else self._default_device
        key = (proxy_url, profile)
        client = self._clients.get(key)
        if client is not None and not client.is_closed:
            self._clients.move_to_end(key)
            return client

        client = self._create_client(proxy_url, profile)
        self._clients[key] = client
        self._clients.move_to_end(key)
        while len(self._clients) > self._max_clients:
            evicted_key, evicted = self._clients.popitem(last=False)
            logger.debug(f"Evicting HTTP client for proxy {evicted_key[0]!r}")
            self._retire(evicted)
        return client

    def _retire(self, client: httpx.AsyncClient) -> None:
        if client.is_closed:
            return
        task = asyncio.get_running_loop().create_task(client.aclose())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    def _create_client(self, proxy_url: str, device: DeviceProfile) -> httpx.AsyncClient:
        options: dict[str, Any] = {
            "timeout": httpx.Timeout(self._timeout),
            "headers": self.device_headers(device),
            "follow_redirects": True,
        }
        if proxy_url:
            try:
                return httpx.AsyncClient(proxy=proxy_url, **options)
            except (ValueError, httpx.InvalidURL, ImportError) as e:
                # Unusable proxy hints fall back to a direct connection
                logger.warning(f"Ignoring proxy {proxy_url!r}: {e}")
        return httpx.AsyncClient(**options)

    def build_request(
        self,
        method: str,
        url: str,
        *,
        proxy_url: str = "",
        device: str | DeviceProfile | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build a request carrying the pooled client's default headers."""
        client = self._get_client(proxy_url, device)
        return client.build_request(method, url, headers=headers)

    async def send(
        self,
        request: httpx.Request,
        *,
        proxy_url: str = "",
        device: str | DeviceProfile | None = None,
        stream: bool = False,
    ) -> httpx.Response:
        """Send a request; streamed responses must be closed by the caller."""
        client = self._get_client(proxy_url, device)
        return await client.send(request, stream=stream)

    async def get(
        self,
        url: str,
        *,
        proxy_url: str = "",
        device: str | DeviceProfile | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Convenience GET returning a fully read response."""
        client = self._get_client(proxy_url, device)
        return await client.get(url, headers=headers, **kwargs)

    async def close(self) -> None:
        """Close every pooled client."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            if not client.is_closed:
                await client.aclose()
        if self._closing:
            await asyncio.gather(*self._closing, return_exceptions=True)

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
