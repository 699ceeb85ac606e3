"""Manifest retrieval with health classification and a single reparse."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

import httpx

from livetap.core.exceptions import (
    HealthCheckError,
    LivetapError,
    PluginNotFoundError,
    ProbeError,
    StreamUnavailableError,
    StreamUnhealthyError,
)
from livetap.core.manifest import (
    fallback_manifest,
    forward_query,
    is_manifest_content_type,
    is_valid_m3u,
    vod_manifest,
)
from livetap.core.models import LiveInfo, ManifestResult
from livetap.core.types import ChannelHealth, DeviceProfile
from livetap.plugins.base import HealthChecker, ResolverPlugin, StreamTransformer

if TYPE_CHECKING:
    from livetap.cache.url_cache import LiveInfoCache
    from livetap.net.fetcher import HttpFetcher
    from livetap.plugins.registry import PluginRegistry
    from livetap.services.probe import DurationProber
    from livetap.services.resolution import ResolutionService
    from livetap.services.status import StatusStore

logger = logging.getLogger(__name__)

NOT_LIVE_MESSAGE = "Url is not a live stream"


class ManifestService:
    """
    Fetches the manifest behind a resolved stream URL.

    A fetch is classified as one of:
    - healthy: a valid playlist that passed the plugin's health check
    - not live: reachable but not a playlist; a synthetic VOD playlist is served
    - unhealthy: transport error, non-2xx status or failed health check

    An unhealthy first attempt triggers one forced reparse followed by a
    second attempt, unless the channel has used up its retries.
    """

    def __init__(
        self,
        resolution: "ResolutionService",
        registry: "PluginRegistry",
        cache: "LiveInfoCache",
        status_store: "StatusStore",
        fetcher: "HttpFetcher",
        prober: "DurationProber | None" = None,
        *,
        timeout: float = 10.0,
        max_manifest_bytes: int = 10 * 1024 * 1024,
        max_retry_count: int = 3,
        device: str | DeviceProfile | None = None,
    ) -> None:
        self._resolution = resolution
        self._registry = registry
        self._cache = cache
        self._status = status_store
        self._fetcher = fetcher
        self._prober = prober
        self._timeout = timeout
        self._max_bytes = max_manifest_bytes
        self._max_retry_count = max_retry_count
        self._device = device

    async def fetch_manifest(
        self,
        source_url: str,
        stream_url: str,
        proxy_url: str = "",
        strategy: str = "",
        *,
        query: Iterable[tuple[str, str]] | None = None,
        is_retry: bool = False,
    ) -> ManifestResult:
        """
        Return the manifest for a channel, reparsing once when unhealthy.

        Args:
            source_url: Channel source URL, the key for cache and status
            stream_url: Resolved stream URL to fetch
            proxy_url: Proxy hint
            strategy: Resolution strategy name (default strategy when empty)
            query: Caller query parameters to forward upstream
            is_retry: Disable the reparse fallback

        Returns:
            The manifest and the stream URL it came from, which differs from
            ``stream_url`` when a reparse produced a new one.

        Raises:
            StreamUnhealthyError: the stream stayed unhealthy
            ResolutionError: the reparse itself failed
            PluginNotFoundError: the reparse named an unknown strategy
        """
        query = list(query) if query is not None else None
        try:
            return await self._attempt(source_url, stream_url, proxy_url, strategy, query)
        except StreamUnhealthyError as e:
            if is_retry or not self._may_reparse(source_url):
                logger.warning(f"{source_url} is unhealthy, giving up: {e.message}")
                self._give_up(source_url, e)
                raise
            first_error = e

        return await self._reparse(source_url, stream_url, proxy_url, strategy, query, first_error)

    def _may_reparse(self, source_url: str) -> bool:
        return self._status.get_status(source_url).retry_count < self._max_retry_count

    def _give_up(self, source_url: str, error: LivetapError) -> None:
        self._status.update_status(source_url, ChannelHealth.ERROR, error.message)
        self._status.increment_retry(source_url)

    async def _reparse(
        self,
        source_url: str,
        stream_url: str,
        proxy_url: str,
        strategy: str,
        query: list[tuple[str, str]] | None,
        first_error: StreamUnhealthyError,
    ) -> ManifestResult:
        logger.info(f"{source_url} is unhealthy ({first_error.message}), doing a reparse")
        self._status.update_status(source_url, ChannelHealth.WARNING, "Unhealthy")

        try:
            info = await self._resolution.force_resolve(
                source_url, proxy_url, strategy, reset_cooldown=False
            )
        except LivetapError as e:
            logger.warning(f"Reparse of {source_url} failed: {e.message}")
            self._give_up(source_url, e)
            raise

        try:
            result = await self._attempt(source_url, info.live_url, proxy_url, strategy, query)
        except StreamUnhealthyError as e:
            logger.warning(
                f"{source_url} is still unhealthy after reparse, giving up "
                f"(stream URL {info.live_url}): {e.message}"
            )
            self._give_up(source_url, e)
            raise

        logger.info(f"{source_url} is back online (stream URL {stream_url} -> {info.live_url})")
        self._status.update_status(source_url, ChannelHealth.OK, "Live!")
        return result

    def _plugin(self, strategy: str) -> ResolverPlugin | None:
        try:
            return self._registry.get(self._resolution.strategy_name(strategy))
        except PluginNotFoundError:
            return None

    async def _attempt(
        self,
        source_url: str,
        stream_url: str,
        proxy_url: str,
        strategy: str,
        query: list[tuple[str, str]] | None,
    ) -> ManifestResult:
        """One fetch of ``stream_url``; raises StreamUnhealthyError when unhealthy."""
        plugin = self._plugin(strategy)
        live_info = await self._cache.load(source_url)

        request = self._fetcher.build_request(
            "GET",
            forward_query(stream_url, query),
            proxy_url=proxy_url,
            device=self._device,
        )
        if live_info is not None and isinstance(plugin, StreamTransformer):
            plugin.decorate(request, live_info)

        body = await self._download(request, proxy_url)
        if body is None or not is_valid_m3u(body):
            return await self._synthesize(source_url, stream_url)

        if isinstance(plugin, HealthChecker):
            await self._check_health(plugin, body, live_info)

        return ManifestResult(body=body, stream_url=stream_url)

    async def _download(self, request: httpx.Request, proxy_url: str) -> str | None:
        """
        Send the manifest request.

        Returns the trimmed body, or None when the response cannot be a
        playlist (content type or size). Transport failures and non-2xx
        responses raise StreamUnavailableError.
        """
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._fetcher.send(
                    request, proxy_url=proxy_url, device=self._device, stream=True
                )
                try:
                    if not response.is_success:
                        raise StreamUnavailableError(
                            f"Server response: HTTP {response.status_code}",
                            status_code=response.status_code,
                        )
                    return await self._read_playlist(response)
                finally:
                    await response.aclose()
        except TimeoutError:
            raise StreamUnavailableError(
                f"Manifest request timed out after {self._timeout:g}s"
            ) from None
        except httpx.HTTPError as e:
            raise StreamUnavailableError(f"Manifest request failed: {e}") from e

    async def _read_playlist(self, response: httpx.Response) -> str | None:
        if not is_manifest_content_type(response.headers.get("content-type", "")):
            return None

        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) >= self._max_bytes:
            return None

        data = bytearray()
        async for chunk in response.aiter_bytes():
            data.extend(chunk)
            if len(data) >= self._max_bytes:
                return None

        return data.decode("utf-8", errors="replace").strip()

    async def _check_health(
        self,
        plugin: HealthChecker,
        body: str,
        live_info: LiveInfo | None,
    ) -> None:
        try:
            await plugin.check(body, live_info)
        except HealthCheckError:
            raise
        except Exception as e:
            logger.exception("Health check raised unexpectedly")
            raise HealthCheckError(str(e) or type(e).__name__) from e

    async def _synthesize(self, source_url: str, stream_url: str) -> ManifestResult:
        """Wrap a non-playlist resource in a synthetic VOD playlist."""
        self._status.update_status(source_url, ChannelHealth.WARNING, NOT_LIVE_MESSAGE)

        duration = await self._probe_duration(stream_url)
        if duration > 0:
            body = vod_manifest(stream_url, duration)
        else:
            body = fallback_manifest(stream_url)
        return ManifestResult(body=body, stream_url=stream_url, synthetic=True)

    async def _probe_duration(self, stream_url: str) -> float:
        if self._prober is None:
            return 0.0
        try:
            return await self._prober.probe(stream_url)
        except ProbeError as e:
            logger.info(f"Failed to get duration of {stream_url}: {e.message}")
            return 0.0
