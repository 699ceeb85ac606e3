"""Channel resolution, status and manifest endpoints."""

from __future__ import annotations

import math

from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from livetap.api.dependencies import Client
from livetap.api.schemas import (
    ErrorDetail,
    LiveInfoResponse,
    PluginListResponse,
    PluginResponse,
    ResolveRequest,
    StatusResponse,
    WarmUpRequest,
    WarmUpResponse,
)
from livetap.core.exceptions import (
    CoolingDownError,
    LivetapError,
    NotFoundError,
    ResolutionError,
    StreamUnavailableError,
    StreamUnhealthyError,
)
from livetap.core.models import ChannelConfig, LiveInfo

router = APIRouter(tags=["live"])

MPEGURL_MEDIA_TYPE = "application/vnd.apple.mpegurl"

# Query keys consumed by the live endpoint itself
_LIVE_PARAMS = frozenset({"url", "parser", "proxyUrl"})


def _http_error(error: LivetapError) -> HTTPException:
    """Map a domain error to an HTTP error response."""
    headers = None
    if isinstance(error, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, CoolingDownError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        headers = {"Retry-After": str(max(1, math.ceil(error.retry_after)))}
    elif isinstance(error, (ResolutionError, StreamUnhealthyError)):
        status_code = status.HTTP_502_BAD_GATEWAY
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    details = dict(error.details)
    if isinstance(error, StreamUnavailableError) and error.status_code is not None:
        details["upstreamStatus"] = error.status_code

    detail = ErrorDetail(
        code=type(error).__name__,
        message=error.message,
        details=details or None,
    )
    return HTTPException(
        status_code=status_code,
        detail=detail.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


def _live_info_response(source_url: str, info: LiveInfo) -> LiveInfoResponse:
    return LiveInfoResponse(
        source_url=source_url,
        live_url=info.live_url,
        extra_info=info.extra_info,
        created_at=info.created_at,
    )


@router.get(
    "/plugins",
    response_model=PluginListResponse,
    operation_id="listPlugins",
    summary="List resolution plugins",
    description="List registered resolution strategies and their optional capabilities.",
)
async def list_plugins(client: Client) -> PluginListResponse:
    """List registered plugins."""
    return PluginListResponse(
        default_strategy=client.settings.default_strategy,
        plugins=[
            PluginResponse(
                name=name,
                capabilities=sorted(client.plugin_capabilities(name)),
            )
            for name in client.plugin_names()
        ],
    )


@router.post(
    "/resolve",
    response_model=LiveInfoResponse,
    operation_id="resolveChannel",
    summary="Resolve a channel",
    description=(
        "Resolve a channel source URL to its stream URL. Cached resolutions are "
        "returned as-is unless force is set."
    ),
)
async def resolve_channel(request: ResolveRequest, client: Client) -> LiveInfoResponse:
    """Resolve a channel, optionally bypassing the cache."""
    try:
        if request.force:
            info = await client.update_url_cache_single(request.to_channel(), reset_cooldown=True)
        else:
            info = await client.resolve(request.url, request.proxy_url, request.parser)
    except LivetapError as e:
        raise _http_error(e) from e

    return _live_info_response(request.url, info)


@router.get(
    "/status",
    response_model=StatusResponse,
    operation_id="getChannelStatus",
    summary="Channel status",
    description="Get the health record of a channel.",
)
async def get_channel_status(
    client: Client,
    url: str = Query(..., min_length=1, description="Channel source URL"),
) -> StatusResponse:
    """Get a channel's health record."""
    record = client.get_status(url)
    return StatusResponse(
        source_url=url,
        status=record.status,
        message=record.message,
        last_checked_at=record.last_checked_at,
        retry_count=record.retry_count,
        cooldown_multiplier=record.cooldown_multiplier,
    )


@router.get(
    "/live.m3u8",
    operation_id="getLiveManifest",
    summary="Live manifest",
    description=(
        "Resolve a channel and return its HLS manifest. Query parameters other "
        "than url, parser and proxyUrl are forwarded to the upstream manifest request."
    ),
    response_class=Response,
)
async def get_live_manifest(
    request: Request,
    client: Client,
    url: str = Query(..., min_length=1, description="Channel source URL"),
    parser: str = Query("", description="Resolution strategy name"),
    proxy_url: str = Query("", alias="proxyUrl", description="Proxy for outbound requests"),
) -> Response:
    """Serve the manifest of a channel."""
    channel = ChannelConfig(url=url, parser=parser, proxy_url=proxy_url)
    query = [
        (key, value)
        for key, value in request.query_params.multi_items()
        if key not in _LIVE_PARAMS
    ]

    try:
        result = await client.live_manifest(channel, query)
    except LivetapError as e:
        raise _http_error(e) from e

    return Response(content=result.body, media_type=MPEGURL_MEDIA_TYPE)


@router.post(
    "/channels/warm",
    response_model=WarmUpResponse,
    status_code=status.HTTP_202_ACCEPTED,
    operation_id="warmChannels",
    summary="Warm channel resolutions",
    description="Schedule background resolution of channels and return immediately.",
)
async def warm_channels(request: WarmUpRequest, client: Client) -> WarmUpResponse:
    """Schedule warm-ups."""
    for channel in request.channels:
        client.warm_up(channel.to_channel())
    return WarmUpResponse(scheduled=len(request.channels))
