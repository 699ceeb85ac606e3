"""API schema definitions."""

from livetap.api.schemas.base import APIBaseSchema, ErrorDetail
from livetap.api.schemas.requests import ChannelRequest, ResolveRequest, WarmUpRequest
from livetap.api.schemas.responses import (
    HealthResponse,
    LiveInfoResponse,
    PluginListResponse,
    PluginResponse,
    StatusResponse,
    WarmUpResponse,
)

__all__ = [
    # Base
    "APIBaseSchema",
    "ErrorDetail",
    # Requests
    "ChannelRequest",
    "ResolveRequest",
    "WarmUpRequest",
    # Responses
    "HealthResponse",
    "LiveInfoResponse",
    "PluginListResponse",
    "PluginResponse",
    "StatusResponse",
    "WarmUpResponse",
]
