"""Network fetch collaborator."""

from .fetcher import DEVICE_HEADERS, HttpFetcher, parse_device

__all__ = [
    "DEVICE_HEADERS",
    "HttpFetcher",
    "parse_device",
]
