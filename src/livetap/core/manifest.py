"""HLS playlist helpers: validation, synthetic playlists and query forwarding."""

from collections.abc import Iterable

import httpx

MANIFEST_MARKER = "#EXTM3U"

# Query keys used for routing/auth by the request handler, never forwarded upstream
ROUTING_PARAMS = frozenset({"k", "c", "token"})
HEADER_PARAM_PREFIX = "header"


def is_valid_m3u(content: str) -> bool:
    """Whether the content starts with the playlist marker once trimmed."""
    return content.strip().startswith(MANIFEST_MARKER)


def is_manifest_content_type(content_type: str) -> bool:
    """Whether a Content-Type header could carry a textual playlist."""
    content_type = content_type.lower()
    return "mpegurl" in content_type or "text" in content_type


def vod_manifest(stream_url: str, duration: float) -> str:
    """
    Build a single-entry VOD playlist for a finite media resource.

    Args:
        stream_url: URL of the media resource
        duration: Length of the resource in seconds

    Returns:
        Playlist text ending with an end-of-list marker
    """
    return (
        f"{MANIFEST_MARKER}\n"
        "#EXT-X-VERSION:3\n"
        f"#EXT-X-TARGETDURATION:{duration:.0f}\n"
        "#EXT-X-PLAYLIST-TYPE:VOD\n"
        "#EXT-X-MEDIA-SEQUENCE:0\n"
        f"#EXTINF:{duration:.4f}, video\n"
        f"{stream_url}\n"
        "#EXT-X-ENDLIST"
    )


def fallback_manifest(stream_url: str) -> str:
    """Build a playlist pointing at a resource of unknown duration."""
    return (
        f"{MANIFEST_MARKER}\n"
        "#EXTINF:-1, video\n"
        "#EXT-X-PLAYLIST-TYPE:VOD\n"
        f"{stream_url}\n"
        "#EXT-X-ENDLIST"
    )


def is_routing_param(key: str) -> bool:
    """Whether a caller query key is an internal routing artifact."""
    return key.startswith(HEADER_PARAM_PREFIX) or key in ROUTING_PARAMS


def forward_query(stream_url: str, query: Iterable[tuple[str, str]] | None) -> str:
    """
    Append caller query parameters to a stream URL.

    Routing artifacts (header overrides, channel and token keys) are dropped,
    everything else is appended verbatim after the URL's own parameters.
    """
    if not query:
        return stream_url

    forwarded = [(key, value) for key, value in query if not is_routing_param(key)]
    if not forwarded:
        return stream_url

    url = httpx.URL(stream_url)
    params = url.params
    for key, value in forwarded:
        params = params.add(key, value)
    return str(url.copy_with(params=params))
