"""Response header filtering for relayed upstream responses."""
from __future__ import annotations

from typing import Iterable, Mapping, Union

RELAYED_HEADERS = frozenset(
    {
        "content-type",
        "cache-control",
        "accept-ranges",
        "content-length",
        "content-range",
        "etag",
        "last-modified",
        "expires",
    }
)

AUDIO_CACHE_CONTROL = "public, max-age=3600"
API_CACHE_CONTROL = "no-store"
API_CONTENT_TYPE = "application/json; charset=utf-8"

HeaderSource = Union[Mapping[str, str], Iterable[tuple[str, str]]]


def filter_response_headers(upstream_headers: HeaderSource, is_audio: bool) -> dict[str, str]:
    """Keep the relayable subset of ``upstream_headers`` and add CORS and cache defaults."""

    pairs = upstream_headers.items() if isinstance(upstream_headers, Mapping) else upstream_headers

    safe: dict[str, str] = {}
    seen: set[str] = set()
    for name, value in pairs:
        lowered = name.lower()
        if lowered not in RELAYED_HEADERS or lowered in seen:
            continue
        seen.add(lowered)
        safe[name] = value

    # Audio URLs are content-addressed; metadata answers are not.
    if "cache-control" not in seen:
        safe["Cache-Control"] = AUDIO_CACHE_CONTROL if is_audio else API_CACHE_CONTROL
    if not is_audio and "content-type" not in seen:
        safe["Content-Type"] = API_CONTENT_TYPE

    safe["Access-Control-Allow-Origin"] = "*"
    return safe
