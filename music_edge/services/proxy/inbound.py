"""Per-request structures shared by the proxy components."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Union
from urllib.parse import parse_qsl

from starlette.datastructures import Headers
from starlette.requests import Request

ProxyMode = Literal["audio", "api"]


@dataclass(slots=True, frozen=True)
class InboundRequest:
    """Snapshot of the caller's request; only the query string and headers matter."""

    method: str
    query_string: str = ""
    headers: Headers = field(default_factory=Headers)

    @classmethod
    def from_request(cls, request: Request) -> "InboundRequest":
        return cls(
            method=request.method.upper(),
            query_string=request.url.query,
            headers=request.headers,
        )

    def query_items(self) -> list[tuple[str, str]]:
        return parse_qsl(self.query_string, keep_blank_values=True)

    def header(self, name: str) -> Optional[str]:
        """Return the first value of ``name`` or ``None`` when absent or empty."""

        value = self.headers.get(name)
        return value or None


@dataclass(slots=True, frozen=True)
class AudioTarget:
    raw_url: str


@dataclass(slots=True, frozen=True)
class ApiTarget:
    query: dict[str, str]


ProxyTarget = Union[AudioTarget, ApiTarget]


def build_api_query(items: list[tuple[str, str]]) -> dict[str, str]:
    """Copy inbound query parameters for the metadata API.

    ``target`` selects the audio path and ``callback`` is a JSONP leftover,
    so neither is ever forwarded. A repeated key keeps its first position and
    its last value.
    """

    query: dict[str, str] = {}
    for key, value in items:
        if key in ("target", "callback"):
            continue
        query[key] = value
    return query


def resolve_target(inbound: InboundRequest) -> ProxyTarget:
    """Select the audio path whenever a non-empty ``target`` parameter is present."""

    items = inbound.query_items()
    for key, value in items:
        if key == "target":
            if value:
                return AudioTarget(raw_url=value)
            break
    return ApiTarget(query=build_api_query(items))
