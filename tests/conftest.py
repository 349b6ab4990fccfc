"""Shared fixtures: settings, a recording fake upstream, and a test client."""
from __future__ import annotations

import json
from typing import Any, Callable, Iterator, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from music_edge.core.config import Settings
from music_edge.main import create_app

API_BASE = "https://music-api.example.test/api.php"


def upstream_reply(
    status_code: int = 200,
    content: bytes = b"",
    headers: Optional[dict[str, str]] = None,
    json_body: Any = None,
) -> httpx.Response:
    """Build an unread upstream response, the way a real connection delivers one.

    ``httpx.Response(content=...)`` is buffered eagerly, so the relay could
    not stream it.
    """

    reply_headers = dict(headers or {})
    if json_body is not None:
        content = json.dumps(json_body).encode("utf-8")
        reply_headers.setdefault("Content-Type", "application/json")
    if content:
        reply_headers.setdefault("Content-Length", str(len(content)))
    return httpx.Response(status_code, headers=reply_headers, stream=httpx.ByteStream(content))


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeUpstream:
    """Record outbound requests and answer them with a configurable handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: upstream_reply(
            json_body={"ok": True}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=API_BASE, password="letmein")


@pytest.fixture
def client(settings: Settings, upstream: FakeUpstream) -> Iterator[TestClient]:
    app = create_app(settings, transport=httpx.MockTransport(upstream))
    with TestClient(app) as test_client:
        yield test_client
