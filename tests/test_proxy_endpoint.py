"""End-to-end behaviour of ``/api/proxy`` against a fake upstream."""
import httpx
import pytest

from tests.conftest import API_BASE, upstream_reply

PREFLIGHT = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET,HEAD,OPTIONS",
    "access-control-allow-headers": "*",
}


@pytest.mark.parametrize("path", ["/api/proxy", "/api/proxy?target=http://evil.com/x", "/api/proxy?types=search"])
def test_options_is_a_bodyless_preflight(client, upstream, path):
    response = client.options(path)

    assert response.status_code == 204
    assert response.content == b""
    for name, value in PREFLIGHT.items():
        assert response.headers[name] == value
    assert response.headers["access-control-max-age"] == "86400"
    assert upstream.requests == []


@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH", "DELETE"])
def test_other_methods_are_rejected(client, upstream, method):
    response = client.request(method, "/api/proxy?types=search")

    assert response.status_code == 405
    assert response.text == "Method not allowed"
    assert upstream.requests == []


def test_disallowed_target_is_a_local_400(client, upstream):
    response = client.get("/api/proxy", params={"target": "http://evil.com/x.mp3"})

    assert response.status_code == 400
    assert response.text == "Invalid target"
    assert response.headers["access-control-allow-origin"] == "*"
    assert upstream.requests == []


def test_audio_is_streamed_from_plain_http_origin(client, upstream):
    payload = bytes(range(256)) * 64
    upstream.handler = lambda request: upstream_reply(
        200,
        content=payload,
        headers={"Content-Type": "audio/mpeg", "Set-Cookie": "tracking=1", "Server": "nginx"},
    )

    response = client.get(
        "/api/proxy",
        params={"target": "https://sycdn.kuwo.cn/a/b.mp3", "types": "ignored"},
        headers={"User-Agent": "Player/1.0", "Cookie": "auth=abc"},
    )

    assert response.status_code == 200
    assert response.content == payload
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.headers["cache-control"] == "public, max-age=3600"
    assert response.headers["access-control-allow-origin"] == "*"
    assert "set-cookie" not in response.headers
    assert "server" not in response.headers

    sent = upstream.last
    assert sent.method == "GET"
    assert str(sent.url) == "http://sycdn.kuwo.cn/a/b.mp3"
    assert sent.headers["user-agent"] == "Player/1.0"
    assert sent.headers["referer"] == "https://www.kuwo.cn/"
    assert "cookie" not in sent.headers


def test_range_requests_relay_partial_content(client, upstream):
    def handler(request):
        assert request.headers["range"] == "bytes=10-19"
        return upstream_reply(
            206,
            content=b"0123456789",
            headers={
                "Content-Type": "audio/mpeg",
                "Content-Range": "bytes 10-19/100",
                "Accept-Ranges": "bytes",
                "Cache-Control": "max-age=60",
            },
        )

    upstream.handler = handler

    response = client.get(
        "/api/proxy",
        params={"target": "http://music.kuwo.cn/a.mp3"},
        headers={"Range": "bytes=10-19"},
    )

    assert response.status_code == 206
    assert response.content == b"0123456789"
    assert response.headers["content-range"] == "bytes 10-19/100"
    assert response.headers["accept-ranges"] == "bytes"
    assert response.headers["content-length"] == "10"
    assert response.headers["cache-control"] == "max-age=60"


def test_head_is_forwarded_with_the_inbound_method(client, upstream):
    upstream.handler = lambda request: upstream_reply(headers={"Content-Type": "audio/mpeg"})

    response = client.head("/api/proxy", params={"target": "http://music.kuwo.cn/a.mp3"})

    assert response.status_code == 200
    assert upstream.last.method == "HEAD"


def test_missing_types_is_rejected_before_forwarding(client, upstream):
    response = client.get("/api/proxy", params={"source": "kuwo", "name": "x"})

    assert response.status_code == 400
    assert response.text == "Missing types"
    assert upstream.requests == []


def test_api_query_is_forwarded_without_callback(client, upstream):
    upstream.handler = lambda request: upstream_reply(content=b'{"data":[1,2]}')

    response = client.get(
        "/api/proxy",
        params={"types": "search", "source": "netease", "name": "晴天", "callback": "cb"},
    )

    assert response.status_code == 200
    assert response.content == b'{"data":[1,2]}'
    assert response.headers["content-type"] == "application/json; charset=utf-8"
    assert response.headers["cache-control"] == "no-store"

    sent = upstream.last
    assert sent.method == "GET"
    assert f"{sent.url.scheme}://{sent.url.host}{sent.url.path}" == API_BASE
    assert dict(sent.url.params) == {"types": "search", "source": "netease", "name": "晴天"}
    assert sent.headers["accept"] == "application/json, text/plain, */*"
    assert "csrf" not in sent.headers


def test_kuwo_source_gets_provider_headers(client, upstream):
    client.get(
        "/api/proxy",
        params={"types": "url", "source": "kuwo", "id": "123"},
        headers={"X-Forwarded-For": "203.0.113.9"},
    )

    sent = upstream.last
    assert sent.headers["origin"] == "https://www.kuwo.cn"
    assert sent.headers["x-real-ip"] == "203.0.113.9"
    assert sent.headers["cookie"].startswith("kw_token=")


def test_upstream_errors_are_relayed_verbatim(client, upstream):
    upstream.handler = lambda request: upstream_reply(
        503, content=b"<html>busy</html>", headers={"Content-Type": "text/html"}
    )

    response = client.get("/api/proxy", params={"types": "search"})

    assert response.status_code == 503
    assert response.content == b"<html>busy</html>"
    assert response.headers["content-type"] == "text/html"


def test_repeated_requests_are_identical(client, upstream):
    upstream.handler = lambda request: upstream_reply(
        200, content=b"[]", headers={"ETag": '"v1"', "X-Debug": "1"}
    )

    first = client.get("/api/proxy", params={"types": "search", "name": "x"})
    second = client.get("/api/proxy", params={"types": "search", "name": "x"})

    assert first.status_code == second.status_code == 200
    assert dict(first.headers) == dict(second.headers)
    assert first.content == second.content


def test_upstream_transport_failure_propagates(client, upstream):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream.handler = handler

    with pytest.raises(httpx.ConnectError):
        client.get("/api/proxy", params={"types": "search"})


def test_audio_redirects_within_the_origin_are_followed_over_http(client, upstream):
    def handler(request):
        if request.url.host == "music.kuwo.cn":
            return upstream_reply(302, headers={"Location": "https://cdn.kuwo.cn/real.mp3"})
        return upstream_reply(200, content=b"audio", headers={"Content-Type": "audio/mpeg"})

    upstream.handler = handler

    response = client.get(
        "/api/proxy",
        params={"target": "http://music.kuwo.cn/a.mp3"},
        headers={"Range": "bytes=0-"},
    )

    assert response.status_code == 200
    assert response.content == b"audio"
    assert [str(request.url) for request in upstream.requests] == [
        "http://music.kuwo.cn/a.mp3",
        "http://cdn.kuwo.cn/real.mp3",
    ]
    assert upstream.last.headers["range"] == "bytes=0-"


def test_audio_redirect_off_the_allowlist_is_not_followed(client, upstream):
    upstream.handler = lambda request: upstream_reply(302, headers={"Location": "http://evil.com/x.mp3"})

    response = client.get("/api/proxy", params={"target": "http://music.kuwo.cn/a.mp3"})

    assert response.status_code == 400
    assert response.text == "Invalid redirect target"
    assert [request.url.host for request in upstream.requests] == ["music.kuwo.cn"]


def test_endless_audio_redirects_give_up(client, upstream):
    upstream.handler = lambda request: upstream_reply(302, headers={"Location": "/again"})

    with pytest.raises(httpx.TooManyRedirects):
        client.get("/api/proxy", params={"target": "http://music.kuwo.cn/a.mp3"})
