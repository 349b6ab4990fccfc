"""Routes each inbound request to the audio origin or the metadata API."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from starlette.responses import Response, StreamingResponse
from starlette.types import Receive, Scope, Send

from music_edge.services.proxy.allowlist import normalize_audio_url
from music_edge.services.proxy.errors import BadTarget, MethodNotAllowed, MissingRequiredParameter
from music_edge.services.proxy.headers import filter_response_headers
from music_edge.services.proxy.inbound import ApiTarget, AudioTarget, InboundRequest, resolve_target
from music_edge.services.proxy.upstream import build_outbound_headers

logger = logging.getLogger(__name__)

FORWARDED_METHODS = frozenset({"GET", "HEAD"})
MAX_AUDIO_REDIRECTS = 5
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,HEAD,OPTIONS",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Max-Age": "86400",
}


def preflight_response() -> Response:
    return Response(status_code=204, headers=dict(PREFLIGHT_HEADERS))


@dataclass(slots=True)
class ProxyDispatcher:
    """Forward one request upstream and relay status, filtered headers and raw body."""

    client: httpx.AsyncClient
    api_base_url: str
    audio_allowed_domain: str = "kuwo.cn"

    async def dispatch(self, inbound: InboundRequest) -> Response:
        if inbound.method == "OPTIONS":
            return preflight_response()
        if inbound.method not in FORWARDED_METHODS:
            raise MethodNotAllowed("Method not allowed")

        target = resolve_target(inbound)
        if isinstance(target, AudioTarget):
            return await self._proxy_audio(target, inbound)
        return await self._proxy_api(target, inbound)

    async def _proxy_audio(self, target: AudioTarget, inbound: InboundRequest) -> Response:
        url = normalize_audio_url(target.raw_url, self.audio_allowed_domain)
        if url is None:
            raise BadTarget("Invalid target")

        headers = build_outbound_headers(None, inbound, "audio")
        logger.debug("Forwarding %s audio request to %s", inbound.method, url.host)
        upstream = await self._send_audio(inbound.method, url, headers)
        return self._relay(upstream, is_audio=True)

    async def _proxy_api(self, target: ApiTarget, inbound: InboundRequest) -> Response:
        if "types" not in target.query:
            raise MissingRequiredParameter("Missing types")

        url = httpx.URL(self.api_base_url).copy_merge_params(target.query)
        source = target.query.get("source")
        headers = build_outbound_headers(source, inbound, "api")
        logger.debug("Forwarding API request types=%s source=%s", target.query["types"], source)
        request = self.client.build_request("GET", url, headers=headers)
        upstream = await self.client.send(request, stream=True)
        return self._relay(upstream, is_audio=False)

    async def _send_audio(self, method: str, url: httpx.URL, headers: dict[str, str]) -> httpx.Response:
        """Follow redirects one hop at a time, holding every hop to the allowlist."""

        request = self.client.build_request(method, url, headers=headers)
        for _ in range(MAX_AUDIO_REDIRECTS + 1):
            upstream = await self.client.send(request, stream=True, follow_redirects=False)
            next_request = upstream.next_request
            if next_request is None:
                return upstream
            await upstream.aclose()

            next_url = normalize_audio_url(str(next_request.url), self.audio_allowed_domain)
            if next_url is None:
                logger.warning("Audio origin redirected outside the allowlist: %s", next_request.url.host)
                raise BadTarget("Invalid redirect target")
            request = self.client.build_request(next_request.method, next_url, headers=headers)

        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)

    def _relay(self, upstream: httpx.Response, *, is_audio: bool) -> Response:
        relayed = filter_response_headers(_raw_header_pairs(upstream.headers), is_audio=is_audio)
        return UpstreamStreamingResponse(upstream, headers=relayed)


class UpstreamStreamingResponse(StreamingResponse):
    """Relay an open upstream body and release it on every exit path.

    Raw bytes keep Content-Length and Content-Range valid for the client.
    """

    def __init__(self, upstream: httpx.Response, headers: dict[str, str]) -> None:
        super().__init__(upstream.aiter_raw(), status_code=upstream.status_code, headers=headers)
        self.upstream = upstream

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.upstream.aclose()


def _raw_header_pairs(headers: httpx.Headers) -> list[tuple[str, str]]:
    return [
        (name.decode(headers.encoding), value.decode(headers.encoding))
        for name, value in headers.raw
    ]
