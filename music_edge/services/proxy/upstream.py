"""Outbound header synthesis, with provider-specific extras kept in a lookup table."""
from __future__ import annotations

import logging
import random
import string
from typing import Callable, Optional

from music_edge.services.proxy.inbound import InboundRequest, ProxyMode

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)
API_ACCEPT = "application/json, text/plain, */*"

KUWO_ORIGIN = "https://www.kuwo.cn"
KUWO_AUDIO_REFERER = f"{KUWO_ORIGIN}/"
KUWO_API_REFERER = f"{KUWO_ORIGIN}/search/list"

_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
_TOKEN_LENGTH = 8

HeaderInjector = Callable[[InboundRequest], dict[str, str]]


def client_ip(inbound: InboundRequest) -> Optional[str]:
    """Return the caller address from ``x-forwarded-for`` or ``x-real-ip``."""

    forwarded = inbound.header("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return inbound.header("x-real-ip")


def session_token() -> str:
    """Opaque throwaway token; the provider only checks that one is present."""

    return "".join(random.choices(_TOKEN_ALPHABET, k=_TOKEN_LENGTH))


def _kuwo_headers(inbound: InboundRequest) -> dict[str, str]:
    # The kuwo backend rejects calls without session-like cookies and a client IP.
    token = session_token()
    headers = {
        "Referer": KUWO_API_REFERER,
        "Origin": KUWO_ORIGIN,
        "Accept-Language": "zh-CN,zh;q=0.9",
        "X-Requested-With": "XMLHttpRequest",
        "Cookie": f"kw_token={token}; csrf={token}",
        "csrf": token,
    }
    ip = client_ip(inbound)
    if ip:
        headers["X-Forwarded-For"] = ip
        headers["X-Real-IP"] = ip
    return headers


PROVIDER_HEADERS: dict[str, HeaderInjector] = {
    "kuwo": _kuwo_headers,
}


def build_outbound_headers(
    provider_hint: Optional[str],
    inbound: InboundRequest,
    mode: ProxyMode,
) -> dict[str, str]:
    """Assemble a fresh header mapping for one outbound call.

    Only the headers named here cross the boundary; nothing else from the
    inbound request is forwarded.
    """

    headers = {"User-Agent": inbound.header("user-agent") or DESKTOP_USER_AGENT}

    if mode == "audio":
        headers["Referer"] = KUWO_AUDIO_REFERER
        range_header = inbound.header("range")
        if range_header:
            headers["Range"] = range_header
        return headers

    headers["Accept"] = API_ACCEPT
    injector = PROVIDER_HEADERS.get(provider_hint or "")
    if injector is not None:
        logger.debug("Injecting provider headers for source=%s", provider_hint)
        headers.update(injector(inbound))
    return headers
