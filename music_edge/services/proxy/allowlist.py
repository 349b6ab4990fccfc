"""Host allowlist for the audio ``target`` parameter."""
from __future__ import annotations

from typing import Optional

import httpx

ALLOWED_SCHEMES = frozenset({"http", "https"})


def is_allowed_host(hostname: str, allowed_domain: str) -> bool:
    """Match ``allowed_domain`` itself or any subdomain of it, label by label."""

    host = hostname.lower().rstrip(".")
    domain = allowed_domain.lower().strip(".")
    if not host or not domain:
        return False
    return host == domain or host.endswith("." + domain)


def normalize_audio_url(raw_url: str, allowed_domain: str = "kuwo.cn") -> Optional[httpx.URL]:
    """Return ``raw_url`` rewritten to plain HTTP, or ``None`` when it may not be proxied.

    The audio origin only serves plain HTTP, so accepted ``https`` links are
    downgraded before the outbound call.
    """

    try:
        url = httpx.URL(raw_url.strip())
    except (httpx.InvalidURL, TypeError):
        return None

    if not url.is_absolute_url:
        return None
    if url.scheme.lower() not in ALLOWED_SCHEMES:
        return None
    if not is_allowed_host(url.host, allowed_domain):
        return None

    try:
        return url.copy_with(scheme="http")
    except httpx.InvalidURL:
        return None
