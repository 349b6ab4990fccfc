"""Shared-password login and auth cookie assembly."""
from __future__ import annotations

import base64
import hmac
from dataclasses import dataclass
from typing import Optional

AUTH_COOKIE_NAME = "auth"
AUTH_COOKIE_MAX_AGE = 48 * 60 * 60


def build_auth_cookie(secret: str, secure: bool) -> str:
    """Return the ``Set-Cookie`` value carrying the base64 encoded secret."""

    token = base64.b64encode(secret.encode("utf-8")).decode("ascii")
    segments = [
        f"{AUTH_COOKIE_NAME}={token}",
        f"Max-Age={AUTH_COOKIE_MAX_AGE}",
        "Path=/",
        "SameSite=Lax",
        "HttpOnly",
    ]
    if secure:
        segments.append("Secure")
    return "; ".join(segments)


@dataclass(slots=True, frozen=True)
class PasswordGate:
    """Single shared-secret check, configured once at startup.

    An unset or empty secret lets every caller through.
    """

    secret: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.secret)

    def check(self, provided: str) -> bool:
        if not self.enabled:
            return True
        return hmac.compare_digest(provided.encode("utf-8"), (self.secret or "").encode("utf-8"))

    def cookie(self, secure: bool) -> str:
        return build_auth_cookie(self.secret or "", secure)
