"""Local rejections raised by the proxy before any upstream call."""
from __future__ import annotations


class ProxyError(RuntimeError):
    """Raised when an inbound request cannot be forwarded."""

    status_code: int = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class MethodNotAllowed(ProxyError):
    status_code = 405


class BadTarget(ProxyError):
    """The ``target`` URL is malformed or points outside the audio origin."""


class MissingRequiredParameter(ProxyError):
    pass
