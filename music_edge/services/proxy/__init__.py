"""Proxy service package."""

from .allowlist import normalize_audio_url  # noqa: F401
from .dispatcher import ProxyDispatcher, preflight_response  # noqa: F401
from .errors import BadTarget, MethodNotAllowed, MissingRequiredParameter, ProxyError  # noqa: F401
from .headers import filter_response_headers  # noqa: F401
from .inbound import ApiTarget, AudioTarget, InboundRequest, build_api_query, resolve_target  # noqa: F401
from .upstream import PROVIDER_HEADERS, build_outbound_headers  # noqa: F401
