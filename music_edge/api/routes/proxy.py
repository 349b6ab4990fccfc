"""Proxy endpoint and its error rendering."""
from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from music_edge.services.proxy import InboundRequest, ProxyDispatcher, ProxyError

router = APIRouter(prefix="/api", tags=["proxy"])
logger = logging.getLogger(__name__)

# Every method reaches the dispatcher so it alone decides what is allowed.
ROUTED_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]


@router.api_route("/proxy", methods=ROUTED_METHODS)
async def proxy(request: Request) -> Response:
    dispatcher: ProxyDispatcher = request.app.state.proxy_dispatcher
    return await dispatcher.dispatch(InboundRequest.from_request(request))


async def _proxy_error_handler(request: Request, exc: ProxyError) -> PlainTextResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.detail)
    return PlainTextResponse(
        exc.detail,
        status_code=exc.status_code,
        headers={"Access-Control-Allow-Origin": "*"},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Render local proxy rejections as plain text with CORS enabled."""

    app.add_exception_handler(ProxyError, _proxy_error_handler)
