"""Shared-password login endpoint."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from music_edge.api.body import read_json_body
from music_edge.core.security import PasswordGate
from music_edge.schemas import LoginResponse

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)


def _json(payload: LoginResponse, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


@router.api_route("/login", methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"])
async def login(request: Request) -> JSONResponse:
    if request.method != "POST":
        return _json(
            LoginResponse(success=False, error="Method not allowed"),
            status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    gate: PasswordGate = request.app.state.password_gate
    body = await read_json_body(request)
    provided = body.get("password") if isinstance(body, dict) else None
    if not isinstance(provided, str):
        provided = ""

    if not gate.check(provided):
        logger.warning("Login rejected: password mismatch")
        return _json(LoginResponse(success=False), status.HTTP_401_UNAUTHORIZED)

    secure = request.headers.get("x-forwarded-proto") == "https"
    response = _json(LoginResponse(success=True), status.HTTP_200_OK)
    response.headers.append("Set-Cookie", gate.cookie(secure))
    return response
