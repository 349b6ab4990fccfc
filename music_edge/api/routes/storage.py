"""Key-value storage endpoint backed by the optional SQLite store."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from music_edge.api.body import read_json_body
from music_edge.schemas import StorageDeleteRequest, StorageResponse, StorageWriteRequest
from music_edge.services.storage import KeyValueStore

router = APIRouter(prefix="/api", tags=["storage"])
logger = logging.getLogger(__name__)

STORAGE_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,DELETE,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _json(content: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    if isinstance(content, StorageResponse):
        content = content.model_dump(by_alias=True, exclude_unset=True)
    return JSONResponse(content=content, status_code=status_code, headers=dict(STORAGE_CORS_HEADERS))


def _parse_keys(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [key.strip() for key in raw.split(",") if key.strip()]


async def _handle_get(request: Request, store: KeyValueStore) -> JSONResponse:
    if request.query_params.get("status"):
        return _json(StorageResponse(d1_available=True))

    keys = _parse_keys(request.query_params.get("keys"))
    data = await asyncio.to_thread(store.get, keys)
    return _json(StorageResponse(d1_available=True, data=data))


async def _handle_post(request: Request, store: KeyValueStore) -> JSONResponse:
    body = await read_json_body(request)
    try:
        payload = StorageWriteRequest.model_validate(body)
    except ValidationError:
        return _json({"error": "Invalid payload"}, status.HTTP_400_BAD_REQUEST)

    updated = await asyncio.to_thread(store.upsert, payload.data)
    logger.debug("Stored %d key(s)", updated)
    return _json(StorageResponse(d1_available=True, updated=updated))


async def _handle_delete(request: Request, store: KeyValueStore) -> JSONResponse:
    body = await read_json_body(request)
    try:
        keys = StorageDeleteRequest.model_validate(body).string_keys()
    except ValidationError:
        keys = []

    deleted = await asyncio.to_thread(store.delete, keys)
    logger.debug("Deleted %d key(s)", deleted)
    return _json(StorageResponse(d1_available=True, deleted=deleted))


@router.api_route("/storage", methods=["GET", "HEAD", "POST", "DELETE", "OPTIONS", "PUT", "PATCH"])
async def storage(request: Request) -> Response:
    method = request.method.upper()
    if method == "OPTIONS":
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=dict(STORAGE_CORS_HEADERS))
    if method not in ("GET", "POST", "DELETE"):
        return _json({"error": "Method not allowed"}, status.HTTP_405_METHOD_NOT_ALLOWED)

    store: Optional[KeyValueStore] = request.app.state.kv_store
    if store is None:
        if method == "DELETE":
            return _json(StorageResponse(d1_available=False))
        return _json(StorageResponse(d1_available=False, data={}))

    if method == "GET":
        return await _handle_get(request, store)
    if method == "POST":
        return await _handle_post(request, store)
    return await _handle_delete(request, store)
