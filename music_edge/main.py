"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from music_edge.api.routes import login_router, proxy_router, storage_router
from music_edge.api.routes.proxy import register_error_handlers
from music_edge.core.config import Settings, get_settings
from music_edge.core.logging_config import configure_logging
from music_edge.core.security import PasswordGate
from music_edge.services.proxy import ProxyDispatcher
from music_edge.services.storage import KeyValueStore


APP_TITLE = "Music Edge Proxy"
APP_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format, settings.quiet_loggers)
    app = FastAPI(title=APP_TITLE, version=APP_VERSION)

    register_error_handlers(app)
    app.include_router(proxy_router)
    app.include_router(login_router)
    app.include_router(storage_router)

    # The secret is bound once here; handlers never read it from the environment.
    app.state.password_gate = PasswordGate(secret=settings.password)
    if not app.state.password_gate.enabled:
        logger.warning("No password configured; login accepts every caller")

    @app.on_event("startup")
    async def _startup_event() -> None:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.upstream_timeout_seconds),
            follow_redirects=True,
            headers={"Accept-Encoding": "identity"},
            transport=transport,
        )
        app.state.upstream_client = client
        app.state.proxy_dispatcher = ProxyDispatcher(
            client=client,
            api_base_url=settings.api_base_url,
            audio_allowed_domain=settings.audio_allowed_domain,
        )

        store: Optional[KeyValueStore] = None
        if settings.storage_path:
            store = KeyValueStore(settings.storage_path)
            store.init_schema()
        app.state.kv_store = store

    @app.on_event("shutdown")
    async def _shutdown_event() -> None:
        await app.state.upstream_client.aclose()

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    if settings.static_dir and Path(settings.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="frontend")

    return app


app = create_app()
