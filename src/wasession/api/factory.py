"""FastAPI application factory.

Wires one session per process: settings -> session store -> session client
-> event reactor -> status tracker, then mounts the HTTP routes.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from wasession.domain.status import StatusTracker
from wasession.observability.correlation import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from wasession.observability.logging import get_logger
from wasession.observability.redaction import safe_log_context
from wasession.persistence.base import SessionStore
from wasession.persistence.factory import build_store
from wasession.session.bridge_client import BridgeSessionClient
from wasession.session.client import SessionClient
from wasession.session.gateway import SessionGateway
from wasession.session.qr import encode_qr_data_url
from wasession.session.reactor import EventReactor, QrEncoder
from wasession.settings import ConfigError, Settings

from .errors import install_error_handlers
from .routers import public
from .routes import messages, session, webhooks_session

logger = get_logger(__name__)


def _build_bridge_client(
    settings: Settings, store: SessionStore | None
) -> BridgeSessionClient | None:
    """Build the default client, or None if persistence is misconfigured."""
    try:
        store = store or build_store(settings)
    except ConfigError as e:
        logger.error(
            "session persistence misconfigured - session client disabled",
            extra={"extra_fields": safe_log_context(error=str(e))},
        )
        return None

    return BridgeSessionClient(
        settings.bridge,
        client_id=settings.client_id,
        store=store,
        request_timeout=settings.adapter_timeout,
        backup_sync_interval_ms=settings.backup_sync_interval_ms,
    )


def create_app(
    settings: Settings | None = None,
    *,
    session_client: SessionClient | None = None,
    store: SessionStore | None = None,
    qr_encoder: QrEncoder | None = None,
) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Explicit settings. If None, read from the environment.
        session_client: Client to drive. If None, a BridgeSessionClient is
            built from settings (skipped when persistence is misconfigured;
            the listener still starts and reports disconnected).
        store: Session store for the default client. If None, chosen by
            PERSISTENCE_BACKEND.
        qr_encoder: Pairing payload renderer. Defaults to a PNG data URL.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings.from_env()

    if session_client is None:
        session_client = _build_bridge_client(settings, store)

    tracker = StatusTracker()
    reactor = EventReactor(
        tracker,
        qr_encoder
        or partial(encode_qr_data_url, width=settings.qr_width, margin=settings.qr_margin),
    )
    if session_client is not None:
        reactor.attach(session_client)
    gateway = SessionGateway(session_client, timeout=settings.adapter_timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        reactor.start()
        if session_client is not None:
            logger.info("initializing session client")
            try:
                await asyncio.wait_for(
                    session_client.initialize(), timeout=settings.adapter_timeout
                )
            except Exception:
                # Keep serving: status stays disconnected and session routes answer 503
                logger.exception("session client initialization failed")
        try:
            yield
        finally:
            await reactor.stop()

    app = FastAPI(
        title="WhatsApp Session Service",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.tracker = tracker
    app.state.reactor = reactor
    app.state.gateway = gateway
    app.state.session_client = session_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[CORRELATION_ID_HEADER],
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    install_error_handlers(app)

    app.include_router(public.router)
    app.include_router(session.router)
    app.include_router(messages.router)

    # Event ingress only exists for clients fed over HTTP
    if hasattr(session_client, "dispatch"):
        app.include_router(webhooks_session.router)

    return app
