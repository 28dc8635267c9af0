"""Lifecycle events posted by the automation bridge.

ACK 200 only once the event has been handed to the session client and
applied by the reactor, so the bridge can rely on the new state being
visible to the next API call.
"""

from __future__ import annotations

import hmac
from typing import Any

from fastapi import APIRouter, Depends, Header, Request, Response

from wasession.api.deps import get_reactor, get_settings
from wasession.observability.logging import get_logger
from wasession.observability.redaction import safe_log_context
from wasession.session.events import InvalidEventError, parse_event
from wasession.session.reactor import EventReactor
from wasession.settings import Settings

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

logger = get_logger(__name__)


@router.post("/session")
async def session_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    reactor: EventReactor = Depends(get_reactor),
    x_webhook_secret: str | None = Header(None, alias="X-Webhook-Secret"),
):
    """Receive one bridge event.

    Returns:
        200 {"ok": true} once applied.
        400 if the body is not JSON or not a known event.
        401 if the header does not match BRIDGE_WEBHOOK_SECRET, or if no
            secret is configured and BRIDGE_WEBHOOK_ALLOW_UNSIGNED is off.
    """
    expected_secret = settings.bridge.webhook_secret
    if not expected_secret:
        if settings.bridge.allow_unsigned_webhooks:
            logger.warning("BRIDGE_WEBHOOK_SECRET not set - skipping validation (local dev)")
        else:
            logger.error("BRIDGE_WEBHOOK_SECRET not configured - rejecting event (fail-closed)")
            return Response(status_code=401, content="unauthorized")
    elif not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, expected_secret):
        logger.warning("bridge webhook secret mismatch")
        return Response(status_code=401, content="unauthorized")

    try:
        payload: Any = await request.json()
    except ValueError:
        logger.warning("invalid json in session webhook")
        return Response(status_code=400, content="invalid json")

    try:
        event = parse_event(payload)
    except InvalidEventError as e:
        logger.warning(
            "invalid bridge event",
            extra={"extra_fields": safe_log_context(error=str(e))},
        )
        return Response(status_code=400, content="invalid event")

    logger.info(
        "bridge event received",
        extra={"extra_fields": safe_log_context(event=event.kind.value)},
    )

    await request.app.state.session_client.dispatch(event)
    if reactor.is_running:
        await reactor.drain()

    return {"ok": True}
