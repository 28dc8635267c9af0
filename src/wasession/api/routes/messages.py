"""Send messages and read chats through the connected session.

Security: NEVER log phone numbers, chat ids or message bodies. Only log
hashes and lengths.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from wasession.api.deps import get_gateway, get_settings, get_tracker
from wasession.domain.phone import normalize_phone
from wasession.domain.projections import (
    MAX_MESSAGES,
    recent_chats,
    recent_messages,
    sent_message_result,
)
from wasession.domain.status import ConnectionStatus, StatusTracker
from wasession.errors import ErrorKind, ServiceError
from wasession.observability.logging import get_logger
from wasession.observability.redaction import hash_identifier, safe_log_context
from wasession.session.gateway import SessionGateway
from wasession.settings import Settings

router = APIRouter(prefix="/api", tags=["messages"])

logger = get_logger(__name__)


class SendMessageRequest(BaseModel):
    """Request body for POST /api/send. Presence is checked by the handler."""

    phone: str | int | None = None
    message: str | None = None


def _require_connected(tracker: StatusTracker, message: str, *, need_ready: bool = True) -> None:
    snap = tracker.snapshot()
    if snap.status is not ConnectionStatus.CONNECTED or (need_ready and not snap.ready):
        raise ServiceError(ErrorKind.NOT_CONNECTED, message)


@router.post("/send")
async def send_message(
    body: SendMessageRequest | None = None,
    settings: Settings = Depends(get_settings),
    tracker: StatusTracker = Depends(get_tracker),
    gateway: SessionGateway = Depends(get_gateway),
) -> dict:
    """Send a text message to a phone number.

    Returns:
        {"success": true, "messageId", "timestamp", "to"} where ``to`` is the
        normalized phone.
    """
    body = body or SendMessageRequest()
    if body.phone in (None, "") or not body.message:
        raise ServiceError(ErrorKind.VALIDATION, "Phone and message are required")

    _require_connected(tracker, "WhatsApp not connected. Please scan QR first.")

    destination = normalize_phone(str(body.phone), settings.phone)

    log_ctx = safe_log_context(
        to_hash=hash_identifier(destination.chat_id),
        text_len=len(body.message),
    )
    logger.info("send request received", extra={"extra_fields": log_ctx})

    result = await gateway.send_message(destination.chat_id, body.message)

    logger.info("message sent", extra={"extra_fields": log_ctx})
    return sent_message_result(result, destination.phone)


@router.get("/chats")
async def list_chats(
    tracker: StatusTracker = Depends(get_tracker),
    gateway: SessionGateway = Depends(get_gateway),
) -> dict:
    """Most recent chats (newest first, at most 30)."""
    _require_connected(tracker, "WhatsApp not connected")

    chats = await gateway.get_chats()
    return {"success": True, "chats": recent_chats(chats)}


@router.get("/messages/{chat_id}")
async def list_messages(
    chat_id: str = Path(..., description="Serialized chat id, e.g. 51987654321@c.us"),
    tracker: StatusTracker = Depends(get_tracker),
    gateway: SessionGateway = Depends(get_gateway),
) -> dict:
    """Most recent messages of one chat (newest first, at most 50)."""
    _require_connected(tracker, "WhatsApp not connected", need_ready=False)

    messages = await gateway.fetch_messages(chat_id, MAX_MESSAGES)
    return {"success": True, "messages": recent_messages(messages)}
