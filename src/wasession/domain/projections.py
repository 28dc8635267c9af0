"""Read-only projections of client chat/message objects into API payloads."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

MAX_CHATS = 30
MAX_MESSAGES = 50
LAST_MESSAGE_PREVIEW_CHARS = 100


def _serialized_id(value: Any) -> Any:
    """Chat ids come as ``{"_serialized": ...}`` objects or plain strings."""
    if isinstance(value, Mapping):
        return value.get("_serialized")
    return value


def _short_id(value: Any) -> Any:
    """Message ids come as ``{"id": ...}`` objects or plain strings."""
    if isinstance(value, Mapping):
        return value.get("id")
    return value


def _timestamp(item: Mapping[str, Any]) -> int:
    ts = item.get("timestamp")
    return ts if isinstance(ts, (int, float)) else 0


def _count(value: Any) -> int:
    """Non-negative integer counter; anything unparseable counts as 0."""
    if isinstance(value, bool):
        return int(value)
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _last_message(raw: Mapping[str, Any] | None) -> dict | None:
    if not raw:
        return None
    body = raw.get("body")
    return {
        "body": body[:LAST_MESSAGE_PREVIEW_CHARS] if isinstance(body, str) else body,
        "timestamp": raw.get("timestamp"),
        "fromMe": bool(raw.get("fromMe")),
    }


def chat_summary(chat: Mapping[str, Any]) -> dict:
    return {
        "id": _serialized_id(chat.get("id")),
        "name": chat.get("name"),
        "isGroup": bool(chat.get("isGroup")),
        "unreadCount": _count(chat.get("unreadCount")),
        "lastMessage": _last_message(chat.get("lastMessage")),
        "timestamp": chat.get("timestamp"),
    }


def message_summary(message: Mapping[str, Any]) -> dict:
    return {
        "id": _short_id(message.get("id")),
        "body": message.get("body"),
        "fromMe": bool(message.get("fromMe")),
        "timestamp": message.get("timestamp"),
        "type": message.get("type"),
        "hasMedia": bool(message.get("hasMedia")),
    }


def recent_chats(chats: Iterable[Mapping[str, Any]], limit: int = MAX_CHATS) -> list[dict]:
    """Most recent chats first, at most ``limit``."""
    ordered = sorted(chats, key=_timestamp, reverse=True)
    return [chat_summary(c) for c in ordered[:limit]]


def recent_messages(
    messages: Iterable[Mapping[str, Any]], limit: int = MAX_MESSAGES
) -> list[dict]:
    """Most recent messages first, at most ``limit``."""
    ordered = sorted(messages, key=_timestamp, reverse=True)
    return [message_summary(m) for m in ordered[:limit]]


def sent_message_result(result: Mapping[str, Any], to: str) -> dict:
    return {
        "success": True,
        "messageId": _short_id(result.get("id")),
        "timestamp": result.get("timestamp"),
        "to": to,
    }
