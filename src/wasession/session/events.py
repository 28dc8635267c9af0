"""Session lifecycle events emitted by the session client."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventKind(str, Enum):
    LOADING_SCREEN = "loading_screen"
    QR = "qr"
    AUTHENTICATED = "authenticated"
    READY = "ready"
    AUTH_FAILURE = "auth_failure"
    DISCONNECTED = "disconnected"
    REMOTE_SESSION_SAVED = "remote_session_saved"


class InvalidEventError(Exception):
    """Raised when an event payload has an invalid shape."""

    pass


@dataclass(frozen=True)
class SessionEvent:
    kind: EventKind
    data: dict[str, Any] = field(default_factory=dict)


def parse_event(payload: Any) -> SessionEvent:
    """Validate a bridge webhook body and build a SessionEvent.

    Expected shape: ``{"event": "<kind>", "data": {...}}`` where ``data`` is
    optional.

    Raises:
        InvalidEventError: If the body is not an object, the event name is
            unknown, or ``data`` is not an object.
    """
    if not isinstance(payload, dict):
        raise InvalidEventError("payload must be an object")

    name = payload.get("event")
    if not isinstance(name, str):
        raise InvalidEventError("missing or invalid event")

    try:
        kind = EventKind(name)
    except ValueError:
        raise InvalidEventError(f"unknown event: {name}") from None

    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise InvalidEventError("data must be an object")

    return SessionEvent(kind=kind, data=data)
