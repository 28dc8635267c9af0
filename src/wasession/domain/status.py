"""Connection status tracking for the single WhatsApp session.

The tracker is the only owner of the connection state. It is written by the
event reactor (and by the disconnect endpoint after a successful logout) and
read by request handlers through immutable snapshots. Every mutator moves
all fields together under one lock so the pairing invariants hold for any
observer:

- connected    => client info set, QR payload empty, ready
- qr_pending   => client info empty
- disconnected => client info and QR payload empty, not ready
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Mapping

UNKNOWN = "Unknown"


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    QR_PENDING = "qr_pending"
    CONNECTED = "connected"


@dataclass(frozen=True)
class ClientInfo:
    """Identity of the paired account."""

    name: str
    phone: str
    platform: str

    @classmethod
    def from_identity(cls, identity: Mapping[str, Any] | None) -> ClientInfo:
        """Build from the adapter's identity descriptor.

        Reads ``pushname``, ``wid.user`` (or a ``user@server`` string wid)
        and ``platform``; anything missing becomes "Unknown".
        """
        identity = identity or {}

        wid = identity.get("wid")
        if isinstance(wid, Mapping):
            phone = wid.get("user")
        elif isinstance(wid, str):
            phone = wid.split("@", 1)[0]
        else:
            phone = None

        return cls(
            name=identity.get("pushname") or UNKNOWN,
            phone=phone or UNKNOWN,
            platform=identity.get("platform") or UNKNOWN,
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class StatusSnapshot:
    status: ConnectionStatus
    client: ClientInfo | None
    qr: str | None
    ready: bool

    def client_dict(self) -> dict[str, str] | None:
        return self.client.to_dict() if self.client else None


class StatusTracker:
    """Lock-protected owner of ConnectionStatus, ClientInfo, QR payload and ready flag."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._status = ConnectionStatus.DISCONNECTED
        self._client: ClientInfo | None = None
        self._qr: str | None = None
        self._ready = False

    def snapshot(self) -> StatusSnapshot:
        with self._lock:
            return StatusSnapshot(
                status=self._status,
                client=self._client,
                qr=self._qr,
                ready=self._ready,
            )

    def show_qr(self, qr: str | None) -> None:
        """Enter qr_pending with a new pairing image (None while generation failed)."""
        with self._lock:
            self._status = ConnectionStatus.QR_PENDING
            self._qr = qr
            self._client = None
            self._ready = False

    def clear_qr(self) -> None:
        """Drop the pairing image; status is left for ``ready`` to advance."""
        with self._lock:
            self._qr = None

    def mark_ready(self, client: ClientInfo) -> None:
        with self._lock:
            self._status = ConnectionStatus.CONNECTED
            self._qr = None
            self._client = client
            self._ready = True

    def mark_disconnected(self) -> None:
        with self._lock:
            self._status = ConnectionStatus.DISCONNECTED
            self._qr = None
            self._client = None
            self._ready = False
