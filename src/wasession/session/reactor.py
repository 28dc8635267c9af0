"""Event reactor: the only writer of connection state driven by the session client.

Client listeners never touch the tracker directly. They enqueue events on an
asyncio.Queue and a single consumer task applies them one at a time, so state
transitions are strictly sequential regardless of how the client delivers
events.

Transitions (initial state disconnected, no automatic reconnect):

    loading_screen        -> unchanged (log only)
    qr(payload)           -> qr_pending, QR image stored, client info cleared
    authenticated         -> QR cleared, status unchanged until ready
    ready                 -> connected, client info from identity
    auth_failure(message) -> disconnected
    disconnected(reason)  -> disconnected
    remote_session_saved  -> unchanged (log only)
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Mapping

from wasession.domain.status import ClientInfo, StatusTracker
from wasession.observability.logging import get_logger
from wasession.observability.redaction import safe_log_context

from .client import SessionClient
from .events import EventKind, SessionEvent

logger = get_logger(__name__)

QrEncoder = Callable[[str], str]


class EventReactor:
    """Single-consumer state-update loop bound to one session client."""

    def __init__(self, tracker: StatusTracker, qr_encoder: QrEncoder) -> None:
        self.tracker = tracker
        self._encode_qr = qr_encoder
        self._queue: asyncio.Queue[SessionEvent] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    def attach(self, client: SessionClient) -> None:
        """Subscribe to every lifecycle event of ``client``."""
        for kind in EventKind:
            client.on(kind.value, self._listener_for(kind))

    def _listener_for(self, kind: EventKind) -> Callable[[Mapping[str, Any]], None]:
        def listener(data: Mapping[str, Any]) -> None:
            self.submit(SessionEvent(kind=kind, data=dict(data or {})))

        return listener

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, event: SessionEvent) -> None:
        self._queue.put_nowait(event)

    def start(self) -> None:
        if self._task is None or self._task.done():
            # Queue must belong to the loop that consumes it
            if self._queue.empty():
                self._queue = asyncio.Queue()
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def drain(self) -> None:
        """Wait until every submitted event has been applied."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                self.apply(event)
            except Exception:
                logger.exception(
                    "failed to apply session event",
                    extra={"extra_fields": safe_log_context(event=event.kind.value)},
                )
            finally:
                self._queue.task_done()

    def apply(self, event: SessionEvent) -> None:
        """Apply one event to the tracker."""
        kind = event.kind
        data = event.data

        if kind is EventKind.LOADING_SCREEN:
            logger.info(
                "session loading",
                extra={
                    "extra_fields": safe_log_context(
                        percent=data.get("percent"), text=data.get("message")
                    )
                },
            )

        elif kind is EventKind.QR:
            logger.info("pairing QR received, waiting for scan")
            self.tracker.show_qr(self._render_qr(data.get("qr")))

        elif kind is EventKind.AUTHENTICATED:
            logger.info("session authenticated")
            self.tracker.clear_qr()

        elif kind is EventKind.READY:
            identity = data.get("info") or data
            self.tracker.mark_ready(ClientInfo.from_identity(identity))
            logger.info("session ready")

        elif kind is EventKind.AUTH_FAILURE:
            logger.error(
                "session authentication failed",
                extra={"extra_fields": safe_log_context(reason=data.get("message"))},
            )
            self.tracker.mark_disconnected()

        elif kind is EventKind.DISCONNECTED:
            logger.warning(
                "session disconnected",
                extra={"extra_fields": safe_log_context(reason=data.get("reason"))},
            )
            self.tracker.mark_disconnected()

        elif kind is EventKind.REMOTE_SESSION_SAVED:
            logger.info("remote session saved")

    def _render_qr(self, payload: Any) -> str | None:
        if not isinstance(payload, str) or not payload:
            logger.error("qr event without pairing string")
            return None
        try:
            return self._encode_qr(payload)
        except Exception:
            logger.exception("failed to render pairing QR")
            return None
