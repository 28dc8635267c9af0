"""Session client backed by a browser-automation bridge.

The bridge is a companion process that runs WhatsApp Web in a headless
browser and exposes it over a small JSON API. Lifecycle events travel the
other way: the bridge POSTs them to ``/webhooks/session`` and the webhook
route hands them to ``BridgeSessionClient.dispatch``.

Security: NEVER log chat ids, phone numbers or message bodies. Only log
hashes, lengths and redacted paths.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from typing import Any, Mapping
from urllib.parse import quote

import requests

from wasession.observability.correlation import CORRELATION_ID_HEADER, get_correlation_id
from wasession.observability.logging import get_logger
from wasession.observability.redaction import hash_identifier, safe_log_context
from wasession.persistence.base import SessionStore
from wasession.settings import BridgeConfig

from .client import EventListener
from .events import EventKind, SessionEvent

logger = get_logger(__name__)


class BridgeError(Exception):
    """Raised when the bridge rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BridgeSessionClient:
    """SessionClient implementation talking HTTP to the automation bridge.

    Args:
        config: Bridge endpoint, credentials and browser options.
        client_id: Logical session name; also the key in the session store.
        store: Where credentials are loaded from and saved to.
        request_timeout: Per-request socket timeout in seconds.
        backup_sync_interval_ms: How often the bridge should push
            ``remote_session_saved`` with fresh credentials.
    """

    def __init__(
        self,
        config: BridgeConfig,
        *,
        client_id: str,
        store: SessionStore | None = None,
        request_timeout: float = 30.0,
        backup_sync_interval_ms: int = 300_000,
        http: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._client_id = client_id
        self._store = store
        self._timeout = request_timeout
        self._backup_sync_interval_ms = backup_sync_interval_ms
        self._http = http or requests.Session()
        self._listeners: dict[str, list[EventListener]] = {}
        self._info: Mapping[str, Any] | None = None

    @property
    def info(self) -> Mapping[str, Any] | None:
        return self._info

    def on(self, event: str, listener: EventListener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    async def dispatch(self, event: SessionEvent) -> None:
        """Apply client-side effects of a bridge event, then notify listeners."""
        if event.kind is EventKind.READY:
            self._info = event.data.get("info") or event.data
        elif event.kind in (EventKind.DISCONNECTED, EventKind.AUTH_FAILURE):
            self._info = None
        elif event.kind is EventKind.REMOTE_SESSION_SAVED:
            await self._persist_session(event.data.get("session"))

        for listener in self._listeners.get(event.kind.value, []):
            listener(event.data)

    async def initialize(self) -> None:
        """Ask the bridge to start the browser session, restoring saved credentials."""
        saved = None
        if self._store is not None:
            saved = await asyncio.to_thread(self._store.load, self._client_id)

        logger.info(
            "starting bridge session",
            extra={
                "extra_fields": safe_log_context(
                    client_id=self._client_id,
                    restored=saved is not None,
                    store=self._store.name if self._store is not None else None,
                )
            },
        )

        await asyncio.to_thread(
            self._request,
            "POST",
            "/session/start",
            json={
                "clientId": self._client_id,
                "webhookUrl": self._config.webhook_url,
                "session": base64.b64encode(saved).decode("ascii") if saved else None,
                "headless": self._config.headless,
                "browserArgs": list(self._config.browser_args),
                "backupSyncIntervalMs": self._backup_sync_interval_ms,
            },
        )

    async def send_message(self, chat_id: str, body: str) -> Mapping[str, Any]:
        logger.info(
            "sending message via bridge",
            extra={
                "extra_fields": safe_log_context(
                    to_hash=hash_identifier(chat_id), text_len=len(body)
                )
            },
        )
        result = await asyncio.to_thread(
            self._request, "POST", "/messages", json={"to": chat_id, "body": body}
        )
        return result or {}

    async def get_chats(self) -> list[Mapping[str, Any]]:
        result = await asyncio.to_thread(self._request, "GET", "/chats")
        return list(result or [])

    async def fetch_messages(self, chat_id: str, limit: int) -> list[Mapping[str, Any]]:
        path = f"/chats/{quote(chat_id, safe='')}/messages"
        try:
            result = await asyncio.to_thread(
                self._request, "GET", path, params={"limit": limit}
            )
        except BridgeError as e:
            if e.status_code == 404:
                raise BridgeError("Chat not found", status_code=404) from e
            raise
        return list(result or [])

    async def logout(self) -> None:
        await asyncio.to_thread(self._request, "POST", "/session/logout")
        self._info = None
        if self._store is not None:
            await asyncio.to_thread(self._store.delete, self._client_id)

    async def _persist_session(self, encoded: Any) -> None:
        if self._store is None or not encoded:
            return
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, TypeError, ValueError):
            logger.warning(
                "ignoring undecodable session payload",
                extra={"extra_fields": safe_log_context(client_id=self._client_id)},
            )
            return
        await asyncio.to_thread(self._store.save, self._client_id, data)
        logger.info(
            "session credentials saved",
            extra={
                "extra_fields": safe_log_context(
                    client_id=self._client_id, store=self._store.name, size=len(data)
                )
            },
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute one bridge call. Raises BridgeError on transport or HTTP errors."""
        headers = {"apikey": self._config.api_key}
        correlation_id = get_correlation_id()
        if correlation_id:
            headers[CORRELATION_ID_HEADER] = correlation_id

        try:
            resp = self._http.request(
                method,
                f"{self._config.base_url}{path}",
                json=json,
                params=params,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error(
                "bridge request failed",
                extra={
                    "extra_fields": safe_log_context(
                        method=method, path=path, error_type=type(e).__name__
                    )
                },
            )
            raise BridgeError(f"Bridge unreachable: {type(e).__name__}") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning(
                "bridge returned error",
                extra={
                    "extra_fields": safe_log_context(
                        method=method, path=path, status=resp.status_code
                    )
                },
            )
            raise BridgeError(message, status_code=resp.status_code)

        if not resp.content:
            return None
        return resp.json()


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return resp.text or f"Bridge returned HTTP {resp.status_code}"
