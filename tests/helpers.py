"""Shared test helpers for wasession tests.

Regular functions and classes (not fixtures) importable by conftest.py and
individual test modules.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import requests
from fastapi import FastAPI

from wasession.api.factory import create_app
from wasession.session.events import EventKind, SessionEvent
from wasession.settings import Settings

FAKE_QR_PREFIX = "data:image/png;base64,"


def fake_qr_encoder(payload: str) -> str:
    return FAKE_QR_PREFIX + payload


class FakeSessionClient:
    """In-memory SessionClient recording every adapter call."""

    def __init__(
        self,
        *,
        chats: list[dict] | None = None,
        messages: list[dict] | None = None,
        send_result: dict | None = None,
    ) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.info: dict | None = None
        self.chats = chats or []
        self.messages = messages or []
        self.send_result = send_result or {
            "id": {"id": "3EB0C767D26A", "_serialized": "true_51987654321@c.us_3EB0C767D26A"},
            "timestamp": 1700000000,
        }
        self.error: Exception | None = None
        self.delay = 0.0
        self.active = 0
        self.max_active = 0
        self._listeners: dict[str, list] = {}

    def on(self, event: str, listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def emit(self, event: str, data: dict | None = None) -> None:
        for listener in self._listeners.get(event, []):
            listener(data or {})

    @property
    def adapter_calls(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] != "initialize"]

    async def _run(self, result: Any) -> Any:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return result
        finally:
            self.active -= 1

    async def initialize(self) -> None:
        self.calls.append(("initialize",))
        await self._run(None)

    async def send_message(self, chat_id: str, body: str) -> dict:
        self.calls.append(("send_message", chat_id, body))
        return await self._run(self.send_result)

    async def get_chats(self) -> list[dict]:
        self.calls.append(("get_chats",))
        return await self._run(self.chats)

    async def fetch_messages(self, chat_id: str, limit: int) -> list[dict]:
        self.calls.append(("fetch_messages", chat_id, limit))
        return await self._run(self.messages[-limit:])

    async def logout(self) -> None:
        self.calls.append(("logout",))
        await self._run(None)


def make_settings(**overrides: Any) -> Settings:
    return Settings(**overrides)


def make_app(client: Any = None, **settings_overrides: Any) -> FastAPI:
    """Create an app driving ``client`` (a FakeSessionClient by default)."""
    return create_app(
        make_settings(**settings_overrides),
        session_client=client if client is not None else FakeSessionClient(),
        qr_encoder=fake_qr_encoder,
    )


READY_IDENTITY = {
    "pushname": "Front Desk",
    "wid": {"user": "51912345678", "server": "c.us"},
    "platform": "android",
}


def apply_events(app: FastAPI, *events: tuple[EventKind, dict]) -> None:
    """Feed events straight into the app's reactor (no lifespan needed)."""
    for kind, data in events:
        app.state.reactor.apply(SessionEvent(kind=kind, data=data))


def connect(app: FastAPI, identity: dict | None = None) -> None:
    apply_events(
        app,
        (EventKind.QR, {"qr": "2@pairing-ref"}),
        (EventKind.AUTHENTICATED, {}),
        (EventKind.READY, identity if identity is not None else READY_IDENTITY),
    )


def json_response(status_code: int, body: Any = None) -> requests.Response:
    """Build a real requests.Response for mocking bridge calls."""
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = b"" if body is None else json.dumps(body).encode()
    resp.headers["Content-Type"] = "application/json"
    return resp


def make_chat(i: int, *, body: str = "hello", timestamp: int | None = None) -> dict:
    return {
        "id": {"_serialized": f"5198765{i:04d}@c.us", "user": f"5198765{i:04d}"},
        "name": f"Guest {i}",
        "isGroup": i % 5 == 0,
        "unreadCount": i % 3,
        "lastMessage": {"body": body, "timestamp": 1700000000 + i, "fromMe": i % 2 == 0},
        "timestamp": timestamp if timestamp is not None else 1700000000 + i,
    }


def make_message(i: int) -> dict:
    return {
        "id": {"id": f"MSG{i:03d}", "fromMe": False},
        "body": f"message {i}",
        "fromMe": i % 2 == 0,
        "timestamp": 1700000000 + i,
        "type": "chat",
        "hasMedia": False,
    }
