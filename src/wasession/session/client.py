"""Contract for the external session client.

The client owns the actual WhatsApp Web connection (browser automation,
protocol, encryption). This service only drives it through the operations
below and listens to its lifecycle events.

Return values keep the upstream object shapes as plain mappings, e.g. a chat
is ``{"id": {"_serialized": ...}, "name": ..., "isGroup": ..., ...}``;
``wasession.domain.projections`` turns them into API payloads.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol

EventListener = Callable[[Mapping[str, Any]], None]


class SessionClient(Protocol):
    """One logical connection to the messaging platform."""

    @property
    def info(self) -> Mapping[str, Any] | None:
        """Identity descriptor (``pushname``, ``wid``, ``platform``) once ready."""
        ...

    def on(self, event: str, listener: EventListener) -> None:
        """Subscribe to a lifecycle event by name."""
        ...

    async def initialize(self) -> None:
        ...

    async def send_message(self, chat_id: str, body: str) -> Mapping[str, Any]:
        """Send a text message. Returns the sent message (``id``, ``timestamp``)."""
        ...

    async def get_chats(self) -> list[Mapping[str, Any]]:
        ...

    async def fetch_messages(self, chat_id: str, limit: int) -> list[Mapping[str, Any]]:
        """Fetch the last ``limit`` messages of a chat. Raises if the chat is unknown."""
        ...

    async def logout(self) -> None:
        ...
