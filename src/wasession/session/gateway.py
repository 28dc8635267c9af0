"""Serialized, time-bounded access to the session client.

The browser session behind the client is not re-entrant, so every operation
holds a width-1 lock until the underlying work has actually finished. A
timeout answers the caller at once but does not release the lock: a bridge
call running in a worker thread cannot be cancelled, so the next operation
waits for it. Failures come out as ServiceError:

- no client configured     -> NOT_CONNECTED
- timeout                  -> TIMEOUT
- any other client failure -> UPSTREAM (client message passed through)
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from wasession.errors import ErrorKind, ServiceError
from wasession.observability.logging import get_logger
from wasession.observability.redaction import safe_log_context

from .client import SessionClient

logger = get_logger(__name__)

T = TypeVar("T")


class SessionGateway:
    def __init__(self, client: SessionClient | None, *, timeout: float) -> None:
        self.client = client
        self.timeout = timeout
        self._lock = asyncio.Lock()

    async def send_message(self, chat_id: str, body: str) -> Mapping[str, Any]:
        return await self._call("send_message", lambda c: c.send_message(chat_id, body))

    async def get_chats(self) -> list[Mapping[str, Any]]:
        return await self._call("get_chats", lambda c: c.get_chats())

    async def fetch_messages(self, chat_id: str, limit: int) -> list[Mapping[str, Any]]:
        return await self._call(
            "fetch_messages", lambda c: c.fetch_messages(chat_id, limit)
        )

    async def logout(self) -> None:
        await self._call("logout", lambda c: c.logout())

    def _release(self, _operation: asyncio.Future) -> None:
        self._lock.release()

    async def _call(
        self,
        operation: str,
        fn: Callable[[SessionClient], Awaitable[T]],
    ) -> T:
        if self.client is None:
            raise ServiceError(ErrorKind.NOT_CONNECTED, "WhatsApp session is not configured")

        client = self.client
        await self._lock.acquire()
        try:
            work = asyncio.ensure_future(fn(client))
        except BaseException:
            self._lock.release()
            raise
        # Lock is released when the work finishes, not when the caller gives up
        work.add_done_callback(self._release)

        try:
            return await asyncio.wait_for(asyncio.shield(work), timeout=self.timeout)
        except ServiceError:
            raise
        except asyncio.TimeoutError:
            logger.error(
                "session operation timed out",
                extra={
                    "extra_fields": safe_log_context(
                        operation=operation, timeout=self.timeout
                    )
                },
            )
            raise ServiceError(
                ErrorKind.TIMEOUT,
                f"WhatsApp session did not answer within {self.timeout:g}s",
            ) from None
        except Exception as e:
            logger.exception(
                "session operation failed",
                extra={
                    "extra_fields": safe_log_context(
                        operation=operation, error_type=type(e).__name__
                    )
                },
            )
            raise ServiceError(ErrorKind.UPSTREAM, str(e) or type(e).__name__) from e
