"""Session credential storage strategy."""

from typing import Protocol


class SessionStore(Protocol):
    """Durable home for the opaque credential blob of one session.

    Implementations: LocalSessionStore (filesystem) and RemoteSessionStore
    (Postgres). The blob format belongs to the session client; stores never
    inspect it.
    """

    name: str

    def load(self, session_id: str) -> bytes | None:
        """Return stored credentials, or None if the session was never saved."""
        ...

    def save(self, session_id: str, data: bytes) -> None:
        ...

    def delete(self, session_id: str) -> None:
        """Forget the session. Deleting an unknown session is a no-op."""
        ...
