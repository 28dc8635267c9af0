"""Select the session store for the configured backend."""

from __future__ import annotations

from wasession.settings import ConfigError, Settings

from .base import SessionStore
from .local_store import LocalSessionStore
from .remote_store import RemoteSessionStore


def build_store(settings: Settings) -> SessionStore:
    """Build the store named by PERSISTENCE_BACKEND.

    Raises:
        ConfigError: If the remote backend is selected without DATABASE_URL.
    """
    if settings.persistence_backend == "remote":
        if not settings.database_url:
            raise ConfigError("DATABASE_URL is required when PERSISTENCE_BACKEND=remote")
        return RemoteSessionStore(settings.database_url)
    return LocalSessionStore(settings.session_data_path)
