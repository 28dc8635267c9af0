"""Filesystem-backed session store."""

from __future__ import annotations

import os
import re
from pathlib import Path

_SAFE_ID = re.compile(r"^[A-Za-z0-9_\-]+$")


class LocalSessionStore:
    """Keeps each session as ``<root>/session-<id>.bin``.

    Writes go through a temporary file and an atomic rename so a crash never
    leaves a truncated credential file behind.
    """

    name = "local"

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, session_id: str) -> Path:
        if not _SAFE_ID.match(session_id):
            raise ValueError(f"invalid session id: {session_id!r}")
        return self.root / f"session-{session_id}.bin"

    def load(self, session_id: str) -> bytes | None:
        path = self._path(session_id)
        if not path.exists():
            return None
        return path.read_bytes()

    def save(self, session_id: str, data: bytes) -> None:
        path = self._path(session_id)
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_bytes(data)
        os.replace(tmp, path)

    def delete(self, session_id: str) -> None:
        self._path(session_id).unlink(missing_ok=True)
