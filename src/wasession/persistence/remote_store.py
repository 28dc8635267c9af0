"""Postgres-backed session store (table created by migration 001)."""

from __future__ import annotations

import psycopg2

from wasession.infra.db import fetchone, txn


class RemoteSessionStore:
    """Stores credentials in ``session_credentials`` (session_id -> bytea)."""

    name = "remote"

    def __init__(self, dsn: str) -> None:
        self.dsn = dsn

    def load(self, session_id: str) -> bytes | None:
        with txn(dsn=self.dsn) as cur:
            row = fetchone(
                cur,
                "SELECT data FROM session_credentials WHERE session_id = %s",
                (session_id,),
            )
        if row is None:
            return None
        return bytes(row[0])

    def save(self, session_id: str, data: bytes) -> None:
        with txn(dsn=self.dsn) as cur:
            cur.execute(
                """
                INSERT INTO session_credentials (session_id, data, updated_at)
                VALUES (%s, %s, now())
                ON CONFLICT (session_id)
                DO UPDATE SET data = EXCLUDED.data, updated_at = now()
                """,
                (session_id, psycopg2.Binary(data)),
            )

    def delete(self, session_id: str) -> None:
        with txn(dsn=self.dsn) as cur:
            cur.execute(
                "DELETE FROM session_credentials WHERE session_id = %s",
                (session_id,),
            )
