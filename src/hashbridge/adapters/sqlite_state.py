"""SQLite state adapter.

Implements the core CursorStore port so a restart resumes polling from the
last advanced offset instead of re-reading everything Telegram still holds.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional


class SQLiteStateStore:
    """Thin SQLite wrapper that satisfies the CursorStore contract."""

    def __init__(self, db_path: str, source_key: str) -> None:
        self._db_path = db_path
        self._source_key = source_key

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - poll_state: per-source poll cursor
        """

        with self._connect() as conn:
            # Fields:
            # - source_key: update source identity, e.g. telegram_bot:<bot id> (PRIMARY KEY)
            # - cursor: smallest update id not yet consumed
            # - updated_at: time of the last advance, for debugging
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS poll_state (
                    source_key TEXT PRIMARY KEY,
                    cursor INTEGER NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
                """
            )

    def get_cursor(self) -> Optional[int]:
        """Return the persisted cursor for this source, if any."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT cursor FROM poll_state WHERE source_key = ?",
                (self._source_key,),
            ).fetchone()
        return int(row["cursor"]) if row else None

    def set_cursor(self, cursor: int) -> None:
        """Upsert the cursor; an older value never overwrites a newer one."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO poll_state (source_key, cursor, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(source_key) DO UPDATE SET
                    cursor = MAX(poll_state.cursor, excluded.cursor),
                    updated_at = excluded.updated_at
                """,
                (self._source_key, cursor, now.isoformat()),
            )
