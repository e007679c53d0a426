"""
Local key-value store backed by a single SQLite table.

Values are opaque strings; callers own serialisation. Every write is one
``INSERT OR REPLACE`` inside its own transaction, so a failed write leaves the
previous value in place.
"""
from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from logging import getLogger
logger = getLogger(__name__)


class KeyValueStore:
    """SQLite-backed string store. Use ``":memory:"`` for a throwaway store."""

    def __init__(self, db_path: Union[str, Path] = ":memory:") -> None:
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.RLock()
        self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self._ensure_table()

    def _ensure_table(self) -> None:
        with self._write_lock:
            self.connection.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            self.connection.commit()
        logger.debug(f"[KeyValueStore] table ready at {self.db_path}")

    def get(self, key: str) -> Optional[str]:
        row = self.connection.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return None if row is None else row[0]

    def set(self, key: str, value: str) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        with self._write_lock:
            with self.connection:
                self.connection.execute(
                    "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                    (key, value, timestamp),
                )

    def delete(self, key: str) -> None:
        with self._write_lock:
            with self.connection:
                self.connection.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def contains(self, key: str) -> bool:
        row = self.connection.execute(
            "SELECT 1 FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return row is not None

    def close(self) -> None:
        self.connection.close()
