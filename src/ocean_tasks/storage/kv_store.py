# storage/kv_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class SqliteKeyValueStore:
    """
    SQLite-backed byte store.

    One table, one row per key. Each method opens its own short-lived
    connection, so there is nothing to keep open between calls.

    Failures never escape:
    - get() returns None
    - set() returns False
    """

    def __init__(self, db_path: str | Path = "storage.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._schema_ready = False
        if self._try_ensure_schema():
            logger.info("KeyValueStore ready db=%s", self._db_path)
        else:
            logger.warning("KeyValueStore unavailable db=%s; changes will not be saved", self._db_path)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _try_ensure_schema(self) -> bool:
        """Create the table if needed; retried on later calls until it succeeds."""
        if self._schema_ready:
            return True
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error):
            logger.debug("Storage schema setup failed db=%s", self._db_path, exc_info=True)
            return False
        self._schema_ready = True
        return True

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get(self, key: str) -> bytes | None:
        if not self._try_ensure_schema():
            return None
        try:
            conn = self._get_conn()
        except sqlite3.Error:
            logger.warning("Storage read failed key=%s", key, exc_info=True)
            return None
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error:
            logger.warning("Storage read failed key=%s", key, exc_info=True)
            return None
        finally:
            conn.close()

        if row is None:
            return None
        value = row[0]
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def set(self, key: str, value: bytes) -> bool:
        if not self._try_ensure_schema():
            logger.warning("Storage write skipped key=%s (storage unavailable)", key)
            return False
        try:
            conn = self._get_conn()
        except sqlite3.Error:
            logger.warning("Storage write failed key=%s", key, exc_info=True)
            return False
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, sqlite3.Binary(value), time.time()),
            )
            conn.commit()
            return True
        except sqlite3.Error:
            logger.warning("Storage write failed key=%s", key, exc_info=True)
            return False
        finally:
            conn.close()

