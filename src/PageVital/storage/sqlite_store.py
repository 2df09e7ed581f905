# ============================================================================
# PageVital - SQLite Store
#
# Purpose: Persist key-value documents in a single SQLite table
# Inputs: String keys and values
# Outputs: SQLite database (kv table)
# Dependencies: pathlib, sqlite3, base
# Usage: store = SQLiteStore("runs/pagevital.db"); store.set("k", "[]")
#
# Changelog:
#   2026-09-20: Initial SQLite store; updated_at column for inspection
# ============================================================================

import sqlite3
from pathlib import Path
from typing import Optional

from PageVital.errors import PersistenceError
from PageVital.logging_utils import get_logger
from PageVital.storage.base import KeyValueStore
from PageVital.utils.time import get_utc_timestamp

logger = get_logger(__name__)

_INIT_SQL = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at_utc TEXT NOT NULL
);
"""


class SQLiteStore(KeyValueStore):
    """
    Store that writes documents to a SQLite database, one row per key.
    """

    def __init__(self, db_path: str = "runs/pagevital.db"):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file (created if missing)
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()
        logger.info(f"SQLiteStore initialized: {self.db_path}")

    def _init_db(self) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.executescript(_INIT_SQL)

    def get(self, key: str) -> Optional[str]:
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read key {key!r} from {self.db_path}", details=str(e)) from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO kv (key, value, updated_at_utc) VALUES (?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                    "updated_at_utc = excluded.updated_at_utc",
                    (key, value, get_utc_timestamp()),
                )
        except sqlite3.Error as e:
            logger.exception(f"Failed to write key {key!r}")
            raise PersistenceError(f"Failed to write key {key!r} to {self.db_path}", details=str(e)) from e

    def delete(self, key: str) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to delete key {key!r}", details=str(e)) from e
