"""
Key-Value Storage Layer
=======================

SQLite-backed ``KeyValueStore`` holding JSON-encoded values. Used for the
upscale history, which must persist across restarts.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from .config import CONFIG_DIR
from .exceptions import StorageError
from .interfaces import KeyValueStore


def get_storage_path() -> Path:
    """Get the storage directory path, creating it if needed."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-based key-value storage."""

    def __init__(self, db_path: Path | None = None):
        """Initialize storage with optional custom database path."""
        if db_path is None:
            db_path = get_storage_path() / "state.db"
        self.db_path = db_path
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_db(self) -> None:
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

    def get(self, key: str, default: Any = None) -> Any:
        with self._get_connection() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()

        if row is None:
            return default
        try:
            return json.loads(row[0])
        except ValueError as e:
            raise StorageError(key, str(e)) from e

    def set(self, key: str, value: Any) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO kv (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, json.dumps(value)),
            )
            conn.commit()
