"""Persisted client storage (credential token, theme preference).

Plays the role browser ``localStorage`` has for the web client: a flat
string key/value store that survives restarts.
"""
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "authToken"
THEME_KEY = "theme"


class ClientStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Non-persistent storage, used for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class SqliteStorage:
    """Key/value storage backed by a single sqlite table."""

    def __init__(self, db_file: str):
        self.db_file = db_file
        self.init_db()

    def get_db_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_file)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the storage table if it is absent."""
        with self.get_db_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS client_storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
        logger.debug("Client storage ready at %s", self.db_file)

    def get_item(self, key: str) -> Optional[str]:
        with self.get_db_connection() as conn:
            row = conn.execute("SELECT value FROM client_storage WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self.get_db_connection() as conn:
            conn.execute(
                """
                INSERT INTO client_storage (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(timezone.utc).isoformat()),
            )

    def remove_item(self, key: str) -> None:
        with self.get_db_connection() as conn:
            conn.execute("DELETE FROM client_storage WHERE key = ?", (key,))

    def clear(self) -> None:
        with self.get_db_connection() as conn:
            conn.execute("DELETE FROM client_storage")

