"""Key/value persistence for history, presets, analytics and preferences.

Values are stored as JSON text. Reading a key whose payload is missing or
corrupt yields None, so a damaged record loads as empty state instead of
breaking the tracker that owns it.
"""

import json
import sqlite3
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config.logging_config import get_logger
from src.errors import StorageError

logger = get_logger("kv_store")

HISTORY_KEY = "facets.filter_history"
CUSTOM_PRESETS_KEY = "facets.custom_presets"
RECENT_PRESETS_KEY = "facets.recent_presets"
ANALYTICS_KEY = "facets.filter_analytics"
PREFERENCES_KEY = "facets.display_preferences"


class KeyValueStore(ABC):
    """Port for persisted tracker state."""

    @abstractmethod
    def get_raw(self, key: str) -> Optional[str]:
        """Stored text for a key, or None."""

    @abstractmethod
    def set_raw(self, key: str, text: str) -> None:
        """Store text under a key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""

    def get(self, key: str) -> Any:
        """Decoded JSON value for a key; None when missing or corrupt."""
        text = self.get_raw(key)
        if text is None:
            return None
        try:
            return json.loads(text)
        except (TypeError, ValueError) as e:
            logger.warning(f"Corrupt payload under {key}, treating as empty: {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        self.set_raw(key, json.dumps(value, sort_keys=True))


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_raw(self, key: str, text: str) -> None:
        self._data[key] = text

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed store; one row per key."""

    def __init__(self, db_path: Union[str, Path]):
        """Initialize store.

        Args:
            db_path: Path to SQLite file, or ":memory:".
        """
        self.db_path = str(db_path)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None

    def _connect(self) -> sqlite3.Connection:
        """Get connection to the store database, creating it if needed."""
        if self._conn is None:
            try:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self.db_path, check_same_thread=False)
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                conn.commit()
            except (sqlite3.Error, OSError) as e:
                raise StorageError(f"Cannot open key/value store at {self.db_path}: {e}") from e
            self._conn = conn
        return self._conn

    def get_raw(self, key: str) -> Optional[str]:
        with self._lock:
            try:
                row = self._connect().execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to read {key}: {e}") from e
        return row[0] if row else None

    def set_raw(self, key: str, text: str) -> None:
        with self._lock:
            try:
                conn = self._connect()
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, text),
                )
                conn.commit()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to write {key}: {e}") from e

    def delete(self, key: str) -> None:
        with self._lock:
            try:
                conn = self._connect()
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                conn.commit()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to delete {key}: {e}") from e

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
