"""Shared persistence plumbing for trackers.

Each persisted key is written by exactly one tracker. Storage failures are
logged and the tracker keeps working from memory.
"""

from typing import Any, Optional

from config.logging_config import get_logger
from src.errors import StorageError
from src.storage.kv_store import KeyValueStore

logger = get_logger("tracking")


class PersistedTracker:
    """Base for components that persist JSON records in a KeyValueStore."""

    storage_key: str = ""

    def __init__(self, kv_store: KeyValueStore):
        self.kv_store = kv_store

    def _load(self, key: Optional[str] = None) -> Any:
        key = key or self.storage_key
        try:
            return self.kv_store.get(key)
        except StorageError as e:
            logger.error(f"Failed to load {key}: {e}")
            return None

    def _save(self, value: Any, key: Optional[str] = None) -> None:
        key = key or self.storage_key
        try:
            self.kv_store.set(key, value)
        except StorageError as e:
            logger.error(f"Failed to save {key}: {e}")
