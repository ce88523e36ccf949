"""Persisted tracker state."""

from .kv_store import (
    KeyValueStore,
    InMemoryKeyValueStore,
    SQLiteKeyValueStore,
    HISTORY_KEY,
    CUSTOM_PRESETS_KEY,
    RECENT_PRESETS_KEY,
    ANALYTICS_KEY,
    PREFERENCES_KEY,
)

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "HISTORY_KEY",
    "CUSTOM_PRESETS_KEY",
    "RECENT_PRESETS_KEY",
    "ANALYTICS_KEY",
    "PREFERENCES_KEY",
]
