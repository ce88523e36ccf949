"""Recently used filter combinations."""

import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from config import config
from config.logging_config import get_logger
from src.filters.state import FilterState
from src.filters.store import CommitEvent
from src.storage.kv_store import HISTORY_KEY, KeyValueStore
from src.tracking.base import PersistedTracker

logger = get_logger("history")


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    filters: FilterState
    timestamp: float
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filters": self.filters.to_dict(),
            "timestamp": self.timestamp,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["HistoryEntry"]:
        if not isinstance(data, dict) or not data.get("id"):
            return None
        filters = FilterState.from_dict(data.get("filters"))
        if filters.is_empty():
            return None
        try:
            timestamp = float(data.get("timestamp", 0))
        except (TypeError, ValueError):
            timestamp = 0.0
        return cls(
            id=str(data["id"]),
            filters=filters,
            timestamp=timestamp,
            description=str(data.get("description") or filters.describe()),
        )


def relative_time(timestamp: float, now: Optional[float] = None) -> str:
    """Short relative time: 'Just now', '5m ago', '2h ago', '3d ago'."""
    current = time.time() if now is None else now
    seconds = int(max(current - timestamp, 0))
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days}d ago"
    if hours > 0:
        return f"{hours}h ago"
    if minutes > 0:
        return f"{minutes}m ago"
    return "Just now"


class FilterHistory(PersistedTracker):
    """
    Bounded, most-recent-first list of committed filter states.

    Identical states are kept once: committing a state already in the list
    moves its entry to the front and refreshes the timestamp.
    """

    storage_key = HISTORY_KEY

    def __init__(
        self,
        kv_store: KeyValueStore,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(kv_store)
        self.max_entries = max_entries or config.tracking.history_size
        self._clock = clock
        self._entries: List[HistoryEntry] = self._load_entries()

    def _load_entries(self) -> List[HistoryEntry]:
        raw = self._load()
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Stored history is not a list; starting empty")
            return []
        entries = [e for e in (HistoryEntry.from_dict(item) for item in raw) if e is not None]
        return entries[: self.max_entries]

    def _persist(self) -> None:
        self._save([entry.to_dict() for entry in self._entries])

    def __call__(self, event: CommitEvent) -> None:
        self.record(event.current)

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def recent(self, n: int = 5) -> List[HistoryEntry]:
        return self._entries[:n]

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def record(self, state: FilterState, now: Optional[float] = None) -> Optional[HistoryEntry]:
        """Add a state to the front of the history. Empty states are ignored."""
        if state.is_empty():
            return None
        timestamp = self._clock() if now is None else now

        existing = next((e for e in self._entries if e.filters == state), None)
        if existing is not None:
            self._entries.remove(existing)
            entry = HistoryEntry(existing.id, existing.filters, timestamp, existing.description)
        else:
            entry = HistoryEntry(
                id=f"history-{int(timestamp * 1000)}-{uuid.uuid4().hex[:9]}",
                filters=state,
                timestamp=timestamp,
                description=state.describe(),
            )

        self._entries.insert(0, entry)
        del self._entries[self.max_entries:]
        self._persist()
        return entry

    def remove(self, entry_id: str) -> bool:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        if len(self._entries) == before:
            return False
        self._persist()
        return True

    def clear(self) -> None:
        self._entries = []
        self._persist()

    def relative_time(self, timestamp: float, now: Optional[float] = None) -> str:
        return relative_time(timestamp, self._clock() if now is None else now)
