"""Filter usage analytics.

Counts which values get picked and which combinations get committed, with
lightweight session bookkeeping. A session ends after 30 minutes without a
filter change; the check runs lazily whenever analytics are touched.
"""

import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import config
from config.logging_config import get_logger
from src.filters.store import CommitEvent, CommitSource
from src.filters.vocabulary import DIMENSIONS, FilterDimension
from src.storage.kv_store import ANALYTICS_KEY, KeyValueStore
from src.tracking.base import PersistedTracker

logger = get_logger("analytics")


def describe_combination(signature: List[str]) -> str:
    """'sport:volleyball' style entries to 'Volleyball + Peak'."""
    parts = []
    for item in signature:
        key, _, value = item.partition(":")
        dimension = FilterDimension.from_key(key)
        parts.append(dimension.format_value(value) if dimension is not None else value)
    return " + ".join(parts)


class FilterAnalytics(PersistedTracker):
    """Per-value and per-combination usage counters with session tracking."""

    storage_key = ANALYTICS_KEY

    def __init__(
        self,
        kv_store: KeyValueStore,
        session_timeout: Optional[float] = None,
        max_combinations: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(kv_store)
        self.session_timeout = (
            config.tracking.session_timeout_seconds if session_timeout is None else session_timeout
        )
        self.max_combinations = max_combinations or config.tracking.top_combinations
        self._clock = clock
        self._reset_state(self._clock())
        self._restore(self._load())

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _reset_state(self, now: float) -> None:
        self.value_counts: Dict[FilterDimension, Dict[str, int]] = {d: {} for d in DIMENSIONS}
        self.combinations: List[Dict[str, Any]] = []
        self.session_started_at = now
        self.last_activity_at = now
        self.changes_this_session = 0
        self.total_sessions = 1

    def _restore(self, data: Any) -> None:
        if data is None:
            return
        if not isinstance(data, dict):
            logger.warning("Stored analytics are not a mapping; starting fresh")
            return

        values = data.get("values")
        if isinstance(values, dict):
            for key, counters in values.items():
                dimension = FilterDimension.from_key(key)
                if dimension is None or not isinstance(counters, dict):
                    continue
                self.value_counts[dimension] = {
                    v: int(c) for v, c in counters.items() if dimension.is_legal(v) and isinstance(c, int)
                }

        combinations = data.get("combinations")
        if isinstance(combinations, list):
            for combo in combinations:
                if (
                    isinstance(combo, dict)
                    and isinstance(combo.get("filters"), list)
                    and isinstance(combo.get("count"), int)
                ):
                    self.combinations.append({"filters": [str(f) for f in combo["filters"]], "count": combo["count"]})
            self._sort_combinations()

        for attr in ("session_started_at", "last_activity_at"):
            value = data.get(attr)
            if isinstance(value, (int, float)):
                setattr(self, attr, float(value))
        for attr in ("changes_this_session", "total_sessions"):
            value = data.get(attr)
            if isinstance(value, int) and value >= 0:
                setattr(self, attr, value)
        self.total_sessions = max(self.total_sessions, 1)

    def _to_dict(self) -> Dict[str, Any]:
        return {
            "values": {d.key: dict(counters) for d, counters in self.value_counts.items()},
            "combinations": [dict(c) for c in self.combinations],
            "session_started_at": self.session_started_at,
            "last_activity_at": self.last_activity_at,
            "changes_this_session": self.changes_this_session,
            "total_sessions": self.total_sessions,
        }

    def _persist(self) -> None:
        self._save(self._to_dict())

    def _sort_combinations(self) -> None:
        self.combinations.sort(key=lambda c: c["count"], reverse=True)
        del self.combinations[self.max_combinations:]

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def tick(self, now: Optional[float] = None) -> bool:
        """
        Start a new session if the last one went idle.

        Returns:
            True if a new session was started
        """
        current = self._clock() if now is None else now
        if current - self.last_activity_at <= self.session_timeout:
            return False

        self.total_sessions += 1
        self.session_started_at = current
        self.last_activity_at = current
        self.changes_this_session = 0
        logger.debug(f"Started analytics session #{self.total_sessions}")
        self._persist()
        return True

    def __call__(self, event: CommitEvent) -> None:
        self.record(event)

    def record(self, event: CommitEvent, now: Optional[float] = None) -> None:
        """Count newly selected values and the resulting combination."""
        current = self._clock() if now is None else now
        self.tick(current)
        # Auto-clears restore a state the user already had; they are not a new choice.
        if event.current.is_empty() or event.source == CommitSource.COMPATIBILITY:
            return

        for dimension in event.changed:
            counters = self.value_counts[dimension]
            for value in event.added_values(dimension):
                counters[value] = counters.get(value, 0) + 1

        signature = list(event.current.signature())
        for combo in self.combinations:
            if combo["filters"] == signature:
                combo["count"] += 1
                break
        else:
            self.combinations.append({"filters": signature, "count": 1})
        self._sort_combinations()

        self.changes_this_session += 1
        self.last_activity_at = current
        self._persist()

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def top_values(self, dimension: FilterDimension, n: int = 5) -> List[Tuple[str, int]]:
        self.tick()
        counters = self.value_counts[FilterDimension(dimension)]
        ranked = sorted(counters.items(), key=lambda item: item[1], reverse=True)
        return ranked[:n]

    def top_combinations(self, n: int = 10) -> List[Dict[str, Any]]:
        self.tick()
        return [
            {
                "filters": list(combo["filters"]),
                "count": combo["count"],
                "description": describe_combination(combo["filters"]),
            }
            for combo in self.combinations[:n]
        ]

    def session_stats(self, now: Optional[float] = None) -> Dict[str, Any]:
        current = self._clock() if now is None else now
        self.tick(current)
        return {
            "session_started_at": self.session_started_at,
            "duration_seconds": max(current - self.session_started_at, 0),
            "changes_this_session": self.changes_this_session,
            "total_sessions": self.total_sessions,
        }

    def summary(self) -> Dict[str, Any]:
        self.tick()
        total_usage = sum(sum(counters.values()) for counters in self.value_counts.values())
        top_sport = self.top_values(FilterDimension.SPORT, 1)
        top_category = self.top_values(FilterDimension.CATEGORY, 1)
        return {
            "total_filter_usage": total_usage,
            "total_sessions": self.total_sessions,
            "avg_filters_per_session": round(total_usage / self.total_sessions) if self.total_sessions else 0,
            "most_used_sport": top_sport[0][0] if top_sport else None,
            "most_used_category": top_category[0][0] if top_category else None,
        }

    def reset(self, now: Optional[float] = None) -> None:
        self._reset_state(self._clock() if now is None else now)
        self._persist()

    def export(self) -> Dict[str, Any]:
        """All counters plus summary and top combinations, JSON-ready."""
        data = self._to_dict()
        data["summary"] = self.summary()
        data["top_combinations"] = self.top_combinations(10)
        return data
