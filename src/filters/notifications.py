"""User-facing notification queue.

Notifications auto-dismiss once their duration has elapsed. Expiry is
checked lazily against an injectable clock instead of with timers.
"""

import time
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from config import config
from config.logging_config import get_logger

logger = get_logger("notifications")

ZERO_RESULTS_MESSAGE = "No photos match your current filters. Try adjusting your selection."


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A single queued notification."""

    id: str
    message: str
    severity: Severity
    duration_ms: int
    created_at: float

    def expired(self, now: float) -> bool:
        if self.duration_ms <= 0:
            return False
        return (now - self.created_at) * 1000 >= self.duration_ms

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


class NotificationCenter:
    """Queue of notifications with subscribe support."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._items: List[Notification] = []
        self._next_id = 0
        self._subscribers: List[Callable[[Notification], None]] = []

    @property
    def all(self) -> List[Notification]:
        """Every queued notification, including ones past their duration."""
        return list(self._items)

    def add(
        self,
        message: str,
        severity: Any = Severity.INFO,
        duration_ms: Optional[int] = None,
    ) -> Notification:
        """Queue a notification and tell subscribers about it."""
        notification = Notification(
            id=f"notification-{self._next_id}",
            message=message,
            severity=Severity(severity),
            duration_ms=config.tracking.notification_duration_ms if duration_ms is None else duration_ms,
            created_at=self._clock(),
        )
        self._next_id += 1
        self._items.append(notification)
        logger.info(f"[{notification.severity.value}] {message}")

        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception:
                logger.exception("Notification subscriber failed")
        return notification

    def notify_auto_cleared(self, cleared_labels: Sequence[str], reason: str) -> Notification:
        """'Cleared Play Type (reason)' notice for filters removed automatically."""
        filter_list = ", ".join(cleared_labels)
        return self.add(f"Cleared {filter_list} ({reason})", Severity.INFO)

    def notify_zero_results(self) -> Notification:
        return self.add(ZERO_RESULTS_MESSAGE, Severity.WARNING)

    def dismiss(self, notification_id: str) -> bool:
        before = len(self._items)
        self._items = [n for n in self._items if n.id != notification_id]
        return len(self._items) < before

    def clear(self) -> None:
        self._items = []

    def active(self, now: Optional[float] = None) -> List[Notification]:
        """Notifications still within their duration; expired ones are dropped."""
        current = self._clock() if now is None else now
        self._items = [n for n in self._items if not n.expired(current)]
        return list(self._items)

    def subscribe(self, callback: Callable[[Notification], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
