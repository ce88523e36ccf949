"""Filter State Store: the single owner of the current FilterState.

Every mutation validates through the vocabulary, commits only when the state
actually changes, and synchronously publishes a CommitEvent to observers.
Mutations issued by an observer while an event is being dispatched are
queued and applied once that dispatch stops, so observers always see commits
in order and never a half-applied state.
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Tuple

from config.logging_config import get_logger
from src.filters.notifications import Notification, NotificationCenter, Severity
from src.filters.state import FilterState
from src.filters.vocabulary import DIMENSIONS, FilterDimension

logger = get_logger("store")


class CommitSource(str, Enum):
    """What caused a commit."""

    USER = "user"
    URL = "url"
    PRESET = "preset"
    HISTORY = "history"
    COMPATIBILITY = "compatibility"
    CLEAR = "clear"


@dataclass(frozen=True)
class CommitEvent:
    """Published after every state change."""

    previous: FilterState
    current: FilterState
    changed: Tuple[FilterDimension, ...]
    revision: int
    source: CommitSource

    def added_values(self, dimension: FilterDimension) -> Tuple[str, ...]:
        """Values of `dimension` selected in this commit that were not selected before."""
        before = set(self.previous.values_for(dimension))
        return tuple(v for v in self.current.values_for(dimension) if v not in before)


Observer = Callable[[CommitEvent], None]
Transition = Callable[[FilterState], FilterState]


def _is_blank(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, str):
        return not raw.strip()
    if isinstance(raw, (list, tuple, set, frozenset)):
        return len(raw) == 0
    return False


class FilterStateStore:
    """
    Holds the committed FilterState and notifies observers of changes.

    Usage:
        store = FilterStateStore()
        unsubscribe = store.subscribe(lambda event: print(event.current))
        store.set(FilterDimension.SPORT, "volleyball")
        store.toggle(FilterDimension.LIGHTING, "natural")
    """

    def __init__(
        self,
        initial: Optional[FilterState] = None,
        notifications: Optional[NotificationCenter] = None,
    ):
        self._state = initial if initial is not None else FilterState()
        self._revision = 0
        self._observers: List[Observer] = []
        self._pending: Deque[Tuple[Transition, CommitSource]] = deque()
        self._dispatching = False
        self._recency: Dict[FilterDimension, int] = {d: 0 for d in self._state.active_dimensions}
        self.notifications = notifications if notifications is not None else NotificationCenter()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def revision(self) -> int:
        return self._revision

    def get(self) -> FilterState:
        return self._state

    def recency(self) -> Dict[FilterDimension, int]:
        """Revision at which each active dimension was last selected or changed."""
        return dict(self._recency)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set(self, dimension: FilterDimension, value: Any, source: CommitSource = CommitSource.USER) -> Optional[CommitEvent]:
        """
        Set a dimension to a value, a collection of values, or None.

        Illegal values are dropped. If nothing legal remains from a non-empty
        input, the call is ignored rather than clearing the dimension.
        """
        dimension = self._known(dimension, "set")
        if dimension is None:
            return None
        if not _is_blank(value) and dimension.normalize(value) is None:
            logger.warning(f"Ignoring set({dimension.key}) with no legal values: {value!r}")
            return None
        return self._run(lambda s: s.with_value(dimension, value), source)

    def toggle(self, dimension: FilterDimension, value: str, source: CommitSource = CommitSource.USER) -> Optional[CommitEvent]:
        """Add/remove a multi value, or select/deselect a single value."""
        dimension = self._known(dimension, "toggle")
        if dimension is None:
            return None
        cleaned = dimension.clean_value(value)
        if cleaned is None:
            logger.warning(f"Ignoring toggle of illegal {dimension.key} value: {value!r}")
            return None
        return self._run(lambda s: s.toggled(dimension, cleaned), source)

    def clear(self) -> Optional[CommitEvent]:
        return self._run(lambda s: FilterState(), CommitSource.CLEAR)

    def clear_dimensions(self, dimensions: Iterable[FilterDimension], source: CommitSource = CommitSource.CLEAR) -> Optional[CommitEvent]:
        known = (self._known(d, "clear") for d in dimensions)
        targets = tuple(d for d in known if d is not None)
        return self._run(lambda s: s.without_dimensions(targets), source)

    @staticmethod
    def _known(dimension: Any, action: str) -> Optional[FilterDimension]:
        known = FilterDimension.from_key(dimension)
        if known is None:
            logger.warning(f"Ignoring {action} of unknown dimension: {dimension!r}")
        return known

    def replace(self, state: FilterState, source: CommitSource = CommitSource.USER) -> Optional[CommitEvent]:
        """Swap in a whole state as one atomic commit."""
        return self._run(lambda s: state, source)

    # ------------------------------------------------------------------
    # Observers and notifications
    # ------------------------------------------------------------------

    def subscribe(self, callback: Observer, first: bool = False) -> Callable[[], None]:
        """
        Register an observer for commit events.

        Args:
            callback: Called with each CommitEvent
            first: Dispatch to this observer before all others

        Returns:
            Function that removes the observer
        """
        if first:
            self._observers.insert(0, callback)
        else:
            self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def notify(self, message: str, severity: Any = Severity.INFO, duration_ms: Optional[int] = None) -> Notification:
        return self.notifications.add(message, severity, duration_ms)

    # ------------------------------------------------------------------
    # Commit machinery
    # ------------------------------------------------------------------

    def _run(self, transition: Transition, source: CommitSource) -> Optional[CommitEvent]:
        source = CommitSource(source)
        self._pending.append((transition, source))
        if self._dispatching:
            logger.debug(f"Queued {source.value} mutation issued during dispatch")
            return None

        self._dispatching = True
        first_event: Optional[CommitEvent] = None
        started = False
        interrupted: Optional[Tuple[CommitEvent, List[Observer]]] = None
        try:
            while self._pending:
                next_transition, next_source = self._pending.popleft()
                event = self._apply(next_transition, next_source)
                if not started:
                    first_event = event
                    started = True

                if event is None:
                    # A queued no-op leaves the interrupted commit current again.
                    if interrupted is not None and not self._pending:
                        pending_event, remaining = interrupted
                        interrupted = self._deliver(pending_event, remaining)
                    continue

                interrupted = self._deliver(event, list(self._observers))
        finally:
            self._dispatching = False
            self._pending.clear()
        return first_event

    def _apply(self, transition: Transition, source: CommitSource) -> Optional[CommitEvent]:
        previous = self._state
        current = transition(previous)
        if current == previous:
            logger.debug(f"No-op {source.value} mutation; state unchanged")
            return None

        changed = tuple(d for d in DIMENSIONS if previous.get(d) != current.get(d))
        self._revision += 1
        self._state = current
        for dimension in changed:
            if dimension in current:
                self._recency[dimension] = self._revision
            else:
                self._recency.pop(dimension, None)

        logger.debug(
            f"Commit r{self._revision} ({source.value}): {current.describe()} "
            f"[changed: {', '.join(d.key for d in changed)}]"
        )
        return CommitEvent(
            previous=previous,
            current=current,
            changed=changed,
            revision=self._revision,
            source=source,
        )

    def _deliver(self, event: CommitEvent, observers: List[Observer]) -> Optional[Tuple[CommitEvent, List[Observer]]]:
        """Deliver to observers in order; stop when a newer commit has been queued."""
        for index, observer in enumerate(observers):
            if self._pending:
                return event, observers[index:]
            if observer not in self._observers:
                continue
            try:
                observer(event)
            except Exception:
                logger.exception(f"Observer {observer!r} failed on revision {event.revision}")
        return None
