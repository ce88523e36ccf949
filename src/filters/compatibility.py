"""Compatibility guard: detects known-incompatible filter combinations.

Rules come from configuration. When a commit violates one, the guard
removes the smallest set of dimensions it can (preferring the most recently
selected one per conflict), recommits the reduced state in one step and
tells the user what was cleared and why. A genuinely empty result for a
valid combination only produces a warning; the state is left alone.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from config.config_loader import get_rule_definitions
from config.logging_config import get_logger
from src.filters.state import FilterState
from src.filters.store import CommitEvent, CommitSource, FilterStateStore
from src.filters.vocabulary import DIMENSIONS, FilterDimension

logger = get_logger("compatibility")


class GuardState(str, Enum):
    STABLE = "stable"
    RECONCILING = "reconciling"


class PillState(str, Enum):
    """Display state of a single filter option."""

    ACTIVE = "active"
    AVAILABLE = "available"
    DISABLED = "disabled"


@dataclass(frozen=True)
class CompatibilityRule:
    """`dimension` holding any of `values` requires `requires` to be unset or in `allowed`."""

    dimension: FilterDimension
    values: FrozenSet[str]
    requires: FilterDimension
    allowed: FrozenSet[str]
    reason: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional["CompatibilityRule"]:
        """Build a rule from its YAML form; None (with a warning) if it is unusable."""
        dimension = FilterDimension.from_key(data.get("dimension"))
        requires = FilterDimension.from_key(data.get("requires"))
        if dimension is None or requires is None or dimension == requires:
            logger.warning(f"Skipping compatibility rule with bad dimensions: {data!r}")
            return None

        values = frozenset(v for v in data.get("values") or [] if dimension.is_legal(v))
        allowed = frozenset(v for v in data.get("allowed") or [] if requires.is_legal(v))
        if not values or not allowed:
            logger.warning(f"Skipping compatibility rule with no legal values: {data!r}")
            return None

        reason = data.get("reason") or f"requires {requires.label}"
        return cls(dimension, values, requires, allowed, str(reason))

    def violated_by(self, state: FilterState) -> bool:
        triggered = any(v in self.values for v in state.values_for(self.dimension))
        if not triggered:
            return False
        required = state.values_for(self.requires)
        return bool(required) and any(v not in self.allowed for v in required)


@dataclass(frozen=True)
class Conflict:
    rule: CompatibilityRule

    @property
    def dimensions(self) -> Tuple[FilterDimension, FilterDimension]:
        return self.rule.dimension, self.rule.requires

    @property
    def reason(self) -> str:
        return self.rule.reason


@dataclass(frozen=True)
class AutoClearEvent:
    """Published when the guard removes filters on its own."""

    cleared_dimensions: Tuple[FilterDimension, ...]
    reason: str
    previous: FilterState
    current: FilterState


def load_rules(definitions: Optional[Iterable[Mapping[str, Any]]] = None) -> Tuple[CompatibilityRule, ...]:
    """Parse rule definitions, reading configuration when none are given."""
    raw = get_rule_definitions() if definitions is None else definitions
    rules = []
    for entry in raw:
        rule = CompatibilityRule.from_dict(entry)
        if rule is not None:
            rules.append(rule)
    logger.debug(f"Loaded {len(rules)} compatibility rules")
    return tuple(rules)


def pill_state(selected: bool, compatible: bool) -> PillState:
    if selected:
        return PillState.ACTIVE
    return PillState.AVAILABLE if compatible else PillState.DISABLED


class CompatibilityGuard:
    """
    Store observer that keeps committed states free of known conflicts.

    Subscribes ahead of every other observer so a conflicting state is
    replaced before history or analytics see it.
    """

    def __init__(self, store: FilterStateStore, rules: Optional[Iterable[CompatibilityRule]] = None):
        self.store = store
        self.rules: Tuple[CompatibilityRule, ...] = tuple(rules) if rules is not None else load_rules()
        self.status = GuardState.STABLE
        self._listeners: List[Callable[[AutoClearEvent], None]] = []
        self._zero_reported: Optional[FilterState] = None
        self._unsubscribe = store.subscribe(self._on_commit, first=True)

    def close(self) -> None:
        self._unsubscribe()

    def add_listener(self, callback: Callable[[AutoClearEvent], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def check(self, state: FilterState) -> List[Conflict]:
        return [Conflict(rule) for rule in self.rules if rule.violated_by(state)]

    def resolve(
        self, state: FilterState, recency: Optional[Mapping[FilterDimension, int]] = None
    ) -> Tuple[FilterState, Tuple[FilterDimension, ...], Tuple[str, ...]]:
        """
        Greedily remove dimensions until no rule is violated.

        For each remaining conflict the more recently selected of its two
        dimensions goes; on a tie, the one later in vocabulary order.

        Returns:
            (reduced state, removed dimensions in vocabulary order, reasons)
        """
        recency = recency or {}
        working = state
        removed: List[FilterDimension] = []
        reasons: List[str] = []

        conflicts = self.check(working)
        while conflicts:
            conflict = conflicts[0]
            victim = max(conflict.dimensions, key=lambda d: (recency.get(d, 0), d.position))
            working = working.without(victim)
            removed.append(victim)
            if conflict.reason not in reasons:
                reasons.append(conflict.reason)
            conflicts = self.check(working)

        ordered = tuple(d for d in DIMENSIONS if d in removed)
        return working, ordered, tuple(reasons)

    def is_option_compatible(
        self,
        dimension: FilterDimension,
        value: str,
        state: FilterState,
        counts: Any = None,
    ) -> bool:
        """An option is enabled iff picking it keeps results (count > 0) and causes no known conflict."""
        if dimension.is_multi:
            candidate = state.with_value(dimension, state.values_for(dimension) + (value,))
        else:
            candidate = state.with_value(dimension, value)
        if self.check(candidate):
            return False
        if counts is not None:
            count = counts.count_for(dimension, value)
            if count is not None and count <= 0:
                return False
        return True

    def option_states(self, state: FilterState, counts: Any = None) -> Dict[FilterDimension, Dict[str, PillState]]:
        """Pill state for every legal value of every dimension."""
        result: Dict[FilterDimension, Dict[str, PillState]] = {}
        for dimension in DIMENSIONS:
            selected = state.values_for(dimension)
            result[dimension] = {
                value: pill_state(
                    value in selected,
                    self.is_option_compatible(dimension, value, state, counts),
                )
                for value in dimension.values
            }
        return result

    # ------------------------------------------------------------------
    # Reactions
    # ------------------------------------------------------------------

    def _on_commit(self, event: CommitEvent) -> None:
        if self._zero_reported is not None and event.current != self._zero_reported:
            self._zero_reported = None

        if event.source == CommitSource.COMPATIBILITY:
            self.status = GuardState.STABLE
            return

        if not self.check(event.current):
            return

        self.status = GuardState.RECONCILING
        reduced, removed, reasons = self.resolve(event.current, self.store.recency())
        reason = "; ".join(reasons)
        labels = [d.label for d in removed]
        logger.info(f"Auto-clearing {', '.join(labels)} ({reason})")

        self.store.notifications.notify_auto_cleared(labels, reason)
        clear_event = AutoClearEvent(
            cleared_dimensions=removed,
            reason=reason,
            previous=event.current,
            current=reduced,
        )
        for listener in list(self._listeners):
            try:
                listener(clear_event)
            except Exception:
                logger.exception("Auto-clear listener failed")

        self.store.replace(reduced, source=CommitSource.COMPATIBILITY)

    def report_result_count(self, state: FilterState, total: int) -> bool:
        """
        Tell the guard how many results the current state produced.

        Emits the zero-results warning once per state when the state has no
        known conflict. Never changes the state.

        Returns:
            True if a warning was emitted
        """
        if total > 0:
            return False
        if state != self.store.state:
            logger.debug("Ignoring result count for a state that is no longer current")
            return False
        if self.check(state):
            return False
        if self._zero_reported == state:
            return False

        self._zero_reported = state
        self.store.notifications.notify_zero_results()
        return True
