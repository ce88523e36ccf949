"""Immutable filter state value object."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from config.logging_config import get_logger
from src.filters.vocabulary import DIMENSIONS, FilterDimension, Selection

logger = get_logger("state")

EMPTY_DESCRIPTION = "All photos"
DESCRIPTION_SEPARATOR = " • "


@dataclass(frozen=True)
class FilterState:
    """
    Mapping of dimension to an optional selection.

    Only legal values are ever stored. Unset dimensions are absent, empty
    collections count as unset, and multi-valued selections are kept
    deduplicated in vocabulary order, so two states with the same values
    compare (and hash) equal regardless of the order values were picked in.

    Build states with ``FilterState.of(...)``; every transition returns a
    new state.
    """

    entries: Tuple[Tuple[FilterDimension, Selection], ...] = ()

    def __post_init__(self):
        selections: Dict[FilterDimension, Selection] = {}
        for key, raw in self.entries:
            dimension = FilterDimension.from_key(key)
            if dimension is None:
                logger.debug(f"Dropping unknown filter dimension: {key!r}")
                continue
            selection = dimension.normalize(raw)
            if selection is not None:
                selections[dimension] = selection
        canonical = tuple((d, selections[d]) for d in DIMENSIONS if d in selections)
        object.__setattr__(self, "entries", canonical)

    @classmethod
    def of(cls, selections: Optional[Mapping[Any, Any]] = None, **kwargs: Any) -> "FilterState":
        """
        Build a state from a mapping and/or keyword arguments.

        Keys may be FilterDimension members or URL keys. Unknown keys and
        illegal values are dropped.

        Example:
            FilterState.of(sport="volleyball", lighting=["natural", "backlit"])
        """
        merged: Dict[Any, Any] = {}
        if selections:
            merged.update(selections)
        merged.update(kwargs)
        return cls(tuple(merged.items()))

    @classmethod
    def empty(cls) -> "FilterState":
        return cls()

    @classmethod
    def from_dict(cls, data: Any) -> "FilterState":
        """Tolerant inverse of to_dict(); anything unusable becomes the empty state."""
        if not isinstance(data, Mapping):
            if data is not None:
                logger.warning(f"Expected a mapping of filters, got {type(data).__name__}")
            return cls()
        return cls.of(data)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, dimension: FilterDimension) -> Selection:
        for d, selection in self.entries:
            if d == dimension:
                return selection
        return None

    def __getitem__(self, dimension: FilterDimension) -> Selection:
        return self.get(dimension)

    def __contains__(self, dimension: object) -> bool:
        return any(d == dimension for d, _ in self.entries)

    def __iter__(self) -> Iterator[FilterDimension]:
        return (d for d, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def items(self) -> Tuple[Tuple[FilterDimension, Selection], ...]:
        return self.entries

    def values_for(self, dimension: FilterDimension) -> Tuple[str, ...]:
        """Selected values for a dimension as a tuple (empty when unset)."""
        selection = self.get(dimension)
        if selection is None:
            return ()
        if isinstance(selection, tuple):
            return selection
        return (selection,)

    def is_empty(self) -> bool:
        return not self.entries

    @property
    def active_dimensions(self) -> Tuple[FilterDimension, ...]:
        return tuple(d for d, _ in self.entries)

    @property
    def active_filter_count(self) -> int:
        """Number of individual values selected across all dimensions."""
        return sum(len(self.values_for(d)) for d in self.active_dimensions)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def with_value(self, dimension: FilterDimension, raw: Any) -> "FilterState":
        """Return a state with the dimension set to raw (None unsets it)."""
        merged: Dict[Any, Any] = dict(self.entries)
        merged[dimension] = raw
        return FilterState(tuple(merged.items()))

    def without(self, dimension: FilterDimension) -> "FilterState":
        return FilterState(tuple((d, s) for d, s in self.entries if d != dimension))

    def without_dimensions(self, dimensions: Iterable[FilterDimension]) -> "FilterState":
        removed = set(dimensions)
        return FilterState(tuple((d, s) for d, s in self.entries if d not in removed))

    def toggled(self, dimension: FilterDimension, value: str) -> "FilterState":
        """
        Toggle one value.

        Multi-valued dimensions add or remove the value; single-valued
        dimensions select it, or deselect it if it is already selected.
        """
        current = self.values_for(dimension)
        if dimension.is_multi:
            if value in current:
                return self.with_value(dimension, tuple(v for v in current if v != value))
            return self.with_value(dimension, current + (value,))
        if value in current:
            return self.without(dimension)
        return self.with_value(dimension, value)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def signature(self) -> Tuple[str, ...]:
        """Sorted 'dimension:value' strings identifying the combination."""
        return tuple(
            sorted(f"{d.key}:{v}" for d in self.active_dimensions for v in self.values_for(d))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Active filters keyed by URL key; multi values as lists."""
        result: Dict[str, Any] = {}
        for dimension, selection in self.entries:
            result[dimension.key] = list(selection) if isinstance(selection, tuple) else selection
        return result

    def describe(self) -> str:
        """Human-readable summary, e.g. 'Volleyball • Peak Intensity'."""
        parts: List[str] = [d.describe(s) for d, s in self.entries]
        parts = [p for p in parts if p]
        return DESCRIPTION_SEPARATOR.join(parts) if parts else EMPTY_DESCRIPTION

    def __repr__(self) -> str:
        return f"FilterState({self.to_dict()!r})"
