"""Interfaces of the external catalog collaborators and their value types."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

from src.catalog.composer import CatalogPage, CatalogRequest
from src.filters.state import FilterState
from src.filters.vocabulary import DIMENSIONS, FilterDimension


@dataclass(frozen=True)
class ValueCount:
    """How many items remain if `value` is also picked."""

    value: str
    count: int


def zero_filled(dimension: FilterDimension, counts: Mapping[str, int]) -> Tuple[ValueCount, ...]:
    """One ValueCount per legal value of the dimension, in vocabulary order."""
    return tuple(ValueCount(value, int(counts.get(value, 0))) for value in dimension.values)


@dataclass(frozen=True)
class FilterCounts:
    """Per-value counts for every dimension, each scoped to the other active filters."""

    counts: Dict[FilterDimension, Tuple[ValueCount, ...]] = field(default_factory=dict, hash=False)
    computed_at: float = 0.0

    def for_dimension(self, dimension: FilterDimension) -> Tuple[ValueCount, ...]:
        return self.counts.get(dimension, ())

    def count_for(self, dimension: FilterDimension, value: str) -> Optional[int]:
        """Count for one value, or None when that axis has no data yet."""
        for entry in self.for_dimension(dimension):
            if entry.value == value:
                return entry.count
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            dimension.key: {entry.value: entry.count for entry in self.for_dimension(dimension)}
            for dimension in DIMENSIONS
        }


@runtime_checkable
class CatalogQueryService(Protocol):
    """Returns one page of photos matching a composed request."""

    async def fetch_page(self, request: CatalogRequest) -> CatalogPage:
        ...


@runtime_checkable
class DistributionService(Protocol):
    """
    Returns counts for every legal value of `dimension`, scoped to `base_state`.

    `base_state` never contains `dimension` itself. Implementations must be
    safe to call for all dimensions concurrently.
    """

    async def fetch_distribution(
        self, base_state: FilterState, dimension: FilterDimension
    ) -> Tuple[ValueCount, ...]:
        ...
