"""Time-bounded cache of per-value filter counts.

One entry per axis, keyed by (dimension, filter state without that
dimension), so the counts next to each option answer "how many photos if I
also pick this". Stale axes refresh concurrently; a failing axis falls back
to its last good counts without holding up the others.
"""

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

from config import config
from config.logging_config import get_logger
from src.catalog.services import DistributionService, FilterCounts, ValueCount
from src.filters.state import FilterState
from src.filters.vocabulary import DIMENSIONS, FilterDimension

logger = get_logger("distribution_cache")

T = TypeVar("T")

CacheKey = Tuple[FilterDimension, FilterState]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: T
    timestamp: float


class DistributionCache:
    """TTL + LRU cache in front of a DistributionService."""

    def __init__(
        self,
        service: DistributionService,
        ttl_seconds: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize cache.

        Args:
            service: Source of per-dimension value counts
            ttl_seconds: Time-to-live of an axis entry (default from settings)
            max_entries: Maximum number of cached axes before LRU eviction
            clock: Monotonic time source, injectable for tests
        """
        self.service = service
        self.ttl = config.cache.ttl_seconds if ttl_seconds is None else ttl_seconds
        # Never evict axes that a single lookup still needs.
        self.max_entries = max(max_entries or config.cache.max_entries, len(DIMENSIONS))
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, CacheEntry[Tuple[ValueCount, ...]]]" = OrderedDict()
        self._inflight: Dict[CacheKey, asyncio.Task] = {}
        self._hits = 0
        self._misses = 0
        self._refreshes = 0
        self._failures = 0

    @staticmethod
    def key_for(dimension: FilterDimension, state: FilterState) -> CacheKey:
        return dimension, state.without(dimension)

    def _is_fresh(self, key: CacheKey, now: float) -> bool:
        entry = self._entries.get(key)
        return entry is not None and (now - entry.timestamp) < self.ttl

    async def get_counts(self, base_state: FilterState) -> FilterCounts:
        """
        Counts for every dimension, each scoped to the other active filters.

        Never raises: axes whose refresh fails keep their last good counts,
        or come back empty if they never had any.
        """
        now = self._clock()
        keys = {dimension: self.key_for(dimension, base_state) for dimension in DIMENSIONS}
        stale = [key for key in keys.values() if not self._is_fresh(key, now)]

        self._hits += len(keys) - len(stale)
        self._misses += len(stale)
        for key in keys.values():
            if key in self._entries:
                self._entries.move_to_end(key)
        # Assemble from this lookup's own entries; a concurrent lookup may evict them meanwhile.
        entries: Dict[CacheKey, Optional[CacheEntry]] = {key: self._entries.get(key) for key in keys.values()}
        if stale:
            refreshed = await asyncio.gather(*(self._refresh(key) for key in stale))
            for key, entry in zip(stale, refreshed):
                if entry is not None:
                    entries[key] = entry

        counts: Dict[FilterDimension, Tuple[ValueCount, ...]] = {}
        for dimension, key in keys.items():
            entry = entries[key]
            if entry is None:
                counts[dimension] = ()
                continue
            if key in self._entries:
                self._entries.move_to_end(key)
            counts[dimension] = entry.data
        return FilterCounts(counts=counts, computed_at=now)

    async def _refresh(self, key: CacheKey) -> Optional[CacheEntry]:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key))
            self._inflight[key] = task

            def _done(finished: asyncio.Task, key: CacheKey = key) -> None:
                if self._inflight.get(key) is finished:
                    del self._inflight[key]

            task.add_done_callback(_done)
        return await asyncio.shield(task)

    async def _load(self, key: CacheKey) -> Optional[CacheEntry]:
        """Fetch one axis. Returns the new entry, or the last good one if the fetch fails."""
        dimension, base_state = key
        self._refreshes += 1
        try:
            data = await self.service.fetch_distribution(base_state, dimension)
        except Exception as e:
            # Keep the old entry and its timestamp so the next lookup retries.
            self._failures += 1
            fallback = "last good counts" if key in self._entries else "no counts"
            logger.warning(f"Distribution refresh failed for {dimension.key}, using {fallback}: {e}")
            return self._entries.get(key)

        entry = CacheEntry(data=tuple(data), timestamp=self._clock())
        self._entries[key] = entry
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted distribution entry for {evicted[0].key}")
        return entry

    def invalidate(self, dimension: Optional[FilterDimension] = None) -> int:
        """Drop cached axes (all, or only one dimension's). Returns the number dropped."""
        if dimension is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            keys = [key for key in self._entries if key[0] == dimension]
            for key in keys:
                del self._entries[key]
            removed = len(keys)
        logger.debug(f"Invalidated {removed} distribution entries")
        return removed

    def stats(self) -> Dict[str, Any]:
        """Get statistics about cache usage."""
        return {
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "ttl": self.ttl,
            "hits": self._hits,
            "misses": self._misses,
            "refreshes": self._refreshes,
            "failures": self._failures,
            "inflight": len(self._inflight),
        }
