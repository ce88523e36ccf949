"""Tests for the distribution cache."""

import asyncio

import pytest

from src.catalog.distribution_cache import DistributionCache
from src.catalog.services import zero_filled
from src.errors import DistributionUnavailableError
from src.filters.state import FilterState
from src.filters.vocabulary import DIMENSIONS, FilterDimension


class FakeDistributionService:
    """Counts each value as 1 and records every call."""

    def __init__(self, delay: float = 0.0):
        self.calls = []
        self.failing = set()
        self.delay = delay

    async def fetch_distribution(self, base_state, dimension):
        self.calls.append((dimension, base_state))
        if self.delay:
            await asyncio.sleep(self.delay)
        if dimension in self.failing:
            raise DistributionUnavailableError("down", dimension=dimension.key)
        return zero_filled(dimension, {v: 1 for v in dimension.values})


@pytest.fixture
def service():
    return FakeDistributionService()


@pytest.fixture
def cache(service, clock):
    return DistributionCache(service, ttl_seconds=60, max_entries=64, clock=clock)


class TestLookups:
    """Tests for cache hits, misses and expiry."""

    def test_first_lookup_fetches_every_axis(self, cache, service):
        counts = asyncio.run(cache.get_counts(FilterState.empty()))

        assert len(service.calls) == len(DIMENSIONS)
        assert counts.count_for(FilterDimension.SPORT, "volleyball") == 1
        assert cache.stats()["misses"] == len(DIMENSIONS)

    def test_axis_base_excludes_its_own_dimension(self, cache, service):
        state = FilterState.of(sport="volleyball", intensity="peak")
        asyncio.run(cache.get_counts(state))

        bases = dict(service.calls)
        assert bases[FilterDimension.SPORT] == FilterState.of(intensity="peak")
        assert bases[FilterDimension.LIGHTING] == state

    def test_changing_one_dimension_reuses_its_own_axis(self, cache, service):
        asyncio.run(cache.get_counts(FilterState.of(sport="volleyball")))
        service.calls.clear()

        asyncio.run(cache.get_counts(FilterState.of(sport="soccer")))

        fetched = [d for d, _ in service.calls]
        assert len(fetched) == len(DIMENSIONS) - 1
        assert FilterDimension.SPORT not in fetched

    def test_fresh_entries_hit(self, cache, service, clock):
        asyncio.run(cache.get_counts(FilterState.empty()))
        clock.advance(30)
        asyncio.run(cache.get_counts(FilterState.empty()))

        assert len(service.calls) == len(DIMENSIONS)
        assert cache.stats()["hits"] == len(DIMENSIONS)

    def test_expired_entries_refresh(self, cache, service, clock):
        asyncio.run(cache.get_counts(FilterState.empty()))
        clock.advance(61)
        asyncio.run(cache.get_counts(FilterState.empty()))

        assert len(service.calls) == 2 * len(DIMENSIONS)

    def test_invalidate(self, cache, service):
        asyncio.run(cache.get_counts(FilterState.empty()))

        assert cache.invalidate(FilterDimension.SPORT) == 1
        assert cache.invalidate() == len(DIMENSIONS) - 1
        assert cache.stats()["size"] == 0


class TestFailures:
    """Tests for failing axes."""

    def test_failed_axis_without_history_is_empty(self, cache, service):
        service.failing.add(FilterDimension.LIGHTING)
        counts = asyncio.run(cache.get_counts(FilterState.empty()))

        assert counts.for_dimension(FilterDimension.LIGHTING) == ()
        assert counts.count_for(FilterDimension.SPORT, "soccer") == 1
        assert cache.stats()["failures"] == 1

    def test_failed_refresh_keeps_last_good_counts(self, cache, service, clock):
        asyncio.run(cache.get_counts(FilterState.empty()))
        clock.advance(61)
        service.failing.add(FilterDimension.LIGHTING)

        counts = asyncio.run(cache.get_counts(FilterState.empty()))
        assert counts.count_for(FilterDimension.LIGHTING, "natural") == 1

        # The stale entry is retried on the next lookup.
        service.failing.clear()
        service.calls.clear()
        asyncio.run(cache.get_counts(FilterState.empty()))
        assert [d for d, _ in service.calls] == [FilterDimension.LIGHTING]


class TestConcurrency:
    """Tests for concurrent lookups."""

    def test_concurrent_lookups_share_inflight_requests(self, clock):
        service = FakeDistributionService(delay=0.01)
        cache = DistributionCache(service, ttl_seconds=60, clock=clock)

        async def run():
            return await asyncio.gather(
                cache.get_counts(FilterState.empty()),
                cache.get_counts(FilterState.empty()),
            )

        first, second = asyncio.run(run())

        assert len(service.calls) == len(DIMENSIONS)
        assert first.to_dict() == second.to_dict()
        assert cache.stats()["inflight"] == 0

    def test_lru_never_evicts_axes_of_one_lookup(self, service, clock):
        cache = DistributionCache(service, ttl_seconds=60, max_entries=1, clock=clock)
        counts = asyncio.run(cache.get_counts(FilterState.of(sport="soccer")))

        assert cache.max_entries == len(DIMENSIONS)
        assert all(counts.for_dimension(d) for d in DIMENSIONS)

        second = asyncio.run(cache.get_counts(FilterState.of(sport="volleyball")))
        assert all(second.for_dimension(d) for d in DIMENSIONS)
        assert cache.stats()["size"] == len(DIMENSIONS)

    def test_concurrent_lookups_keep_their_own_axes(self, clock):
        service = FakeDistributionService(delay=0.01)
        cache = DistributionCache(service, ttl_seconds=60, max_entries=len(DIMENSIONS), clock=clock)

        async def run():
            return await asyncio.gather(
                cache.get_counts(FilterState.of(sport="volleyball")),
                cache.get_counts(FilterState.of(sport="soccer")),
            )

        volleyball, soccer = asyncio.run(run())

        assert all(volleyball.for_dimension(d) for d in DIMENSIONS)
        assert all(soccer.for_dimension(d) for d in DIMENSIONS)
        assert cache.stats()["failures"] == 0
        assert cache.stats()["size"] == len(DIMENSIONS)

    def test_stale_axes_refresh_in_parallel(self, clock):
        service = PeakTrackingService(delay=0.05)
        cache = DistributionCache(service, ttl_seconds=60, clock=clock)

        counts = asyncio.run(cache.get_counts(FilterState.of(sport="volleyball")))

        assert service.peak == len(DIMENSIONS)
        assert all(counts.for_dimension(d) for d in DIMENSIONS)


class PeakTrackingService(FakeDistributionService):
    """Records the largest number of fetches running at once."""

    def __init__(self, delay: float = 0.0):
        super().__init__(delay)
        self.active = 0
        self.peak = 0

    async def fetch_distribution(self, base_state, dimension):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            return await super().fetch_distribution(base_state, dimension)
        finally:
            self.active -= 1
