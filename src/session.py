"""Facet session: wires the store and its observers to the catalog services.

One session corresponds to one browsing context (a tab, or one API
request). The distribution cache and the key/value store are shared across
sessions; everything else is per session.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from config.logging_config import get_logger
from src.catalog.composer import CatalogPage, build_request
from src.catalog.distribution_cache import DistributionCache
from src.catalog.requests import LatestRequestGate
from src.catalog.services import CatalogQueryService, FilterCounts
from src.filters.compatibility import CompatibilityGuard, CompatibilityRule
from src.filters.notifications import NotificationCenter
from src.filters.sorting import DEFAULT_SORT, SortKey
from src.filters.state import FilterState
from src.filters.store import CommitEvent, CommitSource, FilterStateStore
from src.filters.url_codec import (
    DEFAULT_SHARE_PATH,
    UrlMirror,
    build_share_url,
    decode_with_extras,
    encode_with_extras,
)
from src.storage.kv_store import KeyValueStore
from src.tracking.analytics import FilterAnalytics
from src.tracking.history import FilterHistory
from src.tracking.preferences import DisplayPreferences
from src.tracking.presets import Preset, PresetLibrary

logger = get_logger("session")

RESULTS_CONSUMER = "results"
COUNTS_CONSUMER = "counts"


class ResultsStatus(str, Enum):
    LOADED = "loaded"
    EMPTY = "empty"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class ResultsOutcome:
    """What happened to one results request."""

    status: ResultsStatus
    state: FilterState
    page: Optional[CatalogPage] = None
    error: Optional[str] = None
    retryable: bool = False


class FacetSession:
    """
    Composition root for one filtering session.

    Usage:
        session = FacetSession(catalog_service, distribution_cache, kv_store)
        session.load_from_url("sport=volleyball&lighting=natural")
        outcome = await session.load_results()
        counts = await session.load_counts()
    """

    def __init__(
        self,
        catalog: CatalogQueryService,
        distribution_cache: DistributionCache,
        kv_store: KeyValueStore,
        rules: Optional[Iterable[CompatibilityRule]] = None,
        built_in_presets: Optional[Iterable[Preset]] = None,
        page_size: Optional[int] = None,
        base_path: str = DEFAULT_SHARE_PATH,
        track: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self.catalog = catalog
        self.distribution_cache = distribution_cache
        self.page_size = page_size
        self.sort: SortKey = DEFAULT_SORT
        self.page = 1
        self.gate = LatestRequestGate()

        self.notifications = NotificationCenter(clock)
        self.store = FilterStateStore(notifications=self.notifications)
        self.guard = CompatibilityGuard(self.store, rules)
        self.url = UrlMirror(base_path)
        self.history = FilterHistory(kv_store, clock=clock)
        self.presets = PresetLibrary(kv_store, built_in_presets, clock=clock)
        self.analytics = FilterAnalytics(kv_store, clock=clock)
        self.preferences = DisplayPreferences(kv_store)

        self._unsubscribers = [self.store.subscribe(self.url)]
        if track:
            self._unsubscribers.append(self.store.subscribe(self.history))
            self._unsubscribers.append(self.store.subscribe(self.analytics))
        # Any commit makes responses for the previous state stale.
        self._unsubscribers.append(self.store.subscribe(self._supersede_requests))

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.guard.close()
        self.gate.cancel(RESULTS_CONSUMER, COUNTS_CONSUMER)

    def _supersede_requests(self, event: CommitEvent) -> None:
        self.gate.cancel(RESULTS_CONSUMER, COUNTS_CONSUMER)

    @property
    def state(self) -> FilterState:
        return self.store.state

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def load_from_url(self, query: Any) -> FilterState:
        """Adopt the filters, sort and page from a query string in one commit."""
        state, sort, page = decode_with_extras(query)
        self.sort = sort
        self.page = page
        self.store.replace(state, source=CommitSource.URL)
        return self.store.state

    def apply_preset(self, preset_id: str) -> Optional[Preset]:
        preset = self.presets.apply_preset(preset_id, self.store)
        if preset is not None:
            self.page = 1
        return preset

    def apply_history(self, entry_id: str) -> Optional[FilterState]:
        entry = self.history.get(entry_id)
        if entry is None:
            return None
        self.store.replace(entry.filters, source=CommitSource.HISTORY)
        self.page = 1
        return self.store.state

    @property
    def query_string(self) -> str:
        """Canonical query string for the current filters, sort and page."""
        return encode_with_extras(self.store.state, self.sort, self.page)

    def share_url(self) -> str:
        return build_share_url(self.store.state, self.url.base_path)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_results(self, sort: Any = None, page: Optional[int] = None) -> ResultsOutcome:
        """
        Fetch the current page of results.

        A request overtaken by a newer request or by a filter commit comes
        back `superseded` and is not applied. Service failures come back `failed`
        (retryable), which is distinct from a genuinely `empty` result.
        """
        if sort is not None:
            self.sort = SortKey.parse(sort, self.sort)
        if page is not None:
            self.page = page

        state = self.store.state
        request = build_request(state, self.sort, self.page, self.page_size)
        ticket = self.gate.issue(RESULTS_CONSUMER)

        try:
            result = await self.catalog.fetch_page(request)
        except Exception as e:
            if not self.gate.is_current(ticket):
                return ResultsOutcome(ResultsStatus.SUPERSEDED, state)
            logger.error(f"Loading results for '{state.describe()}' failed: {e}")
            return ResultsOutcome(ResultsStatus.FAILED, state, error=str(e), retryable=True)

        if not self.gate.is_current(ticket):
            logger.debug(f"Discarding superseded results (ticket {ticket.sequence})")
            return ResultsOutcome(ResultsStatus.SUPERSEDED, state)

        if result.total == 0:
            self.guard.report_result_count(state, 0)
            return ResultsOutcome(ResultsStatus.EMPTY, state, page=result)
        return ResultsOutcome(ResultsStatus.LOADED, state, page=result)

    async def load_counts(self) -> Optional[FilterCounts]:
        """Per-value counts for the current state; None if a newer request or commit overtook this one."""
        state = self.store.state
        ticket = self.gate.issue(COUNTS_CONSUMER)
        counts = await self.distribution_cache.get_counts(state)
        if not self.gate.is_current(ticket):
            return None
        return counts
