"""Query composition, catalog services and the distribution cache."""

from .composer import (
    CatalogPage,
    CatalogRequest,
    Predicate,
    SortKey,
    SortTerm,
    DEFAULT_SORT,
    build_request,
    build_distribution_request,
)
from .services import (
    CatalogQueryService,
    DistributionService,
    FilterCounts,
    ValueCount,
    zero_filled,
)
from .distribution_cache import CacheEntry, DistributionCache
from .duckdb_services import DuckDBCatalogService, DuckDBDistributionService
from .requests import LatestRequestGate, RequestTicket

__all__ = [
    # Composer
    "CatalogPage",
    "CatalogRequest",
    "Predicate",
    "SortKey",
    "SortTerm",
    "DEFAULT_SORT",
    "build_request",
    "build_distribution_request",
    # Services
    "CatalogQueryService",
    "DistributionService",
    "FilterCounts",
    "ValueCount",
    "zero_filled",
    "DuckDBCatalogService",
    "DuckDBDistributionService",
    # Cache
    "CacheEntry",
    "DistributionCache",
    # Requests
    "LatestRequestGate",
    "RequestTicket",
]
