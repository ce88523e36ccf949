"""Shared FastAPI dependencies.

The key/value store and the distribution cache live for the whole process;
a FacetSession is built per request on top of them.
"""

from typing import Optional

from fastapi import Depends

from api.config import get_settings
from api.services.database import DatabaseService, get_db
from src.catalog.distribution_cache import DistributionCache
from src.catalog.duckdb_services import DuckDBCatalogService, DuckDBDistributionService
from src.session import FacetSession
from src.storage.kv_store import KeyValueStore, SQLiteKeyValueStore

_kv_store: Optional[KeyValueStore] = None
_distribution_cache: Optional[DistributionCache] = None


def get_kv_store() -> KeyValueStore:
    """Get the process-wide key/value store."""
    global _kv_store
    if _kv_store is None:
        _kv_store = SQLiteKeyValueStore(get_settings().storage_path)
    return _kv_store


def get_catalog_service(db: DatabaseService = Depends(get_db)) -> DuckDBCatalogService:
    return DuckDBCatalogService(db.connect())


def get_distribution_cache(db: DatabaseService = Depends(get_db)) -> DistributionCache:
    """Get the process-wide distribution cache."""
    global _distribution_cache
    if _distribution_cache is None:
        settings = get_settings()
        _distribution_cache = DistributionCache(
            DuckDBDistributionService(db.connect()),
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        )
    return _distribution_cache


class SessionFactory:
    """Builds FacetSessions over the shared services."""

    def __init__(self, catalog: DuckDBCatalogService, cache: DistributionCache, kv_store: KeyValueStore):
        self.catalog = catalog
        self.cache = cache
        self.kv_store = kv_store

    def __call__(self, track: bool = True) -> FacetSession:
        return FacetSession(
            self.catalog,
            self.cache,
            self.kv_store,
            page_size=get_settings().page_size,
            track=track,
        )


def get_session_factory(
    catalog: DuckDBCatalogService = Depends(get_catalog_service),
    cache: DistributionCache = Depends(get_distribution_cache),
    kv_store: KeyValueStore = Depends(get_kv_store),
) -> SessionFactory:
    return SessionFactory(catalog, cache, kv_store)


def reset_dependencies() -> None:
    """Forget the shared store and cache (used after reconfiguration and in tests)."""
    global _kv_store, _distribution_cache
    _kv_store = None
    _distribution_cache = None
