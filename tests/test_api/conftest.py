"""Pytest fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import (
    get_catalog_service,
    get_distribution_cache,
    get_kv_store,
    reset_dependencies,
)
from api.main import app
from api.services.database import DatabaseService, get_db
from src.catalog.distribution_cache import DistributionCache
from src.catalog.duckdb_services import DuckDBDistributionService
from src.errors import CatalogUnavailableError
from src.storage.kv_store import InMemoryKeyValueStore


class FailingCatalog:
    async def fetch_page(self, request):
        raise CatalogUnavailableError("catalog offline")


@pytest.fixture
def api_kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def client(test_db, api_kv_store):
    """TestClient over the in-memory sample catalog."""
    db = DatabaseService(connection=test_db)
    cache = DistributionCache(DuckDBDistributionService(test_db, table="photos"), ttl_seconds=300)

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_kv_store] = lambda: api_kv_store
    app.dependency_overrides[get_distribution_cache] = lambda: cache
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_dependencies()


@pytest.fixture
def failing_catalog(client):
    """Make the catalog service fail for the duration of a test."""
    app.dependency_overrides[get_catalog_service] = lambda: FailingCatalog()
    yield
    app.dependency_overrides.pop(get_catalog_service, None)
