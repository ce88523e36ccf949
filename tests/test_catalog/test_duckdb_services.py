"""Tests for the DuckDB-backed catalog services."""

import asyncio

import pytest

from src.catalog.composer import build_request
from src.catalog.duckdb_services import DuckDBCatalogService, DuckDBDistributionService
from src.errors import CatalogUnavailableError, DistributionUnavailableError
from src.filters.sorting import SortKey
from src.filters.state import FilterState
from src.filters.vocabulary import FilterDimension


def fetch(service, state, sort=SortKey.NEWEST, page=1, page_size=10):
    return asyncio.run(service.fetch_page(build_request(state, sort, page, page_size)))


class TestCatalogService:
    """Tests for DuckDBCatalogService.fetch_page."""

    def test_unfiltered_newest_first(self, test_db):
        service = DuckDBCatalogService(test_db, table="photos")
        page = fetch(service, FilterState.empty(), page_size=4)

        assert page.total == 10
        assert page.total_pages == 3
        assert page.photo_ids == ("p10", "p09", "p08", "p07")

    def test_filters_are_conjunctive(self, test_db):
        service = DuckDBCatalogService(test_db, table="photos")
        page = fetch(service, FilterState.of(sport="volleyball", lighting=["natural"]))

        assert page.total == 2
        assert page.photo_ids == ("p03", "p01")

    def test_multi_values_are_alternatives(self, test_db):
        service = DuckDBCatalogService(test_db, table="photos")
        page = fetch(service, FilterState.of(sport="volleyball", lighting=["natural", "backlit"]))

        assert set(page.photo_ids) == {"p01", "p03", "p08"}

    def test_quality_sort_puts_missing_scores_last(self, test_db):
        service = DuckDBCatalogService(test_db, table="photos")
        page = fetch(service, FilterState.empty(), sort=SortKey.HIGHEST_QUALITY)

        assert page.photo_ids[:3] == ("p01", "p06", "p04")
        assert page.photo_ids[-1] == "p09"

    def test_intensity_sort(self, test_db):
        service = DuckDBCatalogService(test_db, table="photos")
        page = fetch(service, FilterState.empty(), sort=SortKey.INTENSITY)

        assert page.photo_ids == ("p04", "p01", "p08", "p06", "p02", "p03", "p10", "p07", "p05", "p09")

    def test_second_page(self, test_db):
        service = DuckDBCatalogService(test_db, table="photos")
        page = fetch(service, FilterState.empty(), sort=SortKey.OLDEST, page=2, page_size=4)

        assert page.photo_ids == ("p05", "p06", "p07", "p08")
        assert page.has_next

    @pytest.mark.parametrize("page_number", [0, 5])
    def test_out_of_range_pages_are_empty_with_total(self, test_db, page_number):
        service = DuckDBCatalogService(test_db, table="photos")
        page = fetch(service, FilterState.empty(), page=page_number)

        assert page.items == ()
        assert page.total == 10

    def test_rows_are_json_ready(self, test_db):
        service = DuckDBCatalogService(test_db, table="photos")
        item = fetch(service, FilterState.of(sport="portrait")).items[0]

        assert item["photo_id"] == "p09"
        assert item["upload_date"] == "2024-06-09T10:00:00"
        assert item["quality_score"] is None
        assert item["thumbnail_url"].endswith("p09_thumb.jpg")

    def test_query_failure_is_reported(self, test_db):
        service = DuckDBCatalogService(test_db, table="missing_table")
        with pytest.raises(CatalogUnavailableError) as exc_info:
            fetch(service, FilterState.empty())
        assert exc_info.value.retryable


class TestDistributionService:
    """Tests for DuckDBDistributionService.fetch_distribution."""

    def test_counts_scoped_to_other_filters(self, test_db):
        service = DuckDBDistributionService(test_db, table="photos")
        counts = asyncio.run(
            service.fetch_distribution(FilterState.of(lighting=["natural"]), FilterDimension.SPORT)
        )

        as_dict = {c.value: c.count for c in counts}
        assert as_dict["volleyball"] == 2
        assert as_dict["soccer"] == 1
        assert as_dict["basketball"] == 0
        assert [c.value for c in counts] == list(FilterDimension.SPORT.values)

    def test_own_dimension_is_ignored(self, test_db):
        service = DuckDBDistributionService(test_db, table="photos")
        counts = asyncio.run(
            service.fetch_distribution(FilterState.of(sport="soccer"), FilterDimension.SPORT)
        )
        assert {c.value: c.count for c in counts}["volleyball"] == 5

    def test_nulls_not_counted(self, test_db):
        service = DuckDBDistributionService(test_db, table="photos")
        counts = asyncio.run(service.fetch_distribution(FilterState.empty(), FilterDimension.PLAY_TYPE))

        as_dict = {c.value: c.count for c in counts}
        assert as_dict["attack"] == 2
        assert as_dict["block"] == 0
        assert sum(as_dict.values()) == 6

    def test_query_failure_is_reported(self, test_db):
        service = DuckDBDistributionService(test_db, table="missing_table")
        with pytest.raises(DistributionUnavailableError) as exc_info:
            asyncio.run(service.fetch_distribution(FilterState.empty(), FilterDimension.LIGHTING))
        assert exc_info.value.dimension == "lighting"
