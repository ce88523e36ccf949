"""Tests for catalog query composition."""

import pytest

from src.catalog.composer import (
    CatalogPage,
    Predicate,
    build_distribution_request,
    build_predicates,
    build_request,
    render_where,
)
from src.filters.sorting import SortKey
from src.filters.state import FilterState
from src.filters.vocabulary import FilterDimension


class TestPredicates:
    """Tests for predicate building."""

    def test_empty_state_has_no_predicates(self):
        assert build_predicates(FilterState.empty()) == ()
        assert render_where(()) == ("", [])

    def test_single_and_multi(self):
        state = FilterState.of(sport="volleyball", lighting=["natural", "backlit"])
        predicates = build_predicates(state)

        assert predicates == (
            Predicate(FilterDimension.SPORT, "eq", ("volleyball",)),
            Predicate(FilterDimension.LIGHTING, "in", ("natural", "backlit")),
        )

    def test_render_where(self):
        state = FilterState.of(sport="volleyball", lighting=["natural", "backlit"])
        where, params = render_where(build_predicates(state), "p")

        assert where == "WHERE p.sport_type = ? AND p.lighting IN (?, ?)"
        assert params == ["volleyball", "natural", "backlit"]

    def test_distribution_request_drops_own_dimension(self):
        state = FilterState.of(sport="volleyball", intensity="peak")
        predicates = build_distribution_request(state, FilterDimension.SPORT)
        assert [p.dimension for p in predicates] == [FilterDimension.INTENSITY]


class TestRequests:
    """Tests for composed page requests."""

    def test_defaults(self):
        request = build_request(FilterState.empty(), page_size=10)
        assert request.sort == SortKey.NEWEST
        assert request.page == 1
        assert request.offset == 0

    def test_unknown_sort_falls_back(self):
        assert build_request(FilterState.empty(), sort="bogus").sort == SortKey.NEWEST

    def test_offset(self):
        request = build_request(FilterState.empty(), page=3, page_size=10)
        assert request.offset == 20
        assert not request.out_of_range

    def test_page_below_one_is_out_of_range(self):
        assert build_request(FilterState.empty(), page=0).out_of_range

    @pytest.mark.parametrize("sort", list(SortKey))
    def test_every_sort_ends_with_tie_break(self, sort):
        request = build_request(FilterState.empty(), sort=sort)
        assert request.order_by_clause().endswith("photo_id ASC NULLS LAST")

    def test_order_by_with_alias(self):
        request = build_request(FilterState.empty(), sort=SortKey.HIGHEST_QUALITY)
        assert request.order_by_clause("p") == (
            "ORDER BY p.quality_score DESC NULLS LAST, "
            "p.upload_date DESC NULLS LAST, p.photo_id ASC NULLS LAST"
        )

    def test_intensity_sort_ranks_values(self):
        clause = build_request(FilterState.empty(), sort=SortKey.INTENSITY).order_by_clause("p")
        assert "CASE p.action_intensity WHEN 'low' THEN 1" in clause
        assert "WHEN 'peak' THEN 4 ELSE 0 END DESC" in clause


class TestCatalogPage:
    """Tests for page metadata."""

    def test_pagination(self):
        page = CatalogPage(items=({"photo_id": "p1"},), total=25, page=2, page_size=10)
        assert page.total_pages == 3
        assert page.has_next
        assert page.photo_ids == ("p1",)

    def test_last_page(self):
        page = CatalogPage(items=(), total=25, page=3, page_size=10)
        assert not page.has_next
        assert page.is_empty

    def test_to_dict(self):
        data = CatalogPage(total=0).to_dict()
        assert data["pagination"]["total_pages"] == 0
        assert data["sort"] == "newest"
