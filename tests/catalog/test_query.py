"""Tests for catalog query plan building."""

from decimal import Decimal

import pytest

from storefront.catalog.query import (
    MAX_OFFSET,
    PaginationParams,
    ProductFilter,
    SortOption,
    build_query,
)


class TestDefaults:
    """An empty parameter bag yields the default plan."""

    def test_empty_params(self) -> None:
        plan = build_query({})

        assert plan.filters == ProductFilter()
        assert plan.filters.active_only is True
        assert plan.sort == SortOption.NEWEST
        assert plan.pagination.page == 1
        assert plan.pagination.page_size == 12
        assert plan.pagination.offset == 0

    def test_none_values_mean_not_supplied(self) -> None:
        plan = build_query({"search": None, "page": None, "limit": None, "sort": None})
        assert plan.filters.search is None
        assert plan.pagination == PaginationParams(page=1, page_size=12)


class TestPagination:
    """Tests for page/limit coercion."""

    def test_offset_from_page_and_limit(self) -> None:
        plan = build_query({"page": "3", "limit": "12"})
        assert plan.pagination.offset == 24
        assert plan.pagination.limit == 12

    @pytest.mark.parametrize("raw", ["abc", "0", "-2", "", "nan", "inf"])
    def test_invalid_page_defaults_to_first(self, raw: str) -> None:
        assert build_query({"page": raw}).pagination.page == 1

    @pytest.mark.parametrize("raw", ["abc", "0", "-5", ""])
    def test_invalid_limit_defaults(self, raw: str) -> None:
        assert build_query({"limit": raw}).pagination.page_size == 12

    def test_fractional_values_truncate(self) -> None:
        plan = build_query({"page": "2.7", "limit": "5.9"})
        assert plan.pagination.page == 2
        assert plan.pagination.page_size == 5

    def test_limit_is_capped(self) -> None:
        assert build_query({"limit": "100000"}).pagination.page_size == 100

    def test_explicit_page_size_bounds(self) -> None:
        plan = build_query({"limit": "50"}, default_page_size=20, max_page_size=30)
        assert plan.pagination.page_size == 30
        assert build_query({}, default_page_size=20).pagination.page_size == 20

    @pytest.mark.parametrize("raw", ["99999999999999999999", "1e300"])
    def test_huge_page_keeps_offset_in_range(self, raw: str) -> None:
        pagination = build_query({"page": raw, "limit": "12"}).pagination
        assert pagination.page > 1
        assert pagination.offset <= MAX_OFFSET
        assert pagination.offset + pagination.limit > MAX_OFFSET


class TestFilters:
    """Tests for filter parsing."""

    def test_search_and_category(self) -> None:
        plan = build_query({"search": "  shoe ", "category": "cat-1"})
        assert plan.filters.search == "shoe"
        assert plan.filters.category_id == "cat-1"

    def test_blank_search_is_ignored(self) -> None:
        assert build_query({"search": "   "}).filters.search is None

    def test_price_bounds(self) -> None:
        plan = build_query({"minPrice": "10", "maxPrice": "99.50"})
        assert plan.filters.min_price == Decimal("10")
        assert plan.filters.max_price == Decimal("99.50")

    def test_unparseable_bounds_are_dropped(self) -> None:
        plan = build_query({"minPrice": "cheap", "maxPrice": "NaN", "minRating": "x"})
        assert plan.filters.min_price is None
        assert plan.filters.max_price is None
        assert plan.filters.min_rating is None

    def test_min_rating(self) -> None:
        assert build_query({"minRating": "4"}).filters.min_rating == Decimal("4")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("false", False), ("1", False), ("TRUE", False), (None, False)],
    )
    def test_featured_requires_literal_true(self, raw: str | None, expected: bool) -> None:
        assert build_query({"featured": raw}).filters.featured_only is expected

    def test_unknown_keys_are_ignored(self) -> None:
        assert build_query({"color": "red"}) == build_query({})


class TestSort:
    """Tests for sort mapping."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("price-asc", SortOption.PRICE_ASC),
            ("price-desc", SortOption.PRICE_DESC),
            ("rating", SortOption.RATING),
            ("newest", SortOption.NEWEST),
            ("name", SortOption.NAME),
            ("popularity", SortOption.NEWEST),
            ("", SortOption.NEWEST),
        ],
    )
    def test_sort_values(self, raw: str, expected: SortOption) -> None:
        assert build_query({"sort": raw}).sort == expected
