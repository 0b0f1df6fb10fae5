"""Catalog query plan building.

Translates the raw query-string parameters of a product listing into a
typed plan. Parsing is total: malformed numbers fall back to their
defaults instead of raising, so any parameter bag yields a valid plan.
Page numbers beyond the largest storable row offset are clamped to it.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum

from storefront.infrastructure.config import settings

MAX_OFFSET = 2**63 - 1


class SortOption(str, Enum):
    """Supported listing orders."""

    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    RATING = "rating"
    NEWEST = "newest"
    NAME = "name"

    @classmethod
    def parse(cls, raw: str | None) -> "SortOption":
        """Parse a sort value, defaulting to newest-first."""
        try:
            return cls(raw)
        except ValueError:
            return cls.NEWEST


@dataclass
class ProductFilter:
    """Filter parameters for product search.

    Attributes:
        search: Case-insensitive substring in name, description or any tag.
        category_id: Exact category id.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        min_rating: Inclusive lower rating bound.
        featured_only: Restrict to featured products.
        active_only: Restrict to active products (always on for listings).
    """

    search: str | None = None
    category_id: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_rating: Decimal | None = None
    featured_only: bool = False
    active_only: bool = True


@dataclass
class PaginationParams:
    """Pagination parameters.

    Attributes:
        page: Page number (1-indexed).
        page_size: Items per page.
    """

    page: int = 1
    page_size: int = 12

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size


@dataclass
class CatalogQuery:
    """Complete listing plan: what to match, how to order, which page."""

    filters: ProductFilter = field(default_factory=ProductFilter)
    sort: SortOption = SortOption.NEWEST
    pagination: PaginationParams = field(default_factory=PaginationParams)


def _parse_positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value < 1:
        return default
    return int(value)


def _parse_decimal(raw: str | None) -> Decimal | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _clean(raw: str | None) -> str | None:
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def build_query(
    params: Mapping[str, str | None],
    default_page_size: int | None = None,
    max_page_size: int | None = None,
) -> CatalogQuery:
    """Build a listing plan from raw query parameters.

    Recognized keys: ``search``, ``category``, ``minPrice``, ``maxPrice``,
    ``minRating``, ``featured``, ``page``, ``limit``, ``sort``. Unknown keys
    are ignored.

    Args:
        params: Raw parameter values; missing keys mean "not supplied".
        default_page_size: Page size when ``limit`` is absent or invalid.
        max_page_size: Upper bound applied to ``limit``.

    Returns:
        Catalog query plan.
    """
    default_page_size = default_page_size or settings.default_page_size
    max_page_size = max_page_size or settings.max_page_size

    filters = ProductFilter(
        search=_clean(params.get("search")),
        category_id=_clean(params.get("category")),
        min_price=_parse_decimal(params.get("minPrice")),
        max_price=_parse_decimal(params.get("maxPrice")),
        min_rating=_parse_decimal(params.get("minRating")),
        featured_only=params.get("featured") == "true",
    )

    page_size = min(_parse_positive_int(params.get("limit"), default_page_size), max_page_size)
    # Keep the row offset within a signed 64-bit integer
    last_page = MAX_OFFSET // page_size + 1
    pagination = PaginationParams(
        page=min(_parse_positive_int(params.get("page"), 1), last_page),
        page_size=page_size,
    )

    return CatalogQuery(
        filters=filters,
        sort=SortOption.parse(params.get("sort")),
        pagination=pagination,
    )
