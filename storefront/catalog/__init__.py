"""Product Catalog.

Provides slug allocation, rating aggregation, listing query plans and
the catalog service that combines them over the product tables.
"""

from storefront.catalog.models import Category, Product, ProductTag, Review, User
from storefront.catalog.query import (
    CatalogQuery,
    PaginationParams,
    ProductFilter,
    SortOption,
    build_query,
)
from storefront.catalog.ratings import RatingSummary, recompute
from storefront.catalog.repository import CategoryRepository, ProductRepository
from storefront.catalog.service import (
    CatalogService,
    CategoryService,
    PaginatedResult,
    ProductInput,
)
from storefront.catalog.slugs import SlugAllocator, slugify

__all__ = [
    # Models
    "Category",
    "Product",
    "ProductTag",
    "Review",
    "User",
    # Query building
    "CatalogQuery",
    "PaginationParams",
    "ProductFilter",
    "SortOption",
    "build_query",
    # Ratings
    "RatingSummary",
    "recompute",
    # Slugs
    "SlugAllocator",
    "slugify",
    # Repository
    "CategoryRepository",
    "ProductRepository",
    # Service
    "CatalogService",
    "CategoryService",
    "PaginatedResult",
    "ProductInput",
]
