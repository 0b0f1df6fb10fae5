"""Catalog service for product operations.

High-level service that combines repository operations with
business logic for catalog management: listing, slug allocation,
partial updates and review aggregation.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from storefront.catalog.models import USER_ID_LENGTH, Category, Product, Review
from storefront.catalog.query import build_query
from storefront.catalog.ratings import recompute
from storefront.catalog.repository import CategoryRepository, ProductRepository
from storefront.catalog.slugs import SlugAllocator, slugify
from storefront.domain.exceptions import (
    CategoryNotFoundError,
    ConcurrentUpdateError,
    DuplicateCategoryError,
    DuplicateReviewError,
    DuplicateSkuError,
    InvalidInputError,
    ProductNotFoundError,
    SlugAllocationError,
    StorageError,
)
from storefront.infrastructure.config import settings

logger = structlog.get_logger()

T = TypeVar("T")

# Fields a client may change through update_product. rating, num_reviews
# and slug are derived and only change through reviews or renames.
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "price",
        "sale_price",
        "sku",
        "category_id",
        "stock",
        "low_stock_threshold",
        "images",
        "specifications",
        "variants",
        "tags",
        "is_active",
        "is_featured",
        "weight",
        "dimensions",
    }
)
NULLABLE_FIELDS = frozenset({"sale_price", "weight", "dimensions"})


@dataclass
class ProductInput:
    """Fields accepted when creating a product."""

    name: str
    description: str
    price: Decimal
    sku: str
    category_id: str
    sale_price: Decimal | None = None
    stock: int = 0
    low_stock_threshold: int = 10
    images: list[dict[str, Any]] = field(default_factory=list)
    specifications: list[dict[str, Any]] = field(default_factory=list)
    variants: list[dict[str, Any]] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False
    weight: float | None = None
    dimensions: dict[str, Any] | None = None


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count.
        page: Current page.
        page_size: Items per page.
    """

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return math.ceil(self.total / self.page_size)


def _validate_values(values: Mapping[str, Any]) -> None:
    """Reject values the storage schema would accept but the catalog must not."""
    if "name" in values and not str(values["name"]).strip():
        raise InvalidInputError("Product name is required", details={"field": "name"})
    if "sku" in values and not str(values["sku"]).strip():
        raise InvalidInputError("SKU is required", details={"field": "sku"})
    for name in ("price", "sale_price", "stock", "low_stock_threshold"):
        value = values.get(name)
        if value is not None and value < 0:
            raise InvalidInputError(
                f"{name} must not be negative",
                details={"field": name, "value": str(value)},
            )


class CatalogService:
    """Service for product catalog operations.

    Every write commits its own unit of work. Slug races surface as
    unique violations at commit and concurrent edits as stale version
    checks; both re-run the whole operation up to
    ``settings.write_retry_attempts`` times.

    Example usage:
        async with async_session_factory() as session:
            service = CatalogService(session)
            page = await service.list_products({"search": "shoe", "sort": "price-asc"})
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = ProductRepository(session)
        self.slugs = SlugAllocator(
            self.repository.slug_exists,
            max_attempts=settings.max_slug_attempts,
        )
        self.max_write_attempts = max(1, settings.write_retry_attempts)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_products(
        self, params: Mapping[str, str | None]
    ) -> PaginatedResult[Product]:
        """Search active products.

        Args:
            params: Raw listing parameters (see ``build_query``).

        Returns:
            Paginated product results without reviews.
        """
        plan = build_query(params)

        products = await self.repository.find_all(plan)
        total = await self.repository.count(plan.filters)

        return PaginatedResult(
            items=list(products),
            total=total,
            page=plan.pagination.page,
            page_size=plan.pagination.page_size,
        )

    async def get_product_by_slug(self, slug: str) -> Product:
        """Get an active product by slug, with reviews and authors.

        Raises:
            ProductNotFoundError: If no active product has this slug.
        """
        product = await self.repository.get_by_slug(slug)
        if product is None:
            raise ProductNotFoundError(slug, field="slug")
        return product

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_product(self, data: ProductInput) -> Product:
        """Create a product with a freshly allocated slug.

        Args:
            data: Product fields.

        Returns:
            Created product with category loaded.

        Raises:
            DuplicateSkuError: If the SKU is taken.
            InvalidInputError: If the name cannot be slugged or a value is invalid.
            SlugAllocationError: If every commit attempt lost a slug race.
        """
        _validate_values(vars(data))

        for attempt in range(1, self.max_write_attempts + 1):
            if await self.repository.sku_exists(data.sku):
                raise DuplicateSkuError(data.sku)

            slug = await self.slugs.allocate(data.name)
            product = Product(
                slug=slug,
                sku=data.sku,
                name=data.name,
                description=data.description,
                price=data.price,
                sale_price=data.sale_price,
                stock=data.stock,
                low_stock_threshold=data.low_stock_threshold,
                category_id=data.category_id,
                images=list(data.images),
                specifications=list(data.specifications),
                variants=list(data.variants),
                tags=list(data.tags),
                is_active=data.is_active,
                is_featured=data.is_featured,
                weight=data.weight,
                dimensions=data.dimensions,
            )
            self.repository.add(product)

            try:
                await self._commit()
            except IntegrityError as e:
                await self._raise_unless_slug_race(e, sku=data.sku, slug=slug)
                logger.warning(
                    "Slug taken at commit, retrying create",
                    slug=slug,
                    attempt=attempt,
                )
                continue

            logger.info("Product created", product_id=product.id, slug=slug, sku=data.sku)
            return await self._reload(product.id)

        raise SlugAllocationError(slugify(data.name), self.max_write_attempts)

    async def update_product(self, product_id: str, changes: Mapping[str, Any]) -> Product:
        """Apply a partial update.

        Only keys present in ``changes`` are written, so ``0`` and ``False``
        are real values. A new name re-allocates the slug, ignoring the
        product's own current slug.

        Args:
            product_id: Product ID.
            changes: Field name to new value, for updatable fields only.

        Returns:
            Updated product with category loaded.

        Raises:
            ProductNotFoundError: If the product does not exist.
            InvalidInputError: On unknown fields or invalid values.
            DuplicateSkuError: If the new SKU belongs to another product.
            ConcurrentUpdateError: If every attempt lost a race.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidInputError(
                "Fields cannot be updated: " + ", ".join(sorted(unknown)),
                details={"fields": sorted(unknown)},
            )
        for name, value in changes.items():
            if value is None and name not in NULLABLE_FIELDS:
                raise InvalidInputError(f"{name} cannot be null", details={"field": name})
        _validate_values(changes)

        for attempt in range(1, self.max_write_attempts + 1):
            product = await self.repository.get_by_id(product_id, refresh=True)
            if product is None:
                raise ProductNotFoundError(product_id)

            sku = changes.get("sku", product.sku)
            if sku != product.sku and await self.repository.sku_exists(sku, exclude_id=product_id):
                raise DuplicateSkuError(sku)

            slug = product.slug
            if "name" in changes and changes["name"] != product.name:
                slug = await self.slugs.allocate(changes["name"], exclude_id=product_id)

            for name, value in changes.items():
                setattr(product, name, value)
            product.slug = slug

            try:
                await self._commit()
            except IntegrityError as e:
                await self._raise_unless_slug_race(e, sku=sku, slug=slug, exclude_id=product_id)
                logger.warning("Slug taken at commit, retrying update", slug=slug, attempt=attempt)
                continue
            except StaleDataError:
                logger.warning(
                    "Product changed during update, retrying",
                    product_id=product_id,
                    attempt=attempt,
                )
                continue

            logger.info(
                "Product updated",
                product_id=product_id,
                fields=sorted(changes),
                slug=slug,
            )
            return await self._reload(product_id)

        raise ConcurrentUpdateError(product_id)

    async def add_review(
        self,
        product_id: str,
        user_id: str,
        rating: int,
        comment: str,
    ) -> Product:
        """Add a review and recompute the product's rating summary.

        The review row and the product's ``rating``/``num_reviews`` are
        written in one transaction. The product's version column turns a
        concurrent review into a stale-data error, which re-runs the
        operation against the fresh review list.

        Args:
            product_id: Reviewed product.
            user_id: Reviewing user.
            rating: Integer rating, 1-5.
            comment: Review text.

        Returns:
            Product with updated rating summary.

        Raises:
            ProductNotFoundError: If the product does not exist.
            DuplicateReviewError: If the user already reviewed the product.
            InvalidInputError: If rating or comment is invalid, or the user id is
                blank or too long.
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidInputError(
                "Rating must be an integer from 1 to 5",
                details={"rating": rating},
            )
        if not comment or not comment.strip():
            raise InvalidInputError("Comment is required", details={"field": "comment"})

        reviewer = str(user_id).strip()
        if not reviewer or len(reviewer) > USER_ID_LENGTH:
            raise InvalidInputError(
                f"User id must be 1 to {USER_ID_LENGTH} characters",
                details={"field": "user_id"},
            )

        for attempt in range(1, self.max_write_attempts + 1):
            product = await self.repository.get_by_id(
                product_id, include_reviews=True, refresh=True
            )
            if product is None:
                raise ProductNotFoundError(product_id)

            if any(str(review.user_id).strip() == reviewer for review in product.reviews):
                raise DuplicateReviewError(product_id, reviewer)

            product.reviews.append(Review(user_id=reviewer, rating=rating, comment=comment))
            summary = recompute(review.rating for review in product.reviews)
            product.rating = summary.rating
            product.num_reviews = summary.num_reviews

            try:
                await self._commit()
            except StaleDataError:
                logger.warning(
                    "Concurrent review detected, retrying",
                    product_id=product_id,
                    attempt=attempt,
                )
                continue
            except IntegrityError as e:
                if await self.repository.review_exists(product_id, reviewer):
                    raise DuplicateReviewError(product_id, reviewer) from e
                raise StorageError(
                    "Review write violated a storage constraint",
                    details={"product_id": product_id},
                ) from e

            logger.info(
                "Review added",
                product_id=product_id,
                user_id=reviewer,
                rating=float(summary.rating),
                num_reviews=summary.num_reviews,
            )
            return product

        raise ConcurrentUpdateError(product_id)

    async def delete_product(self, product_id: str) -> None:
        """Hard-delete a product together with its reviews and tags.

        Raises:
            ProductNotFoundError: If the product does not exist.
        """
        product = await self.repository.get_by_id(product_id, include_reviews=True)
        if product is None:
            raise ProductNotFoundError(product_id)

        await self.repository.delete(product)
        await self._commit()
        logger.info("Product deleted", product_id=product_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _commit(self) -> None:
        """Commit, rolling back on any failure.

        Unique and version violations propagate as-is for the caller to
        classify; every other database failure becomes ``StorageError``.
        """
        try:
            await self.session.commit()
        except (IntegrityError, StaleDataError):
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Commit failed", error=str(e))
            raise StorageError("Failed to persist changes", details={"error": str(e)}) from e

    async def _raise_unless_slug_race(
        self,
        error: IntegrityError,
        sku: str,
        slug: str,
        exclude_id: str | None = None,
    ) -> None:
        """Classify a unique violation after rollback.

        Returns normally only when the slug was taken by someone else,
        which is the one case worth retrying.
        """
        if await self.repository.sku_exists(sku, exclude_id=exclude_id):
            raise DuplicateSkuError(sku) from error
        if await self.repository.slug_exists(slug, exclude_id=exclude_id):
            return
        raise StorageError(
            "Product write violated a storage constraint",
            details={"sku": sku, "slug": slug},
        ) from error

    async def _reload(self, product_id: str) -> Product:
        product = await self.repository.get_by_id(product_id, refresh=True)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product


class CategoryService:
    """Service for the category lookups the catalog depends on."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repository = CategoryRepository(session)

    async def list_categories(self) -> list[Category]:
        """List active categories in display order."""
        return list(await self.repository.list_active())

    async def get_category_by_slug(self, slug: str) -> Category:
        """Get an active category by slug.

        Raises:
            CategoryNotFoundError: If no active category has this slug.
        """
        category = await self.repository.get_by_slug(slug)
        if category is None:
            raise CategoryNotFoundError(slug)
        return category

    async def create_category(
        self,
        name: str,
        description: str | None = None,
        image: str | None = None,
        sort_order: int = 0,
    ) -> Category:
        """Create a category whose slug is derived from its name.

        Raises:
            InvalidInputError: If the name cannot be slugged.
            DuplicateCategoryError: If the name or slug is taken.
        """
        slug = slugify(name)
        if await self.repository.name_or_slug_exists(name, slug):
            raise DuplicateCategoryError(name)

        category = self.repository.add(
            Category(
                name=name,
                slug=slug,
                description=description,
                image=image,
                sort_order=sort_order,
            )
        )
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateCategoryError(name) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageError("Failed to persist category", details={"error": str(e)}) from e

        logger.info("Category created", category_id=category.id, slug=slug)
        return category


