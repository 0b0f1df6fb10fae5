"""Catalog repositories for database operations.

Compiles catalog query plans into SQL and provides the lookups and
existence checks the catalog service needs.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_, exists, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.catalog.models import Category, Product, ProductTag, Review
from storefront.catalog.query import CatalogQuery, ProductFilter, SortOption
from storefront.domain.exceptions import StorageError


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class _BaseRepository:
    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def _execute(self, query: Any) -> Any:
        try:
            return await self.session.execute(query)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            raise StorageError("Database query failed", details={"error": str(e)}) from e


class ProductRepository(_BaseRepository):
    """Repository for Product database operations.

    Handles all database interactions for products including
    filtering, sorting, and pagination.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            products = await repo.find_all(build_query({"search": "shoe"}))
    """

    def add(self, product: Product) -> Product:
        """Stage a new product for insertion.

        Args:
            product: Product to add.

        Returns:
            The same product.
        """
        self.session.add(product)
        return product

    async def delete(self, product: Product) -> None:
        """Stage a product for deletion.

        Reviews must already be loaded so the ORM can cascade to them.

        Args:
            product: Product to delete.
        """
        await self.session.delete(product)

    async def get_by_id(
        self,
        product_id: str,
        include_reviews: bool = False,
        refresh: bool = False,
    ) -> Product | None:
        """Get product by ID.

        Args:
            product_id: Product ID.
            include_reviews: Whether to eagerly load reviews and their authors.
            refresh: Overwrite any copy already in the session with database state.

        Returns:
            Product if found, None otherwise.
        """
        query = (
            select(Product)
            .where(Product.id == product_id)
            .options(selectinload(Product.category))
        )

        if include_reviews:
            query = query.options(
                selectinload(Product.reviews).selectinload(Review.user)
            )

        if refresh:
            query = query.execution_options(populate_existing=True)

        result = await self._execute(query)
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str, active_only: bool = True) -> Product | None:
        """Get product by slug with category and review authors loaded.

        Args:
            slug: Product slug.
            active_only: Whether inactive products are treated as missing.

        Returns:
            Product if found, None otherwise.
        """
        query = (
            select(Product)
            .where(Product.slug == slug)
            .options(
                selectinload(Product.category),
                selectinload(Product.reviews).selectinload(Review.user),
            )
        )
        if active_only:
            query = query.where(Product.is_active.is_(True))
        query = query.execution_options(populate_existing=True)

        result = await self._execute(query)
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        """Check whether a slug is owned by a product other than ``exclude_id``.

        Args:
            slug: Candidate slug.
            exclude_id: Product to ignore.

        Returns:
            True if another product owns the slug.
        """
        condition = Product.slug == slug
        if exclude_id is not None:
            condition = and_(condition, Product.id != exclude_id)
        result = await self._execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def sku_exists(self, sku: str, exclude_id: str | None = None) -> bool:
        """Check whether a SKU is used by a product other than ``exclude_id``.

        Args:
            sku: SKU to check.
            exclude_id: Product to ignore.

        Returns:
            True if another product uses the SKU.
        """
        condition = Product.sku == sku
        if exclude_id is not None:
            condition = and_(condition, Product.id != exclude_id)
        result = await self._execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def review_exists(self, product_id: str, user_id: str) -> bool:
        """Check whether a user already reviewed a product."""
        result = await self._execute(
            select(
                exists().where(
                    Review.product_id == product_id,
                    Review.user_id == user_id,
                )
            )
        )
        return bool(result.scalar())

    async def find_all(self, plan: CatalogQuery) -> Sequence[Product]:
        """Find one page of products matching a query plan.

        Reviews are not loaded; category is.

        Args:
            plan: Catalog query plan.

        Returns:
            Sequence of matching products.
        """
        query = (
            select(Product)
            .options(selectinload(Product.category))
            .execution_options(populate_existing=True)
        )

        conditions = self._build_conditions(plan.filters)
        if conditions:
            query = query.where(and_(*conditions))

        query = query.order_by(*self._get_sort_columns(plan.sort))

        # Pagination
        query = query.limit(plan.pagination.limit).offset(plan.pagination.offset)

        result = await self._execute(query)
        return result.scalars().all()

    async def count(self, filters: ProductFilter) -> int:
        """Count products matching filters, ignoring pagination.

        Args:
            filters: Filter parameters.

        Returns:
            Count of matching products.
        """
        query = select(func.count(Product.id))

        conditions = self._build_conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        result = await self._execute(query)
        return result.scalar_one()

    def _build_conditions(self, filters: ProductFilter) -> list[Any]:
        """Translate a product filter into SQLAlchemy conditions.

        Args:
            filters: Filter parameters.

        Returns:
            List of conditions to AND together.
        """
        conditions: list[Any] = []

        if filters.active_only:
            conditions.append(Product.is_active.is_(True))

        if filters.search:
            search_pattern = f"%{_escape_like(filters.search)}%"
            tag_match = (
                select(ProductTag.id)
                .where(
                    ProductTag.product_id == Product.id,
                    ProductTag.value.ilike(search_pattern, escape="\\"),
                )
                .exists()
            )
            conditions.append(
                or_(
                    Product.name.ilike(search_pattern, escape="\\"),
                    Product.description.ilike(search_pattern, escape="\\"),
                    tag_match,
                )
            )

        if filters.category_id is not None:
            conditions.append(Product.category_id == filters.category_id)

        if filters.min_price is not None:
            conditions.append(Product.price >= filters.min_price)

        if filters.max_price is not None:
            conditions.append(Product.price <= filters.max_price)

        if filters.min_rating is not None:
            conditions.append(Product.rating >= filters.min_rating)

        if filters.featured_only:
            conditions.append(Product.is_featured.is_(True))

        return conditions

    def _get_sort_columns(self, sort: SortOption) -> list[Any]:
        """Get ORDER BY columns for a sort option.

        ``id`` is always appended so equal keys page deterministically.

        Args:
            sort: Sort option.

        Returns:
            SQLAlchemy order-by clauses.
        """
        columns = {
            SortOption.PRICE_ASC: Product.price.asc(),
            SortOption.PRICE_DESC: Product.price.desc(),
            SortOption.RATING: Product.rating.desc(),
            SortOption.NEWEST: Product.created_at.desc(),
            SortOption.NAME: Product.name.asc(),
        }
        return [columns[sort], Product.id.asc()]


class CategoryRepository(_BaseRepository):
    """Repository for Category database operations."""

    def add(self, category: Category) -> Category:
        """Stage a new category for insertion."""
        self.session.add(category)
        return category

    async def list_active(self) -> Sequence[Category]:
        """List active categories ordered by sort order, then name."""
        query = (
            select(Category)
            .where(Category.is_active.is_(True))
            .order_by(Category.sort_order.asc(), Category.name.asc())
        )
        result = await self._execute(query)
        return result.scalars().all()

    async def get_by_slug(self, slug: str) -> Category | None:
        """Get an active category by slug."""
        query = select(Category).where(
            Category.slug == slug,
            Category.is_active.is_(True),
        )
        result = await self._execute(query)
        return result.scalar_one_or_none()

    async def name_or_slug_exists(self, name: str, slug: str) -> bool:
        """Check whether a category already uses this name or slug."""
        result = await self._execute(
            select(exists().where(or_(Category.name == name, Category.slug == slug)))
        )
        return bool(result.scalar())
