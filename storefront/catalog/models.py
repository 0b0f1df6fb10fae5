"""SQLAlchemy models for the product catalog.

Defines Product, ProductTag, Review, Category and User tables.
Category and User are weak references: products and reviews keep
their ids without a foreign key so either side can be removed
independently.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.infrastructure.database import Base


# Width of the users.id column and of references to it
USER_ID_LENGTH = 36


def _uuid() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _decimal_to_float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


class Category(Base):
    """Product category.

    Attributes:
        id: Unique category identifier (UUID string).
        name: Display name (unique).
        slug: URL-safe identifier derived from the name.
        description: Optional description.
        image: Optional image URL.
        sort_order: Position in category listings.
        is_active: Whether the category is publicly listed.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, slug={self.slug})>"


class User(Base):
    """Account record, read here only to expand review authors."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(USER_ID_LENGTH), primary_key=True, default=_uuid)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<User(id={self.id}, email={self.email})>"


class Product(Base):
    """Product entity in the catalog.

    Attributes:
        id: Unique product identifier (UUID string).
        slug: Unique URL-safe identifier derived from the name.
        sku: Stock Keeping Unit, unique, supplied by the client.
        name: Product name.
        description: Product description.
        price: Regular price.
        sale_price: Optional discounted price.
        stock: Units on hand.
        low_stock_threshold: Stock level at which the product counts as low.
        category_id: Id of the owning category (weak reference).
        images: Ordered list of ``{url, alt, isPrimary}`` dicts.
        specifications: Ordered list of ``{name, value}`` dicts.
        variants: Ordered list of ``{name, value, price, stock}`` dicts.
        rating: Average review rating (0.0-5.0), maintained from reviews.
        num_reviews: Number of reviews, maintained from reviews.
        is_active: Whether the product is publicly listed.
        is_featured: Whether the product is promoted.
        weight: Optional shipping weight.
        dimensions: Optional ``{length, width, height}`` dict.
        version: Row version used for optimistic concurrency.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    sku: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    sale_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    category_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    images: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    specifications: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    variants: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False, default=Decimal("0.0"))
    num_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    dimensions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    tag_rows: Mapped[list["ProductTag"]] = relationship(
        "ProductTag",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductTag.position",
        lazy="selectin",
    )
    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Review.created_at",
        lazy="raise",
    )
    category: Mapped[Category | None] = relationship(
        Category,
        primaryjoin="foreign(Product.category_id) == Category.id",
        viewonly=True,
        lazy="raise",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, slug={self.slug}, sku={self.sku})>"

    @property
    def tags(self) -> list[str]:
        """Tag values in their original order."""
        return [row.value for row in self.tag_rows]

    @tags.setter
    def tags(self, values: list[str]) -> None:
        self.tag_rows = [
            ProductTag(value=value, position=position)
            for position, value in enumerate(values)
        ]

    @property
    def is_low_stock(self) -> bool:
        """Whether stock has fallen to the low-stock threshold."""
        return self.stock <= self.low_stock_threshold

    def to_dict(self, include_reviews: bool = False) -> dict[str, Any]:
        """Convert to dictionary.

        Category (and review authors when ``include_reviews`` is set) must
        have been eagerly loaded.

        Args:
            include_reviews: Whether to include the reviews list.

        Returns:
            Dictionary representation.
        """
        category = self.category
        data: dict[str, Any] = {
            "id": self.id,
            "slug": self.slug,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "sale_price": _decimal_to_float(self.sale_price),
            "stock": self.stock,
            "low_stock_threshold": self.low_stock_threshold,
            "is_low_stock": self.is_low_stock,
            "category": (
                {"id": category.id, "name": category.name, "slug": category.slug}
                if category is not None
                else None
            ),
            "images": list(self.images or []),
            "specifications": list(self.specifications or []),
            "variants": list(self.variants or []),
            "tags": self.tags,
            "rating": float(self.rating),
            "num_reviews": self.num_reviews,
            "is_active": self.is_active,
            "is_featured": self.is_featured,
            "weight": self.weight,
            "dimensions": self.dimensions,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_reviews:
            data["reviews"] = [review.to_dict() for review in self.reviews]
        return data


class ProductTag(Base):
    """Tag attached to a product.

    Stored as rows so that search can match substrings inside any tag.
    """

    __tablename__ = "product_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    product: Mapped[Product] = relationship("Product", back_populates="tag_rows")

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductTag(product_id={self.product_id}, value={self.value})>"


class Review(Base):
    """Customer review of a product.

    Attributes:
        id: Unique review identifier.
        product_id: Reviewed product.
        user_id: Author (weak reference to users).
        rating: Integer rating from 1 to 5.
        comment: Review text.
    """

    __tablename__ = "product_reviews"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    product_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(USER_ID_LENGTH), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    product: Mapped[Product] = relationship("Product", back_populates="reviews")
    user: Mapped[User | None] = relationship(
        User,
        primaryjoin="foreign(Review.user_id) == User.id",
        viewonly=True,
        lazy="raise",
    )

    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_product_reviews_product_user"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Review(id={self.id}, product_id={self.product_id}, rating={self.rating})>"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, expanding the author if loaded."""
        user = self.user
        return {
            "id": self.id,
            "user": (
                {"id": user.id, "first_name": user.first_name, "last_name": user.last_name}
                if user is not None
                else {"id": self.user_id, "first_name": None, "last_name": None}
            ),
            "rating": self.rating,
            "comment": self.comment,
            "created_at": self.created_at,
        }
