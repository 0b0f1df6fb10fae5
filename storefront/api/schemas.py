"""API schemas for the Storefront API.

Pydantic models for request/response validation and serialization.
Catalog payloads use camelCase on the wire; error bodies keep the
snake_case ``error_code`` envelope shared by every endpoint.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class MessageResponse(CamelModel):
    """Acknowledgement without a payload."""

    success: bool = True
    message: str


# ============================================================================
# Product Schemas
# ============================================================================


class ImageSchema(CamelModel):
    """Product image."""

    url: str = Field(..., min_length=1)
    alt: str | None = None
    is_primary: bool = False


class SpecificationSchema(CamelModel):
    """Free-form name/value product attribute."""

    name: str
    value: str


class VariantSchema(CamelModel):
    """Purchasable variation of a product, such as a size or colour."""

    name: str = Field(..., min_length=1, description="Variant dimension, e.g. size")
    value: str = Field(..., min_length=1, description="Variant value, e.g. XL")
    price: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)


class DimensionsSchema(CamelModel):
    """Package dimensions."""

    length: float | None = Field(default=None, ge=0)
    width: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)


class CategoryRefSchema(CamelModel):
    """Category as embedded in a product."""

    id: str
    name: str
    slug: str


class ReviewAuthorSchema(CamelModel):
    """Review author display fields."""

    id: str
    first_name: str | None = None
    last_name: str | None = None


class ReviewSchema(CamelModel):
    """Product review."""

    id: str
    user: ReviewAuthorSchema
    rating: int
    comment: str
    created_at: datetime


class ProductSchema(CamelModel):
    """Product as returned by listings and writes."""

    id: str
    slug: str
    sku: str
    name: str
    description: str
    price: float
    sale_price: float | None = None
    stock: int
    low_stock_threshold: int
    is_low_stock: bool
    category: CategoryRefSchema | None = None
    images: list[ImageSchema] = Field(default_factory=list)
    specifications: list[SpecificationSchema] = Field(default_factory=list)
    variants: list[VariantSchema] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    rating: float
    num_reviews: int
    is_active: bool
    is_featured: bool
    weight: float | None = None
    dimensions: DimensionsSchema | None = None
    created_at: datetime
    updated_at: datetime


class ProductDetailSchema(ProductSchema):
    """Product with its reviews, as returned by the slug lookup."""

    reviews: list[ReviewSchema] = Field(default_factory=list)


class PaginationSchema(CamelModel):
    """Listing page metadata."""

    page: int = Field(..., description="Current page number (1-based)")
    pages: int = Field(..., description="Total number of pages")
    total: int = Field(..., description="Total number of matching products")
    limit: int = Field(..., description="Page size")


class ProductListResponse(CamelModel):
    """Paginated product listing."""

    success: bool = True
    products: list[ProductSchema]
    pagination: PaginationSchema


class ProductResponse(CamelModel):
    """Single product."""

    success: bool = True
    product: ProductSchema


class ProductDetailResponse(CamelModel):
    """Single product with reviews."""

    success: bool = True
    product: ProductDetailSchema


class ProductCreateRequest(CamelModel):
    """Request to create a product."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    sale_price: Decimal | None = Field(default=None, ge=0)
    sku: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, description="Category id")
    stock: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    images: list[ImageSchema] = Field(default_factory=list)
    specifications: list[SpecificationSchema] = Field(default_factory=list)
    variants: list[VariantSchema] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False
    weight: float | None = Field(default=None, ge=0)
    dimensions: DimensionsSchema | None = None


class ProductUpdateRequest(CamelModel):
    """Partial product update.

    Only fields present in the request body are applied; ``0`` and
    ``false`` are values like any other.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    price: Decimal | None = Field(default=None, ge=0)
    sale_price: Decimal | None = Field(default=None, ge=0)
    sku: str | None = Field(default=None, min_length=1, max_length=100)
    category: str | None = Field(default=None, min_length=1, description="Category id")
    stock: int | None = Field(default=None, ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)
    images: list[ImageSchema] | None = None
    specifications: list[SpecificationSchema] | None = None
    variants: list[VariantSchema] | None = None
    tags: list[str] | None = None
    is_active: bool | None = None
    is_featured: bool | None = None
    weight: float | None = Field(default=None, ge=0)
    dimensions: DimensionsSchema | None = None

    def to_changes(self) -> dict[str, Any]:
        """Return the explicitly supplied fields as model attribute names."""
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if isinstance(value, list):
                value = [
                    item.model_dump(by_alias=True) if isinstance(item, BaseModel) else item
                    for item in value
                ]
            elif isinstance(value, BaseModel):
                value = value.model_dump(by_alias=True)
            changes["category_id" if name == "category" else name] = value
        return changes


class ReviewCreateRequest(CamelModel):
    """Request to review a product."""

    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1)


class ReviewCreatedResponse(CamelModel):
    """Acknowledgement of a new review with the refreshed summary."""

    success: bool = True
    message: str = "Review added"
    rating: float
    num_reviews: int


# ============================================================================
# Category Schemas
# ============================================================================


class CategorySchema(CamelModel):
    """Category."""

    id: str
    name: str
    slug: str
    description: str | None = None
    image: str | None = None
    sort_order: int
    is_active: bool


class CategoryCreateRequest(CamelModel):
    """Request to create a category."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    image: str | None = None
    sort_order: int = 0


class CategoryListResponse(CamelModel):
    """Active categories."""

    success: bool = True
    categories: list[CategorySchema]


class CategoryResponse(CamelModel):
    """Single category."""

    success: bool = True
    category: CategorySchema
