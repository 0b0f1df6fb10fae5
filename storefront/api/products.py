"""Product API endpoints.

Provides listing, lookup, create, update, delete and review endpoints
for the product catalog.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.errors import to_http_exception
from storefront.api.schemas import (
    ErrorResponse,
    MessageResponse,
    PaginationSchema,
    ProductCreateRequest,
    ProductDetailResponse,
    ProductDetailSchema,
    ProductListResponse,
    ProductResponse,
    ProductSchema,
    ProductUpdateRequest,
    ReviewCreatedResponse,
    ReviewCreateRequest,
)
from storefront.catalog.models import Product
from storefront.catalog.service import CatalogService, ProductInput
from storefront.domain.exceptions import DomainError
from storefront.infrastructure.database import get_session

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(session: Annotated[AsyncSession, Depends(get_session)]) -> CatalogService:
    """Get catalog service bound to the request session."""
    return CatalogService(session)


# ============================================================================
# Converters
# ============================================================================


def product_to_schema(product: Product) -> ProductSchema:
    """Convert Product model to response schema."""
    return ProductSchema.model_validate(product.to_dict())


def product_to_detail_schema(product: Product) -> ProductDetailSchema:
    """Convert Product model, reviews included, to response schema."""
    return ProductDetailSchema.model_validate(product.to_dict(include_reviews=True))


def request_to_input(request: ProductCreateRequest) -> ProductInput:
    """Convert create request to service input."""
    return ProductInput(
        name=request.name,
        description=request.description,
        price=request.price,
        sale_price=request.sale_price,
        sku=request.sku,
        category_id=request.category,
        stock=request.stock,
        low_stock_threshold=request.low_stock_threshold,
        images=[image.model_dump(by_alias=True) for image in request.images],
        specifications=[spec.model_dump(by_alias=True) for spec in request.specifications],
        variants=[variant.model_dump(by_alias=True) for variant in request.variants],
        tags=list(request.tags),
        is_active=request.is_active,
        is_featured=request.is_featured,
        weight=request.weight,
        dimensions=request.dimensions.model_dump(by_alias=True) if request.dimensions else None,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products",
    description=(
        "Search and filter active products. Malformed numeric parameters "
        "fall back to their defaults instead of failing."
    ),
)
async def list_products(
    service: Annotated[CatalogService, Depends(get_service)],
    search: Annotated[str | None, Query(description="Text in name, description or tags")] = None,
    category: Annotated[str | None, Query(description="Category id")] = None,
    min_price: Annotated[str | None, Query(alias="minPrice")] = None,
    max_price: Annotated[str | None, Query(alias="maxPrice")] = None,
    min_rating: Annotated[str | None, Query(alias="minRating")] = None,
    featured: Annotated[str | None, Query(description="'true' for featured only")] = None,
    page: Annotated[str | None, Query(description="Page number (1-based)")] = None,
    limit: Annotated[str | None, Query(description="Page size")] = None,
    sort: Annotated[
        str | None,
        Query(description="price-asc, price-desc, rating, newest or name"),
    ] = None,
) -> ProductListResponse:
    """List products.

    Returns:
        One page of products with pagination metadata.
    """
    params = {
        "search": search,
        "category": category,
        "minPrice": min_price,
        "maxPrice": max_price,
        "minRating": min_rating,
        "featured": featured,
        "page": page,
        "limit": limit,
        "sort": sort,
    }
    try:
        result = await service.list_products(params)
    except DomainError as e:
        raise to_http_exception(e) from e

    return ProductListResponse(
        products=[product_to_schema(p) for p in result.items],
        pagination=PaginationSchema(
            page=result.page,
            pages=result.total_pages,
            total=result.total,
            limit=result.page_size,
        ),
    )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Create product",
)
async def create_product(
    request: ProductCreateRequest,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductResponse:
    """Create a product.

    The slug is derived from the name; a numeric suffix is added when
    the plain slug is taken.

    Raises:
        HTTPException: 409 if the SKU exists, 400 if the name has no
            sluggable characters.
    """
    try:
        product = await service.create_product(request_to_input(request))
    except DomainError as e:
        raise to_http_exception(e) from e

    return ProductResponse(product=product_to_schema(product))


@router.get(
    "/{slug}",
    response_model=ProductDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product by slug",
)
async def get_product(
    slug: str,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductDetailResponse:
    """Get an active product by slug, including reviews.

    Raises:
        HTTPException: If no active product has this slug.
    """
    try:
        product = await service.get_product_by_slug(slug)
    except DomainError as e:
        raise to_http_exception(e) from e

    return ProductDetailResponse(product=product_to_detail_schema(product))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update product",
)
async def update_product(
    product_id: str,
    request: ProductUpdateRequest,
    service: Annotated[CatalogService, Depends(get_service)],
) -> ProductResponse:
    """Partially update a product.

    Fields omitted from the body are left unchanged.
    """
    try:
        product = await service.update_product(product_id, request.to_changes())
    except DomainError as e:
        raise to_http_exception(e) from e

    return ProductResponse(product=product_to_schema(product))


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete product",
)
async def delete_product(
    product_id: str,
    service: Annotated[CatalogService, Depends(get_service)],
) -> MessageResponse:
    """Delete a product and its reviews."""
    try:
        await service.delete_product(product_id)
    except DomainError as e:
        raise to_http_exception(e) from e

    return MessageResponse(message="Product deleted")


@router.post(
    "/{product_id}/reviews",
    response_model=ReviewCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Review product",
)
async def create_review(
    product_id: str,
    request: ReviewCreateRequest,
    service: Annotated[CatalogService, Depends(get_service)],
    user_id: Annotated[str | None, Header(alias="X-User-ID")] = None,
) -> ReviewCreatedResponse:
    """Add the calling user's review to a product.

    The user id is supplied by the authentication gateway in the
    ``X-User-ID`` header.

    Raises:
        HTTPException: 401 without a user, 404 for unknown products,
            409 if the user already reviewed the product.
    """
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "USER_REQUIRED",
                "message": "Missing X-User-ID header",
            },
        )

    try:
        product = await service.add_review(
            product_id,
            user_id=user_id,
            rating=request.rating,
            comment=request.comment,
        )
    except DomainError as e:
        raise to_http_exception(e) from e

    return ReviewCreatedResponse(
        rating=float(product.rating),
        num_reviews=product.num_reviews,
    )
