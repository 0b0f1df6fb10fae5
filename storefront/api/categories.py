"""Category API endpoints.

Provides the category lookups products are filtered by.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.errors import to_http_exception
from storefront.api.schemas import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategorySchema,
    ErrorResponse,
)
from storefront.catalog.service import CategoryService
from storefront.domain.exceptions import DomainError
from storefront.infrastructure.database import get_session

router = APIRouter(prefix="/categories", tags=["Categories"])


def get_service(session: Annotated[AsyncSession, Depends(get_session)]) -> CategoryService:
    """Get category service bound to the request session."""
    return CategoryService(session)


@router.get("", response_model=CategoryListResponse, summary="List categories")
async def list_categories(
    service: Annotated[CategoryService, Depends(get_service)],
) -> CategoryListResponse:
    """List active categories in display order."""
    try:
        categories = await service.list_categories()
    except DomainError as e:
        raise to_http_exception(e) from e
    return CategoryListResponse(
        categories=[CategorySchema.model_validate(c) for c in categories],
    )


@router.get(
    "/{slug}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category by slug",
)
async def get_category(
    slug: str,
    service: Annotated[CategoryService, Depends(get_service)],
) -> CategoryResponse:
    """Get an active category by slug."""
    try:
        category = await service.get_category_by_slug(slug)
    except DomainError as e:
        raise to_http_exception(e) from e
    return CategoryResponse(category=CategorySchema.model_validate(category))


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create category",
)
async def create_category(
    request: CategoryCreateRequest,
    service: Annotated[CategoryService, Depends(get_service)],
) -> CategoryResponse:
    """Create a category; its slug is derived from the name."""
    try:
        category = await service.create_category(
            name=request.name,
            description=request.description,
            image=request.image,
            sort_order=request.sort_order,
        )
    except DomainError as e:
        raise to_http_exception(e) from e
    return CategoryResponse(category=CategorySchema.model_validate(category))
