"""Domain layer module.

Contains the error taxonomy shared by the catalog services and the API.
"""

from storefront.domain.exceptions import (
    CategoryNotFoundError,
    ConcurrentUpdateError,
    ConflictError,
    DomainError,
    DuplicateCategoryError,
    DuplicateReviewError,
    DuplicateSkuError,
    InvalidInputError,
    NotFoundError,
    ProductNotFoundError,
    SlugAllocationError,
    StorageError,
)

__all__ = [
    "CategoryNotFoundError",
    "ConcurrentUpdateError",
    "ConflictError",
    "DomainError",
    "DuplicateCategoryError",
    "DuplicateReviewError",
    "DuplicateSkuError",
    "InvalidInputError",
    "NotFoundError",
    "ProductNotFoundError",
    "SlugAllocationError",
    "StorageError",
]
