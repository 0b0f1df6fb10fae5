"""Domain exceptions.

All domain-level errors raised by the catalog. The API layer maps each
family to an HTTP status; services never raise HTTP errors themselves.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the API layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Client Errors
# ============================================================================


class InvalidInputError(DomainError):
    """Raised when identifying input is malformed (e.g. an unsluggable name)."""

    error_code = "INVALID_INPUT"


class NotFoundError(DomainError):
    """Base class for missing or inactive records."""

    error_code = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    """Raised when a product does not exist or is not visible."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, key: str, field: str = "id") -> None:
        """Initialize product not found error.

        Args:
            key: Lookup value that matched nothing.
            field: Field the lookup was made on (``id`` or ``slug``).
        """
        super().__init__(
            f"Product not found: {key}",
            details={field: key},
        )


class CategoryNotFoundError(NotFoundError):
    """Raised when a category does not exist or is inactive."""

    error_code = "CATEGORY_NOT_FOUND"

    def __init__(self, slug: str) -> None:
        super().__init__(f"Category not found: {slug}", details={"slug": slug})


# ============================================================================
# Conflict Errors
# ============================================================================


class ConflictError(DomainError):
    """Base class for uniqueness violations."""

    error_code = "CONFLICT"


class DuplicateSkuError(ConflictError):
    """Raised when a SKU is already used by another product."""

    error_code = "DUPLICATE_SKU"

    def __init__(self, sku: str) -> None:
        """Initialize duplicate SKU error.

        Args:
            sku: The SKU that is already taken.
        """
        super().__init__(
            f"Product with SKU '{sku}' already exists",
            details={"sku": sku},
        )


class DuplicateReviewError(ConflictError):
    """Raised when a user reviews the same product twice."""

    error_code = "DUPLICATE_REVIEW"

    def __init__(self, product_id: str, user_id: str) -> None:
        """Initialize duplicate review error.

        Args:
            product_id: Reviewed product.
            user_id: User who already has a review on the product.
        """
        super().__init__(
            "Product already reviewed",
            details={"product_id": product_id, "user_id": user_id},
        )


class DuplicateCategoryError(ConflictError):
    """Raised when a category name or slug is already taken."""

    error_code = "DUPLICATE_CATEGORY"

    def __init__(self, name: str) -> None:
        super().__init__(f"Category '{name}' already exists", details={"name": name})


class SlugAllocationError(ConflictError):
    """Raised when no free slug could be found within the attempt budget."""

    error_code = "SLUG_UNAVAILABLE"

    def __init__(self, base_slug: str, attempts: int) -> None:
        """Initialize slug allocation error.

        Args:
            base_slug: Normalized slug the allocator started from.
            attempts: Number of candidates or commits tried.
        """
        super().__init__(
            f"Could not allocate a unique slug for '{base_slug}' after {attempts} attempts",
            details={"base_slug": base_slug, "attempts": attempts},
        )


class ConcurrentUpdateError(ConflictError):
    """Raised when a product keeps changing underneath an update."""

    error_code = "CONCURRENT_UPDATE"

    def __init__(self, product_id: str) -> None:
        super().__init__(
            f"Product {product_id} was modified concurrently, please retry",
            details={"product_id": product_id},
        )


# ============================================================================
# Server Errors
# ============================================================================


class StorageError(DomainError):
    """Raised for storage failures that are not a known client error."""

    error_code = "STORAGE_ERROR"
