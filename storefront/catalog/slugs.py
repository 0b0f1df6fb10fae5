"""Slug normalization and allocation.

A slug is the lowercase, hyphen-separated form of a product name. The
allocator probes ``base``, ``base-2``, ``base-3``... until it finds one
no other product owns. Probing is check-then-act: two concurrent
allocations can pick the same slug, so the unique index on
``products.slug`` has the final word and callers retry on violation.
"""

import re
import unicodedata
from collections.abc import Awaitable, Callable

import structlog

from storefront.domain.exceptions import InvalidInputError, SlugAllocationError

logger = structlog.get_logger()

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")

SlugExistsFn = Callable[[str, str | None], Awaitable[bool]]


def slugify(value: str) -> str:
    """Normalize a display name into a base slug.

    Args:
        value: Display name.

    Returns:
        Lowercase slug with single hyphens between alphanumeric runs.

    Raises:
        InvalidInputError: If nothing alphanumeric is left.
    """
    ascii_value = (
        unicodedata.normalize("NFKD", value or "")
        .encode("ascii", "ignore")
        .decode("ascii")
    )
    slug = _NON_ALPHANUMERIC.sub("-", ascii_value.lower()).strip("-")
    if not slug:
        raise InvalidInputError(
            f"Cannot derive a slug from {value!r}",
            details={"name": value},
        )
    return slug


def candidate_slugs(base_slug: str, limit: int):
    """Yield ``base``, ``base-2``, ``base-3``... up to ``limit`` candidates."""
    yield base_slug
    for counter in range(2, limit + 1):
        yield f"{base_slug}-{counter}"


class SlugAllocator:
    """Finds the first free slug for a product name.

    Example usage:
        allocator = SlugAllocator(repository.slug_exists)
        slug = await allocator.allocate("Red Shoes")
        # "red-shoes", or "red-shoes-2" if taken
    """

    def __init__(self, slug_exists: SlugExistsFn, max_attempts: int = 100) -> None:
        """Initialize allocator.

        Args:
            slug_exists: Async predicate ``(slug, exclude_id) -> bool``.
            max_attempts: Number of candidates probed before giving up.
        """
        self.slug_exists = slug_exists
        self.max_attempts = max_attempts

    async def allocate(self, candidate_name: str, exclude_id: str | None = None) -> str:
        """Allocate a slug for ``candidate_name``.

        Args:
            candidate_name: Display name to derive the slug from.
            exclude_id: Product whose own slug does not count as taken.

        Returns:
            First candidate slug not owned by another product.

        Raises:
            InvalidInputError: If the name has no sluggable characters.
            SlugAllocationError: If every candidate is taken.
        """
        base_slug = slugify(candidate_name)

        for slug in candidate_slugs(base_slug, self.max_attempts):
            if not await self.slug_exists(slug, exclude_id):
                if slug != base_slug:
                    logger.debug("Slug collision resolved", base_slug=base_slug, slug=slug)
                return slug

        logger.warning(
            "Slug candidates exhausted",
            base_slug=base_slug,
            attempts=self.max_attempts,
        )
        raise SlugAllocationError(base_slug, self.max_attempts)
