"""Review rating aggregation."""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class RatingSummary:
    """Denormalized rating fields stored on a product.

    Attributes:
        rating: Mean review rating rounded half-up to one decimal.
        num_reviews: Number of reviews.
    """

    rating: Decimal
    num_reviews: int


def recompute(ratings: Iterable[int]) -> RatingSummary:
    """Recompute the rating summary from individual review ratings.

    Uses Decimal arithmetic so half-way means round up exactly
    (a mean of 4.05 becomes 4.1, 4.25 becomes 4.3).

    Args:
        ratings: Review ratings, each 1-5.

    Returns:
        Rating summary; ``(0.0, 0)`` when there are no reviews.
    """
    values = list(ratings)
    if not values:
        return RatingSummary(rating=Decimal("0.0"), num_reviews=0)

    mean = Decimal(sum(values)) / Decimal(len(values))
    return RatingSummary(
        rating=mean.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP),
        num_reviews=len(values),
    )
