# furnibles/services/reviews/ratings.py
"""Rating aggregates computed from the ratings of PUBLISHED reviews."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

_TWO_PLACES = Decimal("0.01")

#: Ratings at or above this value count as a recommendation.
RECOMMEND_THRESHOLD = 4


@dataclass(frozen=True, slots=True)
class RatingAggregate:
    """
    Summary of a set of 1..5 star ratings.

    Attributes
    ----------
    total_reviews:
        Number of ratings.
    average_rating:
        Arithmetic mean, two decimals, ``0`` when empty.
    recommendation_rate:
        Percentage of ratings ``>= 4``, two decimals, ``0`` when empty.
    histogram:
        Count per star value ``1..5`` (every key present).
    """

    total_reviews: int = 0
    average_rating: Decimal = Decimal("0.00")
    recommendation_rate: Decimal = Decimal("0.00")
    histogram: dict[int, int] = field(default_factory=lambda: dict.fromkeys(range(1, 6), 0))

    def as_columns(self) -> dict[str, object]:
        """Column values for :class:`~furnibles.models.rating.RatingAggregateMixin`."""
        columns: dict[str, object] = {
            "total_reviews": self.total_reviews,
            "average_rating": self.average_rating,
            "recommendation_rate": self.recommendation_rate,
        }
        columns.update({f"rating_{star}": n for star, n in self.histogram.items()})
        return columns


def compute_aggregate(ratings: Iterable[int]) -> RatingAggregate:
    """
    Aggregate ``ratings`` in a single pass.

    >>> agg = compute_aggregate([5, 4, 2])
    >>> agg.average_rating, agg.recommendation_rate
    (Decimal('3.67'), Decimal('66.67'))

    :raises ValueError: If a rating is outside ``1..5``.
    """
    histogram = dict.fromkeys(range(1, 6), 0)
    total = 0
    points = 0
    recommended = 0
    for rating in ratings:
        if rating not in histogram:
            raise ValueError(f"Rating out of range: {rating!r}")
        histogram[rating] += 1
        total += 1
        points += rating
        if rating >= RECOMMEND_THRESHOLD:
            recommended += 1

    if total == 0:
        return RatingAggregate(histogram=histogram)

    average = (Decimal(points) / Decimal(total)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    rate = (Decimal(recommended) * 100 / Decimal(total)).quantize(
        _TWO_PLACES, rounding=ROUND_HALF_UP
    )
    return RatingAggregate(
        total_reviews=total,
        average_rating=average,
        recommendation_rate=rate,
        histogram=histogram,
    )
