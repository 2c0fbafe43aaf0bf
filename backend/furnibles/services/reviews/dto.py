# furnibles/services/reviews/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from furnibles.models.rating import RatingAggregateMixin
from furnibles.models.review import Review

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class ReviewCreateIn:
    """
    Input DTO for a new review.

    :param order_id: COMPLETED order of the actor containing ``product_id``.
    :param rating: Integer 1..5.
    """

    order_id: int
    product_id: int
    rating: int
    title: str
    comment: str
    pros: str | None = None
    cons: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class ReviewResponseOut:
    seller_id: int
    comment: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class ReviewOut:
    id: int
    order_id: int
    product_id: int
    buyer_id: int
    buyer_name: str
    seller_id: int
    rating: int
    title: str
    comment: str
    pros: str | None
    cons: str | None
    status: str
    is_verified: bool
    helpful_count: int
    not_helpful_count: int
    moderation_reason: str | None
    created_at: datetime
    updated_at: datetime
    response: ReviewResponseOut | None


@dataclass(frozen=True, slots=True)
class VoteOut:
    review_id: int
    vote: str
    helpful_count: int
    not_helpful_count: int


@dataclass(frozen=True, slots=True)
class RatingStatsOut:
    """Aggregate view; all zeros when nothing has been published yet."""

    total_reviews: int
    average_rating: Decimal
    recommendation_rate: Decimal
    histogram: dict[int, int]


def to_review_out(review: Review) -> ReviewOut:
    response = review.response
    return ReviewOut(
        id=review.id,
        order_id=review.order_id,
        product_id=review.product_id,
        buyer_id=review.buyer_id,
        buyer_name=review.buyer.full_name if review.buyer is not None else "",
        seller_id=review.seller_id,
        rating=review.rating,
        title=review.title,
        comment=review.comment,
        pros=review.pros,
        cons=review.cons,
        status=review.status,
        is_verified=review.is_verified,
        helpful_count=review.helpful_count,
        not_helpful_count=review.not_helpful_count,
        moderation_reason=review.moderation_reason,
        created_at=review.created_at,
        updated_at=review.updated_at,
        response=(
            ReviewResponseOut(
                seller_id=response.seller_id,
                comment=response.comment,
                created_at=response.created_at,
                updated_at=response.updated_at,
            )
            if response is not None
            else None
        ),
    )


def to_stats_out(row: RatingAggregateMixin | None) -> RatingStatsOut:
    if row is None:
        return RatingStatsOut(
            total_reviews=0,
            average_rating=Decimal("0.00"),
            recommendation_rate=Decimal("0.00"),
            histogram=dict.fromkeys(range(1, 6), 0),
        )
    return RatingStatsOut(
        total_reviews=row.total_reviews,
        average_rating=row.average_rating,
        recommendation_rate=row.recommendation_rate,
        histogram=row.histogram,
    )
