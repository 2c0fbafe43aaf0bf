# furnibles/services/reviews/service.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from furnibles.models.review import REPORT_REASONS, VOTE_TYPES, Review, ReviewResponse
from furnibles.services._shared.base import BaseService, ServiceContext
from furnibles.services._shared.config import ReviewConfig
from furnibles.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from furnibles.services.reviews.dto import (
    RatingStatsOut,
    ReviewCreateIn,
    ReviewOut,
    VoteOut,
    to_review_out,
    to_stats_out,
)
from furnibles.services.reviews.moderation import auto_moderate
from furnibles.services.reviews.ratings import compute_aggregate
from furnibles.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

MODERATION_QUEUE = ("PENDING_MODERATION", "FLAGGED")
MODERATION_TARGETS = frozenset({"PUBLISHED", "FLAGGED", "REMOVED"})


class ReviewService(BaseService):
    """
    Verified-purchase reviews and the aggregates derived from them.

    Every command that can change the set of PUBLISHED reviews recomputes the
    product and seller aggregates inside the same unit of work.
    """

    def __init__(self, *, ctx: ServiceContext, cfg: ReviewConfig | None = None) -> None:
        super().__init__(ctx=ctx)
        self.cfg = cfg or ReviewConfig()

    # ------------------------------------------------------------------ #
    # Buyer commands
    # ------------------------------------------------------------------ #

    def create_review(self, dto: ReviewCreateIn) -> ReviewOut:
        """
        Review a product bought in one of the actor's COMPLETED orders.

        :raises AuthorizationError: If the actor is not a buyer, or the order is
            not theirs or not completed.
        :raises NotFoundError: If the order does not exist.
        :raises ValidationError: If the product is not part of the order.
        :raises ConflictError: If the actor already reviewed the product.
        """
        self.ensure_role("BUYER", msg="Only buyers can write reviews")
        _check_rating(dto.rating)
        buyer_id = self.ctx.actor_id

        with self.rw_uow() as uow:
            order = uow.orders.get(dto.order_id)
            if order is None:
                raise NotFoundError("Order", dto.order_id)
            if order.buyer_id != buyer_id:
                raise AuthorizationError("You can only review your own purchases")
            if order.status != "COMPLETED":
                raise AuthorizationError("Only completed orders can be reviewed")
            item = next((i for i in order.items if i.product_id == dto.product_id), None)
            if item is None:
                raise ValidationError("Product is not part of this order")
            if uow.reviews.get_by_buyer_product(buyer_id, dto.product_id) is not None:
                raise ConflictError("Review", "You have already reviewed this product")

            review = Review(
                order_id=order.id,
                product_id=dto.product_id,
                buyer_id=buyer_id,
                seller_id=item.seller_id,
                rating=dto.rating,
                title=dto.title,
                comment=dto.comment,
                pros=dto.pros,
                cons=dto.cons,
                status="PENDING_MODERATION",
                is_verified=True,
            )
            self._moderate_content(review)
            uow.reviews.add(review)
            uow.reviews.flush()
            self._recompute(uow, review.product_id, review.seller_id)

            log.info(
                "Review created",
                extra={"review_id": review.id, "product_id": review.product_id},
            )
            return to_review_out(review)

    def update_review(self, review_id: int, changes: Mapping[str, Any]) -> ReviewOut:
        """
        Edit the actor's own review and send it through moderation again.

        :raises NotFoundError: If the review does not exist.
        :raises AuthorizationError: If the actor is not the author.
        :raises ValidationError: If the review can no longer be edited.
        """
        if "rating" in changes:
            _check_rating(changes["rating"])

        with self.rw_uow() as uow:
            review = self._get_review(uow, review_id, for_update=True)
            self.ensure_owner(
                self.ctx.actor_id, review.buyer_id, msg="You can only edit your own reviews"
            )
            if not review.is_editable:
                raise ValidationError(f"Review in status {review.status} cannot be edited")

            try:
                uow.reviews.assign_updates(review, dict(changes), flush=False)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            review.status = "PENDING_MODERATION"
            review.moderation_reason = None
            self._moderate_content(review)
            uow.reviews.flush()
            self._recompute(uow, review.product_id, review.seller_id)
            return to_review_out(review)

    def vote(self, review_id: int, vote: str) -> VoteOut:
        """
        Record the actor's helpfulness vote, replacing a previous one.

        :raises ValidationError: On an unknown vote, an unpublished review or
            a vote on one's own review.
        """
        if vote not in VOTE_TYPES:
            raise ValidationError(f"Unknown vote: {vote}")
        user_id = self.ctx.actor_id

        with self.rw_uow() as uow:
            review = self._get_review(uow, review_id, for_update=True)
            if review.status != "PUBLISHED":
                raise ValidationError("Only published reviews can be voted on")
            if review.buyer_id == user_id:
                raise ValidationError("You cannot vote on your own review")

            uow.review_votes.cast_vote(review_id=review.id, user_id=user_id, vote=vote)
            counts = uow.review_votes.tally(review.id)
            review.helpful_count = counts["HELPFUL"]
            review.not_helpful_count = counts["NOT_HELPFUL"]
            uow.reviews.flush()
            uow.session.expire(review, ["votes"])
            return VoteOut(
                review_id=review.id,
                vote=vote,
                helpful_count=review.helpful_count,
                not_helpful_count=review.not_helpful_count,
            )

    def report(self, review_id: int, reason: str, comment: str | None = None) -> ReviewOut:
        """
        File an abuse report; enough reports flag a PUBLISHED review.

        :raises ConflictError: If the actor already reported this review.
        """
        if reason not in REPORT_REASONS:
            raise ValidationError(f"Unknown report reason: {reason}")

        with self.rw_uow() as uow:
            review = self._get_review(uow, review_id, for_update=True)
            filed = uow.review_reports.file(
                review_id=review.id, user_id=self.ctx.actor_id, reason=reason, comment=comment
            )
            if not filed:
                raise ConflictError("ReviewReport", "You have already reported this review")

            reports = uow.review_reports.count_for_review(review.id)
            if reports >= self.cfg.report_threshold and review.status == "PUBLISHED":
                review.status = "FLAGGED"
                review.moderation_reason = f"Reported {reports} times"
                uow.reviews.flush()
                self._recompute(uow, review.product_id, review.seller_id)
                log.info("Review flagged by reports", extra={"review_id": review.id})
            return to_review_out(review)

    # ------------------------------------------------------------------ #
    # Seller commands
    # ------------------------------------------------------------------ #

    def respond(self, review_id: int, comment: str) -> ReviewOut:
        """
        Create or edit the seller's single public reply.

        :raises AuthorizationError: If the actor is not the reviewed seller.
        :raises ValidationError: If a new reply targets an unpublished review.
        """
        if not comment or not comment.strip():
            raise ValidationError("Response comment is required")

        with self.rw_uow() as uow:
            review = self._get_review(uow, review_id)
            if review.seller_id != self.ctx.actor_id:
                raise AuthorizationError("Only the seller can respond to this review")

            response = uow.review_responses.get_for_review(review.id)
            if response is None:
                if review.status != "PUBLISHED":
                    raise ValidationError("Only published reviews can receive a response")
                review.response = ReviewResponse(seller_id=review.seller_id, comment=comment)
            else:
                response.comment = comment
            uow.reviews.flush()
            return to_review_out(review)

    # ------------------------------------------------------------------ #
    # Admin commands
    # ------------------------------------------------------------------ #

    def moderate(self, review_id: int, status: str, reason: str | None = None) -> ReviewOut:
        """
        Set the status of a review by hand.

        :raises AuthorizationError: If the actor is not an admin.
        :raises ValidationError: If ``status`` is not a moderation outcome.
        """
        self.ensure_role("ADMIN", msg="Only admins can moderate reviews")
        if status not in MODERATION_TARGETS:
            raise ValidationError(
                f"Invalid moderation status: {status}. Expected one of "
                f"{sorted(MODERATION_TARGETS)}"
            )
        return self._set_status(review_id, status, reason)

    def remove(self, review_id: int, reason: str | None = None) -> ReviewOut:
        self.ensure_role("ADMIN", msg="Only admins can remove reviews")
        return self._set_status(review_id, "REMOVED", reason or "Removed by moderator")

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def list_product_reviews(
        self,
        product_id: int,
        *,
        page: int = 1,
        limit: int = 20,
        sort: list[str] | None = None,
        rating: int | None = None,
    ) -> tuple[list[ReviewOut], int]:
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort)
        with self.ro_uow() as uow:
            if uow.products.get(product_id) is None:
                raise NotFoundError("Product", product_id)
            result = uow.reviews.paginate_published_for_product(
                product_id, pagination, rating=rating
            )
            return [to_review_out(r) for r in result.items], result.total

    def get_review(self, review_id: int) -> ReviewOut:
        """
        Return a review.

        Unpublished reviews are only visible to their buyer, the reviewed
        seller and admins; everyone else gets :class:`NotFoundError`.
        """
        with self.ro_uow() as uow:
            review = self._get_review(uow, review_id)
            if review.status != "PUBLISHED" and not self._can_see_unpublished(review):
                raise NotFoundError("Review", review_id)
            return to_review_out(review)

    def list_pending(
        self, *, page: int = 1, limit: int = 20, sort: list[str] | None = None
    ) -> tuple[list[ReviewOut], int]:
        """Moderation queue: PENDING_MODERATION and FLAGGED reviews, oldest first."""
        self.ensure_role("ADMIN", msg="Only admins can moderate reviews")
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort)
        with self.ro_uow() as uow:
            result = uow.reviews.paginate_in_statuses(MODERATION_QUEUE, pagination)
            return [to_review_out(r) for r in result.items], result.total

    def product_stats(self, product_id: int) -> RatingStatsOut:
        with self.ro_uow() as uow:
            return to_stats_out(uow.product_ratings.get_for(product_id))

    def seller_stats(self, seller_id: int) -> RatingStatsOut:
        with self.ro_uow() as uow:
            return to_stats_out(uow.seller_ratings.get_for(seller_id))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _set_status(self, review_id: int, status: str, reason: str | None) -> ReviewOut:
        with self.rw_uow() as uow:
            review = self._get_review(uow, review_id, for_update=True)
            review.status = status
            review.moderation_reason = reason
            review.moderated_by = self.ctx.actor_id
            review.moderated_at = self.now_utc()
            uow.reviews.flush()
            self._recompute(uow, review.product_id, review.seller_id)
            log.info(
                "Review moderated",
                extra={"review_id": review.id, "status": status, "admin_id": self.ctx.actor_id},
            )
            return to_review_out(review)

    def _moderate_content(self, review: Review) -> None:
        status, reason = auto_moderate(review.text_blob, review.rating, self.cfg.banned_terms)
        review.status = status
        review.moderation_reason = reason

    @staticmethod
    def _recompute(uow: SQLAlchemyUnitOfWork, product_id: int, seller_id: int) -> None:
        """Rebuild the product and seller aggregates from PUBLISHED reviews."""
        # autoflush is off: pending status changes must reach the DB first
        uow.session.flush()
        product_agg = compute_aggregate(uow.reviews.published_ratings_for_product(product_id))
        uow.product_ratings.store(product_id, product_agg.as_columns())
        seller_agg = compute_aggregate(uow.reviews.published_ratings_for_seller(seller_id))
        uow.seller_ratings.store(seller_id, seller_agg.as_columns())

    @staticmethod
    def _get_review(
        uow: SQLAlchemyUnitOfWork | SQLAlchemyReadOnlyUnitOfWork,
        review_id: int,
        *,
        for_update: bool = False,
    ) -> Review:
        review = uow.reviews.get_for_update(review_id) if for_update else uow.reviews.get(review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def _can_see_unpublished(self, review: Review) -> bool:
        actor = self.ctx.actor_id
        return self.ctx.is_admin or actor in (review.buyer_id, review.seller_id)

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)


def _check_rating(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
        raise ValidationError("Rating must be an integer between 1 and 5")


__all__ = ["MODERATION_QUEUE", "MODERATION_TARGETS", "ReviewService"]
