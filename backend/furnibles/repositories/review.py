"""Repositories for reviews, seller responses, helpfulness votes and reports."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from sqlalchemy import Select, and_, func, select
from sqlalchemy.orm import InstrumentedAttribute

from furnibles.models.base import utcnow
from furnibles.models.review import Review, ReviewReport, ReviewResponse, ReviewVote
from furnibles.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)


class ReviewRepository(BaseRepository[Review]):
    """
    Persistence-only repository for :class:`Review`.

    Unique key: ``(buyer_id, product_id)``.
    """

    model = Review

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "id": Review.id,
            "created_at": Review.created_at,
            "rating": Review.rating,
            "helpful_count": Review.helpful_count,
        }

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]] | None:
        return {
            "product_id": Review.product_id,
            "seller_id": Review.seller_id,
            "buyer_id": Review.buyer_id,
            "status": Review.status,
            "rating": Review.rating,
        }

    def _updatable_fields(self) -> set[str]:
        # Buyer-editable content; status and counters are service-owned.
        return {"rating", "title", "comment", "pros", "cons"}

    # ---------------------------- Lookups ----------------------------
    def get_by_buyer_product(self, buyer_id: int, product_id: int) -> Review | None:
        stmt = select(Review).where(
            and_(Review.buyer_id == buyer_id, Review.product_id == product_id)
        )
        return cast(Review | None, self.session.execute(stmt).scalars().first())

    def paginate_published_for_product(
        self, product_id: int, pagination: Pagination, *, rating: int | None = None
    ) -> Page[Review]:
        filters: dict[str, Any] = {"product_id": product_id, "status": "PUBLISHED"}
        if rating is not None:
            filters["rating"] = rating
        if not pagination.sort:
            pagination.sort = ["-created_at"]
        return self.paginate(pagination, filters=filters)

    def paginate_in_statuses(self, statuses: tuple[str, ...], pagination: Pagination) -> Page[Review]:
        """Oldest-first page of reviews in any of ``statuses`` (moderation queue)."""
        stmt: Select[Any] = select(Review).where(Review.status.in_(statuses))
        stmt = apply_sorting(
            stmt,
            self._sortable_fields(),
            pagination.sort or ["created_at"],
            pk_attr=self._pk_attr(),
        )
        items, total = paginate_select(
            self.session, stmt, page=pagination.page, limit=pagination.limit
        )
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)

    # ---------------------------- Aggregation inputs ----------------------------
    def _published_ratings(self, stmt: Select[Any]) -> list[int]:
        return [int(r) for r in self.session.execute(stmt).scalars().all()]

    def published_ratings_for_product(self, product_id: int) -> list[int]:
        return self._published_ratings(
            select(Review.rating).where(
                and_(Review.product_id == product_id, Review.status == "PUBLISHED")
            )
        )

    def published_ratings_for_seller(self, seller_id: int) -> list[int]:
        return self._published_ratings(
            select(Review.rating).where(
                and_(Review.seller_id == seller_id, Review.status == "PUBLISHED")
            )
        )


class ReviewResponseRepository(BaseRepository[ReviewResponse]):
    model = ReviewResponse

    def get_for_review(self, review_id: int) -> ReviewResponse | None:
        stmt = select(ReviewResponse).where(ReviewResponse.review_id == review_id)
        return cast(ReviewResponse | None, self.session.execute(stmt).scalars().first())


class ReviewVoteRepository(BaseRepository[ReviewVote]):
    """Unique key: ``(review_id, user_id)``; re-votes overwrite in place."""

    model = ReviewVote

    def cast_vote(self, *, review_id: int, user_id: int, vote: str) -> None:
        now = utcnow()
        self.upsert(
            {"review_id": review_id, "user_id": user_id, "vote": vote},
            conflict_on=("review_id", "user_id"),
            update={"vote": vote, "updated_at": now},
        )

    def tally(self, review_id: int) -> dict[str, int]:
        """Count votes of ``review_id`` grouped by vote type."""
        stmt = (
            select(ReviewVote.vote, func.count())
            .where(ReviewVote.review_id == review_id)
            .group_by(ReviewVote.vote)
        )
        counts = {"HELPFUL": 0, "NOT_HELPFUL": 0}
        for vote, n in self.session.execute(stmt).all():
            counts[vote] = int(n)
        return counts


class ReviewReportRepository(BaseRepository[ReviewReport]):
    model = ReviewReport

    def file(self, *, review_id: int, user_id: int, reason: str, comment: str | None) -> bool:
        """Store a report; ``False`` when this user already reported the review."""
        return self.insert_ignore(
            {"review_id": review_id, "user_id": user_id, "reason": reason, "comment": comment},
            conflict_on=("review_id", "user_id"),
        )

    def count_for_review(self, review_id: int) -> int:
        stmt = (
            select(func.count()).select_from(ReviewReport).where(ReviewReport.review_id == review_id)
        )
        return int(self.session.execute(stmt).scalar_one())
