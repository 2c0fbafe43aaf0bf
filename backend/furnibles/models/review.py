"""Verified-purchase reviews and their satellites (responses, votes, reports)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from furnibles.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User

# --- Domain Enums ---
REVIEW_STATUSES = ("PENDING_MODERATION", "PUBLISHED", "FLAGGED", "REMOVED")
VOTE_TYPES = ("HELPFUL", "NOT_HELPFUL")
REPORT_REASONS = ("SPAM", "INAPPROPRIATE", "FAKE", "OFFENSIVE", "OTHER")
ReviewStatus = Enum(*REVIEW_STATUSES, name="review_status")
VoteType = Enum(*VOTE_TYPES, name="review_vote_type")
ReportReason = Enum(*REPORT_REASONS, name="review_report_reason")

# Statuses a buyer may still edit from
EDITABLE_STATUSES = frozenset({"PENDING_MODERATION", "PUBLISHED"})


class Review(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A buyer's rating of a product bought in a COMPLETED order.

    At most one review per ``(buyer_id, product_id)``. ``is_verified`` records
    that the purchase precondition held when the review was created.
    ``helpful_count`` / ``not_helpful_count`` are derived from
    :class:`ReviewVote` rows and are always recomputed, never incremented.
    """

    __tablename__ = "reviews"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    buyer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    seller_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    pros: Mapped[str | None] = mapped_column(Text)
    cons: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        ReviewStatus, nullable=False, default="PENDING_MODERATION"
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    helpful_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    not_helpful_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    moderated_by: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    moderated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    moderation_reason: Mapped[str | None] = mapped_column(String(255))

    __table_args__ = (
        UniqueConstraint("buyer_id", "product_id", name="uq_reviews_buyer_product"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="rating_range"),
        Index("ix_reviews_product_status", "product_id", "status"),
        Index("ix_reviews_seller_status", "seller_id", "status"),
    )

    buyer: Mapped[User] = relationship("User", foreign_keys=[buyer_id], lazy="joined")
    response: Mapped[ReviewResponse | None] = relationship(
        "ReviewResponse",
        back_populates="review",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    votes: Mapped[list[ReviewVote]] = relationship(
        "ReviewVote", back_populates="review", cascade="all, delete-orphan", lazy="selectin"
    )

    @validates("rating")
    def _validate_rating(self, key: str, value: int) -> int:
        if not isinstance(value, int) or not 1 <= value <= 5:
            raise ValueError("Rating must be an integer between 1 and 5.")
        return value

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    @property
    def text_blob(self) -> str:
        """All free-text fields joined, for content screening."""
        return " ".join(part for part in (self.title, self.comment, self.pros, self.cons) if part)


class ReviewResponse(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """The single public reply of the reviewed seller."""

    __tablename__ = "review_responses"

    review_id: Mapped[int] = mapped_column(
        ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False
    )
    seller_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    comment: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (UniqueConstraint("review_id", name="uq_review_responses_review_id"),)

    review: Mapped[Review] = relationship("Review", back_populates="response")


class ReviewVote(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """One helpfulness vote per (review, user); re-voting overwrites it."""

    __tablename__ = "review_votes"

    review_id: Mapped[int] = mapped_column(
        ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    vote: Mapped[str] = mapped_column(VoteType, nullable=False)

    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_review_votes_review_user"),
    )

    review: Mapped[Review] = relationship("Review", back_populates="votes")


class ReviewReport(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Abuse report filed by a user against a review."""

    __tablename__ = "review_reports"

    review_id: Mapped[int] = mapped_column(
        ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    reason: Mapped[str] = mapped_column(ReportReason, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        UniqueConstraint("review_id", "user_id", name="uq_review_reports_review_user"),
    )
