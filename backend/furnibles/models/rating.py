"""Denormalised rating aggregates for products and sellers."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from furnibles.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class RatingAggregateMixin:
    """Columns shared by every aggregate: count, mean and 1..5 histogram."""

    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_rating: Mapped[Decimal] = mapped_column(
        Numeric(3, 2), nullable=False, default=Decimal("0")
    )
    recommendation_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0")
    )
    rating_1: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_2: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_3: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_4: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_5: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def histogram(self) -> dict[int, int]:
        return {star: getattr(self, f"rating_{star}") for star in range(1, 6)}


class ProductRating(RatingAggregateMixin, PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Aggregate over the PUBLISHED reviews of one product."""

    __tablename__ = "product_ratings"

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (UniqueConstraint("product_id", name="uq_product_ratings_product_id"),)


class SellerRating(RatingAggregateMixin, PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Aggregate over the PUBLISHED reviews of every product of one seller."""

    __tablename__ = "seller_ratings"

    seller_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (UniqueConstraint("seller_id", name="uq_seller_ratings_seller_id"),)
