"""Review lifecycle, moderation and rating aggregates."""

from __future__ import annotations

from decimal import Decimal

import pytest

from furnibles.services._shared.config import ReviewConfig
from furnibles.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from furnibles.services.reviews.dto import ReviewCreateIn
from furnibles.services.reviews.service import ReviewService
from tests.factories.order import order_with_items
from tests.factories.product import ProductFactory
from tests.factories.user import AdminFactory, BuyerFactory
from tests.helpers.auth import context_for


@pytest.fixture()
def product(session):
    return ProductFactory()


def _svc(user, **kwargs) -> ReviewService:
    return ReviewService(ctx=context_for(user), **kwargs)


def _review(product, *, rating=5, comment="Accurate cut list and clear joinery.", buyer=None):
    """Have a buyer with a COMPLETED order of ``product`` review it."""
    buyer = buyer or BuyerFactory()
    order = order_with_items(buyer, [product], status="COMPLETED")
    out = _svc(buyer).create_review(
        ReviewCreateIn(
            order_id=order.id,
            product_id=product.id,
            rating=rating,
            title="Built it in a weekend",
            comment=comment,
        )
    )
    return buyer, out


def _stats(product):
    return ReviewService(ctx=context_for(AdminFactory())).product_stats(product.id)


# --------------------------------- Create --------------------------------- #
class TestCreateReview:
    def test_clean_review_is_published_and_counted(self, session, product):
        buyer, review = _review(product, rating=4)

        assert review.status == "PUBLISHED"
        assert review.is_verified is True
        assert review.seller_id == product.seller_id
        assert review.buyer_name
        stats = _stats(product)
        assert stats.total_reviews == 1
        assert stats.average_rating == Decimal("4.00")
        assert stats.recommendation_rate == Decimal("100.00")
        assert stats.histogram[4] == 1

        seller = ReviewService(ctx=context_for(buyer)).seller_stats(product.seller_id)
        assert seller.total_reviews == 1

    def test_one_star_and_banned_terms_wait_for_moderation(self, session, product):
        _, one_star = _review(product, rating=1)
        _, spammy = _review(product, rating=5, comment="Looks like a scam to me")

        assert one_star.status == "FLAGGED"
        assert spammy.status == "FLAGGED"
        assert _stats(product).total_reviews == 0

    def test_second_review_of_same_product_conflicts(self, session, product):
        buyer, _ = _review(product)

        with pytest.raises(ConflictError):
            _review(product, buyer=buyer)

    def test_order_must_be_completed_and_owned(self, session, product):
        buyer = BuyerFactory()
        pending = order_with_items(buyer, [product])
        dto = ReviewCreateIn(pending.id, product.id, 5, "Nice", "Very nice plan")

        with pytest.raises(AuthorizationError, match="completed"):
            _svc(buyer).create_review(dto)

        completed = order_with_items(buyer, [ProductFactory()], status="COMPLETED")
        dto = ReviewCreateIn(completed.id, completed.items[0].product_id, 5, "Nice", "Very nice")
        with pytest.raises(AuthorizationError, match="own purchases"):
            _svc(BuyerFactory()).create_review(dto)

    def test_product_must_be_in_order(self, session, product):
        buyer = BuyerFactory()
        order = order_with_items(buyer, [ProductFactory()], status="COMPLETED")

        with pytest.raises(ValidationError, match="not part"):
            _svc(buyer).create_review(ReviewCreateIn(order.id, product.id, 5, "Nice", "Nice"))

    def test_missing_order_and_bad_rating(self, session, product):
        buyer = BuyerFactory()

        with pytest.raises(NotFoundError):
            _svc(buyer).create_review(ReviewCreateIn(999_999, product.id, 5, "t", "c"))
        with pytest.raises(ValidationError, match="between 1 and 5"):
            _svc(buyer).create_review(ReviewCreateIn(1, product.id, 6, "t", "c"))

    def test_only_buyers_review(self, session, product):
        with pytest.raises(AuthorizationError):
            _svc(product.seller).create_review(ReviewCreateIn(1, product.id, 5, "t", "c"))


# --------------------------------- Update --------------------------------- #
class TestUpdateReview:
    def test_edit_recomputes_aggregates(self, session, product):
        buyer, review = _review(product, rating=5)

        updated = _svc(buyer).update_review(review.id, {"rating": 3})

        assert updated.rating == 3
        assert updated.status == "PUBLISHED"
        assert _stats(product).average_rating == Decimal("3.00")

    def test_edit_into_one_star_unpublishes(self, session, product):
        buyer, review = _review(product, rating=5)

        updated = _svc(buyer).update_review(review.id, {"rating": 1})

        assert updated.status == "FLAGGED"
        assert _stats(product).total_reviews == 0

    def test_only_author_can_edit(self, session, product):
        _, review = _review(product)

        with pytest.raises(AuthorizationError):
            _svc(BuyerFactory()).update_review(review.id, {"title": "Hijacked"})

    def test_removed_review_is_frozen(self, session, product):
        buyer, review = _review(product)
        _svc(AdminFactory()).remove(review.id)

        with pytest.raises(ValidationError, match="cannot be edited"):
            _svc(buyer).update_review(review.id, {"title": "Please restore"})


# ------------------------------ Votes & reports --------------------------- #
class TestVotesAndReports:
    def test_revote_replaces_previous_vote(self, session, product):
        _, review = _review(product)
        voter = BuyerFactory()

        first = _svc(voter).vote(review.id, "HELPFUL")
        second = _svc(voter).vote(review.id, "NOT_HELPFUL")
        other = _svc(BuyerFactory()).vote(review.id, "HELPFUL")

        assert (first.helpful_count, first.not_helpful_count) == (1, 0)
        assert (second.helpful_count, second.not_helpful_count) == (0, 1)
        assert (other.helpful_count, other.not_helpful_count) == (1, 1)

    def test_cannot_vote_on_own_review(self, session, product):
        buyer, review = _review(product)

        with pytest.raises(ValidationError, match="own review"):
            _svc(buyer).vote(review.id, "HELPFUL")

    def test_cannot_vote_on_unpublished_review(self, session, product):
        _, review = _review(product, rating=1)

        with pytest.raises(ValidationError, match="published"):
            _svc(BuyerFactory()).vote(review.id, "HELPFUL")

    def test_reports_flag_review_at_threshold(self, session, product):
        _, review = _review(product)
        cfg = ReviewConfig(report_threshold=2)

        after_one = _svc(BuyerFactory(), cfg=cfg).report(review.id, "SPAM")
        after_two = _svc(BuyerFactory(), cfg=cfg).report(review.id, "FAKE", "Copied text")

        assert after_one.status == "PUBLISHED"
        assert after_two.status == "FLAGGED"
        assert after_two.moderation_reason == "Reported 2 times"
        assert _stats(product).total_reviews == 0

    def test_duplicate_report_conflicts(self, session, product):
        _, review = _review(product)
        reporter = BuyerFactory()
        _svc(reporter).report(review.id, "SPAM")

        with pytest.raises(ConflictError):
            _svc(reporter).report(review.id, "OTHER")


# -------------------------------- Responses ------------------------------- #
class TestSellerResponse:
    def test_seller_responds_then_edits(self, session, product):
        _, review = _review(product)
        seller_svc = _svc(product.seller)

        created = seller_svc.respond(review.id, "Thanks for building it!")
        edited = seller_svc.respond(review.id, "Thanks, enjoy the shelf!")

        assert created.response.comment == "Thanks for building it!"
        assert edited.response.comment == "Thanks, enjoy the shelf!"

    def test_other_sellers_cannot_respond(self, session, product):
        _, review = _review(product)

        with pytest.raises(AuthorizationError):
            _svc(ProductFactory().seller).respond(review.id, "Not mine")

    def test_unpublished_review_cannot_get_first_response(self, session, product):
        _, review = _review(product, rating=1)

        with pytest.raises(ValidationError):
            _svc(product.seller).respond(review.id, "Sorry to hear")


# ------------------------------- Moderation ------------------------------- #
class TestModeration:
    def test_admin_publishes_flagged_review(self, session, product):
        _, review = _review(product, rating=1)
        admin = AdminFactory()

        pending, total = _svc(admin).list_pending()
        assert total == 1
        assert pending[0].id == review.id

        published = _svc(admin).moderate(review.id, "PUBLISHED", "Legitimate complaint")

        assert published.status == "PUBLISHED"
        stats = _stats(product)
        assert stats.total_reviews == 1
        assert stats.recommendation_rate == Decimal("0.00")
        assert _svc(admin).list_pending()[1] == 0

    def test_remove_drops_review_from_aggregates(self, session, product):
        _, review = _review(product, rating=5)
        _review(product, rating=3)

        removed = _svc(AdminFactory()).remove(review.id, "Off-topic")

        assert removed.status == "REMOVED"
        assert removed.moderation_reason == "Off-topic"
        stats = _stats(product)
        assert stats.total_reviews == 1
        assert stats.average_rating == Decimal("3.00")

    def test_invalid_target_and_non_admin(self, session, product):
        _, review = _review(product)

        with pytest.raises(ValidationError):
            _svc(AdminFactory()).moderate(review.id, "PENDING_MODERATION")
        with pytest.raises(AuthorizationError):
            _svc(BuyerFactory()).moderate(review.id, "REMOVED")


# --------------------------------- Queries -------------------------------- #
class TestQueries:
    def test_unpublished_visibility(self, session, product):
        buyer, review = _review(product, rating=1)

        assert _svc(buyer).get_review(review.id).id == review.id
        assert _svc(product.seller).get_review(review.id).id == review.id
        assert _svc(AdminFactory()).get_review(review.id).id == review.id
        with pytest.raises(NotFoundError):
            _svc(BuyerFactory()).get_review(review.id)

    def test_product_listing_shows_published_only(self, session, product):
        _review(product, rating=5)
        _review(product, rating=4)
        _review(product, rating=1)

        svc = _svc(BuyerFactory())
        items, total = svc.list_product_reviews(product.id)
        assert total == 2
        assert {r.rating for r in items} == {4, 5}

        fives, n = svc.list_product_reviews(product.id, rating=5)
        assert n == 1
        assert fives[0].rating == 5

    def test_listing_unknown_product(self, session):
        with pytest.raises(NotFoundError):
            _svc(BuyerFactory()).list_product_reviews(999_999)

    def test_stats_default_to_zero(self, session, product):
        stats = _stats(product)

        assert stats.total_reviews == 0
        assert stats.histogram == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
