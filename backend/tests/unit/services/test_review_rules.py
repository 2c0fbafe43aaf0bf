"""Rating aggregation and content screening."""

from __future__ import annotations

from decimal import Decimal

import pytest

from furnibles.services.reviews.moderation import auto_moderate, find_banned_terms
from furnibles.services.reviews.ratings import compute_aggregate

BANNED = ("spam", "fake", "scam")


class TestComputeAggregate:
    def test_empty_is_all_zeros(self):
        agg = compute_aggregate([])

        assert agg.total_reviews == 0
        assert agg.average_rating == Decimal("0.00")
        assert agg.recommendation_rate == Decimal("0.00")
        assert agg.histogram == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}

    def test_mean_histogram_and_recommendation(self):
        agg = compute_aggregate([5, 4, 2])

        assert agg.total_reviews == 3
        assert agg.average_rating == Decimal("3.67")
        assert agg.recommendation_rate == Decimal("66.67")
        assert agg.histogram == {1: 0, 2: 1, 3: 0, 4: 1, 5: 1}

    def test_as_columns_flattens_histogram(self):
        columns = compute_aggregate([5, 5]).as_columns()

        assert columns["total_reviews"] == 2
        assert columns["average_rating"] == Decimal("5.00")
        assert columns["rating_5"] == 2
        assert columns["rating_1"] == 0

    @pytest.mark.parametrize("bad", [0, 6, -1])
    def test_rejects_out_of_range(self, bad):
        with pytest.raises(ValueError):
            compute_aggregate([5, bad])


class TestAutoModerate:
    def test_clean_review_is_published(self):
        assert auto_moderate("Solid plan, easy cuts", 4, BANNED) == ("PUBLISHED", None)

    def test_banned_term_is_flagged_case_insensitively(self):
        status, reason = auto_moderate("Total SCAM, do not buy", 3, BANNED)

        assert status == "FLAGGED"
        assert "scam" in reason

    def test_one_star_goes_to_moderation(self):
        status, reason = auto_moderate("Missing dimensions", 1, BANNED)

        assert status == "FLAGGED"
        assert reason == "One-star rating"

    def test_find_banned_terms_reports_every_hit(self):
        assert sorted(find_banned_terms("fake spam", BANNED)) == ["fake", "spam"]
        assert find_banned_terms("", BANNED) == []
