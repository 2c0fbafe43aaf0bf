"""Review resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from furnibles.models.review import REPORT_REASONS, VOTE_TYPES

_RATING = validate.Range(min=1, max=5)


class ReviewCreateSchema(Schema):
    """Payload for reviewing a purchased product."""

    order_id = fields.Integer(required=True, validate=validate.Range(min=1))
    product_id = fields.Integer(required=True, validate=validate.Range(min=1))
    rating = fields.Integer(required=True, strict=True, validate=_RATING)
    title = fields.String(required=True, validate=validate.Length(min=1, max=120))
    comment = fields.String(required=True, validate=validate.Length(min=1, max=5000))
    pros = fields.String(load_default=None, validate=validate.Length(max=2000))
    cons = fields.String(load_default=None, validate=validate.Length(max=2000))


class ReviewUpdateSchema(Schema):
    """Partial update of a review's content; at least one field is expected."""

    rating = fields.Integer(strict=True, validate=_RATING)
    title = fields.String(validate=validate.Length(min=1, max=120))
    comment = fields.String(validate=validate.Length(min=1, max=5000))
    pros = fields.String(allow_none=True, validate=validate.Length(max=2000))
    cons = fields.String(allow_none=True, validate=validate.Length(max=2000))


class ReviewRespondSchema(Schema):
    comment = fields.String(required=True, validate=validate.Length(min=1, max=5000))


class ReviewVoteSchema(Schema):
    vote = fields.String(required=True, validate=validate.OneOf(VOTE_TYPES))


class ReviewReportSchema(Schema):
    reason = fields.String(required=True, validate=validate.OneOf(REPORT_REASONS))
    comment = fields.String(load_default=None, validate=validate.Length(max=2000))


class ReviewModerateSchema(Schema):
    status = fields.String(
        required=True, validate=validate.OneOf(["PUBLISHED", "FLAGGED", "REMOVED"])
    )
    reason = fields.String(load_default=None, validate=validate.Length(max=255))


class ReviewFilterSchema(Schema):
    """Supported query parameters for listing a product's reviews."""

    class Meta:
        unknown = EXCLUDE

    rating = fields.Integer(load_default=None, validate=_RATING)


class ReviewResponseSchema(Schema):
    seller_id = fields.Integer(required=True)
    comment = fields.String(required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)


class ReviewSchema(Schema):
    """Public representation of a review."""

    id = fields.Integer(required=True)
    order_id = fields.Integer(required=True)
    product_id = fields.Integer(required=True)
    buyer_id = fields.Integer(required=True)
    buyer_name = fields.String(required=True)
    seller_id = fields.Integer(required=True)
    rating = fields.Integer(required=True)
    title = fields.String(required=True)
    comment = fields.String(required=True)
    pros = fields.String(allow_none=True)
    cons = fields.String(allow_none=True)
    status = fields.String(required=True)
    is_verified = fields.Boolean(required=True)
    helpful_count = fields.Integer(required=True)
    not_helpful_count = fields.Integer(required=True)
    moderation_reason = fields.String(allow_none=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
    response = fields.Nested(ReviewResponseSchema, allow_none=True)


class VoteResultSchema(Schema):
    review_id = fields.Integer(required=True)
    vote = fields.String(required=True)
    helpful_count = fields.Integer(required=True)
    not_helpful_count = fields.Integer(required=True)


class RatingStatsSchema(Schema):
    total_reviews = fields.Integer(required=True)
    average_rating = fields.Decimal(required=True, places=2, as_string=True)
    recommendation_rate = fields.Decimal(required=True, places=2, as_string=True)
    histogram = fields.Dict(keys=fields.String(), values=fields.Integer(), required=True)
