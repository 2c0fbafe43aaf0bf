"""Review endpoints: public listings, buyer/seller actions and moderation."""

from __future__ import annotations

from flask import Blueprint, request

from furnibles.api.deps import (
    anonymous_context,
    json_response,
    parse_pagination,
    require_auth,
    require_role,
    review_config,
    service_context,
    timing,
)
from furnibles.core.errors import BadRequest
from furnibles.schemas import (
    RatingStatsSchema,
    ReviewCreateSchema,
    ReviewFilterSchema,
    ReviewModerateSchema,
    ReviewReportSchema,
    ReviewRespondSchema,
    ReviewSchema,
    ReviewUpdateSchema,
    ReviewVoteSchema,
    VoteResultSchema,
    build_meta,
)
from furnibles.services.reviews.dto import ReviewCreateIn
from furnibles.services.reviews.service import ReviewService

bp = Blueprint("reviews", __name__, url_prefix="/reviews")

review_schema = ReviewSchema()
review_list_schema = ReviewSchema(many=True)
review_create_schema = ReviewCreateSchema()
review_update_schema = ReviewUpdateSchema()
review_filter_schema = ReviewFilterSchema()
respond_schema = ReviewRespondSchema()
vote_schema = ReviewVoteSchema()
vote_result_schema = VoteResultSchema()
report_schema = ReviewReportSchema()
moderate_schema = ReviewModerateSchema()
stats_schema = RatingStatsSchema()


def _service() -> ReviewService:
    return ReviewService(ctx=service_context(), cfg=review_config())


def _public_service() -> ReviewService:
    return ReviewService(ctx=anonymous_context(), cfg=review_config())


def _payload() -> dict:
    return request.get_json(silent=True) or {}


# ------------------------------- Public --------------------------------------


@bp.get("/products/<int:product_id>")
@timing
def list_product_reviews(product_id: int):
    """Published reviews of a product, newest first by default."""

    filters = review_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, total = _public_service().list_product_reviews(
        product_id,
        page=pagination.page,
        limit=pagination.limit,
        sort=pagination.sort,
        rating=filters["rating"],
    )
    meta = build_meta(total=total, page=pagination.page, limit=pagination.limit)
    return json_response({"data": review_list_schema.dump(items), "meta": meta})


@bp.get("/products/<int:product_id>/stats")
@timing
def product_stats(product_id: int):
    return json_response({"data": stats_schema.dump(_public_service().product_stats(product_id))})


@bp.get("/sellers/<int:seller_id>/stats")
@timing
def seller_stats(seller_id: int):
    return json_response({"data": stats_schema.dump(_public_service().seller_stats(seller_id))})


# ------------------------- Optionally authenticated --------------------------


@bp.get("/<int:review_id>")
@timing
def get_review(review_id: int):
    """Unpublished reviews are visible to their buyer, the seller and admins."""

    return json_response({"data": review_schema.dump(_service().get_review(review_id))})


# ------------------------------ Buyer / seller --------------------------------


@bp.post("")
@require_role("BUYER")
@timing
def create_review():
    data = review_create_schema.load(_payload())
    review = _service().create_review(ReviewCreateIn(**data))
    return json_response({"data": review_schema.dump(review)}, status=201)


@bp.put("/<int:review_id>")
@require_auth
@timing
def update_review(review_id: int):
    changes = review_update_schema.load(_payload())
    if not changes:
        raise BadRequest("No fields to update")
    review = _service().update_review(review_id, changes)
    return json_response({"data": review_schema.dump(review)})


@bp.put("/<int:review_id>/response")
@require_role("SELLER")
@timing
def respond(review_id: int):
    data = respond_schema.load(_payload())
    review = _service().respond(review_id, data["comment"])
    return json_response({"data": review_schema.dump(review)})


@bp.post("/<int:review_id>/vote")
@require_auth
@timing
def vote(review_id: int):
    data = vote_schema.load(_payload())
    result = _service().vote(review_id, data["vote"])
    return json_response({"data": vote_result_schema.dump(result)})


@bp.post("/<int:review_id>/report")
@require_auth
@timing
def report(review_id: int):
    data = report_schema.load(_payload())
    review = _service().report(review_id, data["reason"], data["comment"])
    return json_response({"data": review_schema.dump(review)}, status=201)


# ------------------------------- Admin ---------------------------------------


@bp.get("/admin/pending")
@require_role("ADMIN")
@timing
def list_pending():
    pagination = parse_pagination()
    items, total = _service().list_pending(
        page=pagination.page, limit=pagination.limit, sort=pagination.sort
    )
    meta = build_meta(total=total, page=pagination.page, limit=pagination.limit)
    return json_response({"data": review_list_schema.dump(items), "meta": meta})


@bp.put("/admin/<int:review_id>/moderate")
@require_role("ADMIN")
@timing
def moderate(review_id: int):
    data = moderate_schema.load(_payload())
    review = _service().moderate(review_id, data["status"], data["reason"])
    return json_response({"data": review_schema.dump(review)})


@bp.delete("/admin/<int:review_id>")
@require_role("ADMIN")
@timing
def remove(review_id: int):
    return json_response({"data": review_schema.dump(_service().remove(review_id))})
