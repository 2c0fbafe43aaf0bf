"""Order endpoints: checkout, order history, sales and lifecycle actions."""

from __future__ import annotations

from flask import Blueprint, request

from furnibles.api.deps import (
    json_response,
    marketplace_config,
    parse_pagination,
    require_auth,
    require_role,
    service_context,
    timing,
)
from furnibles.schemas import OrderFilterSchema, OrderSchema, build_meta
from furnibles.services.orders.service import OrderService

bp = Blueprint("orders", __name__, url_prefix="/orders")

order_schema = OrderSchema()
order_list_schema = OrderSchema(many=True)
order_filter_schema = OrderFilterSchema()


def _service() -> OrderService:
    return OrderService(ctx=service_context(), cfg=marketplace_config())


@bp.post("")
@require_role("BUYER")
@timing
def checkout():
    """Turn the caller's cart into a PENDING order."""

    order = _service().checkout()
    return json_response({"data": order_schema.dump(order)}, status=201)


@bp.get("/my")
@require_auth
@timing
def my_orders():
    """Return the caller's orders, newest first."""

    filters = order_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, total = _service().list_buyer_orders(
        page=pagination.page, limit=pagination.limit, status=filters["status"]
    )
    meta = build_meta(total=total, page=pagination.page, limit=pagination.limit)
    return json_response({"data": order_list_schema.dump(items), "meta": meta})


@bp.get("/sales")
@require_role("SELLER", "ADMIN")
@timing
def my_sales():
    """Return orders containing at least one of the caller's products."""

    filters = order_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, total = _service().list_seller_sales(
        page=pagination.page, limit=pagination.limit, status=filters["status"]
    )
    meta = build_meta(total=total, page=pagination.page, limit=pagination.limit)
    return json_response({"data": order_list_schema.dump(items), "meta": meta})


@bp.get("/<int:order_id>")
@require_auth
@timing
def get_order(order_id: int):
    return json_response({"data": order_schema.dump(_service().get_order(order_id))})


@bp.post("/<int:order_id>/cancel")
@require_auth
@timing
def cancel_order(order_id: int):
    return json_response({"data": order_schema.dump(_service().cancel_order(order_id))})


@bp.post("/<int:order_id>/refund")
@require_role("ADMIN")
@timing
def refund_order(order_id: int):
    return json_response({"data": order_schema.dump(_service().refund_order(order_id))})
