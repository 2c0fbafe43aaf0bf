"""Cart endpoints (buyers only)."""

from __future__ import annotations

from flask import Blueprint, request

from furnibles.api.deps import (
    json_response,
    marketplace_config,
    require_role,
    service_context,
    timing,
)
from furnibles.schemas import CartAddSchema, CartSchema, MessageSchema
from furnibles.services.cart.service import CartService

bp = Blueprint("cart", __name__, url_prefix="/cart")

cart_schema = CartSchema()
cart_add_schema = CartAddSchema()
message_schema = MessageSchema()


def _service() -> CartService:
    return CartService(ctx=service_context(), cfg=marketplace_config())


@bp.get("")
@require_role("BUYER")
@timing
def get_cart():
    return json_response({"data": cart_schema.dump(_service().get_cart())})


@bp.post("/items")
@require_role("BUYER")
@timing
def add_item():
    """Add a product at its current price; returns the updated cart."""

    data = cart_add_schema.load(request.get_json(silent=True) or {})
    cart = _service().add_item(data["product_id"])
    return json_response({"data": cart_schema.dump(cart)}, status=201)


@bp.delete("/items/<int:item_id>")
@require_role("BUYER")
@timing
def remove_item(item_id: int):
    return json_response({"data": cart_schema.dump(_service().remove_item(item_id))})


@bp.delete("")
@require_role("BUYER")
@timing
def clear_cart():
    return json_response({"data": message_schema.dump(_service().clear())})
