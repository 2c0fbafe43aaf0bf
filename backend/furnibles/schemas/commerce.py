"""Cart, order, payment-webhook and download schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from furnibles.services.payments.service import EVENT_TYPES

_MONEY = {"places": 2, "as_string": True}


# ------------------------------- Cart ----------------------------------------


class CartAddSchema(Schema):
    """Payload for adding a product to the cart."""

    product_id = fields.Integer(required=True, validate=validate.Range(min=1))


class CartItemSchema(Schema):
    id = fields.Integer(required=True)
    product_id = fields.Integer(required=True)
    title = fields.String(required=True)
    seller_id = fields.Integer(required=True)
    price = fields.Decimal(required=True, **_MONEY)
    quantity = fields.Integer(required=True)


class CartSchema(Schema):
    """Cart contents plus the totals checkout would charge."""

    items = fields.List(fields.Nested(CartItemSchema), required=True)
    item_count = fields.Integer(required=True)
    subtotal = fields.Decimal(required=True, **_MONEY)
    platform_fee = fields.Decimal(required=True, **_MONEY)
    total = fields.Decimal(required=True, **_MONEY)
    currency = fields.String(required=True)


# ------------------------------- Orders --------------------------------------


class OrderItemSchema(Schema):
    product_id = fields.Integer(required=True)
    seller_id = fields.Integer(required=True)
    product_title = fields.String(required=True)
    price = fields.Decimal(required=True, **_MONEY)
    quantity = fields.Integer(required=True)


class OrderSchema(Schema):
    """Public representation of an order."""

    id = fields.Integer(required=True)
    order_number = fields.String(required=True)
    buyer_id = fields.Integer(required=True)
    buyer_email = fields.Email(required=True)
    status = fields.String(required=True)
    subtotal = fields.Decimal(required=True, **_MONEY)
    platform_fee_rate = fields.Decimal(required=True, as_string=True)
    platform_fee = fields.Decimal(required=True, **_MONEY)
    total_amount = fields.Decimal(required=True, **_MONEY)
    seller_amount = fields.Decimal(required=True, **_MONEY)
    currency = fields.String(required=True)
    payment_status = fields.String(allow_none=True)
    created_at = fields.DateTime(required=True)
    paid_at = fields.DateTime(allow_none=True)
    completed_at = fields.DateTime(allow_none=True)
    cancelled_at = fields.DateTime(allow_none=True)
    refunded_at = fields.DateTime(allow_none=True)
    items = fields.List(fields.Nested(OrderItemSchema), required=True)


class OrderFilterSchema(Schema):
    """Supported query parameters for listing orders."""

    class Meta:
        unknown = EXCLUDE

    status = fields.String(
        load_default=None,
        validate=validate.OneOf(
            ["PENDING", "PROCESSING", "PAID", "COMPLETED", "CANCELLED", "REFUNDED", "DISPUTED"]
        ),
    )


# ------------------------------ Payments -------------------------------------


class PaymentEventSchema(Schema):
    """Webhook body sent by the payment provider."""

    class Meta:
        unknown = EXCLUDE

    id = fields.String(required=True, validate=validate.Length(min=1, max=255))
    type = fields.String(required=True, validate=validate.OneOf(sorted(EVENT_TYPES)))
    order_id = fields.Integer(load_default=None)
    payment_intent_id = fields.String(load_default=None, validate=validate.Length(max=255))


class PaymentEventResultSchema(Schema):
    event_id = fields.String(required=True)
    duplicate = fields.Boolean(required=True)
    order_id = fields.Integer(allow_none=True)
    order_status = fields.String(allow_none=True)


# ------------------------------ Downloads ------------------------------------


class DownloadTokenSchema(Schema):
    token = fields.String(required=True)
    order_id = fields.Integer(required=True)
    product_id = fields.Integer(required=True)
    product_title = fields.String(required=True)
    download_limit = fields.Integer(required=True)
    download_count = fields.Integer(required=True)
    remaining = fields.Integer(required=True)
    expires_at = fields.DateTime(required=True)
    is_active = fields.Boolean(required=True)
    is_usable = fields.Boolean(required=True)


class DownloadGrantSchema(Schema):
    product_id = fields.Integer(required=True)
    file_key = fields.String(allow_none=True)
    remaining = fields.Integer(required=True)
    expires_at = fields.DateTime(required=True)
