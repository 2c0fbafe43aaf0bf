"""End-to-end purchase flow over HTTP: cart, checkout, payment, download, review."""

from __future__ import annotations

import hashlib
import hmac
import json
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from tests.factories.product import ProductFactory
from tests.factories.user import AdminFactory, BuyerFactory, SellerFactory

API = "/api/v1"


@pytest.fixture()
def webhook_secret(app):
    previous = app.config.get("PAYMENT_WEBHOOK_SECRET")
    app.config["PAYMENT_WEBHOOK_SECRET"] = "whsec_test"
    yield "whsec_test"
    app.config["PAYMENT_WEBHOOK_SECRET"] = previous


def _sign(body: bytes, secret: str) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def _checkout(client, headers, product_id):
    added = client.post(f"{API}/cart/items", json={"product_id": product_id}, headers=headers)
    assert added.status_code == 201
    created = client.post(f"{API}/orders", headers=headers)
    assert created.status_code == 201
    return created.get_json()["data"]


def test_purchase_download_and_review(client, headers_for):
    seller = SellerFactory()
    product = ProductFactory(seller=seller, price=Decimal("450.00"))
    buyer = BuyerFactory()
    headers = headers_for(buyer)

    order = _checkout(client, headers, product.id)
    assert order["status"] == "PENDING"
    assert order["subtotal"] == "450.00"
    assert order["platform_fee"] == "45.00"
    assert order["total_amount"] == "495.00"

    # Checkout empties the cart.
    cart = client.get(f"{API}/cart", headers=headers).get_json()["data"]
    assert cart["item_count"] == 0

    event = {
        "id": "evt_flow_1",
        "type": "payment.succeeded",
        "order_id": order["id"],
        "payment_intent_id": "pi_flow_1",
    }
    paid = client.post(f"{API}/payments/webhook", json=event)
    assert paid.status_code == 200
    assert paid.get_json()["data"] == {
        "event_id": "evt_flow_1",
        "duplicate": False,
        "order_id": order["id"],
        "order_status": "COMPLETED",
    }

    replay = client.post(f"{API}/payments/webhook", json=event)
    assert replay.get_json()["data"]["duplicate"] is True

    listed = client.get(f"{API}/downloads/orders/{order['id']}", headers=headers)
    assert listed.status_code == 200
    tokens = listed.get_json()["data"]
    assert len(tokens) == 1
    token = tokens[0]
    assert token["product_id"] == product.id
    assert token["download_count"] == 0
    assert token["download_limit"] == 5
    expires_at = datetime.fromisoformat(token["expires_at"])
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    assert timedelta(days=29) < expires_at - datetime.now(UTC) <= timedelta(days=30)

    grant = client.post(f"{API}/downloads/{token['token']}", headers=headers)
    assert grant.status_code == 200
    assert grant.get_json()["data"]["file_key"] == product.file_key
    assert grant.get_json()["data"]["remaining"] == 4

    review = client.post(
        f"{API}/reviews",
        json={
            "order_id": order["id"],
            "product_id": product.id,
            "rating": 5,
            "title": "Clear plans",
            "comment": "Built the bookshelf in a weekend.",
        },
        headers=headers,
    )
    assert review.status_code == 201
    assert review.get_json()["data"]["status"] == "PUBLISHED"
    assert review.get_json()["data"]["is_verified"] is True

    stats = client.get(f"{API}/reviews/products/{product.id}/stats")
    assert stats.status_code == 200
    data = stats.get_json()["data"]
    assert data["total_reviews"] == 1
    assert data["average_rating"] == "5.00"
    assert data["histogram"]["5"] == 1

    listing = client.get(f"{API}/reviews/products/{product.id}")
    assert listing.get_json()["meta"]["total"] == 1

    sales = client.get(f"{API}/orders/sales", headers=headers_for(seller))
    assert [o["id"] for o in sales.get_json()["data"]] == [order["id"]]


def test_other_buyer_cannot_see_order_or_downloads(client, headers_for):
    product = ProductFactory()
    owner = BuyerFactory()
    order = _checkout(client, headers_for(owner), product.id)
    stranger = headers_for(BuyerFactory())

    assert client.get(f"{API}/orders/{order['id']}", headers=stranger).status_code == 404
    resp = client.get(f"{API}/downloads/orders/{order['id']}", headers=stranger)
    assert resp.status_code == 404


def test_cancel_pending_order(client, headers_for):
    buyer = BuyerFactory()
    headers = headers_for(buyer)
    order = _checkout(client, headers, ProductFactory().id)

    resp = client.post(f"{API}/orders/{order['id']}/cancel", headers=headers)

    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "CANCELLED"


def test_review_requires_completed_order(client, headers_for):
    buyer = BuyerFactory()
    headers = headers_for(buyer)
    product = ProductFactory()
    order = _checkout(client, headers, product.id)

    resp = client.post(
        f"{API}/reviews",
        json={
            "order_id": order["id"],
            "product_id": product.id,
            "rating": 4,
            "title": "Early",
            "comment": "Not paid yet.",
        },
        headers=headers,
    )

    assert resp.status_code == 403


def test_webhook_rejects_bad_signature(client, webhook_secret):
    body = json.dumps({"id": "evt_sig", "type": "payment.failed", "order_id": 1}).encode()

    missing = client.post(
        f"{API}/payments/webhook", data=body, content_type="application/json"
    )
    forged = client.post(
        f"{API}/payments/webhook",
        data=body,
        content_type="application/json",
        headers={"X-Webhook-Signature": _sign(body, "other-secret")},
    )

    assert missing.status_code == 401
    assert forged.status_code == 401


def test_webhook_accepts_signed_body(client, headers_for, webhook_secret):
    buyer = BuyerFactory()
    order = _checkout(client, headers_for(buyer), ProductFactory().id)
    body = json.dumps(
        {"id": "evt_signed", "type": "payment.failed", "order_id": order["id"]}
    ).encode()

    resp = client.post(
        f"{API}/payments/webhook",
        data=body,
        content_type="application/json",
        headers={"X-Webhook-Signature": _sign(body, webhook_secret)},
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["event_id"] == "evt_signed"


def test_webhook_unknown_event_type_is_422(client):
    resp = client.post(
        f"{API}/payments/webhook", json={"id": "evt_bad", "type": "payment.exploded"}
    )

    assert resp.status_code == 422


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("post", "/cart/items"),
        ("get", "/orders/sales"),
        ("get", "/reviews/admin/pending"),
    ],
)
def test_buyer_only_or_admin_routes_enforce_roles(client, headers_for, method, path):
    # A buyer can use the cart but not seller or admin views; a seller can't use the cart.
    buyer = headers_for(BuyerFactory())
    seller = headers_for(SellerFactory())
    caller = seller if path.startswith("/cart") else buyer

    resp = getattr(client, method)(f"{API}{path}", json={"product_id": 1}, headers=caller)

    assert resp.status_code == 403


def test_admin_refund_of_completed_order(client, headers_for):
    buyer = BuyerFactory()
    headers = headers_for(buyer)
    order = _checkout(client, headers, ProductFactory().id)
    client.post(
        f"{API}/payments/webhook",
        json={"id": "evt_refund_flow", "type": "payment.succeeded", "order_id": order["id"]},
    )
    listed = client.get(f"{API}/downloads/orders/{order['id']}", headers=headers)
    token = listed.get_json()["data"][0]["token"]

    resp = client.post(
        f"{API}/orders/{order['id']}/refund", headers=headers_for(AdminFactory())
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "REFUNDED"
    assert client.post(f"{API}/downloads/{token}", headers=headers).status_code == 400
