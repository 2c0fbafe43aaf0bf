"""Payment-provider webhook."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from furnibles.api.deps import json_response, marketplace_config, timing
from furnibles.core.errors import Unauthorized
from furnibles.schemas import PaymentEventResultSchema, PaymentEventSchema
from furnibles.services.payments.service import PaymentEventIn, PaymentService, verify_signature

log = logging.getLogger(__name__)

bp = Blueprint("payments", __name__, url_prefix="/payments")

SIGNATURE_HEADER = "X-Webhook-Signature"

event_schema = PaymentEventSchema()
result_schema = PaymentEventResultSchema()


@bp.post("/webhook")
@timing
def webhook():
    """
    Apply a provider event.

    When ``PAYMENT_WEBHOOK_SECRET`` is set the raw body must carry a valid
    HMAC-SHA256 signature. Processing errors propagate as 5xx so the
    provider redelivers; replays are acknowledged with ``duplicate: true``.
    """

    secret = current_app.config.get("PAYMENT_WEBHOOK_SECRET") or ""
    raw = request.get_data(cache=True)
    if secret and not verify_signature(raw, request.headers.get(SIGNATURE_HEADER), secret):
        log.warning("Webhook signature rejected")
        raise Unauthorized("Invalid webhook signature")

    data = event_schema.load(request.get_json(silent=True) or {})
    event = PaymentEventIn(
        event_id=data["id"],
        type=data["type"],
        order_id=data["order_id"],
        payment_intent_id=data["payment_intent_id"],
    )
    result = PaymentService(cfg=marketplace_config()).handle_event(event)
    return json_response({"data": result_schema.dump(result)})
