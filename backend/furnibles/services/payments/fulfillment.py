# furnibles/services/payments/fulfillment.py
"""
Post-payment steps: split settlement, download issuance and completion.

Every step is idempotent so a replayed or retried confirmation can run them
again on an order that is already PAID or COMPLETED.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime

from furnibles.models.order import Order
from furnibles.services._shared.config import MarketplaceConfig
from furnibles.services._shared.money import split_fee
from furnibles.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


def settle(uow: SQLAlchemyUnitOfWork, order: Order, now: datetime) -> int:
    """
    Write a SALE (seller net) and a PLATFORM_FEE row per order line.

    The fee is rounded first and the net is the remainder, so both rows of a
    line sum to the line subtotal. Rows already present are left untouched.

    :returns: Number of ledger rows created by this call.
    """
    created = 0
    for item in order.items:
        fee, net = split_fee(item.line_total, order.platform_fee_rate)
        created += uow.transactions.record(
            order_id=order.id,
            product_id=item.product_id,
            seller_id=item.seller_id,
            type="SALE",
            amount=net,
            currency=order.currency,
            description=f"Sale of {item.product_title}",
            processed_at=now,
        )
        created += uow.transactions.record(
            order_id=order.id,
            product_id=item.product_id,
            seller_id=None,
            type="PLATFORM_FEE",
            amount=fee,
            currency=order.currency,
            description=f"Platform fee for order {order.order_number}",
            processed_at=now,
        )
    uow.session.expire(order, ["transactions"])
    return created


def fulfill(
    uow: SQLAlchemyUnitOfWork, order: Order, cfg: MarketplaceConfig, now: datetime
) -> int:
    """
    Issue one download token per distinct purchased product.

    :returns: Number of tokens created by this call.
    """
    created = 0
    for product_id in order.product_ids:
        created += uow.downloads.issue_if_absent(
            token=secrets.token_urlsafe(32),
            order_id=order.id,
            product_id=product_id,
            buyer_id=order.buyer_id,
            download_limit=cfg.download_limit,
            expires_at=now + cfg.download_expiry,
        )
    uow.session.expire(order, ["download_tokens"])
    return created


def complete(order: Order, now: datetime) -> None:
    """Move a fulfilled PAID order to COMPLETED (no-op once completed)."""
    if order.status == "PAID":
        order.transition_to("COMPLETED")
        order.completed_at = now
