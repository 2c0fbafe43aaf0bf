# furnibles/services/payments/service.py
from __future__ import annotations

import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from furnibles.models.order import Order
from furnibles.services._shared.base import BaseService
from furnibles.services._shared.config import MarketplaceConfig
from furnibles.services._shared.errors import NotFoundError, ValidationError
from furnibles.services.orders import lifecycle
from furnibles.services.payments import fulfillment
from furnibles.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

EVENT_TYPES = frozenset(
    {
        "payment.succeeded",
        "payment.failed",
        "payment.canceled",
        "checkout.expired",
        "charge.disputed",
        "charge.refunded",
    }
)

# A refund may close a dispute as well as a regular paid order.
WEBHOOK_REFUNDABLE = lifecycle.REFUNDABLE_STATUSES | {"DISPUTED"}


@dataclass(frozen=True, slots=True)
class PaymentEventIn:
    """
    Normalised provider event.

    :param event_id: Provider-unique id used for replay detection.
    :param type: One of :data:`EVENT_TYPES`.
    :param order_id: Target order, when the provider echoes it back.
    :param payment_intent_id: Provider payment reference (alternative lookup key).
    """

    event_id: str
    type: str
    order_id: int | None = None
    payment_intent_id: str | None = None


@dataclass(frozen=True, slots=True)
class PaymentEventResult:
    event_id: str
    duplicate: bool
    order_id: int | None = None
    order_status: str | None = None


def verify_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """
    Check an HMAC-SHA256 hex signature of ``payload``.

    ``signature`` may carry a ``sha256=`` prefix.
    """
    if not signature:
        return False
    provided = signature.split("=", 1)[1] if signature.startswith("sha256=") else signature
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, provided.strip().lower())


class PaymentService(BaseService):
    """
    Apply payment-provider webhook events to orders.

    Each event id is processed once: replays are acknowledged without side
    effects. Errors are not swallowed; the transaction rolls back (including
    the event claim) and the provider redelivers.
    """

    def __init__(self, *, cfg: MarketplaceConfig | None = None) -> None:
        super().__init__()
        self.cfg = cfg or MarketplaceConfig()

    def handle_event(self, event: PaymentEventIn) -> PaymentEventResult:
        """
        Apply ``event`` in a single transaction.

        :raises ValidationError: On an unknown event type or missing order reference.
        :raises NotFoundError: If the referenced order does not exist.
        """
        if event.type not in EVENT_TYPES:
            raise ValidationError(f"Unsupported event type: {event.type}")
        if event.order_id is None and not event.payment_intent_id:
            raise ValidationError("Event does not reference an order")

        with self.rw_uow() as uow:
            order = self._resolve_order(uow, event)
            if not uow.payment_events.claim(event.event_id, event.type, order.id):
                log.info(
                    "Duplicate payment event ignored",
                    extra={"event_id": event.event_id, "order_id": order.id},
                )
                return PaymentEventResult(event_id=event.event_id, duplicate=True, order_id=order.id)

            handler = {
                "payment.succeeded": self._on_succeeded,
                "payment.failed": self._on_failed,
                "payment.canceled": self._on_canceled,
                "checkout.expired": self._on_canceled,
                "charge.disputed": self._on_disputed,
                "charge.refunded": self._on_refunded,
            }[event.type]
            handler(uow, order, event)
            uow.orders.flush()

            log.info(
                "Payment event processed",
                extra={
                    "event_id": event.event_id,
                    "event_type": event.type,
                    "order_id": order.id,
                },
            )
            return PaymentEventResult(
                event_id=event.event_id,
                duplicate=False,
                order_id=order.id,
                order_status=order.status,
            )

    # ------------------------------------------------------------------ #
    # Handlers
    # ------------------------------------------------------------------ #

    def _on_succeeded(self, uow: SQLAlchemyUnitOfWork, order: Order, event: PaymentEventIn) -> None:
        """PENDING/PROCESSING → PAID, then settlement, fulfillment and completion."""
        now = self.now_utc()
        if order.status not in ("PENDING", "PROCESSING", "PAID", "COMPLETED"):
            log.warning(
                "Payment succeeded for order in status %s; ignoring",
                order.status,
                extra={"order_id": order.id},
            )
            return

        if order.status == "PENDING":
            order.transition_to("PROCESSING")
        if order.status == "PROCESSING":
            order.transition_to("PAID")
            order.paid_at = now
            order.payment_status = "succeeded"
            if event.payment_intent_id:
                order.payment_intent_id = event.payment_intent_id
        uow.orders.flush()

        fulfillment.settle(uow, order, now)
        fulfillment.fulfill(uow, order, self.cfg, now)
        fulfillment.complete(order, now)

    def _on_failed(self, uow: SQLAlchemyUnitOfWork, order: Order, event: PaymentEventIn) -> None:
        if order.status in lifecycle.CANCELLABLE_STATUSES:
            order.payment_status = "failed"

    def _on_canceled(self, uow: SQLAlchemyUnitOfWork, order: Order, event: PaymentEventIn) -> None:
        if order.status == "PENDING":
            lifecycle.cancel(order, self.now_utc())
            order.payment_status = "canceled"

    def _on_disputed(self, uow: SQLAlchemyUnitOfWork, order: Order, event: PaymentEventIn) -> None:
        if order.can_transition_to("DISPUTED"):
            order.transition_to("DISPUTED")
            order.payment_status = "disputed"
        else:
            log.warning(
                "Dispute for order in status %s; ignoring",
                order.status,
                extra={"order_id": order.id},
            )

    def _on_refunded(self, uow: SQLAlchemyUnitOfWork, order: Order, event: PaymentEventIn) -> None:
        if order.status == "REFUNDED":
            return
        lifecycle.refund(uow, order, self.now_utc(), allowed=WEBHOOK_REFUNDABLE)

    # ------------------------------------------------------------------ #

    @staticmethod
    def _resolve_order(uow: SQLAlchemyUnitOfWork, event: PaymentEventIn) -> Order:
        order: Order | None = None
        if event.order_id is not None:
            order = uow.orders.get_for_update(event.order_id)
        elif event.payment_intent_id:
            order = uow.orders.get_by_payment_intent(event.payment_intent_id, for_update=True)
        if order is None:
            raise NotFoundError("Order", event.order_id or event.payment_intent_id or "")
        return order

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
