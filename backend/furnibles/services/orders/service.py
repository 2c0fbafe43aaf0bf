# furnibles/services/orders/service.py
from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal

from furnibles.models.order import Order, OrderItem
from furnibles.repositories.base import Page
from furnibles.services._shared.base import BaseService, ServiceContext
from furnibles.services._shared.config import MarketplaceConfig
from furnibles.services._shared.errors import NotFoundError, ValidationError
from furnibles.services._shared.money import order_totals
from furnibles.services.orders import lifecycle
from furnibles.services.orders.dto import OrderOut, to_order_out

log = logging.getLogger(__name__)


class OrderService(BaseService):
    """
    Checkout and order queries.

    Checkout turns the actor's cart into a PENDING order and empties the
    cart in the same transaction: the cart is cleared only after the order
    and its items have been flushed, so a failure leaves the cart intact.
    """

    def __init__(self, *, ctx: ServiceContext, cfg: MarketplaceConfig | None = None) -> None:
        super().__init__(ctx=ctx)
        self.cfg = cfg or MarketplaceConfig()

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def checkout(self) -> OrderOut:
        """
        Create a PENDING order from the cart and clear the cart.

        :raises AuthorizationError: If the actor is not a buyer.
        :raises ValidationError: If the cart has no purchasable items.
        """
        self.ensure_role("BUYER", msg="Only buyers can place orders")
        buyer_id = self.ctx.actor_id
        now = self.now_utc()

        with self.rw_uow() as uow:
            buyer = uow.users.get(buyer_id)
            if buyer is None:
                raise NotFoundError("User", buyer_id)

            lines = [
                item
                for item in uow.cart.list_for_user(buyer_id)
                if item.product is not None and item.product.is_purchasable
            ]
            if not lines:
                raise ValidationError("Cart is empty")

            subtotal = sum((item.price * item.quantity for item in lines), Decimal("0"))
            totals = order_totals(subtotal, self.cfg.fee_rate)
            order = Order(
                order_number=lifecycle.next_order_number(uow, now),
                buyer_id=buyer_id,
                buyer_email=buyer.email,
                status="PENDING",
                platform_fee_rate=self.cfg.fee_rate,
                currency=self.cfg.currency,
                **totals,
            )
            order.items = [
                OrderItem(
                    product_id=item.product_id,
                    seller_id=item.product.seller_id,
                    product_title=item.product.title,
                    price=item.price,
                    quantity=item.quantity,
                )
                for item in lines
            ]
            uow.orders.add(order)

            uow.cart.clear_for_user(buyer_id)
            log.info(
                "Order created",
                extra={"order_id": order.id, "user_id": buyer_id, "count": len(lines)},
            )
            return to_order_out(order)

    def cancel_order(self, order_id: int) -> OrderOut:
        """
        Cancel an unpaid order (buyer who owns it, or admin).

        :raises ValidationError: Unless the order is PENDING or PROCESSING.
        """
        with self.rw_uow() as uow:
            order = uow.orders.get_for_update(order_id)
            if order is None or not (self.ctx.is_admin or order.buyer_id == self.ctx.actor_id):
                raise NotFoundError("Order", order_id)
            lifecycle.cancel(order, self.now_utc())
            uow.orders.flush()
            return to_order_out(order)

    def refund_order(self, order_id: int) -> OrderOut:
        """Refund a PAID or COMPLETED order (admin only)."""
        self.ensure_role("ADMIN", msg="Only admins can refund orders")
        with self.rw_uow() as uow:
            order = uow.orders.get_for_update(order_id)
            if order is None:
                raise NotFoundError("Order", order_id)
            lifecycle.refund(uow, order, self.now_utc())
            return to_order_out(order)

    def cancel_stale_orders(self) -> int:
        """Cancel PENDING orders older than the configured TTL; return the count."""
        cutoff = self.now_utc() - self.cfg.pending_order_ttl
        with self.rw_uow() as uow:
            stale = uow.orders.list_stale_pending(cutoff)
            for order in stale:
                lifecycle.cancel(order, self.now_utc())
            uow.orders.flush()
        if stale:
            log.info("Stale pending orders cancelled", extra={"count": len(stale)})
        return len(stale)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_order(self, order_id: int) -> OrderOut:
        """
        Return an order visible to the actor.

        The buyer, any seller with a line in the order, and admins may read
        it; everyone else gets NotFound so order ids cannot be probed.
        """
        with self.ro_uow() as uow:
            order = uow.orders.get(order_id)
            if order is None or not self._can_view(order):
                raise NotFoundError("Order", order_id)
            return to_order_out(order)

    def list_buyer_orders(
        self, *, page: int = 1, limit: int = 20, status: str | None = None
    ) -> tuple[list[OrderOut], int]:
        pagination = self.ensure_pagination(page=page, limit=limit)
        with self.ro_uow() as uow:
            result: Page[Order] = uow.orders.paginate_for_buyer(
                self.ctx.actor_id, pagination, status=status
            )
            return [to_order_out(o) for o in result.items], result.total

    def list_seller_sales(
        self, *, page: int = 1, limit: int = 20, status: str | None = None
    ) -> tuple[list[OrderOut], int]:
        self.ensure_role("SELLER", "ADMIN", msg="Only sellers have sales")
        pagination = self.ensure_pagination(page=page, limit=limit)
        with self.ro_uow() as uow:
            result: Page[Order] = uow.orders.paginate_for_seller(
                self.ctx.actor_id, pagination, status=status
            )
            return [to_order_out(o) for o in result.items], result.total

    # ------------------------------------------------------------------ #

    def _can_view(self, order: Order) -> bool:
        actor = self.ctx.actor_id
        return (
            self.ctx.is_admin
            or order.buyer_id == actor
            or actor in order.seller_ids()
        )

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
