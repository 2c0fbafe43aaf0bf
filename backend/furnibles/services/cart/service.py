# furnibles/services/cart/service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from furnibles.models.cart import CartItem
from furnibles.services._shared.base import BaseService, ServiceContext
from furnibles.services._shared.config import MarketplaceConfig
from furnibles.services._shared.errors import NotFoundError, ValidationError
from furnibles.services._shared.money import order_totals

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CartItemOut:
    id: int
    product_id: int
    title: str
    seller_id: int
    price: Decimal
    quantity: int


@dataclass(frozen=True, slots=True)
class CartOut:
    """
    Cart contents with the amounts checkout would charge.

    :param items: Lines whose product is still purchasable.
    :param subtotal: Sum of line prices.
    :param platform_fee: Fee charged on top of ``subtotal``.
    :param total: ``subtotal + platform_fee``.
    """

    items: list[CartItemOut]
    item_count: int
    subtotal: Decimal
    platform_fee: Decimal
    total: Decimal
    currency: str


class CartService(BaseService):
    """Buyer cart: one line per digital product, price captured when added."""

    def __init__(self, *, ctx: ServiceContext, cfg: MarketplaceConfig | None = None) -> None:
        super().__init__(ctx=ctx)
        self.cfg = cfg or MarketplaceConfig()

    def get_cart(self) -> CartOut:
        self.ensure_role("BUYER", msg="Only buyers have a cart")
        with self.ro_uow() as uow:
            items = uow.cart.list_for_user(self.ctx.actor_id)
            return self._summary(items)

    def add_item(self, product_id: int) -> CartOut:
        """
        Add ``product_id`` to the actor's cart.

        :raises AuthorizationError: If the actor is not a buyer.
        :raises NotFoundError: If the product does not exist.
        :raises ValidationError: If the product is unavailable, owned by the
            actor, already in the cart, or the cart is full.
        """
        self.ensure_role("BUYER", msg="Only buyers can add items to a cart")
        user_id = self.ctx.actor_id
        with self.rw_uow() as uow:
            product = uow.products.get(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            if not product.is_purchasable:
                raise ValidationError("Product is not available")
            if product.seller_id == user_id:
                raise ValidationError("You cannot buy your own product")
            if uow.cart.count_for_user(user_id) >= self.cfg.cart_max_items:
                raise ValidationError(
                    f"Cart cannot hold more than {self.cfg.cart_max_items} products"
                )
            if uow.cart.get_for_user_product(user_id, product_id) is not None:
                raise ValidationError("Product is already in the cart")

            uow.cart.add(
                CartItem(user_id=user_id, product_id=product_id, price=product.price, quantity=1)
            )
            log.info("Cart item added", extra={"user_id": user_id, "product_id": product_id})
            items = uow.cart.list_for_user(user_id)
            return self._summary(items)

    def remove_item(self, item_id: int) -> CartOut:
        self.ensure_role("BUYER", msg="Only buyers have a cart")
        user_id = self.ctx.actor_id
        with self.rw_uow() as uow:
            item = uow.cart.get_for_user(user_id, item_id)
            if item is None:
                raise NotFoundError("CartItem", item_id)
            uow.cart.delete(item)
            items = uow.cart.list_for_user(user_id)
            return self._summary(items)

    def clear(self) -> dict[str, str]:
        self.ensure_role("BUYER", msg="Only buyers have a cart")
        with self.rw_uow() as uow:
            removed = uow.cart.clear_for_user(self.ctx.actor_id)
        log.info("Cart cleared", extra={"user_id": self.ctx.actor_id, "count": removed})
        return {"message": "Cart cleared"}

    # ------------------------------------------------------------------ #

    def _summary(self, items: list[CartItem]) -> CartOut:
        lines = [
            CartItemOut(
                id=item.id,
                product_id=item.product_id,
                title=item.product.title,
                seller_id=item.product.seller_id,
                price=item.price,
                quantity=item.quantity,
            )
            for item in items
            if item.product is not None and item.product.is_purchasable
        ]
        totals = order_totals(sum((line.price for line in lines), Decimal("0")), self.cfg.fee_rate)
        return CartOut(
            items=lines,
            item_count=len(lines),
            subtotal=totals["subtotal"],
            platform_fee=totals["platform_fee"],
            total=totals["total_amount"],
            currency=self.cfg.currency,
        )
