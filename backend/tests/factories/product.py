"""Factory Boy definitions for products and cart lines."""

from __future__ import annotations

from decimal import Decimal

import factory

from furnibles.models.cart import CartItem
from furnibles.models.product import Product
from tests.factories import BaseFactory
from tests.factories.user import BuyerFactory, SellerFactory


class ProductFactory(BaseFactory):
    """Approved, purchasable product owned by a fresh seller."""

    class Meta:
        model = Product

    id = None
    seller = factory.SubFactory(SellerFactory)
    title = factory.Sequence(lambda n: f"Oak Bookshelf Plan {n}")
    slug = factory.Sequence(lambda n: f"oak-bookshelf-plan-{n}")
    description = "Step-by-step plan with cut list."
    price = Decimal("150.00")
    status = "APPROVED"
    file_key = factory.Sequence(lambda n: f"plans/plan-{n}.pdf")


class CartItemFactory(BaseFactory):
    class Meta:
        model = CartItem

    id = None
    user_id = factory.LazyFunction(lambda: BuyerFactory().id)
    product = factory.SubFactory(ProductFactory)
    product_id = factory.SelfAttribute("product.id")
    price = factory.SelfAttribute("product.price")
    quantity = 1
