"""Product repository (read side used by cart, orders and reviews)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from sqlalchemy import select
from sqlalchemy.orm import InstrumentedAttribute

from furnibles.models.product import Product
from furnibles.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    """Persistence-only repository for :class:`Product`."""

    model = Product

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "id": Product.id,
            "title": Product.title,
            "price": Product.price,
            "created_at": Product.created_at,
        }

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]] | None:
        return {
            "seller_id": Product.seller_id,
            "status": Product.status,
        }

    def get_by_slug(self, slug: str) -> Product | None:
        stmt = select(Product).where(Product.slug == slug)
        return cast(Product | None, self.session.execute(stmt).scalars().first())

    def get_many(self, product_ids: list[int]) -> dict[int, Product]:
        """Return ``{id: product}`` for the given ids (missing ids are absent)."""
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in self.session.execute(stmt).scalars().unique()}
