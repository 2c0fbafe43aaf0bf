"""Rating aggregate repositories (one row per product / per seller)."""

from __future__ import annotations

from typing import Any, cast

from furnibles.models.rating import ProductRating, SellerRating
from furnibles.repositories.base import BaseRepository


class _AggregateRepository(BaseRepository[Any]):
    #: Owner column name (``product_id`` / ``seller_id``)
    owner_field: str

    def get_for(self, owner_id: int) -> Any | None:
        return self.find_one(**{self.owner_field: owner_id})

    def get_or_create(self, owner_id: int) -> Any:
        """Return the aggregate row of ``owner_id``, inserting an empty one if missing."""
        self.insert_ignore({self.owner_field: owner_id}, conflict_on=(self.owner_field,))
        row = self.get_for(owner_id)
        if row is None:  # pragma: no cover - insert above guarantees a row
            raise RuntimeError(f"{self.model.__name__} row missing for {owner_id}")
        return row

    def store(self, owner_id: int, values: dict[str, Any]) -> Any:
        """Overwrite the aggregate columns of ``owner_id`` with ``values``."""
        row = self.get_or_create(owner_id)
        for key, value in values.items():
            setattr(row, key, value)
        self.flush()
        return row


class ProductRatingRepository(_AggregateRepository):
    model = ProductRating
    owner_field = "product_id"

    def get_for(self, owner_id: int) -> ProductRating | None:
        return cast(ProductRating | None, super().get_for(owner_id))


class SellerRatingRepository(_AggregateRepository):
    model = SellerRating
    owner_field = "seller_id"

    def get_for(self, owner_id: int) -> SellerRating | None:
        return cast(SellerRating | None, super().get_for(owner_id))
