"""Processed webhook event ledger."""

from __future__ import annotations

from furnibles.models.payment_event import PaymentEvent
from furnibles.repositories.base import BaseRepository


class PaymentEventRepository(BaseRepository[PaymentEvent]):
    model = PaymentEvent

    def claim(self, event_id: str, event_type: str, order_id: int | None = None) -> bool:
        """Record ``event_id`` as processed.

        :returns: ``False`` if the event was already recorded (a replay).
        """
        return self.insert_ignore(
            {"event_id": event_id, "type": event_type, "order_id": order_id},
            conflict_on=("event_id",),
        )
