"""Service configuration value objects built from the Flask config mapping."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any


@dataclass(frozen=True, slots=True)
class MarketplaceConfig:
    """
    Commercial rules shared by cart, orders, payments and downloads.

    :param fee_rate: Platform cut applied to each subtotal (e.g. ``0.10``).
    :param currency: ISO-4217 code stored on orders and ledger rows.
    :param cart_max_items: Maximum distinct products per cart.
    :param download_limit: Downloads granted per token.
    :param download_expiry: Token lifetime from issuance.
    :param pending_order_ttl: Age after which unpaid orders are cancelled.
    """

    fee_rate: Decimal = Decimal("0.10")
    currency: str = "USD"
    cart_max_items: int = 10
    download_limit: int = 5
    download_expiry: timedelta = timedelta(days=30)
    pending_order_ttl: timedelta = timedelta(hours=1)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> MarketplaceConfig:
        return cls(
            fee_rate=Decimal(str(config.get("PLATFORM_FEE_RATE", "0.10"))),
            currency=str(config.get("CURRENCY", "USD")),
            cart_max_items=int(config.get("CART_MAX_ITEMS", 10)),
            download_limit=int(config.get("DOWNLOAD_LIMIT", 5)),
            download_expiry=timedelta(days=int(config.get("DOWNLOAD_EXPIRY_DAYS", 30))),
            pending_order_ttl=config.get("PENDING_ORDER_TTL", timedelta(hours=1)),
        )


@dataclass(frozen=True, slots=True)
class ReviewConfig:
    """
    Review moderation rules.

    :param banned_terms: Lowercase terms that flag a review for moderation.
    :param report_threshold: Reports after which a published review is flagged.
    """

    banned_terms: tuple[str, ...] = ("spam", "fake", "scam")
    report_threshold: int = 3

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> ReviewConfig:
        return cls(
            banned_terms=tuple(config.get("REVIEW_BANNED_TERMS", ("spam", "fake", "scam"))),
            report_threshold=int(config.get("REVIEW_REPORT_THRESHOLD", 3)),
        )
