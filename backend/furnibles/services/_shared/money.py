"""Fixed-point money helpers (two decimal places, half-up rounding)."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert ``value`` to ``Decimal`` going through ``str`` for floats."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value: Decimal | int | float | str) -> Decimal:
    """Round to cents with ``ROUND_HALF_UP``."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def split_fee(amount: Decimal, rate: Decimal) -> tuple[Decimal, Decimal]:
    """Split ``amount`` into ``(platform_fee, seller_net)``.

    The fee is rounded first and the net is the remainder, so the two parts
    always add back up to ``amount`` exactly.

    >>> split_fee(Decimal("450.00"), Decimal("0.10"))
    (Decimal('45.00'), Decimal('405.00'))
    """
    amount = quantize(amount)
    fee = quantize(amount * to_decimal(rate))
    return fee, amount - fee


def order_totals(subtotal: Decimal, rate: Decimal) -> dict[str, Decimal]:
    """Return ``subtotal``, ``platform_fee``, ``total_amount`` and ``seller_amount``."""
    subtotal = quantize(subtotal)
    fee, net = split_fee(subtotal, rate)
    return {
        "subtotal": subtotal,
        "platform_fee": fee,
        "total_amount": subtotal + fee,
        "seller_amount": net,
    }
