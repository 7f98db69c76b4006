"""Money helpers.

All amounts are ``Decimal`` with two places, rounded half-up, matching the
``DecimalField(max_digits=10, decimal_places=2)`` columns they end up in.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, percent: Decimal) -> Decimal:
    """``amount * percent / 100`` rounded to cents."""
    return quantize_money(amount * (Decimal(percent) / Decimal("100")))
