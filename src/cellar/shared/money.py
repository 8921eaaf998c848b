"""Monetary rounding helpers.

Amounts are carried as floats while being computed and rounded half-up to
cents only at the point they are stored on an aggregate.
"""

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def round_money(amount) -> float:
    if amount is None:
        return 0.0
    return float(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def to_minor_units(amount) -> int:
    """Convert a major-unit amount (e.g. dollars) to integer minor units (cents)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def money_equal(left, right) -> bool:
    return abs(round_money(left) - round_money(right)) < 0.005
