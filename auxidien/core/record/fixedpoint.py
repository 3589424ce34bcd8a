"""Fixed-point conversion for values crossing the publication boundary."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

DECIMALS = 6
SCALE = 10**DECIMALS
BPS_DENOMINATOR = 10_000
# Prices travel as uint256.
MAX_PRICE = 2**256 - 1


def to_fixed(value: float | Decimal | str) -> int:
    """Scale ``value`` by 10**6 and round half up to the nearest integer.

    Floats go through ``repr`` so the decimal digits the float prints are
    the ones that get rounded.
    """
    amount = value if isinstance(value, Decimal) else Decimal(repr(value) if isinstance(value, float) else value)
    return int((amount * SCALE).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_fixed(value: int) -> Decimal:
    return Decimal(value) / SCALE


def max_change(price: int, max_change_rate_bps: int) -> int:
    """Largest admissible absolute move from ``price``, floored like integer ledger arithmetic."""
    return price * max_change_rate_bps // BPS_DENOMINATOR


__all__ = ["BPS_DENOMINATOR", "DECIMALS", "MAX_PRICE", "SCALE", "from_fixed", "max_change", "to_fixed"]
