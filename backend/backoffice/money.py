# Overview: Decimal helpers for currency amounts (2 decimal places, half-up rounding).

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from .errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Balances at or below this are treated as settled.
SETTLEMENT_EPSILON = Decimal("0.01")

# Matches Numeric(12, 2): 9,999,999,999.99
MAX_AMOUNT = Decimal("9999999999.99")


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def as_money(value: Any) -> Decimal:
    """
    Normalize a value read back from the database (Decimal, float under
    SQLite aggregates, int, or None) into a 2-place Decimal.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return quantize(value)
    return quantize(Decimal(str(value)))


def parse_money(value: Any, field: str, *, allow_negative: bool = False) -> Decimal:
    """
    Parse client input into a 2-place Decimal.

    Accepts ints, floats and numeric strings. Floats go through str() so that
    0.1 arrives as Decimal("0.1"), not its binary expansion.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValidationError(f"{field} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")

    amount = quantize(amount)
    if not allow_negative and amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT}")
    return amount


def to_number(value: Decimal | None) -> float | None:
    """JSON output: money fields are emitted as plain numbers."""
    if value is None:
        return None
    return float(as_money(value))
