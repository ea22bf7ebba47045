"""Decimal helpers for currency amounts (two places, half-up)."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from ..core.exceptions import ValidationException

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Numeric = Union[Decimal, int, float, str]


def to_decimal(value: Numeric) -> Decimal:
    """Convert ints, floats and strings to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationException(
            "Amount is not a valid number",
            code="INVALID_AMOUNT",
            details={"value": repr(value)},
        ) from exc


def quantize_money(value: Numeric) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Numeric) -> str:
    return f"{quantize_money(value):.2f}"
