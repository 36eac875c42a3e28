"""
Money helpers.

All monetary values are Decimal with two places, rounded half-up.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any


CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Amounts must fit DECIMAL(20,2)
MAX_AMOUNT_EXPONENT = 17


def round_money(value: Decimal) -> Decimal:
    """
    Round a Decimal to cents using half-up rounding.

    Args:
        value: Amount to round

    Returns:
        Amount quantized to two decimal places

    Raises:
        ValueError: If the amount has too many digits to quantize
    """
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"amount out of range: {value}") from e


def to_decimal(value: Any) -> Decimal:
    """
    Convert loose numeric input to Decimal without going through binary floats.

    Floats are converted via their shortest repr, so 0.1 becomes
    Decimal("0.1") rather than the exact binary expansion.

    Raises:
        ValueError: If the value is not numeric or does not fit a money column
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not an amount")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty amount")
        try:
            result = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"invalid amount: {value!r}") from e
    else:
        raise ValueError(f"unsupported amount type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"amount must be finite: {value!r}")
    if result and result.adjusted() > MAX_AMOUNT_EXPONENT:
        raise ValueError(f"amount out of range: {value!r}")
    return result


def clamp_non_negative(value: Decimal) -> Decimal:
    """Clamp amount at zero."""
    if value < ZERO:
        return ZERO
    return value
