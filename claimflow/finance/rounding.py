"""
Rounding and numeric coercion shared by the financial calculators.

Money is rounded half-up through Decimal so that values such as
10000 * 0.125 land exactly on 1250.00 instead of drifting in binary floats.
"""
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Union

from claimflow.core.exceptions import InvalidInputError

CENT = Decimal("0.01")
BASIS_FRACTION = Decimal("0.0001")


def to_decimal(value: Union[float, Decimal]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps the shortest repr, so 0.125 stays 0.125 rather than its binary expansion
    return Decimal(str(value))


def round_money(value: Union[float, Decimal]) -> float:
    """Round a dollar amount to cents, half-up."""
    return float(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def round_fraction(value: Union[float, Decimal]) -> float:
    """Round a ratio to 4 decimal places, half-up."""
    return float(to_decimal(value).quantize(BASIS_FRACTION, rounding=ROUND_HALF_UP))


def multiply_money(amount: float, rate: float) -> float:
    """amount x rate computed in Decimal, rounded to cents."""
    return round_money(to_decimal(amount) * to_decimal(rate))


def same_cents(a: float, b: float) -> bool:
    return round_money(a) == round_money(b)


def require_amount(value: Any, name: str) -> float:
    """
    Validate a monetary input.

    Raises:
        InvalidInputError: If the value is not a finite, non-negative number
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if number < 0:
        raise InvalidInputError(f"{name} cannot be negative, got {value!r}")
    return number


def to_float_or_none(value: Any, name: str) -> Optional[float]:
    """
    Coerce an optional configured number, keeping None as None.

    Accepts floats, ints, Decimals and numeric strings. Blank strings count
    as not configured.
    """
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidInputError(f"{name} is not a number: {value!r}")
    return require_amount(value, name)
