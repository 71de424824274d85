"""
Decimal Amounts Module

Conversion, rounding and display of monetary amounts. NEVER uses float for
monetary values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
import re

from .errors import InvalidAmount

# High precision for intermediate interest calculations
getcontext().prec = 28

ZERO = Decimal('0')


def to_amount(value) -> Decimal:
    """
    Convert user or API supplied value to Decimal

    Args:
        value: str, int or Decimal

    Returns:
        Decimal value (not rounded)

    Raises:
        InvalidAmount: If value is empty, a float, or not a finite number
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmount(value, f"Invalid amount: {value!r}. Use a string or Decimal, not float")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        clean_value = re.sub(r'[\s,]', '', value)
        if not clean_value:
            raise InvalidAmount(value, "Amount must be a non-empty number")
        try:
            result = Decimal(clean_value)
        except InvalidOperation:
            raise InvalidAmount(value, f"Cannot convert '{value}' to an amount")
    else:
        raise InvalidAmount(value, f"Unsupported amount type: {type(value).__name__}")

    if not result.is_finite():
        raise InvalidAmount(value)
    return result


def round_amount(value: Decimal, places: int = 2) -> Decimal:
    """
    Round to currency precision (half up)

    Raises:
        InvalidAmount: If the value has too many digits to hold at that precision
    """
    try:
        return value.quantize(Decimal('0.1') ** places, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(value, f"Invalid amount: {value}. Amount is too large")


def format_amount(value: Decimal, places: int = 2) -> str:
    """Format for display"""
    return f"{round_amount(value, places):.{places}f}"
