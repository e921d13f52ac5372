from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from typing import Union

# Type alias for money values
Money = Decimal

ZERO = Decimal("0.00")


def to_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    """Convert to Decimal via str so floats keep their printed value."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """
    Round monetary value to 2 decimal places using ROUND_HALF_UP.

    Examples:
        >>> round_money(10.125)
        Decimal('10.13')
        >>> round_money("800")
        Decimal('800.00')
    """
    value = to_decimal(value)
    if value < 0:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_DOWN)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_amount(value: Union[Decimal, float, int, str]) -> str:
    """
    Render an amount without trailing zeros, for human-readable text.

    Examples:
        >>> format_amount(Decimal("1500.00"))
        '1500'
        >>> format_amount("12.50")
        '12.5'
    """
    normalized = to_decimal(value).normalize()
    return format(normalized, "f")
