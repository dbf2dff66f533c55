"""Helpers for Decimal normalization."""

from decimal import ROUND_HALF_UP, Decimal


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from callers, documents or adapters.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value: Decimal, places: int) -> Decimal:
    """Round a Decimal half-up to a fixed number of decimal places.

    Args:
        value: Amount to round.
        places: Number of digits kept after the decimal point.

    Returns:
        Decimal: Rounded amount.
    """
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


__all__ = ["coerce_decimal", "quantize"]
