"""Helpers for Decimal normalization."""

from collections.abc import Mapping
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL or adapters.

    Returns:
        Decimal: Normalized numeric value.

    Raises:
        InvalidOperation: If the value cannot be read as a number.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"Boolean is not a currency value: {value}")
    return Decimal(str(value))


def quantize_currency(value: Decimal) -> Decimal:
    """Round a value half-up to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def fractional_digits(value: Decimal) -> int:
    """Return the number of significant fractional digits of a value."""
    normalized = value.normalize()
    exponent = normalized.as_tuple().exponent
    if not isinstance(exponent, int):
        return 0
    return max(0, -exponent)


def safe_divide(numerator: Decimal, denominator: Decimal | int) -> Decimal:
    """Divide two values, returning zero when the denominator is zero."""
    if not denominator:
        return ZERO
    return numerator / Decimal(denominator)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Return part/whole*100 rounded to two decimals, zero for an empty whole."""
    if whole == 0:
        return ZERO.quantize(CENT)
    return quantize_currency(part / whole * HUNDRED)


def allocate_percentages(parts: Mapping, whole: Decimal) -> dict:
    """Return each part's share of ``whole`` in percent, rounded to cents.

    Shares are rounded down and the leftover hundredths go to the largest
    remainders, so the shares add up to the rounded percentage of the
    combined parts (100.00 when the parts make up the whole). Each share is
    within one hundredth of its exact value.

    Args:
        parts: Amount per key.
        whole: Amount the shares are taken of.

    Returns:
        dict: Percentage per key, in the order of ``parts``.
    """
    if whole == 0:
        return {key: ZERO.quantize(CENT) for key in parts}
    exact = {key: coerce_decimal(part) / whole * HUNDRED for key, part in parts.items()}
    shares = {
        key: value.quantize(CENT, rounding=ROUND_DOWN) for key, value in exact.items()
    }
    target = quantize_currency(sum(exact.values(), ZERO))
    leftover = int((target - sum(shares.values(), ZERO)) / CENT)
    # Stable sort: equal remainders keep the order of ``parts``.
    ranked = sorted(exact, key=lambda key: exact[key] - shares[key], reverse=True)
    for key in ranked[:leftover]:
        shares[key] += CENT
    return shares


__all__ = [
    "CENT",
    "ZERO",
    "HUNDRED",
    "coerce_decimal",
    "quantize_currency",
    "fractional_digits",
    "safe_divide",
    "percentage",
    "allocate_percentages",
]
