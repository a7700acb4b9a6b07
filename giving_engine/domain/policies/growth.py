"""Policy for period-over-period growth when the previous period is empty."""

from decimal import Decimal
from enum import Enum

from giving_engine.utils.decimal_utils import HUNDRED, quantize_currency


class ZeroGrowthPolicy(str, Enum):
    """How growth is reported when the previous value is zero.

    HUNDRED_PERCENT reports 100 when the current value is positive and 0
    otherwise. UNDEFINED reports no growth value at all.
    """

    HUNDRED_PERCENT = "hundred_percent"
    UNDEFINED = "undefined"


def compute_growth(
    current: Decimal,
    previous: Decimal,
    policy: ZeroGrowthPolicy = ZeroGrowthPolicy.HUNDRED_PERCENT,
) -> Decimal | None:
    """Return (current - previous) / previous * 100 rounded to cents.

    Args:
        current: Value for the current period.
        previous: Value for the comparison period.
        policy: Handling of a zero previous value.

    Returns:
        Decimal | None: Growth percentage, or None when undefined.
    """
    if previous == 0:
        if policy == ZeroGrowthPolicy.UNDEFINED:
            return None
        return Decimal("100.00") if current > 0 else Decimal("0.00")
    return quantize_currency((current - previous) / previous * HUNDRED)


__all__ = ["ZeroGrowthPolicy", "compute_growth"]
