"""Pure computations for category running statistics.

Incremental adjustments and full recomputation share ``_finalize`` so both
paths round the same way and produce identical values for the same set of
verified donations. Year totals are anchored to ``statistics_year`` and
rolled forward before any adjustment made in a later year.
"""

from collections.abc import Iterable
from dataclasses import fields, replace
from datetime import date
from decimal import Decimal

from giving_engine.domain.models import CategoryStatistics, Donation
from giving_engine.utils.decimal_utils import (
    CENT,
    coerce_decimal,
    quantize_currency,
    safe_divide,
)

ZERO = Decimal("0.00")


def _finalize(
    total_amount: Decimal,
    donation_count: int,
    current_year_total: Decimal,
    last_year_total: Decimal,
    last_donation_date: date | None,
    statistics_year: int,
) -> CategoryStatistics:
    total_amount = quantize_currency(total_amount)
    if donation_count <= 0:
        return CategoryStatistics()
    return CategoryStatistics(
        total_amount=total_amount,
        donation_count=donation_count,
        average_donation=quantize_currency(
            safe_divide(total_amount, donation_count)
        ),
        current_year_total=quantize_currency(current_year_total),
        last_year_total=quantize_currency(last_year_total),
        last_donation_date=last_donation_date,
        statistics_year=statistics_year,
    )


def roll_forward(stats: CategoryStatistics, current_year: int) -> CategoryStatistics:
    """Re-anchor the year totals of ``stats`` to ``current_year``.

    One year later the current total becomes last year's total; two or more
    years later both totals are zero. Statistics without an anchor, or
    anchored to a later year, are returned unchanged.

    Args:
        stats: Stored running statistics.
        current_year: Calendar year treated as the current tax year.

    Returns:
        CategoryStatistics: Statistics whose year totals refer to
        ``current_year``.
    """
    anchor = stats.statistics_year
    if anchor is None:
        if stats.donation_count == 0:
            return stats
        return replace(stats, statistics_year=current_year)
    if anchor >= current_year:
        return stats
    if current_year - anchor == 1:
        return replace(
            stats,
            current_year_total=ZERO,
            last_year_total=stats.current_year_total,
            statistics_year=current_year,
        )
    return replace(
        stats,
        current_year_total=ZERO,
        last_year_total=ZERO,
        statistics_year=current_year,
    )


def _year_totals(
    stats: CategoryStatistics,
    year: int,
    donation: Donation,
    amount: Decimal,
) -> tuple[Decimal, Decimal]:
    current_year_total = stats.current_year_total
    last_year_total = stats.last_year_total
    if donation.tax_year == year:
        current_year_total += amount
    elif donation.tax_year == year - 1:
        last_year_total += amount
    return current_year_total, last_year_total


def add_contribution(
    stats: CategoryStatistics,
    donation: Donation,
    current_year: int,
) -> CategoryStatistics:
    """Return statistics with a verified donation added.

    Args:
        stats: Current running statistics.
        donation: Newly verified donation.
        current_year: Calendar year treated as the current tax year.

    Returns:
        CategoryStatistics: Updated statistics.
    """
    stats = roll_forward(stats, current_year)
    year = stats.statistics_year or current_year
    amount = quantize_currency(coerce_decimal(donation.amount))
    current_year_total, last_year_total = _year_totals(stats, year, donation, amount)
    last_date = stats.last_donation_date
    if last_date is None or donation.donation_date > last_date:
        last_date = donation.donation_date
    return _finalize(
        stats.total_amount + amount,
        stats.donation_count + 1,
        current_year_total,
        last_year_total,
        last_date,
        year,
    )


def remove_contribution(
    stats: CategoryStatistics,
    donation: Donation,
    current_year: int,
    remaining_last_date: date | None,
) -> CategoryStatistics:
    """Return statistics with a previously verified donation reversed.

    Args:
        stats: Current running statistics.
        donation: Donation being voided or refunded.
        current_year: Calendar year treated as the current tax year.
        remaining_last_date: Latest date among the donations that still
            contribute; used when the removed donation held the latest date.

    Returns:
        CategoryStatistics: Updated statistics, recomputed from totals.
    """
    stats = roll_forward(stats, current_year)
    year = stats.statistics_year or current_year
    amount = quantize_currency(coerce_decimal(donation.amount))
    current_year_total, last_year_total = _year_totals(stats, year, donation, -amount)
    last_date = stats.last_donation_date
    if last_date is not None and donation.donation_date >= last_date:
        last_date = remaining_last_date
    return _finalize(
        stats.total_amount - amount,
        stats.donation_count - 1,
        current_year_total,
        last_year_total,
        last_date,
        year,
    )


def compute_statistics(
    donations: Iterable[Donation],
    current_year: int,
) -> CategoryStatistics:
    """Recompute statistics from the authoritative set of donations.

    Only verified donations are counted.
    """
    total = ZERO
    count = 0
    current_year_total = ZERO
    last_year_total = ZERO
    last_date: date | None = None
    for donation in donations:
        if not donation.counts_toward_totals:
            continue
        amount = quantize_currency(coerce_decimal(donation.amount))
        total += amount
        count += 1
        if donation.tax_year == current_year:
            current_year_total += amount
        elif donation.tax_year == current_year - 1:
            last_year_total += amount
        if last_date is None or donation.donation_date > last_date:
            last_date = donation.donation_date
    return _finalize(
        total, count, current_year_total, last_year_total, last_date, current_year
    )


def statistics_differences(
    stored: CategoryStatistics,
    expected: CategoryStatistics,
) -> dict[str, tuple]:
    """Return fields whose stored value drifted from the expected value.

    Currency fields within one cent are treated as equal.
    """
    differences: dict[str, tuple] = {}
    for item in fields(CategoryStatistics):
        left = getattr(stored, item.name)
        right = getattr(expected, item.name)
        if isinstance(left, Decimal) and isinstance(right, Decimal):
            if abs(left - right) > CENT:
                differences[item.name] = (left, right)
        elif left != right:
            differences[item.name] = (left, right)
    return differences


def average_is_consistent(stats: CategoryStatistics) -> bool:
    """Check that average * count matches the total within rounding."""
    if stats.donation_count == 0:
        return stats.total_amount == 0 and stats.average_donation == 0
    drift = abs(stats.average_donation * stats.donation_count - stats.total_amount)
    # Rounding the average to cents moves each of the count shares by at
    # most half a cent.
    return drift <= CENT / 2 * stats.donation_count + CENT


__all__ = [
    "roll_forward",
    "add_contribution",
    "remove_contribution",
    "compute_statistics",
    "statistics_differences",
    "average_is_consistent",
]
