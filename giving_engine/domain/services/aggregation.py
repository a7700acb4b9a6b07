"""Domain services for donation aggregates.

All functions here are pure: they read the donations and metadata they are
given and can be called concurrently on snapshots.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from logging import Logger

from giving_engine.domain.constants import (
    DONOR_RANGE_BUCKETS,
    DonationMethod,
    DonationStatus,
)
from giving_engine.domain.errors import DataIntegrityError
from giving_engine.domain.models import (
    BreakdownEntry,
    Category,
    CategoryBreakdownEntry,
    Donation,
    DonorGivingSummary,
    DonorRangeBucket,
    FinancialSummary,
    GrowthComparison,
    LedgerStatistics,
    ReportingPeriod,
    SkippedRecord,
)
from giving_engine.domain.policies import ZeroGrowthPolicy, compute_growth
from giving_engine.domain.services.compliance import (
    deductible_amount,
    resolve_line_item,
)
from giving_engine.domain.services.normalization import (
    normalize_method,
    normalize_status,
)
from giving_engine.utils.decimal_utils import (
    allocate_percentages,
    coerce_decimal,
    percentage,
    quantize_currency,
    safe_divide,
)


def check_record_integrity(donation: Donation) -> Decimal:
    """Return the donation amount, or raise when the record is malformed.

    Args:
        donation: Record read from the ledger.

    Returns:
        Decimal: Amount quantized to cents.

    Raises:
        DataIntegrityError: If the amount, category or compliance fields
            are unusable.
    """
    record_id = getattr(donation, "id", None)
    try:
        amount = coerce_decimal(donation.amount)
    except (InvalidOperation, ValueError, TypeError):
        raise DataIntegrityError(record_id, "amount is not a number")
    if not amount.is_finite() or amount <= 0:
        raise DataIntegrityError(record_id, "amount must be positive")
    if not donation.category_id:
        raise DataIntegrityError(record_id, "missing category reference")
    if donation.compliance is None:
        raise DataIntegrityError(record_id, "missing compliance fields")
    return quantize_currency(amount)


def compute_financial_summary(
    donations: Iterable[Donation],
    period: ReportingPeriod,
    *,
    categories: Mapping[str, Category] | None = None,
    previous: FinancialSummary | None = None,
    growth_policy: ZeroGrowthPolicy = ZeroGrowthPolicy.HUNDRED_PERCENT,
    logger: Logger | None = None,
) -> FinancialSummary:
    """Compute a financial summary over verified donations in a period.

    Args:
        donations: Candidate donations; unverified ones are ignored.
        period: Inclusive reporting window.
        categories: Category metadata by id; names are re-resolved here
            rather than read from the donations' display copies.
        previous: Summary of the comparison period, if any.
        growth_policy: Handling of a zero previous total.
        logger: Logger used for skipped-record warnings.

    Returns:
        FinancialSummary: Totals, breakdowns and donor histogram. Malformed
        records are excluded and listed in ``skipped_records``.
    """
    categories = categories or {}
    skipped: list[SkippedRecord] = []
    included: list[tuple[Donation, Decimal]] = []

    for donation in donations:
        if normalize_status(donation.status) != DonationStatus.VERIFIED:
            continue
        record_id = getattr(donation, "id", None)
        donation_date = donation.donation_date
        if not isinstance(donation_date, date):
            skipped.append(SkippedRecord(record_id, "missing donation date"))
            continue
        if isinstance(donation_date, datetime):
            # datetime subclasses date but cannot be compared with one.
            skipped.append(
                SkippedRecord(record_id, "donation date carries a time of day")
            )
            continue
        if not period.contains(donation_date):
            continue
        try:
            amount = check_record_integrity(donation)
        except DataIntegrityError as exc:
            skipped.append(SkippedRecord(exc.record_id, exc.reason))
            continue
        included.append((donation, amount))

    if skipped and logger is not None:
        logger.warning(
            f"Skipped {len(skipped)} malformed donations for period "
            f"{period.start} to {period.end}"
        )

    total = Decimal("0.00")
    category_totals: dict[str, list] = {}
    method_totals: dict[str, list] = {}
    line_item_totals: dict[str, list] = {}
    donor_totals: dict[str, Decimal] = {}

    for donation, amount in included:
        total += amount
        _accumulate(category_totals, donation.category_id, amount)
        method = normalize_method(donation.method) or DonationMethod.OTHER
        _accumulate(method_totals, method.value, amount)
        line_item = resolve_line_item(
            donation, categories.get(donation.category_id)
        )
        _accumulate(line_item_totals, line_item.value, amount)
        if donation.donor_id and not donation.is_anonymous:
            donor_totals[donation.donor_id] = (
                donor_totals.get(donation.donor_id, Decimal("0.00")) + amount
            )

    count = len(included)
    average = quantize_currency(safe_divide(total, count))

    by_category: dict[str, CategoryBreakdownEntry] = {}
    shares = allocate_percentages(
        {key: amount for key, (amount, _) in category_totals.items()}, total
    )
    for category_id, (amount, group_count) in sorted(category_totals.items()):
        category = categories.get(category_id)
        name = category.name if category else _fallback_name(included, category_id)
        goal_progress = None
        if category is not None and category.annual_goal:
            goal_progress = percentage(amount, coerce_decimal(category.annual_goal))
        by_category[category_id] = CategoryBreakdownEntry(
            amount=amount,
            count=group_count,
            percentage=shares[category_id],
            category_name=name,
            goal_progress=goal_progress,
        )

    summary_growth = None
    if previous is not None:
        summary_growth = GrowthComparison(
            previous_total=previous.total_donations,
            previous_count=previous.donation_count,
            amount_growth=compute_growth(
                total, previous.total_donations, growth_policy
            ),
            count_growth=compute_growth(
                Decimal(count), Decimal(previous.donation_count), growth_policy
            ),
            average_growth=compute_growth(
                average, previous.average_donation, growth_policy
            ),
        )

    return FinancialSummary(
        total_donations=total,
        donation_count=count,
        average_donation=average,
        period_start=period.start,
        period_end=period.end,
        by_category=by_category,
        by_method=_entries(method_totals, total),
        by_line_item=_entries(line_item_totals, total),
        top_donor_ranges=bucket_donor_totals(donor_totals.values()),
        growth=summary_growth,
        skipped_records=skipped,
    )


def bucket_donor_totals(totals: Iterable[Decimal]) -> list[DonorRangeBucket]:
    """Build the ordered donor-range histogram from per-donor totals."""
    counts = [0] * len(DONOR_RANGE_BUCKETS)
    sums = [Decimal("0.00")] * len(DONOR_RANGE_BUCKETS)
    for amount in totals:
        for index, (_, lower, upper) in enumerate(DONOR_RANGE_BUCKETS):
            if amount >= lower and (upper is None or amount < upper):
                counts[index] += 1
                sums[index] += amount
                break
    return [
        DonorRangeBucket(label=label, count=counts[index], total_amount=sums[index])
        for index, (label, _, _) in enumerate(DONOR_RANGE_BUCKETS)
    ]


def compute_donor_giving_summary(
    donations: Iterable[Donation],
    donor_id: str,
    today: date,
    tax_year: int | None = None,
) -> DonorGivingSummary:
    """Compute a donor's personal giving totals.

    Only the donor's verified donations count; ``tax_year`` narrows the
    totals to one year.
    """
    total = Decimal("0.00")
    count = 0
    ytd_amount = Decimal("0.00")
    ytd_count = 0
    deductible = Decimal("0.00")
    for donation in donations:
        if donation.donor_id != donor_id or not donation.counts_toward_totals:
            continue
        if tax_year is not None and donation.tax_year != tax_year:
            continue
        amount = quantize_currency(coerce_decimal(donation.amount))
        total += amount
        count += 1
        if donation.donation_date.year == today.year:
            ytd_amount += amount
            ytd_count += 1
        deductible += deductible_amount(donation)
    return DonorGivingSummary(
        donor_id=donor_id,
        total_amount=total,
        total_count=count,
        ytd_amount=ytd_amount,
        ytd_count=ytd_count,
        tax_deductible_amount=deductible,
        average_donation=quantize_currency(safe_divide(total, count)),
        tax_year=tax_year,
    )


def compute_ledger_statistics(donations: Iterable[Donation]) -> LedgerStatistics:
    """Count every ledger donation by status and method."""
    total = Decimal("0.00")
    count = 0
    by_status: dict[str, int] = {}
    by_method: dict[str, int] = {}
    for donation in donations:
        try:
            amount = quantize_currency(coerce_decimal(donation.amount))
        except (InvalidOperation, ValueError, TypeError):
            continue
        status = normalize_status(donation.status)
        method = normalize_method(donation.method) or DonationMethod.OTHER
        status_key = status.value if status else "unknown"
        by_status[status_key] = by_status.get(status_key, 0) + 1
        by_method[method.value] = by_method.get(method.value, 0) + 1
        total += amount
        count += 1
    return LedgerStatistics(
        total_donations=count,
        total_amount=total,
        average_donation=quantize_currency(safe_divide(total, count)),
        by_status=dict(sorted(by_status.items())),
        by_method=dict(sorted(by_method.items())),
    )


def _accumulate(groups: dict[str, list], key: str, amount: Decimal) -> None:
    entry = groups.setdefault(key, [Decimal("0.00"), 0])
    entry[0] += amount
    entry[1] += 1


def _entries(groups: dict[str, list], total: Decimal) -> dict[str, BreakdownEntry]:
    shares = allocate_percentages(
        {key: amount for key, (amount, _) in groups.items()}, total
    )
    return {
        key: BreakdownEntry(
            amount=amount,
            count=count,
            percentage=shares[key],
        )
        for key, (amount, count) in sorted(groups.items())
    }


def _fallback_name(
    included: list[tuple[Donation, Decimal]],
    category_id: str,
) -> str:
    for donation, _ in included:
        if donation.category_id == category_id and donation.category_name:
            return donation.category_name
    return category_id


__all__ = [
    "check_record_integrity",
    "compute_financial_summary",
    "bucket_donor_totals",
    "compute_donor_giving_summary",
    "compute_ledger_statistics",
]
