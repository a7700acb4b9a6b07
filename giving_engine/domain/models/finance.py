"""Domain models for financial aggregates and disclosures."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class ReportingPeriod:
    """Inclusive date window for a report."""

    start: date
    end: date

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True)
class BreakdownEntry:
    """Amount, count and share of the period total for one group."""

    amount: Decimal
    count: int
    percentage: Decimal


@dataclass(frozen=True)
class CategoryBreakdownEntry(BreakdownEntry):
    """Breakdown entry for a category, with its re-resolved name."""

    category_name: str = ""
    goal_progress: Decimal | None = None


@dataclass(frozen=True)
class DonorRangeBucket:
    """Histogram bucket of per-donor period totals."""

    label: str
    count: int
    total_amount: Decimal


@dataclass(frozen=True)
class GrowthComparison:
    """Period-over-period growth percentages.

    A growth value is None when the previous value is zero and the growth
    policy leaves that case undefined.
    """

    previous_total: Decimal
    previous_count: int
    amount_growth: Decimal | None
    count_growth: Decimal | None
    average_growth: Decimal | None


@dataclass(frozen=True)
class SkippedRecord:
    """A donation excluded from a report because it was malformed."""

    record_id: str | None
    reason: str


@dataclass(frozen=True)
class FinancialSummary:
    """Point-in-time projection of verified donations over a period."""

    total_donations: Decimal
    donation_count: int
    average_donation: Decimal
    period_start: date
    period_end: date
    by_category: dict[str, CategoryBreakdownEntry]
    by_method: dict[str, BreakdownEntry]
    by_line_item: dict[str, BreakdownEntry]
    top_donor_ranges: list[DonorRangeBucket]
    growth: GrowthComparison | None = None
    skipped_records: list[SkippedRecord] = field(default_factory=list)

    @property
    def skipped_notice(self) -> str | None:
        """Return a user-facing notice when records were excluded."""
        if not self.skipped_records:
            return None
        count = len(self.skipped_records)
        noun = "record" if count == 1 else "records"
        return f"{count} {noun} skipped"


@dataclass(frozen=True)
class DonorGivingSummary:
    """Personal giving totals for a single donor."""

    donor_id: str
    total_amount: Decimal
    total_count: int
    ytd_amount: Decimal
    ytd_count: int
    tax_deductible_amount: Decimal
    average_donation: Decimal
    tax_year: int | None = None


@dataclass(frozen=True)
class LedgerStatistics:
    """Whole-ledger counts by status and method."""

    total_donations: int
    total_amount: Decimal
    average_donation: Decimal
    by_status: dict[str, int]
    by_method: dict[str, int]


@dataclass(frozen=True)
class QuidProQuoDisclosure:
    """Disclosure line for a donation partly exchanged for goods or services."""

    donation_id: str
    total_amount: Decimal
    quid_pro_quo_value: Decimal
    deductible_amount: Decimal
    description: str | None


@dataclass(frozen=True)
class RestrictedFundDisclosure:
    """Restricted donations for one category."""

    category_id: str
    category_name: str
    total_amount: Decimal
    by_restriction: dict[str, Decimal]
    donation_ids: list[str]


@dataclass(frozen=True)
class AnnualGivingStatement:
    """Year-end giving statement data for one donor.

    Attributes:
        donor_id: Donor the statement is issued to.
        donor_name: Name recorded on the donor's most recent donation.
        tax_year: Statement year.
        period_start: First day of the tax year.
        period_end: Last day of the tax year.
        donation_ids: Verified donations included, oldest first.
        total_amount: Sum of the included donations.
        total_deductible_amount: Sum of their deductible amounts.
        donation_count: Number of included donations.
        includes_quid_pro_quo: Whether any donation received goods or
            services in return.
        by_category: Amount per current category name.
        generated_at: Time the statement data was assembled.
    """

    donor_id: str
    donor_name: str | None
    tax_year: int
    period_start: date
    period_end: date
    donation_ids: list[str]
    total_amount: Decimal
    total_deductible_amount: Decimal
    donation_count: int
    includes_quid_pro_quo: bool
    by_category: dict[str, Decimal]
    generated_at: datetime


@dataclass(frozen=True)
class DonationReceipt:
    """Receipt data for a single verified donation."""

    receipt_number: str
    donation_id: str
    donor_id: str | None
    donor_name: str | None
    donation_amount: Decimal
    deductible_amount: Decimal
    donation_date: date
    method: str
    category_name: str
    is_quid_pro_quo: bool
    quid_pro_quo_value: Decimal | None
    generated_at: datetime


__all__ = [
    "ReportingPeriod",
    "BreakdownEntry",
    "CategoryBreakdownEntry",
    "DonorRangeBucket",
    "GrowthComparison",
    "SkippedRecord",
    "FinancialSummary",
    "DonorGivingSummary",
    "LedgerStatistics",
    "QuidProQuoDisclosure",
    "RestrictedFundDisclosure",
    "AnnualGivingStatement",
    "DonationReceipt",
]
