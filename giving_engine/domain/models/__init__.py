"""Domain models package."""

from .access import AccessContext
from .categories import Category, CategoryDraft, CategoryStatistics
from .donations import ComplianceFields, Donation, DonationDraft
from .events import ChangeEvent
from .finance import (
    AnnualGivingStatement,
    BreakdownEntry,
    CategoryBreakdownEntry,
    DonationReceipt,
    DonorGivingSummary,
    DonorRangeBucket,
    FinancialSummary,
    GrowthComparison,
    LedgerStatistics,
    QuidProQuoDisclosure,
    ReportingPeriod,
    RestrictedFundDisclosure,
    SkippedRecord,
)

__all__ = [
    "AccessContext",
    "Category",
    "CategoryDraft",
    "CategoryStatistics",
    "ComplianceFields",
    "Donation",
    "DonationDraft",
    "ChangeEvent",
    "AnnualGivingStatement",
    "BreakdownEntry",
    "CategoryBreakdownEntry",
    "DonationReceipt",
    "DonorGivingSummary",
    "DonorRangeBucket",
    "FinancialSummary",
    "GrowthComparison",
    "LedgerStatistics",
    "QuidProQuoDisclosure",
    "ReportingPeriod",
    "RestrictedFundDisclosure",
    "SkippedRecord",
]
