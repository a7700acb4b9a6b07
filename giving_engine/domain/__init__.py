"""Domain package for business rules and core models."""

from .constants import (
    DonationMethod,
    DonationStatus,
    LineItem,
    RestrictionType,
    Role,
)
from .models import (
    AccessContext,
    Category,
    CategoryStatistics,
    ComplianceFields,
    Donation,
    FinancialSummary,
    ReportingPeriod,
)
from .services import (
    compute_financial_summary,
    sanitize_donations,
    sanitize_summary,
)

__all__ = [
    "DonationMethod",
    "DonationStatus",
    "LineItem",
    "RestrictionType",
    "Role",
    "AccessContext",
    "Category",
    "CategoryStatistics",
    "ComplianceFields",
    "Donation",
    "FinancialSummary",
    "ReportingPeriod",
    "compute_financial_summary",
    "sanitize_donations",
    "sanitize_summary",
]
