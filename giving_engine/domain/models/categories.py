"""Domain models for donation categories."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from giving_engine.domain.constants import LineItem


@dataclass(frozen=True)
class CategoryStatistics:
    """Running totals for a category, maintained by the statistics updater.

    Attributes:
        total_amount: Sum of verified donation amounts.
        donation_count: Number of verified donations.
        average_donation: total_amount / donation_count rounded to cents.
        current_year_total: Verified total for the current tax year.
        last_year_total: Verified total for the previous tax year.
        last_donation_date: Most recent verified donation date.
        statistics_year: Calendar year the two year totals refer to; None
            while the category has no verified donations.
    """

    total_amount: Decimal = Decimal("0.00")
    donation_count: int = 0
    average_donation: Decimal = Decimal("0.00")
    current_year_total: Decimal = Decimal("0.00")
    last_year_total: Decimal = Decimal("0.00")
    last_donation_date: date | None = None
    statistics_year: int | None = None


@dataclass(frozen=True)
class CategoryDraft:
    """Administrator-supplied data for a new category."""

    name: str
    default_line_item: LineItem | str
    is_tax_deductible: bool
    display_order: int | None = None
    description: str | None = None
    annual_goal: Decimal | None = None
    include_in_reports: bool = True
    reporting_category: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Category:
    """A reporting bucket for donations."""

    id: str
    name: str
    default_line_item: LineItem | str
    is_tax_deductible: bool
    is_active: bool
    display_order: int
    statistics: CategoryStatistics = field(default_factory=CategoryStatistics)
    description: str | None = None
    annual_goal: Decimal | None = None
    include_in_reports: bool = True
    reporting_category: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["CategoryStatistics", "CategoryDraft", "Category"]
