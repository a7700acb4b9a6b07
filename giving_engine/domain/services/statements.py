"""Domain services assembling donor statements and receipts."""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
import re

from giving_engine.domain.constants import DonationStatus
from giving_engine.domain.errors import NotFoundError
from giving_engine.domain.models import (
    AnnualGivingStatement,
    Donation,
    DonationReceipt,
)
from giving_engine.domain.services.compliance import deductible_amount
from giving_engine.utils.decimal_utils import coerce_decimal, quantize_currency

UNCATEGORIZED = "Uncategorized"
_RECEIPT_NUMBER = re.compile(r"^R-(\d{4})-(\d{3,})$")


def _display_name(
    donation: Donation,
    category_names: Mapping[str, str] | None,
) -> str:
    if category_names and donation.category_id in category_names:
        return category_names[donation.category_id]
    return donation.category_name or UNCATEGORIZED


def build_annual_statement(
    donations: Iterable[Donation],
    donor_id: str,
    tax_year: int,
    *,
    generated_at: datetime,
    category_names: Mapping[str, str] | None = None,
) -> AnnualGivingStatement:
    """Assemble the year-end statement for a donor.

    Args:
        donations: Candidate donations; only the donor's verified donations
            of ``tax_year`` are included.
        donor_id: Donor the statement is issued to.
        tax_year: Statement year.
        generated_at: Time stamped on the statement.
        category_names: Current category names by id.

    Returns:
        AnnualGivingStatement: Totals, deductible totals and the category
        breakdown of the included donations.

    Raises:
        NotFoundError: If the donor has no verified donations that year.
    """
    included = sorted(
        (
            donation
            for donation in donations
            if donation.donor_id == donor_id
            and donation.tax_year == tax_year
            and donation.status == DonationStatus.VERIFIED
        ),
        key=lambda donation: (donation.donation_date, donation.id),
    )
    if not included:
        raise NotFoundError("Statement", f"{donor_id}/{tax_year}")

    total = Decimal("0.00")
    deductible = Decimal("0.00")
    by_category: dict[str, Decimal] = {}
    for donation in included:
        amount = quantize_currency(coerce_decimal(donation.amount))
        total += amount
        deductible += deductible_amount(donation)
        name = _display_name(donation, category_names)
        by_category[name] = by_category.get(name, Decimal("0.00")) + amount

    return AnnualGivingStatement(
        donor_id=donor_id,
        donor_name=included[-1].donor_name,
        tax_year=tax_year,
        period_start=date(tax_year, 1, 1),
        period_end=date(tax_year, 12, 31),
        donation_ids=[donation.id for donation in included],
        total_amount=total,
        total_deductible_amount=quantize_currency(deductible),
        donation_count=len(included),
        includes_quid_pro_quo=any(
            donation.compliance is not None and donation.compliance.is_quid_pro_quo
            for donation in included
        ),
        by_category=dict(sorted(by_category.items())),
        generated_at=generated_at,
    )


def next_receipt_number(existing: Iterable[str | None], tax_year: int) -> str:
    """Return the next ``R-<year>-<nnn>`` receipt number for a tax year.

    Numbers of other years and values in another format are ignored.
    """
    highest = 0
    for number in existing:
        match = _RECEIPT_NUMBER.match(number or "")
        if match and int(match.group(1)) == tax_year:
            highest = max(highest, int(match.group(2)))
    return f"R-{tax_year}-{highest + 1:03d}"


def build_donation_receipt(
    donation: Donation,
    receipt_number: str,
    *,
    generated_at: datetime,
    category_names: Mapping[str, str] | None = None,
) -> DonationReceipt:
    """Assemble receipt data for one donation."""
    compliance = donation.compliance
    method = donation.method
    return DonationReceipt(
        receipt_number=receipt_number,
        donation_id=donation.id,
        donor_id=donation.donor_id,
        donor_name=donation.donor_name,
        donation_amount=quantize_currency(coerce_decimal(donation.amount)),
        deductible_amount=deductible_amount(donation),
        donation_date=donation.donation_date,
        method=method.value if isinstance(method, Enum) else str(method),
        category_name=_display_name(donation, category_names),
        is_quid_pro_quo=bool(compliance and compliance.is_quid_pro_quo),
        quid_pro_quo_value=compliance.quid_pro_quo_value if compliance else None,
        generated_at=generated_at,
    )


__all__ = [
    "build_annual_statement",
    "build_donation_receipt",
    "next_receipt_number",
]
