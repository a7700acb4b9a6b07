"""Domain models for ledger donations."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from giving_engine.domain.constants import (
    DonationMethod,
    DonationStatus,
    LineItem,
    RestrictionType,
)


@dataclass(frozen=True)
class ComplianceFields:
    """Form 990 compliance attributes attached to a donation.

    Attributes:
        line_item: Revenue line item; stored values outside the enumeration
            are kept as raw strings and reported under not-applicable.
        is_quid_pro_quo: Whether goods or services were given in return.
        quid_pro_quo_value: Value of the goods or services received.
        is_anonymous: Whether the donor asked to remain anonymous.
        restriction_type: Donor-imposed restriction on the gift.
        fair_market_value: Appraised value of a non-cash gift.
        donor_provided_value: Value claimed by the donor for a non-cash gift.
    """

    line_item: LineItem | str
    is_quid_pro_quo: bool = False
    quid_pro_quo_value: Decimal | None = None
    quid_pro_quo_description: str | None = None
    is_anonymous: bool = False
    restriction_type: RestrictionType = RestrictionType.UNRESTRICTED
    restriction_description: str | None = None
    fair_market_value: Decimal | None = None
    donor_provided_value: Decimal | None = None


@dataclass(frozen=True)
class DonationDraft:
    """Caller-supplied data for creating or editing a donation."""

    amount: Decimal
    donation_date: date
    method: DonationMethod | str
    category_id: str
    compliance: ComplianceFields | None
    donor_id: str | None = None
    donor_name: str | None = None
    note: str | None = None
    source_label: str | None = None
    receipt_number: str | None = None


@dataclass(frozen=True)
class Donation:
    """A ledger donation record.

    ``category_name`` is a display copy of the referenced category's name;
    reports re-resolve the name from category metadata.
    """

    id: str
    amount: Decimal
    donation_date: date
    method: DonationMethod | str
    category_id: str
    category_name: str
    compliance: ComplianceFields | None
    tax_year: int
    status: DonationStatus
    created_at: datetime
    updated_at: datetime
    donor_id: str | None = None
    donor_name: str | None = None
    is_tax_deductible: bool = True
    is_receipt_sent: bool = False
    receipt_sent_at: datetime | None = None
    receipt_number: str | None = None
    note: str | None = None
    source_label: str | None = None
    verified_at: datetime | None = None
    verified_by: str | None = None
    created_by: str | None = None
    updated_by: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return bool(self.compliance and self.compliance.is_anonymous)

    @property
    def counts_toward_totals(self) -> bool:
        """Return True when the donation contributes to statistics."""
        return self.status == DonationStatus.VERIFIED


__all__ = ["ComplianceFields", "DonationDraft", "Donation"]
