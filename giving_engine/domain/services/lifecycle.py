"""Donation lifecycle transitions.

States move ``pending -> verified -> (void | refunded)``. Each transition
returns a new Donation; records are never deleted.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from giving_engine.domain.constants import DonationStatus
from giving_engine.domain.errors import (
    DateValidationError,
    IdentityValidationError,
    LifecycleTransitionError,
)
from giving_engine.domain.models import Category, Donation, DonationDraft
from giving_engine.domain.services.normalization import normalize_method
from giving_engine.utils.decimal_utils import quantize_currency

ALLOWED_TRANSITIONS = {
    DonationStatus.PENDING: frozenset({DonationStatus.VERIFIED}),
    DonationStatus.VERIFIED: frozenset(
        {DonationStatus.VOID, DonationStatus.REFUNDED}
    ),
    DonationStatus.VOID: frozenset(),
    DonationStatus.REFUNDED: frozenset(),
}


def new_pending_donation(
    draft: DonationDraft,
    *,
    donation_id: str,
    amount: Decimal,
    category: Category,
    now: datetime,
    created_by: str | None = None,
) -> Donation:
    """Build a pending donation from a validated draft.

    Args:
        draft: Validated donation data.
        donation_id: Identifier assigned to the new record.
        amount: Validated amount.
        category: Referenced category; its name and deductibility are copied.
        now: Creation timestamp.
        created_by: Administrator recording the donation.

    Returns:
        Donation: The new pending record.
    """
    return Donation(
        id=donation_id,
        amount=quantize_currency(amount),
        donation_date=draft.donation_date,
        method=normalize_method(draft.method),
        category_id=category.id,
        category_name=category.name,
        compliance=draft.compliance,
        tax_year=draft.donation_date.year,
        status=DonationStatus.PENDING,
        created_at=now,
        updated_at=now,
        donor_id=draft.donor_id,
        donor_name=draft.donor_name,
        is_tax_deductible=category.is_tax_deductible,
        is_receipt_sent=False,
        receipt_number=draft.receipt_number,
        note=draft.note,
        source_label=draft.source_label,
        created_by=created_by,
    )


def apply_edit(
    donation: Donation,
    draft: DonationDraft,
    *,
    amount: Decimal,
    category: Category,
    now: datetime,
    updated_by: str | None = None,
) -> Donation:
    """Apply validated edits to a pending donation.

    Raises:
        LifecycleTransitionError: If the donation is no longer pending.
        DateValidationError: If the edit would move the donation to another
            tax year.
    """
    if donation.status != DonationStatus.PENDING:
        raise LifecycleTransitionError(
            f"Donation {donation.id} is {donation.status.value} and can no "
            "longer be edited",
            current_status=donation.status.value,
            target_status=DonationStatus.PENDING.value,
        )
    if draft.donation_date.year != donation.tax_year:
        raise DateValidationError(
            f"Tax year {donation.tax_year} is fixed for donation {donation.id}",
            field="donation_date",
        )
    return replace(
        donation,
        amount=quantize_currency(amount),
        donation_date=draft.donation_date,
        method=normalize_method(draft.method),
        category_id=category.id,
        category_name=category.name,
        compliance=draft.compliance,
        donor_id=draft.donor_id,
        donor_name=draft.donor_name,
        is_tax_deductible=category.is_tax_deductible,
        receipt_number=draft.receipt_number,
        note=draft.note,
        source_label=draft.source_label,
        updated_at=now,
        updated_by=updated_by,
    )


def transition(
    donation: Donation,
    target: DonationStatus,
    *,
    now: datetime,
    actor: str | None = None,
) -> Donation:
    """Move a donation to a new lifecycle state.

    Args:
        donation: Current record.
        target: Requested status.
        now: Timestamp of the transition.
        actor: Administrator performing the transition; required to verify.

    Returns:
        Donation: The record in its new state.

    Raises:
        LifecycleTransitionError: If the transition is not allowed.
        IdentityValidationError: If verification has no verifier.
    """
    allowed = ALLOWED_TRANSITIONS.get(donation.status, frozenset())
    if target not in allowed:
        raise LifecycleTransitionError(
            f"Cannot move donation {donation.id} from "
            f"{donation.status.value} to {target.value}",
            current_status=donation.status.value,
            target_status=target.value,
        )
    if target == DonationStatus.VERIFIED:
        if not actor or not actor.strip():
            raise IdentityValidationError(
                "verified_by is required to verify a donation",
                field="verified_by",
            )
        return replace(
            donation,
            status=target,
            verified_by=actor,
            verified_at=now,
            updated_at=now,
            updated_by=actor,
        )
    return replace(donation, status=target, updated_at=now, updated_by=actor)


def mark_receipt_sent(
    donation: Donation,
    *,
    now: datetime,
    receipt_number: str | None = None,
) -> Donation:
    """Record that a tax receipt was sent for the donation."""
    return replace(
        donation,
        is_receipt_sent=True,
        receipt_sent_at=now,
        receipt_number=receipt_number or donation.receipt_number,
        updated_at=now,
    )


__all__ = [
    "ALLOWED_TRANSITIONS",
    "new_pending_donation",
    "apply_edit",
    "transition",
    "mark_receipt_sent",
]
