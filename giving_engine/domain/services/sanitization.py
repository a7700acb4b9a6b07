"""Role-based projections of donations and summaries.

Sanitized records are dictionaries built only from the fields a role may
see. Disallowed keys are never emitted, so a viewer cannot tell a donor
field that is absent because the gift was anonymous from one that was
redacted.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from giving_engine.domain.constants import DONOR_IDENTITY_FIELDS, Role
from giving_engine.domain.errors import AccessError
from giving_engine.domain.models import (
    AccessContext,
    AnnualGivingStatement,
    Donation,
    DonationReceipt,
    DonorGivingSummary,
    FinancialSummary,
)
from giving_engine.domain.services.compliance import (
    deductible_amount,
    resolve_line_item,
)

DONATION_FIELDS = (
    "id",
    "donation_date",
    "amount",
    "deductible_amount",
    "method",
    "category_id",
    "category_name",
    "line_item",
    "is_quid_pro_quo",
    "quid_pro_quo_value",
    "quid_pro_quo_description",
    "is_anonymous",
    "restriction_type",
    "restriction_description",
    "fair_market_value",
    "donor_provided_value",
    "donor_id",
    "donor_name",
    "tax_year",
    "status",
    "is_tax_deductible",
    "is_receipt_sent",
    "receipt_number",
    "note",
    "source_label",
    "created_at",
    "updated_at",
    "verified_at",
    "verified_by",
)


@dataclass(frozen=True)
class ExportFieldPolicy:
    """Closed set of donation fields each role may observe or export."""

    fields_by_role: Mapping[Role, tuple[str, ...]]

    def fields_for(self, role: Role) -> tuple[str, ...]:
        """Return the allowed fields for a role, empty when unknown."""
        return tuple(self.fields_by_role.get(role, ()))


def validate_export_policy(policy: ExportFieldPolicy) -> None:
    """Check that an export policy respects the access boundaries.

    Raises:
        ValueError: If a field is unknown, aggregate access can see donor
            identity, or full access is not a superset of the other roles.
    """
    full = set(policy.fields_for(Role.FULL_ACCESS))
    for role in Role:
        allowed = policy.fields_for(role)
        if not allowed:
            raise ValueError(f"No export fields configured for {role.value}")
        unknown = set(allowed) - set(DONATION_FIELDS)
        if unknown:
            raise ValueError(
                f"Unknown export fields for {role.value}: {sorted(unknown)}"
            )
        if not set(allowed) <= full:
            raise ValueError(
                f"Full access must include every {role.value} field"
            )
    leaked = set(policy.fields_for(Role.AGGREGATE_ACCESS)) & set(
        DONOR_IDENTITY_FIELDS
    )
    if leaked:
        raise ValueError(
            f"Aggregate access must not include donor identity: {sorted(leaked)}"
        )


def require_subject_access(
    context: AccessContext,
    requested_subject_id: str | None,
) -> str | None:
    """Resolve the subject a request may read, failing closed.

    Args:
        context: Role and subject of the requester.
        requested_subject_id: Donor the caller asks about, if any.

    Returns:
        str | None: The donor id the request is scoped to, None for
        organization-wide requests.

    Raises:
        AccessError: If a self-access requester has no subject or asks for
            another donor, or the role is not recognized.
    """
    if context.role == Role.FULL_ACCESS:
        return requested_subject_id
    if context.role == Role.AGGREGATE_ACCESS:
        if requested_subject_id is not None:
            raise AccessError(
                "Aggregate access cannot request an individual donor",
                role=context.role.value,
                subject_id=requested_subject_id,
            )
        return None
    if context.role == Role.SELF_ACCESS:
        if not context.subject_id:
            raise AccessError(
                "Self access requires an authenticated subject",
                role=context.role.value,
                subject_id=requested_subject_id,
            )
        if requested_subject_id is not None and requested_subject_id != context.subject_id:
            raise AccessError(
                "Donors may only access their own donation data",
                role=context.role.value,
                subject_id=requested_subject_id,
            )
        return context.subject_id
    raise AccessError(
        f"Unknown role: {context.role}",
        role=str(context.role),
        subject_id=requested_subject_id,
    )


def donation_to_record(donation: Donation) -> dict[str, object]:
    """Flatten a donation into a record keyed by export field names."""
    compliance = donation.compliance
    return {
        "id": donation.id,
        "donation_date": donation.donation_date,
        "amount": donation.amount,
        "deductible_amount": deductible_amount(donation),
        "method": _plain(donation.method),
        "category_id": donation.category_id,
        "category_name": donation.category_name,
        "line_item": resolve_line_item(donation).value,
        "is_quid_pro_quo": bool(compliance and compliance.is_quid_pro_quo),
        "quid_pro_quo_value": compliance.quid_pro_quo_value if compliance else None,
        "quid_pro_quo_description": (
            compliance.quid_pro_quo_description if compliance else None
        ),
        "is_anonymous": donation.is_anonymous,
        "restriction_type": _plain(compliance.restriction_type) if compliance else None,
        "restriction_description": (
            compliance.restriction_description if compliance else None
        ),
        "fair_market_value": compliance.fair_market_value if compliance else None,
        "donor_provided_value": (
            compliance.donor_provided_value if compliance else None
        ),
        "donor_id": donation.donor_id,
        "donor_name": donation.donor_name,
        "tax_year": donation.tax_year,
        "status": _plain(donation.status),
        "is_tax_deductible": donation.is_tax_deductible,
        "is_receipt_sent": donation.is_receipt_sent,
        "receipt_number": donation.receipt_number,
        "note": donation.note,
        "source_label": donation.source_label,
        "created_at": donation.created_at,
        "updated_at": donation.updated_at,
        "verified_at": donation.verified_at,
        "verified_by": donation.verified_by,
    }


def sanitize_donations(
    context: AccessContext,
    donations: Iterable[Donation],
    policy: ExportFieldPolicy,
    requested_subject_id: str | None = None,
    category_names: Mapping[str, str] | None = None,
) -> list[dict[str, object]]:
    """Project donations into the fields the requester may observe.

    Args:
        context: Role and subject of the requester.
        donations: Donations to project.
        policy: Export field whitelist.
        requested_subject_id: Donor the request is scoped to, if any.
        category_names: Current category names by id; replaces the
            denormalized names in the output.

    Returns:
        list[dict[str, object]]: One record per donation.

    Raises:
        AccessError: If a self-access request reaches another donor's data.
    """
    subject_id = require_subject_access(context, requested_subject_id)
    allowed = policy.fields_for(context.role)
    records = []
    for donation in donations:
        if context.role == Role.SELF_ACCESS and donation.donor_id != subject_id:
            raise AccessError(
                "Donation list contains records of another donor",
                role=context.role.value,
                subject_id=subject_id,
            )
        if (
            context.role == Role.FULL_ACCESS
            and subject_id is not None
            and donation.donor_id != subject_id
        ):
            continue
        source = donation_to_record(donation)
        if category_names and donation.category_id in category_names:
            source["category_name"] = category_names[donation.category_id]
        hide_identity = context.role != Role.FULL_ACCESS and donation.is_anonymous
        records.append(
            {
                key: source[key]
                for key in allowed
                if not (hide_identity and key in DONOR_IDENTITY_FIELDS)
            }
        )
    return records


def sanitize_summary(
    context: AccessContext,
    summary: FinancialSummary,
    requested_subject_id: str | None = None,
) -> dict[str, object]:
    """Project an organization-wide summary for the requester.

    Raises:
        AccessError: For self-access requesters, who may only see their own
            personal summary.
    """
    if context.role == Role.SELF_ACCESS:
        raise AccessError(
            "Organization-wide summaries are not available to donors",
            role=context.role.value,
            subject_id=requested_subject_id or context.subject_id,
        )
    require_subject_access(context, requested_subject_id)
    return summary_to_record(summary)


def sanitize_donor_summary(
    context: AccessContext,
    summary: DonorGivingSummary,
) -> dict[str, object]:
    """Project a donor's personal summary for the requester.

    Raises:
        AccessError: For aggregate access, or self access to another donor.
    """
    if context.role == Role.AGGREGATE_ACCESS:
        raise AccessError(
            "Aggregate access cannot view individual donor summaries",
            role=context.role.value,
            subject_id=summary.donor_id,
        )
    require_subject_access(context, summary.donor_id)
    return _to_plain(asdict(summary))


def sanitize_donor_document(
    context: AccessContext,
    document: AnnualGivingStatement | DonationReceipt,
) -> dict[str, object]:
    """Project a donor's statement or receipt for the requester.

    Documents are personal: full access sees every document, self access
    only documents issued to the subject, and aggregate access none.

    Raises:
        AccessError: For aggregate access, or self access to a document of
            another donor or of an anonymous donation.
    """
    if context.role == Role.AGGREGATE_ACCESS:
        raise AccessError(
            "Aggregate access cannot view donor statements or receipts",
            role=context.role.value,
            subject_id=document.donor_id,
        )
    subject_id = require_subject_access(context, document.donor_id)
    if context.role == Role.SELF_ACCESS and document.donor_id != subject_id:
        raise AccessError(
            "Donors may only access their own statements and receipts",
            role=context.role.value,
            subject_id=subject_id,
        )
    return _to_plain(asdict(document))


def summary_to_record(summary: FinancialSummary) -> dict[str, object]:
    """Convert a financial summary into plain nested dictionaries."""
    record = _to_plain(asdict(summary))
    record["skipped_notice"] = summary.skipped_notice
    return record


def export_fields(role: Role, policy: ExportFieldPolicy) -> tuple[str, ...]:
    """Return the closed list of export columns for a role."""
    return policy.fields_for(role)


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    return value


def _to_plain(value):
    if isinstance(value, dict):
        return {_plain(key): _to_plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    if isinstance(value, (Decimal, date, datetime)) or value is None:
        return value
    return _plain(value)


__all__ = [
    "DONATION_FIELDS",
    "ExportFieldPolicy",
    "validate_export_policy",
    "require_subject_access",
    "donation_to_record",
    "sanitize_donations",
    "sanitize_summary",
    "sanitize_donor_summary",
    "sanitize_donor_document",
    "summary_to_record",
    "export_fields",
]
