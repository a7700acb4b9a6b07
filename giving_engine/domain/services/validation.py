"""Validation rules for donation and category input."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from giving_engine.domain.constants import (
    DEFAULT_MAX_DONATION_AMOUNT,
    MAX_CATEGORY_NAME_LENGTH,
)
from giving_engine.domain.errors import (
    AmountValidationError,
    CategoryValidationError,
    DateValidationError,
    IdentityValidationError,
    TaxonomyValidationError,
)
from giving_engine.domain.models import CategoryDraft, ComplianceFields, DonationDraft
from giving_engine.domain.policies import is_valid_category_name
from giving_engine.domain.services.compliance import validate_category_compliance
from giving_engine.domain.services.normalization import (
    normalize_line_item,
    normalize_method,
    normalize_restriction,
)
from giving_engine.utils.decimal_utils import coerce_decimal, fractional_digits


def validate_currency_value(
    value,
    field: str,
    *,
    allow_zero: bool = False,
    maximum: Decimal | None = None,
) -> Decimal:
    """Validate a currency value and return it as a Decimal.

    Args:
        value: Raw value supplied by the caller.
        field: Name of the field, reported on failure.
        allow_zero: Whether zero is accepted.
        maximum: Optional inclusive ceiling.

    Returns:
        Decimal: The validated value.

    Raises:
        AmountValidationError: If the value is missing, not numeric,
            non-positive, has more than two decimals or exceeds the ceiling.
    """
    if value is None:
        raise AmountValidationError(f"{field} is required", field=field)
    try:
        amount = coerce_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise AmountValidationError(f"{field} must be a number", field=field)
    if not amount.is_finite():
        raise AmountValidationError(f"{field} must be a number", field=field)
    if amount < 0 or (amount == 0 and not allow_zero):
        raise AmountValidationError(
            f"{field} must be greater than 0", field=field
        )
    if fractional_digits(amount) > 2:
        raise AmountValidationError(
            f"{field} must have at most 2 decimal places", field=field
        )
    if maximum is not None and amount > maximum:
        raise AmountValidationError(
            f"{field} must not exceed {maximum}", field=field
        )
    return amount


def validate_donation_date(value, today: date) -> date:
    """Ensure a donation date is a calendar date not in the future."""
    if isinstance(value, datetime) or not isinstance(value, date):
        raise DateValidationError(
            "Donation date must be a calendar date", field="donation_date"
        )
    if value > today:
        raise DateValidationError(
            "Donation date cannot be in the future", field="donation_date"
        )
    return value


def validate_compliance_fields(
    compliance: ComplianceFields | None,
    amount: Decimal,
) -> None:
    """Check Form 990 fields, including quid pro quo semantics."""
    if compliance is None:
        raise TaxonomyValidationError(
            "Form 990 fields are required", field="compliance"
        )
    if normalize_line_item(compliance.line_item) is None:
        raise TaxonomyValidationError(
            f"Invalid Form 990 line item: {compliance.line_item}",
            field="line_item",
        )
    if normalize_restriction(compliance.restriction_type) is None:
        raise TaxonomyValidationError(
            f"Invalid restriction type: {compliance.restriction_type}",
            field="restriction_type",
        )
    if compliance.is_quid_pro_quo:
        value = validate_currency_value(
            compliance.quid_pro_quo_value,
            "quid_pro_quo_value",
            allow_zero=True,
        )
        if value >= amount:
            raise AmountValidationError(
                "Quid pro quo value must be less than the donation amount",
                field="quid_pro_quo_value",
            )
    for field in ("fair_market_value", "donor_provided_value"):
        raw = getattr(compliance, field)
        if raw is not None:
            validate_currency_value(raw, field, allow_zero=True)


def validate_donor_identity(
    donor_id: str | None,
    donor_name: str | None,
    is_anonymous: bool,
) -> None:
    """Check that donor identity agrees with the anonymity flag.

    Anonymous donations must carry no donor identity at all; a blank string
    is rejected as well. Other donations must name a donor.
    """
    if is_anonymous:
        if donor_id is not None or donor_name is not None:
            raise IdentityValidationError(
                "Anonymous donations must not carry donor identity",
                field="donor_id" if donor_id is not None else "donor_name",
            )
        return
    if donor_id is None or not donor_id.strip():
        raise IdentityValidationError(
            "Donor is required unless the donation is anonymous",
            field="donor_id",
        )
    if donor_name is not None and not donor_name.strip():
        raise IdentityValidationError(
            "Donor name must not be blank", field="donor_name"
        )


def validate_donation_draft(
    draft: DonationDraft,
    *,
    today: date,
    max_amount: Decimal = DEFAULT_MAX_DONATION_AMOUNT,
) -> Decimal:
    """Validate a donation draft before it enters the ledger.

    Args:
        draft: Donation data supplied by the caller.
        today: Submission date used to reject future dates.
        max_amount: Configured amount ceiling.

    Returns:
        Decimal: The validated amount.

    Raises:
        ValidationError: A typed subclass naming the failed invariant.
    """
    amount = validate_currency_value(draft.amount, "amount", maximum=max_amount)
    validate_donation_date(draft.donation_date, today)
    if normalize_method(draft.method) is None:
        raise TaxonomyValidationError(
            f"Invalid donation method: {draft.method}", field="method"
        )
    if not draft.category_id:
        raise CategoryValidationError(
            "Donation category is required", field="category_id"
        )
    validate_compliance_fields(draft.compliance, amount)
    validate_donor_identity(
        draft.donor_id,
        draft.donor_name,
        draft.compliance.is_anonymous,
    )
    return amount


def validate_category_draft(
    draft: CategoryDraft,
    max_name_length: int = MAX_CATEGORY_NAME_LENGTH,
) -> None:
    """Validate category attributes supplied by an administrator."""
    if not draft.name or not draft.name.strip():
        raise CategoryValidationError("Category name is required", field="name")
    if not is_valid_category_name(draft.name, max_name_length):
        raise CategoryValidationError(
            f"Category name must be {max_name_length} characters or less",
            field="name",
        )
    if draft.is_tax_deductible is None:
        raise CategoryValidationError(
            "Tax deductible status is required", field="is_tax_deductible"
        )
    validate_category_compliance(draft.default_line_item, draft.is_tax_deductible)
    if draft.annual_goal is not None:
        validate_currency_value(draft.annual_goal, "annual_goal")
    if draft.display_order is not None and draft.display_order <= 0:
        raise CategoryValidationError(
            "Display order must be greater than 0", field="display_order"
        )


__all__ = [
    "validate_currency_value",
    "validate_donation_date",
    "validate_compliance_fields",
    "validate_donor_identity",
    "validate_donation_draft",
    "validate_category_draft",
]
