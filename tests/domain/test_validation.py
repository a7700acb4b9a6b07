"""Tests for donation and category validation rules."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from giving_engine.domain.constants import LineItem
from giving_engine.domain.errors import (
    AmountValidationError,
    CategoryValidationError,
    DateValidationError,
    IdentityValidationError,
    TaxonomyValidationError,
    ValidationError,
)
from giving_engine.domain.models import CategoryDraft
from giving_engine.domain.services.validation import (
    validate_category_draft,
    validate_currency_value,
    validate_donation_draft,
    validate_donor_identity,
)
from tests.fakes import make_compliance, make_draft

TODAY = date(2024, 6, 15)


def test_valid_draft_returns_amount():
    """A well-formed draft should validate and return its amount."""
    assert validate_donation_draft(make_draft("125.50"), today=TODAY) == Decimal(
        "125.50"
    )


@pytest.mark.parametrize("amount", ["0", "-1", "10.001", "1000000.01"])
def test_invalid_amounts_are_rejected(amount):
    """Zero, negative, sub-cent and over-ceiling amounts should fail."""
    with pytest.raises(AmountValidationError) as excinfo:
        validate_donation_draft(make_draft(amount), today=TODAY)

    assert excinfo.value.field == "amount"
    assert excinfo.value.code == "INVALID_AMOUNT"


def test_amount_ceiling_is_configurable():
    """A lower configured ceiling should be enforced."""
    with pytest.raises(AmountValidationError):
        validate_donation_draft(
            make_draft("600"), today=TODAY, max_amount=Decimal("500")
        )


def test_non_numeric_amount_is_rejected():
    """Text and booleans are not currency values."""
    for value in ("abc", True, None):
        with pytest.raises(AmountValidationError):
            validate_currency_value(value, "amount")


def test_future_date_is_rejected():
    """Donations cannot be dated after the submission date."""
    with pytest.raises(DateValidationError):
        validate_donation_draft(
            make_draft(donation_date=date(2024, 6, 16)), today=TODAY
        )


def test_datetime_is_not_a_calendar_date():
    """A timestamp should be refused as donation date."""
    with pytest.raises(DateValidationError):
        validate_donation_draft(
            make_draft(donation_date=datetime(2024, 6, 1, 10, 0)), today=TODAY
        )


def test_unknown_method_is_rejected():
    """Methods outside the enumeration should fail."""
    with pytest.raises(TaxonomyValidationError) as excinfo:
        validate_donation_draft(make_draft(method="barter"), today=TODAY)

    assert excinfo.value.field == "method"


def test_legacy_method_spelling_is_accepted():
    """Legacy spellings should normalize instead of failing."""
    assert validate_donation_draft(make_draft(method="credit_card"), today=TODAY)


def test_missing_compliance_fields_are_rejected():
    """Form 990 fields are required on every donation."""
    with pytest.raises(TaxonomyValidationError):
        validate_donation_draft(make_draft(compliance=None), today=TODAY)


def test_unknown_line_item_is_rejected():
    """New donations must use a known line item."""
    with pytest.raises(TaxonomyValidationError) as excinfo:
        validate_donation_draft(
            make_draft(compliance=make_compliance(line_item="1g_bogus")),
            today=TODAY,
        )

    assert excinfo.value.field == "line_item"


def test_quid_pro_quo_value_is_required_and_below_amount():
    """Quid pro quo gifts need a value smaller than the amount."""
    missing = make_compliance(is_quid_pro_quo=True)
    too_large = make_compliance(
        is_quid_pro_quo=True, quid_pro_quo_value=Decimal("100")
    )

    with pytest.raises(AmountValidationError):
        validate_donation_draft(make_draft("100", compliance=missing), today=TODAY)
    with pytest.raises(AmountValidationError) as excinfo:
        validate_donation_draft(make_draft("100", compliance=too_large), today=TODAY)

    assert excinfo.value.field == "quid_pro_quo_value"


def test_anonymous_donation_must_not_carry_identity():
    """Anonymous gifts with a donor id, or even a blank one, should fail."""
    with pytest.raises(IdentityValidationError):
        validate_donor_identity("donor-1", None, True)
    with pytest.raises(IdentityValidationError):
        validate_donor_identity(None, "", True)
    validate_donor_identity(None, None, True)


def test_named_donation_requires_donor():
    """Non-anonymous gifts need a donor id and a non-blank name."""
    with pytest.raises(IdentityValidationError):
        validate_donor_identity(None, None, False)
    with pytest.raises(IdentityValidationError):
        validate_donor_identity("donor-1", "   ", False)


def test_validation_errors_share_a_base_class():
    """Every typed validation error is a ValidationError."""
    with pytest.raises(ValidationError):
        validate_donation_draft(make_draft("0"), today=TODAY)


def test_category_draft_rules():
    """Names, deductibility and goals are validated on categories."""
    validate_category_draft(
        CategoryDraft(
            name="Youth",
            default_line_item=LineItem.CASH_CONTRIBUTIONS,
            is_tax_deductible=True,
            annual_goal=Decimal("5000.00"),
        )
    )
    with pytest.raises(CategoryValidationError):
        validate_category_draft(
            CategoryDraft(
                name="x" * 101,
                default_line_item=LineItem.CASH_CONTRIBUTIONS,
                is_tax_deductible=True,
            )
        )
    with pytest.raises(CategoryValidationError):
        validate_category_draft(
            CategoryDraft(
                name="Youth",
                default_line_item=LineItem.CASH_CONTRIBUTIONS,
                is_tax_deductible=True,
                display_order=0,
            )
        )
    with pytest.raises(AmountValidationError):
        validate_category_draft(
            CategoryDraft(
                name="Youth",
                default_line_item=LineItem.CASH_CONTRIBUTIONS,
                is_tax_deductible=True,
                annual_goal=Decimal("-1"),
            )
        )
