"""Tests for the DonorStatementsUseCase."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from giving_engine.application.use_cases.donor_statements import (
    DonorStatementsUseCase,
)
from giving_engine.application.use_cases.record_donation import (
    DonationLedgerUseCase,
)
from giving_engine.domain.constants import DonationStatus, Role
from giving_engine.domain.errors import (
    AccessError,
    DateValidationError,
    LifecycleTransitionError,
    NotFoundError,
)
from giving_engine.domain.models import AccessContext
from giving_engine.infrastructure.change_feed import ChangeEventBus
from giving_engine.infrastructure.clock import FixedClock
from tests.fakes import (
    NOW,
    InMemoryCategoryRepository,
    InMemoryDonationRepository,
    make_category,
    make_compliance,
    make_donation,
)

FULL = AccessContext(Role.FULL_ACCESS)
AGGREGATE = AccessContext(Role.AGGREGATE_ACCESS)
DONOR_1 = AccessContext(Role.SELF_ACCESS, subject_id="donor-1")
DONOR_2 = AccessContext(Role.SELF_ACCESS, subject_id="donor-2")


def _use_case(donations=None):
    donations = donations or InMemoryDonationRepository(
        [
            make_donation("d1", "100.00", donation_date=date(2024, 1, 10)),
            make_donation(
                "d2",
                "2500.00",
                category_id="cat-gala",
                category_name="Gala",
                donation_date=date(2024, 5, 2),
                compliance=make_compliance(
                    is_quid_pro_quo=True, quid_pro_quo_value=Decimal("150.00")
                ),
            ),
            make_donation(
                "d3", "40.00", status=DonationStatus.PENDING,
                donation_date=date(2024, 2, 1),
            ),
            make_donation("d4", "75.00", donation_date=date(2023, 12, 31)),
            make_donation("d5", "60.00", donor_id="donor-2"),
            make_donation(
                "d6", "500.00", compliance=make_compliance(is_anonymous=True)
            ),
        ]
    )
    categories = InMemoryCategoryRepository(
        [
            make_category(name="Tithes & Offerings"),
            make_category("cat-gala", "Gala", display_order=20),
        ]
    )
    clock = FixedClock(NOW)
    ledger = DonationLedgerUseCase(
        donations,
        categories,
        ChangeEventBus(logger=MagicMock()),
        clock,
        logger=MagicMock(),
    )
    usage_logger = MagicMock()
    use_case = DonorStatementsUseCase(
        donations,
        categories,
        ledger,
        clock,
        logger=MagicMock(),
        usage_logger=usage_logger,
    )
    return use_case, donations, usage_logger


def test_annual_statement_for_own_donations():
    """A donor's statement covers their verified donations of the year."""
    use_case, _, usage_logger = _use_case()

    statement = use_case.annual_statement(DONOR_1, 2024)

    assert statement["donor_id"] == "donor-1"
    assert statement["donation_ids"] == ["d1", "d2"]
    assert statement["donation_count"] == 2
    assert statement["total_amount"] == Decimal("2600.00")
    assert statement["total_deductible_amount"] == Decimal("2450.00")
    assert statement["includes_quid_pro_quo"] is True
    assert statement["by_category"] == {
        "Gala": Decimal("2500.00"),
        "Tithes & Offerings": Decimal("100.00"),
    }
    assert statement["period_start"] == date(2024, 1, 1)
    assert statement["period_end"] == date(2024, 12, 31)
    assert statement["generated_at"] == NOW
    usage_logger.info.assert_called_once()


def test_full_access_reads_statement_of_any_donor():
    """Full access names the donor explicitly."""
    use_case, _, _ = _use_case()

    statement = use_case.annual_statement(FULL, 2024, donor_id="donor-2")

    assert statement["donation_ids"] == ["d5"]
    assert statement["total_amount"] == Decimal("60.00")
    assert statement["includes_quid_pro_quo"] is False


@pytest.mark.parametrize(
    "context, donor_id",
    [
        (AGGREGATE, None),
        (AGGREGATE, "donor-1"),
        (DONOR_2, "donor-1"),
        (FULL, None),
    ],
)
def test_statement_access_is_refused_and_logged(context, donor_id):
    """Aggregate access, other donors and unnamed donors are refused."""
    use_case, _, usage_logger = _use_case()

    with pytest.raises(AccessError) as exc:
        use_case.annual_statement(context, 2024, donor_id=donor_id)

    assert exc.value.code == "UNAUTHORIZED_ACCESS"
    usage_logger.warning.assert_called_once()
    usage_logger.info.assert_not_called()


@pytest.mark.parametrize("tax_year", [1999, 2025])
def test_statement_year_out_of_range_is_rejected(tax_year):
    """Years before 2000 or after the current year are invalid."""
    use_case, _, _ = _use_case()

    with pytest.raises(DateValidationError):
        use_case.annual_statement(DONOR_1, tax_year)


def test_statement_without_verified_donations_is_not_found():
    """Pending donations alone do not produce a statement."""
    use_case, _, _ = _use_case(
        InMemoryDonationRepository(
            [make_donation("p1", "10.00", status=DonationStatus.PENDING)]
        )
    )

    with pytest.raises(NotFoundError):
        use_case.annual_statement(DONOR_1, 2024)


def test_previous_year_statement_excludes_current_year():
    """Only the requested tax year is included."""
    use_case, _, _ = _use_case()

    statement = use_case.annual_statement(DONOR_1, 2023)

    assert statement["donation_ids"] == ["d4"]
    assert statement["total_deductible_amount"] == Decimal("75.00")


def test_receipt_numbers_are_issued_in_sequence_and_reused():
    """Receipts get R-<year>-<nnn> numbers once and keep them."""
    use_case, donations, _ = _use_case()

    first = use_case.donation_receipt(DONOR_1, "d1")
    second = use_case.donation_receipt(FULL, "d2")
    again = use_case.donation_receipt(DONOR_1, "d1")

    assert first["receipt_number"] == "R-2024-001"
    assert second["receipt_number"] == "R-2024-002"
    assert again["receipt_number"] == "R-2024-001"
    assert donations.items["d1"].is_receipt_sent is True
    assert donations.items["d1"].receipt_number == "R-2024-001"
    assert donations.items["d2"].receipt_sent_at == NOW


def test_receipt_reports_quid_pro_quo_deduction():
    """The deductible amount excludes the value of goods received."""
    use_case, _, _ = _use_case()

    receipt = use_case.donation_receipt(DONOR_1, "d2")

    assert receipt["donation_amount"] == Decimal("2500.00")
    assert receipt["deductible_amount"] == Decimal("2350.00")
    assert receipt["is_quid_pro_quo"] is True
    assert receipt["quid_pro_quo_value"] == Decimal("150.00")
    assert receipt["category_name"] == "Gala"
    assert receipt["method"] == "check"


def test_receipt_for_unverified_donation_is_refused():
    """Pending donations cannot be receipted."""
    use_case, donations, _ = _use_case()

    with pytest.raises(LifecycleTransitionError):
        use_case.donation_receipt(FULL, "d3")

    assert donations.items["d3"].receipt_number is None


def test_receipt_for_unknown_donation_is_not_found():
    use_case, _, _ = _use_case()

    with pytest.raises(NotFoundError):
        use_case.donation_receipt(FULL, "missing")


@pytest.mark.parametrize(
    "context, donation_id",
    [
        (DONOR_2, "d1"),
        (DONOR_1, "d6"),
        (AGGREGATE, "d1"),
    ],
)
def test_denied_receipt_issues_no_number(context, donation_id):
    """Receipts outside the requester's reach are refused before numbering."""
    use_case, donations, usage_logger = _use_case()

    with pytest.raises(AccessError):
        use_case.donation_receipt(context, donation_id)

    assert donations.items[donation_id].receipt_number is None
    assert donations.items[donation_id].is_receipt_sent is False
    usage_logger.warning.assert_called_once()


def test_anonymous_receipt_is_available_to_full_access():
    """Full access can receipt an anonymous gift, which carries no donor."""
    use_case, _, _ = _use_case()

    receipt = use_case.donation_receipt(FULL, "d6")

    assert receipt["donor_id"] is None
    assert receipt["donor_name"] is None
    assert receipt["receipt_number"] == "R-2024-001"
