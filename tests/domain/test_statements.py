"""Tests for the statement and receipt builders."""

from datetime import date
from decimal import Decimal

import pytest

from giving_engine.domain.constants import DonationStatus
from giving_engine.domain.errors import NotFoundError
from giving_engine.domain.services.statements import (
    build_annual_statement,
    build_donation_receipt,
    next_receipt_number,
)
from tests.fakes import NOW, make_compliance, make_donation


def test_statement_orders_donations_by_date():
    donations = [
        make_donation("b", "20.00", donation_date=date(2024, 8, 1)),
        make_donation("a", "10.00", donation_date=date(2024, 2, 1)),
        make_donation("c", "5.00", donation_date=date(2024, 2, 1)),
    ]

    statement = build_annual_statement(
        donations, "donor-1", 2024, generated_at=NOW
    )

    assert statement.donation_ids == ["a", "c", "b"]
    assert statement.total_amount == Decimal("35.00")
    assert statement.by_category == {"Tithes": Decimal("35.00")}


def test_statement_skips_non_deductible_portion():
    """Non-deductible donations count in the total but not the deductible."""
    donations = [
        make_donation("a", "100.00"),
        make_donation("b", "40.00", is_tax_deductible=False),
    ]

    statement = build_annual_statement(
        donations, "donor-1", 2024, generated_at=NOW
    )

    assert statement.total_amount == Decimal("140.00")
    assert statement.total_deductible_amount == Decimal("100.00")
    assert statement.includes_quid_pro_quo is False


def test_statement_uses_current_category_names():
    donations = [
        make_donation("a", "10.00", category_id="cat-old", category_name="Old"),
        make_donation("b", "15.00", category_id="cat-gone", category_name=""),
    ]

    statement = build_annual_statement(
        donations,
        "donor-1",
        2024,
        generated_at=NOW,
        category_names={"cat-old": "Renamed"},
    )

    assert statement.by_category == {
        "Renamed": Decimal("10.00"),
        "Uncategorized": Decimal("15.00"),
    }


@pytest.mark.parametrize(
    "donation",
    [
        make_donation("a", "10.00", status=DonationStatus.VOID),
        make_donation("a", "10.00", donor_id="donor-2"),
        make_donation("a", "10.00", donation_date=date(2023, 5, 1)),
    ],
)
def test_statement_without_matching_donations_is_not_found(donation):
    with pytest.raises(NotFoundError):
        build_annual_statement([donation], "donor-1", 2024, generated_at=NOW)


def test_next_receipt_number_follows_highest_of_the_year():
    """Numbers of other years and foreign formats are ignored."""
    existing = ["R-2024-007", "R-2024-002", "R-2023-050", "legacy-9", None]

    assert next_receipt_number(existing, 2024) == "R-2024-008"
    assert next_receipt_number(existing, 2023) == "R-2023-051"
    assert next_receipt_number([], 2022) == "R-2022-001"


def test_receipt_past_one_thousand_keeps_counting():
    assert next_receipt_number(["R-2024-999"], 2024) == "R-2024-1000"
    assert next_receipt_number(["R-2024-1000"], 2024) == "R-2024-1001"


def test_receipt_deducts_quid_pro_quo_value():
    donation = make_donation(
        "gala",
        "2500.00",
        compliance=make_compliance(
            is_quid_pro_quo=True, quid_pro_quo_value=Decimal("150")
        ),
    )

    receipt = build_donation_receipt(donation, "R-2024-001", generated_at=NOW)

    assert receipt.deductible_amount == Decimal("2350.00")
    assert receipt.is_quid_pro_quo is True
    assert receipt.method == "check"
    assert receipt.category_name == "Tithes"
    assert receipt.generated_at == NOW
