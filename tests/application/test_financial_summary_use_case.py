"""Tests for the GetFinancialSummaryUseCase."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from giving_engine.application.use_cases.get_financial_summary import (
    GetFinancialSummaryUseCase,
)
from giving_engine.domain.constants import DonationStatus
from giving_engine.domain.policies import ZeroGrowthPolicy
from tests.fakes import (
    InMemoryCategoryRepository,
    InMemoryDonationRepository,
    make_category,
    make_donation,
)


def _use_case(donations, **kwargs):
    return GetFinancialSummaryUseCase(
        InMemoryDonationRepository(donations),
        InMemoryCategoryRepository(
            [make_category(name="Tithes (renamed)"), make_category("cat-m", "Missions", 20)]
        ),
        logger=MagicMock(),
        **kwargs,
    )


def test_execute_summarizes_verified_donations_in_period():
    """Only verified donations inside the window are counted."""
    use_case = _use_case(
        [
            make_donation("a", "100.00", donation_date=date(2024, 3, 1)),
            make_donation("b", "50.00", "cat-m", "Missions", date(2024, 3, 15)),
            make_donation("c", "75.00", status=DonationStatus.PENDING),
            make_donation("d", "999.00", donation_date=date(2024, 5, 1)),
        ]
    )

    summary = use_case.execute(date(2024, 3, 1), date(2024, 3, 31))

    assert summary.total_donations == Decimal("150.00")
    assert summary.donation_count == 2
    assert summary.average_donation == Decimal("75.00")
    assert summary.by_category["cat-tithes"].category_name == "Tithes (renamed)"
    assert summary.growth is None


def test_execute_with_comparison_period_reports_growth():
    """A previous period yields growth percentages."""
    use_case = _use_case(
        [
            make_donation("a", "150.00", donation_date=date(2024, 3, 1)),
            make_donation("b", "100.00", donation_date=date(2024, 2, 1)),
        ]
    )

    summary = use_case.execute(
        date(2024, 3, 1), date(2024, 3, 31), date(2024, 2, 1), date(2024, 2, 29)
    )

    assert summary.growth.previous_total == Decimal("100.00")
    assert summary.growth.amount_growth == Decimal("50.00")


def test_empty_previous_period_follows_growth_policy():
    """The zero-growth policy decides growth against an empty period."""
    donations = [make_donation("a", "150.00", donation_date=date(2024, 3, 1))]

    default = _use_case(donations).execute(
        date(2024, 3, 1), date(2024, 3, 31), date(2024, 2, 1), date(2024, 2, 29)
    )
    undefined = _use_case(
        donations, growth_policy=ZeroGrowthPolicy.UNDEFINED
    ).execute(date(2024, 3, 1), date(2024, 3, 31), date(2024, 2, 1), date(2024, 2, 29))

    assert default.growth.amount_growth == Decimal("100.00")
    assert undefined.growth.amount_growth is None


def test_execute_rejects_invalid_periods():
    """Reversed periods and half comparison periods are errors."""
    use_case = _use_case([])

    with pytest.raises(ValueError):
        use_case.execute(date(2024, 3, 31), date(2024, 3, 1))
    with pytest.raises(ValueError):
        use_case.execute(date(2024, 3, 1), date(2024, 3, 31), date(2024, 2, 1))


def test_ledger_statistics_counts_every_status():
    """Ledger statistics include all statuses."""
    use_case = _use_case(
        [
            make_donation("a", "100.00"),
            make_donation("b", "50.00", status=DonationStatus.PENDING),
            make_donation("c", "25.00", status=DonationStatus.VOID),
        ]
    )

    stats = use_case.ledger_statistics()

    assert stats.total_donations == 3
    assert stats.by_status["pending"] == 1
    assert stats.by_status["void"] == 1
