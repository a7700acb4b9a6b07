"""Tests for the financial summary aggregation."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

from giving_engine.domain.constants import DonationMethod, DonationStatus, LineItem
from giving_engine.domain.models import ReportingPeriod
from giving_engine.domain.policies import ZeroGrowthPolicy
from giving_engine.domain.services.aggregation import (
    bucket_donor_totals,
    compute_donor_giving_summary,
    compute_financial_summary,
    compute_ledger_statistics,
)
from tests.fakes import make_category, make_compliance, make_donation

PERIOD = ReportingPeriod(start=date(2024, 1, 1), end=date(2024, 12, 31))


def _tithe_and_missions():
    return [
        make_donation("d1", "100", donor_id="donor-1"),
        make_donation("d2", "250", donor_id="donor-2"),
        make_donation(
            "d3",
            "1000",
            category_id="cat-missions",
            category_name="Missions",
            donor_id="donor-3",
        ),
    ]


def test_summary_totals_and_category_percentages():
    """Three verified donations should produce totals, average and shares."""
    categories = {
        "cat-tithes": make_category(),
        "cat-missions": make_category("cat-missions", "Missions", 20),
    }

    summary = compute_financial_summary(
        _tithe_and_missions(), PERIOD, categories=categories
    )

    assert summary.total_donations == Decimal("1350.00")
    assert summary.donation_count == 3
    assert summary.average_donation == Decimal("450.00")
    assert summary.by_category["cat-tithes"].percentage == Decimal("25.93")
    assert summary.by_category["cat-tithes"].amount == Decimal("350.00")
    assert summary.by_category["cat-missions"].percentage == Decimal("74.07")
    assert summary.by_category["cat-missions"].category_name == "Missions"


def test_empty_period_reports_zeros():
    """No donations should yield zero totals and an empty histogram."""
    summary = compute_financial_summary([], PERIOD)

    assert summary.total_donations == Decimal("0.00")
    assert summary.donation_count == 0
    assert summary.average_donation == Decimal("0.00")
    assert summary.by_category == {}
    assert summary.by_method == {}
    assert summary.by_line_item == {}
    assert [bucket.count for bucket in summary.top_donor_ranges] == [0, 0, 0, 0, 0]
    assert summary.skipped_notice is None


def test_only_verified_donations_in_period_count():
    """Pending, void and out-of-period donations should be ignored."""
    donations = [
        make_donation("d1", "100"),
        make_donation("d2", "200", status=DonationStatus.PENDING),
        make_donation("d3", "300", status=DonationStatus.VOID),
        make_donation("d4", "400", status=DonationStatus.REFUNDED),
        make_donation("d5", "500", donation_date=date(2023, 12, 31)),
    ]

    summary = compute_financial_summary(donations, PERIOD)

    assert summary.total_donations == Decimal("100.00")
    assert summary.donation_count == 1


def test_breakdowns_sum_to_total():
    """Category, method and line item groups should each sum to the total."""
    donations = [
        make_donation("d1", "10.10", method=DonationMethod.CASH),
        make_donation("d2", "20.20", category_id="cat-b", category_name="B"),
        make_donation(
            "d3",
            "33.33",
            method="credit_card",
            compliance=make_compliance(line_item=LineItem.PROGRAM_SERVICE_REVENUE),
        ),
        make_donation("d4", "0.01", category_id="cat-c", category_name="C"),
    ]

    summary = compute_financial_summary(donations, PERIOD)

    for groups in (summary.by_category, summary.by_method, summary.by_line_item):
        assert sum(e.amount for e in groups.values()) == summary.total_donations
        assert sum(e.count for e in groups.values()) == summary.donation_count
        total_pct = sum(e.percentage for e in groups.values())
        assert total_pct == Decimal("100.00")
    assert set(summary.by_method) == {"cash", "check", "card"}


def test_unknown_line_item_is_reported_as_not_applicable():
    """A legacy line item should land in not_applicable, not disappear."""
    donation = make_donation(
        "d1", "75", compliance=make_compliance(line_item="1g_legacy_value")
    )

    summary = compute_financial_summary([donation], PERIOD)

    assert summary.by_line_item["not_applicable"].amount == Decimal("75.00")


def test_malformed_records_are_skipped_with_notice():
    """Malformed records should be excluded and listed as skipped."""
    logger = MagicMock()
    donations = [
        make_donation("good", "50"),
        make_donation("negative", "-5"),
        replace(make_donation("nan", "100"), amount="not-a-number"),
        replace(make_donation("no-compliance", "10"), compliance=None),
        replace(make_donation("no-category", "10"), category_id=""),
    ]

    summary = compute_financial_summary(donations, PERIOD, logger=logger)

    assert summary.total_donations == Decimal("50.00")
    assert {r.record_id for r in summary.skipped_records} == {
        "negative",
        "nan",
        "no-compliance",
        "no-category",
    }
    assert summary.skipped_notice == "4 records skipped"
    logger.warning.assert_called_once()


def test_donation_date_with_time_of_day_is_skipped():
    """A timestamp in place of a calendar date is skipped, not fatal."""
    donations = [
        make_donation("good", "50"),
        replace(make_donation("stamped", "20"), donation_date=datetime(2024, 3, 1, 9)),
    ]

    summary = compute_financial_summary(donations, PERIOD)

    assert summary.total_donations == Decimal("50.00")
    assert [r.record_id for r in summary.skipped_records] == ["stamped"]


def test_many_equal_categories_share_exactly_one_hundred_percent():
    """Rounding leftovers are allocated so shares still add up to 100."""
    donations = [
        make_donation(f"d{index}", "10.00", category_id=f"cat-{index:02d}")
        for index in range(60)
    ]

    summary = compute_financial_summary(donations, PERIOD)

    shares = [entry.percentage for entry in summary.by_category.values()]
    assert sum(shares) == Decimal("100.00")
    assert set(shares) == {Decimal("1.66"), Decimal("1.67")}


def test_category_names_are_resolved_from_metadata():
    """A stale denormalized name should not leak into the report."""
    donation = make_donation("d1", "40", category_name="Old Name")
    categories = {"cat-tithes": make_category(name="Tithes & Offerings")}

    summary = compute_financial_summary([donation], PERIOD, categories=categories)

    assert summary.by_category["cat-tithes"].category_name == "Tithes & Offerings"


def test_goal_progress_uses_annual_goal():
    """Category entries should report progress toward the annual goal."""
    categories = {"cat-tithes": make_category(annual_goal=Decimal("1000.00"))}

    summary = compute_financial_summary(
        [make_donation("d1", "250")], PERIOD, categories=categories
    )

    assert summary.by_category["cat-tithes"].goal_progress == Decimal("25.00")


def test_donor_histogram_skips_anonymous_and_groups_by_donor():
    """Per-donor totals should be bucketed; anonymous gifts are excluded."""
    donations = [
        make_donation("d1", "60", donor_id="a"),
        make_donation("d2", "60", donor_id="a"),
        make_donation("d3", "2500", donor_id="b"),
        make_donation("d4", "99.99", donor_id="c"),
        make_donation("d5", "700", compliance=make_compliance(is_anonymous=True)),
    ]

    summary = compute_financial_summary(donations, PERIOD)

    buckets = {b.label: b for b in summary.top_donor_ranges}
    assert [b.label for b in summary.top_donor_ranges] == [
        "$0-$99",
        "$100-$499",
        "$500-$999",
        "$1000-$2499",
        "$2500+",
    ]
    assert buckets["$0-$99"].count == 1
    assert buckets["$100-$499"].count == 1
    assert buckets["$100-$499"].total_amount == Decimal("120.00")
    assert buckets["$500-$999"].count == 0
    assert buckets["$2500+"].count == 1
    assert sum(b.count for b in summary.top_donor_ranges) == 3


def test_bucket_donor_totals_uses_inclusive_lower_bounds():
    """Boundary totals should fall into the higher bucket."""
    buckets = bucket_donor_totals([Decimal("100"), Decimal("1000"), Decimal("99.99")])

    assert [b.count for b in buckets] == [1, 1, 0, 1, 0]


def test_growth_against_previous_summary():
    """Growth should compare amount, count and average with the previous period."""
    previous = compute_financial_summary(
        [make_donation("p1", "500", donation_date=date(2023, 5, 1))],
        ReportingPeriod(date(2023, 1, 1), date(2023, 12, 31)),
    )

    summary = compute_financial_summary(
        [make_donation("d1", "400"), make_donation("d2", "350")],
        PERIOD,
        previous=previous,
    )

    assert summary.growth.amount_growth == Decimal("50.00")
    assert summary.growth.count_growth == Decimal("100.00")
    assert summary.growth.average_growth == Decimal("-25.00")
    assert summary.growth.previous_total == Decimal("500.00")


def test_growth_from_empty_previous_period_follows_policy():
    """A zero previous total should follow the configured growth policy."""
    previous = compute_financial_summary([], PERIOD)
    donations = [make_donation("d1", "10")]

    default = compute_financial_summary(donations, PERIOD, previous=previous)
    undefined = compute_financial_summary(
        donations,
        PERIOD,
        previous=previous,
        growth_policy=ZeroGrowthPolicy.UNDEFINED,
    )

    assert default.growth.amount_growth == Decimal("100.00")
    assert undefined.growth.amount_growth is None


def test_donor_giving_summary_counts_verified_donations_only():
    """The personal summary should include only the donor's verified gifts."""
    donations = [
        make_donation("d1", "100", donation_date=date(2024, 2, 1)),
        make_donation("d2", "50", donation_date=date(2023, 2, 1)),
        make_donation("d3", "75", status=DonationStatus.PENDING),
        make_donation("d4", "500", donor_id="someone-else"),
        make_donation(
            "d5",
            "200",
            compliance=make_compliance(
                is_quid_pro_quo=True, quid_pro_quo_value=Decimal("40")
            ),
        ),
    ]

    summary = compute_donor_giving_summary(donations, "donor-1", date(2024, 6, 1))

    assert summary.total_amount == Decimal("350.00")
    assert summary.total_count == 3
    assert summary.ytd_amount == Decimal("300.00")
    assert summary.ytd_count == 2
    assert summary.tax_deductible_amount == Decimal("310.00")
    assert summary.average_donation == Decimal("116.67")


def test_donor_giving_summary_filters_tax_year():
    """A tax year filter should narrow the totals."""
    donations = [
        make_donation("d1", "100", donation_date=date(2024, 2, 1)),
        make_donation("d2", "50", donation_date=date(2023, 2, 1)),
    ]

    summary = compute_donor_giving_summary(
        donations, "donor-1", date(2024, 6, 1), tax_year=2023
    )

    assert summary.total_amount == Decimal("50.00")
    assert summary.tax_year == 2023


def test_ledger_statistics_count_every_status():
    """Ledger statistics should count all donations by status and method."""
    donations = [
        make_donation("d1", "100"),
        make_donation("d2", "50", status=DonationStatus.PENDING),
        make_donation("d3", "25", status=DonationStatus.VOID, method="online"),
    ]

    stats = compute_ledger_statistics(donations)

    assert stats.total_donations == 3
    assert stats.total_amount == Decimal("175.00")
    assert stats.average_donation == Decimal("58.33")
    assert stats.by_status == {"pending": 1, "verified": 1, "void": 1}
    assert stats.by_method == {"card": 1, "check": 2}
