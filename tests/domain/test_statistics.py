"""Tests for category statistics computations."""

from datetime import date
from decimal import Decimal
import itertools
import random

from giving_engine.domain.models import CategoryStatistics
from giving_engine.domain.services.statistics import (
    add_contribution,
    average_is_consistent,
    compute_statistics,
    remove_contribution,
    roll_forward,
    statistics_differences,
)
from tests.fakes import make_donation

CURRENT_YEAR = 2024


def _donations():
    return [
        make_donation("a", "100.00", donation_date=date(2024, 1, 10)),
        make_donation("b", "33.33", donation_date=date(2023, 7, 4)),
        make_donation("c", "0.01", donation_date=date(2024, 5, 1)),
        make_donation("d", "250.50", donation_date=date(2022, 2, 2)),
        make_donation("e", "19.99", donation_date=date(2024, 3, 3)),
    ]


def test_incremental_matches_recalculation_in_any_order():
    """Adding donations one by one in any order equals a full recomputation."""
    expected = compute_statistics(_donations(), CURRENT_YEAR)

    for ordering in itertools.permutations(_donations()):
        stats = CategoryStatistics()
        for donation in ordering:
            stats = add_contribution(stats, donation, CURRENT_YEAR)
        assert stats == expected


def test_recalculation_is_idempotent():
    """Recomputing twice yields identical statistics."""
    first = compute_statistics(_donations(), CURRENT_YEAR)
    second = compute_statistics(_donations(), CURRENT_YEAR)

    assert first == second
    assert first.total_amount == Decimal("403.83")
    assert first.donation_count == 5
    assert first.average_donation == Decimal("80.77")
    assert first.current_year_total == Decimal("120.00")
    assert first.last_year_total == Decimal("33.33")
    assert first.last_donation_date == date(2024, 5, 1)


def test_remove_contribution_is_the_inverse_of_add():
    """Removing a donation equals recomputing without it."""
    donations = _donations()
    stats = compute_statistics(donations, CURRENT_YEAR)
    removed = donations[2]
    remaining = [d for d in donations if d.id != removed.id]

    result = remove_contribution(
        stats,
        removed,
        CURRENT_YEAR,
        max(d.donation_date for d in remaining),
    )

    assert result == compute_statistics(remaining, CURRENT_YEAR)
    assert result.last_donation_date == date(2024, 3, 3)


def test_removing_last_donation_resets_to_zero():
    """Statistics with no contributions should be all zeros."""
    donation = make_donation("only", "42.00")
    stats = add_contribution(CategoryStatistics(), donation, CURRENT_YEAR)

    result = remove_contribution(stats, donation, CURRENT_YEAR, None)

    assert result == CategoryStatistics()


def test_average_stays_consistent_with_total():
    """average * count stays within rounding of the total."""
    rng = random.Random(7)
    stats = CategoryStatistics()
    for index in range(200):
        amount = f"{rng.randint(1, 500000) / 100:.2f}"
        stats = add_contribution(
            stats, make_donation(f"d{index}", amount), CURRENT_YEAR
        )
        assert average_is_consistent(stats)


def test_rounded_average_of_many_donations_is_consistent():
    """A cent-rounded average may miss the total by more than one cent."""
    stats = CategoryStatistics(
        total_amount=Decimal("1000.00"),
        donation_count=300,
        average_donation=Decimal("3.33"),
    )
    drifted = CategoryStatistics(
        total_amount=Decimal("1000.00"),
        donation_count=300,
        average_donation=Decimal("3.30"),
    )

    assert average_is_consistent(stats)
    assert not average_is_consistent(drifted)


def test_statistics_differences_reports_drift():
    """Fields drifting beyond one cent should be reported."""
    expected = compute_statistics(_donations(), CURRENT_YEAR)
    stored = CategoryStatistics(
        total_amount=expected.total_amount + Decimal("5.00"),
        donation_count=expected.donation_count,
        average_donation=expected.average_donation,
        current_year_total=expected.current_year_total,
        last_year_total=expected.last_year_total + Decimal("0.01"),
        last_donation_date=expected.last_donation_date,
        statistics_year=expected.statistics_year,
    )

    differences = statistics_differences(stored, expected)

    assert set(differences) == {"total_amount"}
    assert differences["total_amount"] == (
        Decimal("408.83"),
        Decimal("403.83"),
    )


def test_year_totals_roll_over_at_new_year():
    """A void after New Year reverses the amount from last year's total."""
    first = make_donation("a", "100.00", donation_date=date(2024, 3, 1))
    second = make_donation("b", "50.00", donation_date=date(2024, 4, 1))
    stats = add_contribution(CategoryStatistics(), first, 2024)
    stats = add_contribution(stats, second, 2024)
    assert stats.current_year_total == Decimal("150.00")

    result = remove_contribution(stats, first, 2025, second.donation_date)

    assert result == compute_statistics([second], 2025)
    assert result.current_year_total == Decimal("0.00")
    assert result.last_year_total == Decimal("50.00")
    assert result.statistics_year == 2025


def test_roll_forward_moves_and_clears_year_totals():
    """One year moves current into last; two years clear both."""
    stats = compute_statistics(_donations(), CURRENT_YEAR)

    next_year = roll_forward(stats, CURRENT_YEAR + 1)
    later = roll_forward(stats, CURRENT_YEAR + 2)

    assert next_year.last_year_total == stats.current_year_total
    assert next_year.current_year_total == Decimal("0.00")
    assert next_year.total_amount == stats.total_amount
    assert (later.current_year_total, later.last_year_total) == (
        Decimal("0.00"),
        Decimal("0.00"),
    )
    assert roll_forward(stats, CURRENT_YEAR) == stats
    assert roll_forward(CategoryStatistics(), CURRENT_YEAR) == CategoryStatistics()


def _interleavings(donations, removed_ids, rng, rounds):
    """Yield random event orders in which each removal follows its add."""
    for _ in range(rounds):
        steps = [("add", d) for d in donations] + [
            ("remove", d) for d in donations if d.id in removed_ids
        ]
        rng.shuffle(steps)
        seen, ordered, deferred = set(), [], {}
        for action, donation in steps:
            if action == "add":
                ordered.append((action, donation))
                seen.add(donation.id)
                if donation.id in deferred:
                    ordered.append(deferred.pop(donation.id))
            elif donation.id in seen:
                ordered.append((action, donation))
            else:
                deferred[donation.id] = (action, donation)
        yield ordered


def test_adds_and_removes_in_any_order_match_recalculation():
    """Every interleaving of adds and removes ends at the recomputed values."""
    donations = _donations()
    removed_ids = {"b", "d"}
    expected = compute_statistics(
        [d for d in donations if d.id not in removed_ids], CURRENT_YEAR
    )

    for ordered in _interleavings(donations, removed_ids, random.Random(11), 200):
        stats = CategoryStatistics()
        contributing: dict[str, date] = {}
        for action, donation in ordered:
            if action == "add":
                stats = add_contribution(stats, donation, CURRENT_YEAR)
                contributing[donation.id] = donation.donation_date
            else:
                del contributing[donation.id]
                stats = remove_contribution(
                    stats,
                    donation,
                    CURRENT_YEAR,
                    max(contributing.values(), default=None),
                )
        assert stats == expected
