"""Tests for the Decimal helpers."""

from decimal import Decimal

from giving_engine.utils.decimal_utils import allocate_percentages, percentage


def test_allocate_percentages_gives_leftover_to_largest_remainders():
    """Thirds round to 33.34, 33.33, 33.33 in key order."""
    shares = allocate_percentages(
        {"a": Decimal("1"), "b": Decimal("1"), "c": Decimal("1")}, Decimal("3")
    )

    assert shares == {
        "a": Decimal("33.34"),
        "b": Decimal("33.33"),
        "c": Decimal("33.33"),
    }


def test_allocate_percentages_stays_within_one_hundredth():
    """Each share differs from independent rounding by at most a hundredth."""
    parts = {"tithe": Decimal("350"), "missions": Decimal("1000")}
    whole = Decimal("1350")

    shares = allocate_percentages(parts, whole)

    assert shares == {"tithe": Decimal("25.93"), "missions": Decimal("74.07")}
    for key, part in parts.items():
        assert abs(shares[key] - percentage(part, whole)) <= Decimal("0.01")


def test_allocate_percentages_of_empty_whole_is_zero():
    """A zero whole yields zero shares instead of dividing by zero."""
    assert allocate_percentages({"a": Decimal("0")}, Decimal("0")) == {
        "a": Decimal("0.00")
    }
