"""Policies governing how categories accept donations."""

from enum import Enum


class InactiveCategoryPolicy(str, Enum):
    """Whether a deactivated category may receive new donations.

    REJECT refuses the donation with a validation error. ALLOW only hides the
    category from pickers and still records the donation.
    """

    REJECT = "reject"
    ALLOW = "allow"


def is_valid_category_name(name: str | None, max_length: int = 100) -> bool:
    """Return True when the name is non-blank and within max_length."""
    if not name or not name.strip():
        return False
    return len(name) <= max_length


__all__ = ["InactiveCategoryPolicy", "is_valid_category_name"]
