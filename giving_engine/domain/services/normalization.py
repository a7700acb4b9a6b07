"""Domain normalization helpers."""

from giving_engine.domain.constants import (
    LEGACY_METHOD_ALIASES,
    DonationMethod,
    DonationStatus,
    LineItem,
    RestrictionType,
)


def normalize_method(value: DonationMethod | str | None) -> DonationMethod | None:
    """Normalize a payment method, accepting legacy spellings.

    Args:
        value: Raw method value from a form or repository.

    Returns:
        DonationMethod | None: Normalized method, or None when unknown.
    """
    if isinstance(value, DonationMethod):
        return value
    if not value:
        return None
    cleaned = str(value).strip().lower()
    if cleaned in LEGACY_METHOD_ALIASES:
        return LEGACY_METHOD_ALIASES[cleaned]
    try:
        return DonationMethod(cleaned)
    except ValueError:
        return None


def normalize_line_item(value: LineItem | str | None) -> LineItem | None:
    """Normalize a Form 990 line item.

    Args:
        value: Raw line item value from a form or repository.

    Returns:
        LineItem | None: Normalized line item, or None when unknown.
    """
    if isinstance(value, LineItem):
        return value
    if not value:
        return None
    try:
        return LineItem(str(value).strip())
    except ValueError:
        return None


def normalize_restriction(
    value: RestrictionType | str | None,
) -> RestrictionType | None:
    """Normalize a restriction type; a missing value means unrestricted."""
    if isinstance(value, RestrictionType):
        return value
    if not value:
        return RestrictionType.UNRESTRICTED
    try:
        return RestrictionType(str(value).strip())
    except ValueError:
        return None


def normalize_status(value: DonationStatus | str | None) -> DonationStatus | None:
    """Normalize a lifecycle status, or None when unknown."""
    if isinstance(value, DonationStatus):
        return value
    if not value:
        return None
    try:
        return DonationStatus(str(value).strip().lower())
    except ValueError:
        return None


__all__ = [
    "normalize_method",
    "normalize_line_item",
    "normalize_restriction",
    "normalize_status",
]
