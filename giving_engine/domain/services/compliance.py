"""Form 990 taxonomy mapping and disclosure lists."""

from collections.abc import Iterable, Mapping
from decimal import Decimal

from giving_engine.domain.constants import (
    RESTRICTED_TYPES,
    TAX_DEDUCTIBLE_LINE_ITEMS,
    DonationStatus,
    LineItem,
    RestrictionType,
)
from giving_engine.domain.errors import TaxonomyValidationError
from giving_engine.domain.models import (
    Category,
    Donation,
    QuidProQuoDisclosure,
    RestrictedFundDisclosure,
)
from giving_engine.domain.services.normalization import (
    normalize_line_item,
    normalize_restriction,
)
from giving_engine.utils.decimal_utils import ZERO, coerce_decimal, quantize_currency


def validate_category_compliance(
    line_item: LineItem | str | None,
    is_tax_deductible: bool,
) -> LineItem:
    """Check that a category's default line item fits its deductibility.

    Only contribution and program-service line items may be marked tax
    deductible.

    Args:
        line_item: Default line item of the category.
        is_tax_deductible: Whether gifts to the category are deductible.

    Returns:
        LineItem: The normalized line item.

    Raises:
        TaxonomyValidationError: If the line item is unknown or cannot be
            tax deductible.
    """
    normalized = normalize_line_item(line_item)
    if normalized is None:
        raise TaxonomyValidationError(
            f"Invalid Form 990 line item: {line_item}",
            field="default_line_item",
        )
    if is_tax_deductible and normalized not in TAX_DEDUCTIBLE_LINE_ITEMS:
        raise TaxonomyValidationError(
            f"Line item {normalized.value} cannot be tax deductible",
            field="is_tax_deductible",
        )
    return normalized


def resolve_line_item(
    donation: Donation,
    category: Category | None = None,
) -> LineItem:
    """Return the line item a donation is reported under.

    The donation's own line item overrides the category default. A missing
    donation line item falls back to the category default; unknown values
    are reported as not applicable rather than dropped.
    """
    raw = donation.compliance.line_item if donation.compliance else None
    if raw:
        return normalize_line_item(raw) or LineItem.NOT_APPLICABLE
    if category is not None:
        return normalize_line_item(category.default_line_item) or LineItem.NOT_APPLICABLE
    return LineItem.NOT_APPLICABLE


def deductible_amount(donation: Donation) -> Decimal:
    """Return the tax-deductible portion of a donation."""
    if not donation.is_tax_deductible:
        return ZERO.quantize(Decimal("0.01"))
    amount = coerce_decimal(donation.amount)
    compliance = donation.compliance
    if compliance and compliance.is_quid_pro_quo:
        amount -= coerce_decimal(compliance.quid_pro_quo_value)
    return quantize_currency(max(amount, ZERO))


def build_quid_pro_quo_disclosures(
    donations: Iterable[Donation],
) -> list[QuidProQuoDisclosure]:
    """List verified quid pro quo donations with their deductible portion.

    Args:
        donations: Donations to scan.

    Returns:
        list[QuidProQuoDisclosure]: Disclosures ordered by donation date, id.
    """
    eligible = [
        donation
        for donation in donations
        if donation.status == DonationStatus.VERIFIED
        and donation.compliance is not None
        and donation.compliance.is_quid_pro_quo
    ]
    eligible.sort(key=lambda d: (d.donation_date, d.id))
    disclosures = []
    for donation in eligible:
        total = quantize_currency(coerce_decimal(donation.amount))
        value = quantize_currency(
            coerce_decimal(donation.compliance.quid_pro_quo_value)
        )
        disclosures.append(
            QuidProQuoDisclosure(
                donation_id=donation.id,
                total_amount=total,
                quid_pro_quo_value=value,
                deductible_amount=quantize_currency(max(total - value, ZERO)),
                description=donation.compliance.quid_pro_quo_description,
            )
        )
    return disclosures


def build_restricted_fund_disclosures(
    donations: Iterable[Donation],
    categories: Mapping[str, Category] | None = None,
) -> list[RestrictedFundDisclosure]:
    """Group verified restricted donations by category.

    Args:
        donations: Donations to scan.
        categories: Category metadata by id, used to re-resolve names.

    Returns:
        list[RestrictedFundDisclosure]: One entry per category, ordered by
        category name.
    """
    categories = categories or {}
    grouped: dict[str, list[Donation]] = {}
    for donation in donations:
        if donation.status != DonationStatus.VERIFIED or donation.compliance is None:
            continue
        restriction = normalize_restriction(donation.compliance.restriction_type)
        if restriction not in RESTRICTED_TYPES:
            continue
        grouped.setdefault(donation.category_id, []).append(donation)

    disclosures = []
    for category_id, members in grouped.items():
        category = categories.get(category_id)
        name = category.name if category else members[0].category_name
        by_restriction: dict[str, Decimal] = {}
        total = Decimal("0.00")
        for donation in members:
            amount = quantize_currency(coerce_decimal(donation.amount))
            restriction = normalize_restriction(
                donation.compliance.restriction_type
            ) or RestrictionType.UNRESTRICTED
            key = restriction.value
            by_restriction[key] = by_restriction.get(key, Decimal("0.00")) + amount
            total += amount
        disclosures.append(
            RestrictedFundDisclosure(
                category_id=category_id,
                category_name=name,
                total_amount=total,
                by_restriction=dict(sorted(by_restriction.items())),
                donation_ids=sorted(d.id for d in members),
            )
        )
    return sorted(disclosures, key=lambda d: (d.category_name, d.category_id))


__all__ = [
    "validate_category_compliance",
    "resolve_line_item",
    "deductible_amount",
    "build_quid_pro_quo_disclosures",
    "build_restricted_fund_disclosures",
]
