"""Domain constants and closed enumerations for donation reporting."""

from decimal import Decimal
from enum import Enum


class DonationMethod(str, Enum):
    """Payment method recorded for a donation."""

    CHECK = "check"
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    STOCK = "stock"
    CRYPTO = "crypto"
    IN_KIND = "in_kind"
    OTHER = "other"


class DonationStatus(str, Enum):
    """Lifecycle state of a donation."""

    PENDING = "pending"
    VERIFIED = "verified"
    VOID = "void"
    REFUNDED = "refunded"


class LineItem(str, Enum):
    """IRS Form 990 Part VIII revenue line items."""

    CASH_CONTRIBUTIONS = "1a_cash_contributions"
    NONCASH_CONTRIBUTIONS = "1b_noncash_contributions"
    CONTRIBUTIONS_REPORTED_990 = "1c_contributions_reported_990"
    RELATED_ORGANIZATIONS = "1d_related_organizations"
    GOVERNMENT_GRANTS = "1e_government_grants"
    OTHER_CONTRIBUTIONS = "1f_other_contributions"
    PROGRAM_SERVICE_REVENUE = "2_program_service_revenue"
    INVESTMENT_INCOME = "3_investment_income"
    OTHER_REVENUE = "4_other_revenue"
    NOT_APPLICABLE = "not_applicable"


class RestrictionType(str, Enum):
    """Donor-imposed restriction on the use of a gift."""

    UNRESTRICTED = "unrestricted"
    TEMPORARILY_RESTRICTED = "temporarily_restricted"
    PERMANENTLY_RESTRICTED = "permanently_restricted"


class Role(str, Enum):
    """Access role of the party requesting ledger data."""

    FULL_ACCESS = "full_access"
    AGGREGATE_ACCESS = "aggregate_access"
    SELF_ACCESS = "self_access"


class ChangeType(str, Enum):
    """Kind of ledger change carried by a change event."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    VERIFIED = "verified"
    VOIDED = "voided"
    REFUNDED = "refunded"


# Spellings used by older records and imports.
LEGACY_METHOD_ALIASES = {
    "credit_card": DonationMethod.CARD,
    "debit_card": DonationMethod.CARD,
    "online": DonationMethod.CARD,
    "cryptocurrency": DonationMethod.CRYPTO,
}

TAX_DEDUCTIBLE_LINE_ITEMS = frozenset(
    {
        LineItem.CASH_CONTRIBUTIONS,
        LineItem.NONCASH_CONTRIBUTIONS,
        LineItem.CONTRIBUTIONS_REPORTED_990,
        LineItem.PROGRAM_SERVICE_REVENUE,
    }
)

NON_CASH_METHODS = frozenset(
    {DonationMethod.STOCK, DonationMethod.CRYPTO, DonationMethod.IN_KIND}
)

RESTRICTED_TYPES = frozenset(
    {
        RestrictionType.TEMPORARILY_RESTRICTED,
        RestrictionType.PERMANENTLY_RESTRICTED,
    }
)

DONOR_IDENTITY_FIELDS = ("donor_id", "donor_name")

# (label, inclusive lower bound, exclusive upper bound)
DONOR_RANGE_BUCKETS = (
    ("$0-$99", Decimal("0"), Decimal("100")),
    ("$100-$499", Decimal("100"), Decimal("500")),
    ("$500-$999", Decimal("500"), Decimal("1000")),
    ("$1000-$2499", Decimal("1000"), Decimal("2500")),
    ("$2500+", Decimal("2500"), None),
)

DEFAULT_MAX_DONATION_AMOUNT = Decimal("1000000.00")
MAX_CATEGORY_NAME_LENGTH = 100


__all__ = [
    "DonationMethod",
    "DonationStatus",
    "LineItem",
    "RestrictionType",
    "Role",
    "ChangeType",
    "LEGACY_METHOD_ALIASES",
    "TAX_DEDUCTIBLE_LINE_ITEMS",
    "NON_CASH_METHODS",
    "RESTRICTED_TYPES",
    "DONOR_IDENTITY_FIELDS",
    "DONOR_RANGE_BUCKETS",
    "DEFAULT_MAX_DONATION_AMOUNT",
    "MAX_CATEGORY_NAME_LENGTH",
]
