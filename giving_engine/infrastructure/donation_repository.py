"""SQLAlchemy-backed repository for ledger donations."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import text

from giving_engine.application.ports.database import DatabaseEnginePort
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.domain.errors import NotFoundError
from giving_engine.domain.models import ComplianceFields, Donation
from giving_engine.domain.services.normalization import (
    normalize_line_item,
    normalize_method,
    normalize_restriction,
    normalize_status,
)
from giving_engine.utils.decimal_utils import quantize_currency

CREATE_DONATIONS_SQL = """
CREATE TABLE IF NOT EXISTS donations (
    id TEXT PRIMARY KEY,
    amount NUMERIC(14, 2) NOT NULL,
    donation_date DATE NOT NULL,
    method TEXT NOT NULL,
    category_id TEXT NOT NULL,
    category_name TEXT NOT NULL,
    line_item TEXT,
    is_quid_pro_quo BOOLEAN NOT NULL DEFAULT FALSE,
    quid_pro_quo_value NUMERIC(14, 2),
    quid_pro_quo_description TEXT,
    is_anonymous BOOLEAN NOT NULL DEFAULT FALSE,
    restriction_type TEXT,
    restriction_description TEXT,
    fair_market_value NUMERIC(14, 2),
    donor_provided_value NUMERIC(14, 2),
    donor_id TEXT,
    donor_name TEXT,
    tax_year INTEGER NOT NULL,
    status TEXT NOT NULL,
    is_tax_deductible BOOLEAN NOT NULL DEFAULT TRUE,
    is_receipt_sent BOOLEAN NOT NULL DEFAULT FALSE,
    receipt_sent_at TIMESTAMP,
    receipt_number TEXT,
    note TEXT,
    source_label TEXT,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL,
    verified_at TIMESTAMP,
    verified_by TEXT,
    created_by TEXT,
    updated_by TEXT
)
"""

DONATION_COLUMNS = (
    "id",
    "amount",
    "donation_date",
    "method",
    "category_id",
    "category_name",
    "line_item",
    "is_quid_pro_quo",
    "quid_pro_quo_value",
    "quid_pro_quo_description",
    "is_anonymous",
    "restriction_type",
    "restriction_description",
    "fair_market_value",
    "donor_provided_value",
    "donor_id",
    "donor_name",
    "tax_year",
    "status",
    "is_tax_deductible",
    "is_receipt_sent",
    "receipt_sent_at",
    "receipt_number",
    "note",
    "source_label",
    "created_at",
    "updated_at",
    "verified_at",
    "verified_by",
    "created_by",
    "updated_by",
)

SELECT_DONATIONS_SQL = f"SELECT {', '.join(DONATION_COLUMNS)} FROM donations"

INSERT_DONATION_SQL = text(
    f"INSERT INTO donations ({', '.join(DONATION_COLUMNS)}) "
    f"VALUES ({', '.join(':' + column for column in DONATION_COLUMNS)})"
)

UPDATE_DONATION_SQL = text(
    "UPDATE donations SET "
    + ", ".join(f"{column} = :{column}" for column in DONATION_COLUMNS[1:])
    + " WHERE id = :id"
)

QUERYABLE_FIELDS = frozenset(
    {"donor_id", "category_id", "status", "tax_year", "method"}
)


def to_decimal(value) -> Decimal | None:
    """Normalize numeric values read from SQL to Decimal."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_date(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def to_datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def to_param(value):
    """Convert a value to a driver-neutral bind parameter."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


class SqlAlchemyDonationRepository(DonationRepositoryPort):
    """Repository storing donations in the ``donations`` table."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the ledger engine.
        """
        self._db_port = db_port

    def ensure_schema(self) -> None:
        """Create the donations table when missing."""
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.exec_driver_sql(CREATE_DONATIONS_SQL)

    def add(self, donation: Donation) -> Donation:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(INSERT_DONATION_SQL, self._to_params(donation))
        return donation

    def get(self, donation_id: str) -> Donation | None:
        query = text(SELECT_DONATIONS_SQL + " WHERE id = :id")
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            row = conn.execute(query, {"id": donation_id}).first()
        return self._from_row(row) if row else None

    def save(self, donation: Donation) -> Donation:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            result = conn.execute(UPDATE_DONATION_SQL, self._to_params(donation))
        if result.rowcount == 0:
            raise NotFoundError("Donation", donation.id)
        return donation

    def query(self, field: str, value: object) -> list[Donation]:
        """Return donations whose column equals the value.

        Raises:
            ValueError: If the field is not a queryable column.
        """
        if field not in QUERYABLE_FIELDS:
            raise ValueError(f"Unsupported donation query field: {field}")
        query = text(
            SELECT_DONATIONS_SQL + f" WHERE {field} = :value ORDER BY donation_date, id"
        )
        return self._fetch(query, {"value": to_param(value)})

    def list_in_period(self, start: date, end: date) -> list[Donation]:
        query = text(
            SELECT_DONATIONS_SQL
            + " WHERE donation_date >= :start_date AND donation_date <= :end_date"
            + " ORDER BY donation_date, id"
        )
        return self._fetch(
            query,
            {"start_date": to_param(start), "end_date": to_param(end)},
        )

    def list_all(self) -> list[Donation]:
        return self._fetch(text(SELECT_DONATIONS_SQL + " ORDER BY donation_date, id"), {})

    def _fetch(self, query, params: dict) -> list[Donation]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(query, params).all()
        return [self._from_row(row) for row in rows]

    @staticmethod
    def _to_params(donation: Donation) -> dict[str, object]:
        compliance = donation.compliance or ComplianceFields(line_item=None)
        values = {
            "id": donation.id,
            "amount": donation.amount,
            "donation_date": donation.donation_date,
            "method": donation.method,
            "category_id": donation.category_id,
            "category_name": donation.category_name,
            "line_item": compliance.line_item,
            "is_quid_pro_quo": bool(compliance.is_quid_pro_quo),
            "quid_pro_quo_value": compliance.quid_pro_quo_value,
            "quid_pro_quo_description": compliance.quid_pro_quo_description,
            "is_anonymous": bool(compliance.is_anonymous),
            "restriction_type": compliance.restriction_type,
            "restriction_description": compliance.restriction_description,
            "fair_market_value": compliance.fair_market_value,
            "donor_provided_value": compliance.donor_provided_value,
            "donor_id": donation.donor_id,
            "donor_name": donation.donor_name,
            "tax_year": donation.tax_year,
            "status": donation.status,
            "is_tax_deductible": donation.is_tax_deductible,
            "is_receipt_sent": donation.is_receipt_sent,
            "receipt_sent_at": donation.receipt_sent_at,
            "receipt_number": donation.receipt_number,
            "note": donation.note,
            "source_label": donation.source_label,
            "created_at": donation.created_at,
            "updated_at": donation.updated_at,
            "verified_at": donation.verified_at,
            "verified_by": donation.verified_by,
            "created_by": donation.created_by,
            "updated_by": donation.updated_by,
        }
        return {key: to_param(value) for key, value in values.items()}

    @staticmethod
    def _from_row(row) -> Donation:
        data = row._mapping
        compliance = None
        if data["line_item"] is not None:
            compliance = ComplianceFields(
                line_item=normalize_line_item(data["line_item"]) or data["line_item"],
                is_quid_pro_quo=bool(data["is_quid_pro_quo"]),
                quid_pro_quo_value=to_decimal(data["quid_pro_quo_value"]),
                quid_pro_quo_description=data["quid_pro_quo_description"],
                is_anonymous=bool(data["is_anonymous"]),
                restriction_type=(
                    normalize_restriction(data["restriction_type"])
                    or data["restriction_type"]
                ),
                restriction_description=data["restriction_description"],
                fair_market_value=to_decimal(data["fair_market_value"]),
                donor_provided_value=to_decimal(data["donor_provided_value"]),
            )
        return Donation(
            id=data["id"],
            amount=quantize_currency(to_decimal(data["amount"])),
            donation_date=to_date(data["donation_date"]),
            method=normalize_method(data["method"]) or data["method"],
            category_id=data["category_id"],
            category_name=data["category_name"],
            compliance=compliance,
            tax_year=int(data["tax_year"]),
            status=normalize_status(data["status"]) or data["status"],
            created_at=to_datetime(data["created_at"]),
            updated_at=to_datetime(data["updated_at"]),
            donor_id=data["donor_id"],
            donor_name=data["donor_name"],
            is_tax_deductible=bool(data["is_tax_deductible"]),
            is_receipt_sent=bool(data["is_receipt_sent"]),
            receipt_sent_at=to_datetime(data["receipt_sent_at"]),
            receipt_number=data["receipt_number"],
            note=data["note"],
            source_label=data["source_label"],
            verified_at=to_datetime(data["verified_at"]),
            verified_by=data["verified_by"],
            created_by=data["created_by"],
            updated_by=data["updated_by"],
        )


__all__ = [
    "SqlAlchemyDonationRepository",
    "CREATE_DONATIONS_SQL",
    "to_decimal",
    "to_date",
    "to_datetime",
    "to_param",
]
