"""SQLAlchemy-backed repository for donation categories."""

from sqlalchemy import text

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.database import DatabaseEnginePort
from giving_engine.domain.errors import NotFoundError
from giving_engine.domain.models import Category, CategoryStatistics
from giving_engine.domain.services.normalization import normalize_line_item
from giving_engine.infrastructure.donation_repository import (
    to_date,
    to_datetime,
    to_decimal,
    to_param,
)
from giving_engine.utils.decimal_utils import quantize_currency

CREATE_CATEGORIES_SQL = """
CREATE TABLE IF NOT EXISTS donation_categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    default_line_item TEXT NOT NULL,
    is_tax_deductible BOOLEAN NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    display_order INTEGER NOT NULL,
    description TEXT,
    annual_goal NUMERIC(14, 2),
    include_in_reports BOOLEAN NOT NULL DEFAULT TRUE,
    reporting_category TEXT,
    created_by TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    total_amount NUMERIC(14, 2) NOT NULL DEFAULT 0,
    donation_count INTEGER NOT NULL DEFAULT 0,
    average_donation NUMERIC(14, 2) NOT NULL DEFAULT 0,
    current_year_total NUMERIC(14, 2) NOT NULL DEFAULT 0,
    last_year_total NUMERIC(14, 2) NOT NULL DEFAULT 0,
    last_donation_date DATE,
    statistics_year INTEGER
)
"""

CATEGORY_COLUMNS = (
    "id",
    "name",
    "default_line_item",
    "is_tax_deductible",
    "is_active",
    "display_order",
    "description",
    "annual_goal",
    "include_in_reports",
    "reporting_category",
    "created_by",
    "created_at",
    "updated_at",
    "total_amount",
    "donation_count",
    "average_donation",
    "current_year_total",
    "last_year_total",
    "last_donation_date",
    "statistics_year",
)

SELECT_CATEGORIES_SQL = (
    f"SELECT {', '.join(CATEGORY_COLUMNS)} FROM donation_categories"
)

INSERT_CATEGORY_SQL = text(
    f"INSERT INTO donation_categories ({', '.join(CATEGORY_COLUMNS)}) "
    f"VALUES ({', '.join(':' + column for column in CATEGORY_COLUMNS)})"
)

UPDATE_CATEGORY_SQL = text(
    "UPDATE donation_categories SET "
    + ", ".join(f"{column} = :{column}" for column in CATEGORY_COLUMNS[1:])
    + " WHERE id = :id"
)


class SqlAlchemyCategoryRepository(CategoryRepositoryPort):
    """Repository storing categories and their running statistics."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        self._db_port = db_port

    def ensure_schema(self) -> None:
        """Create the categories table when missing."""
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.exec_driver_sql(CREATE_CATEGORIES_SQL)

    def add(self, category: Category) -> Category:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(INSERT_CATEGORY_SQL, self._to_params(category))
        return category

    def get(self, category_id: str) -> Category | None:
        rows = self._fetch(
            text(SELECT_CATEGORIES_SQL + " WHERE id = :id"),
            {"id": category_id},
        )
        return rows[0] if rows else None

    def save(self, category: Category) -> Category:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            result = conn.execute(UPDATE_CATEGORY_SQL, self._to_params(category))
        if result.rowcount == 0:
            raise NotFoundError("Category", category.id)
        return category

    def find_by_name(self, name: str) -> Category | None:
        """Return the category whose name matches, ignoring case."""
        rows = self._fetch(
            text(SELECT_CATEGORIES_SQL + " WHERE lower(name) = lower(:name)"),
            {"name": name.strip()},
        )
        return rows[0] if rows else None

    def list_all(self) -> list[Category]:
        return self._fetch(
            text(SELECT_CATEGORIES_SQL + " ORDER BY display_order, name"),
            {},
        )

    def list_active(self) -> list[Category]:
        return self._fetch(
            text(
                SELECT_CATEGORIES_SQL
                + " WHERE is_active = :active ORDER BY display_order, name"
            ),
            {"active": True},
        )

    def _fetch(self, query, params: dict) -> list[Category]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(query, params).all()
        return [self._from_row(row) for row in rows]

    @staticmethod
    def _to_params(category: Category) -> dict[str, object]:
        stats = category.statistics
        values = {
            "id": category.id,
            "name": category.name,
            "default_line_item": category.default_line_item,
            "is_tax_deductible": category.is_tax_deductible,
            "is_active": category.is_active,
            "display_order": category.display_order,
            "description": category.description,
            "annual_goal": category.annual_goal,
            "include_in_reports": category.include_in_reports,
            "reporting_category": category.reporting_category,
            "created_by": category.created_by,
            "created_at": category.created_at,
            "updated_at": category.updated_at,
            "total_amount": stats.total_amount,
            "donation_count": stats.donation_count,
            "average_donation": stats.average_donation,
            "current_year_total": stats.current_year_total,
            "last_year_total": stats.last_year_total,
            "last_donation_date": stats.last_donation_date,
            "statistics_year": stats.statistics_year,
        }
        return {key: to_param(value) for key, value in values.items()}

    @staticmethod
    def _from_row(row) -> Category:
        data = row._mapping
        statistics = CategoryStatistics(
            total_amount=quantize_currency(to_decimal(data["total_amount"])),
            donation_count=int(data["donation_count"]),
            average_donation=quantize_currency(to_decimal(data["average_donation"])),
            current_year_total=quantize_currency(
                to_decimal(data["current_year_total"])
            ),
            last_year_total=quantize_currency(to_decimal(data["last_year_total"])),
            last_donation_date=to_date(data["last_donation_date"]),
            statistics_year=data["statistics_year"],
        )
        annual_goal = to_decimal(data["annual_goal"])
        return Category(
            id=data["id"],
            name=data["name"],
            default_line_item=(
                normalize_line_item(data["default_line_item"])
                or data["default_line_item"]
            ),
            is_tax_deductible=bool(data["is_tax_deductible"]),
            is_active=bool(data["is_active"]),
            display_order=int(data["display_order"]),
            statistics=statistics,
            description=data["description"],
            annual_goal=(
                quantize_currency(annual_goal) if annual_goal is not None else None
            ),
            include_in_reports=bool(data["include_in_reports"]),
            reporting_category=data["reporting_category"],
            created_by=data["created_by"],
            created_at=to_datetime(data["created_at"]),
            updated_at=to_datetime(data["updated_at"]),
        )


__all__ = ["SqlAlchemyCategoryRepository", "CREATE_CATEGORIES_SQL"]
