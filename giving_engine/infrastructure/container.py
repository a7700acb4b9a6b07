"""Composition root for wiring infrastructure adapters."""

from dataclasses import dataclass

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.change_feed import ChangeFeedPort
from giving_engine.application.ports.clock import ClockPort
from giving_engine.application.ports.database import DatabaseEnginePort
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.application.use_cases.compliance_disclosures import (
    GetComplianceDisclosuresUseCase,
)
from giving_engine.application.use_cases.get_financial_summary import (
    GetFinancialSummaryUseCase,
)
from giving_engine.application.use_cases.donor_statements import (
    DonorStatementsUseCase,
)
from giving_engine.application.use_cases.manage_categories import (
    ManageCategoriesUseCase,
)
from giving_engine.application.use_cases.record_donation import (
    DonationLedgerUseCase,
)
from giving_engine.application.use_cases.role_views import RoleViewsUseCase
from giving_engine.application.use_cases.update_category_statistics import (
    CategoryStatisticsUpdater,
)
from giving_engine.infrastructure.category_repository import (
    SqlAlchemyCategoryRepository,
)
from giving_engine.infrastructure.change_feed import ChangeEventBus
from giving_engine.infrastructure.clock import SystemClock
from giving_engine.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from giving_engine.infrastructure.donation_cache import SubjectDonationCache
from giving_engine.infrastructure.donation_repository import (
    SqlAlchemyDonationRepository,
)
from giving_engine.infrastructure.export_policy import load_export_policy
from giving_engine.infrastructure.logging.logger import get_app_logger
from giving_engine.infrastructure.settings import GivingSettings


@dataclass(frozen=True)
class GivingEngine:
    """Wired use cases sharing one ledger, change feed and clock."""

    settings: GivingSettings
    donations: DonationRepositoryPort
    categories: CategoryRepositoryPort
    change_feed: ChangeFeedPort
    clock: ClockPort
    ledger: DonationLedgerUseCase
    statistics: CategoryStatisticsUpdater
    category_admin: ManageCategoriesUseCase
    summaries: GetFinancialSummaryUseCase
    disclosures: GetComplianceDisclosuresUseCase
    views: RoleViewsUseCase
    statements: DonorStatementsUseCase
    cache: SubjectDonationCache


def build_database_adapter(
    settings: GivingSettings | None = None,
) -> DatabaseEnginePort:
    """Return the database adapter instance."""
    resolved = settings or GivingSettings.from_env()
    return SqlAlchemyDatabaseEngineAdapter(resolved.ledger_db_url)


def build_repositories(
    db_port: DatabaseEnginePort,
    create_schema: bool = True,
) -> tuple[SqlAlchemyDonationRepository, SqlAlchemyCategoryRepository]:
    """Return the SQL repositories, creating their tables when asked."""
    donations = SqlAlchemyDonationRepository(db_port)
    categories = SqlAlchemyCategoryRepository(db_port)
    if create_schema:
        donations.ensure_schema()
        categories.ensure_schema()
    return donations, categories


def build_engine(
    settings: GivingSettings | None = None,
    donations: DonationRepositoryPort | None = None,
    categories: CategoryRepositoryPort | None = None,
    clock: ClockPort | None = None,
    logger=None,
) -> GivingEngine:
    """Wire every use case around shared repositories and a change feed.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        donations: Ledger repository; SQL-backed when omitted.
        categories: Category repository; SQL-backed when omitted.
        clock: Time source; the system clock when omitted.
        logger: Logger shared by the use cases.

    Returns:
        GivingEngine: The wired engine. The statistics updater is already
        subscribed to the change feed.
    """
    resolved_settings = settings or GivingSettings.from_env()
    resolved_logger = logger or get_app_logger()
    if donations is None or categories is None:
        sql_donations, sql_categories = build_repositories(
            build_database_adapter(resolved_settings)
        )
        donations = donations or sql_donations
        categories = categories or sql_categories
    resolved_clock = clock or SystemClock()
    change_feed = ChangeEventBus(logger=resolved_logger)

    statistics = CategoryStatisticsUpdater(
        categories,
        donations,
        resolved_clock,
        change_feed=change_feed,
        logger=resolved_logger,
    )
    statistics.subscribe(change_feed)
    summaries = GetFinancialSummaryUseCase(
        donations,
        categories,
        logger=resolved_logger,
        growth_policy=resolved_settings.zero_growth_policy,
    )
    ledger = DonationLedgerUseCase(
        donations,
        categories,
        change_feed,
        resolved_clock,
        logger=resolved_logger,
        max_amount=resolved_settings.max_donation_amount,
        inactive_category_policy=resolved_settings.inactive_category_policy,
    )
    return GivingEngine(
        settings=resolved_settings,
        donations=donations,
        categories=categories,
        change_feed=change_feed,
        clock=resolved_clock,
        ledger=ledger,
        statistics=statistics,
        category_admin=ManageCategoriesUseCase(
            categories, statistics, resolved_clock, logger=resolved_logger
        ),
        summaries=summaries,
        disclosures=GetComplianceDisclosuresUseCase(
            donations, categories, logger=resolved_logger
        ),
        views=RoleViewsUseCase(
            donations,
            categories,
            summaries,
            load_export_policy(resolved_settings.export_fields_file),
            resolved_clock,
            logger=resolved_logger,
        ),
        statements=DonorStatementsUseCase(
            donations, categories, ledger, resolved_clock, logger=resolved_logger
        ),
        cache=SubjectDonationCache(
            donations,
            change_feed,
            resolved_clock,
            ttl_seconds=resolved_settings.cache_ttl_seconds,
            logger=resolved_logger,
        ),
    )


__all__ = [
    "GivingEngine",
    "build_database_adapter",
    "build_repositories",
    "build_engine",
]
