"""Application use cases package."""

from .compliance_disclosures import (
    ComplianceDisclosures,
    GetComplianceDisclosuresUseCase,
)
from .donor_statements import DonorStatementsUseCase
from .get_financial_summary import GetFinancialSummaryUseCase
from .manage_categories import DEFAULT_CATEGORIES, ManageCategoriesUseCase
from .record_donation import DonationLedgerUseCase
from .role_views import RoleViewsUseCase
from .update_category_statistics import (
    CategoryStatisticsUpdater,
    ReconciliationAlert,
)

__all__ = [
    "ComplianceDisclosures",
    "GetComplianceDisclosuresUseCase",
    "DonorStatementsUseCase",
    "GetFinancialSummaryUseCase",
    "DEFAULT_CATEGORIES",
    "ManageCategoriesUseCase",
    "DonationLedgerUseCase",
    "RoleViewsUseCase",
    "CategoryStatisticsUpdater",
    "ReconciliationAlert",
]
