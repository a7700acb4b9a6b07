"""Use case building Form 990 disclosure lists for a period."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.domain.models import (
    QuidProQuoDisclosure,
    RestrictedFundDisclosure,
)
from giving_engine.domain.services.compliance import (
    build_quid_pro_quo_disclosures,
    build_restricted_fund_disclosures,
)
from giving_engine.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class ComplianceDisclosures:
    """Disclosure lists for one reporting period.

    Attributes:
        period_start: First day of the period.
        period_end: Last day of the period.
        quid_pro_quo: Donations partly exchanged for goods or services.
        restricted_funds: Restricted donations grouped by category.
    """

    period_start: date
    period_end: date
    quid_pro_quo: list[QuidProQuoDisclosure]
    restricted_funds: list[RestrictedFundDisclosure]

    @property
    def total_deductible_quid_pro_quo(self) -> Decimal:
        return sum(
            (item.deductible_amount for item in self.quid_pro_quo),
            Decimal("0.00"),
        )


class GetComplianceDisclosuresUseCase:
    """Collect quid pro quo and restricted fund disclosures."""

    def __init__(
        self,
        donation_repository: DonationRepositoryPort,
        category_repository: CategoryRepositoryPort,
        logger=None,
    ) -> None:
        self._donations = donation_repository
        self._categories = category_repository
        self._logger = logger or get_app_logger()

    def execute(self, start_date: date, end_date: date) -> ComplianceDisclosures:
        """Return the disclosures for verified donations in the period."""
        donations = self._donations.list_in_period(start_date, end_date)
        categories = {category.id: category for category in self._categories.list_all()}
        disclosures = ComplianceDisclosures(
            period_start=start_date,
            period_end=end_date,
            quid_pro_quo=build_quid_pro_quo_disclosures(donations),
            restricted_funds=build_restricted_fund_disclosures(donations, categories),
        )
        self._logger.info(
            f"Compliance disclosures {start_date} to {end_date}: "
            f"{len(disclosures.quid_pro_quo)} quid pro quo, "
            f"{len(disclosures.restricted_funds)} restricted categories"
        )
        return disclosures


__all__ = ["ComplianceDisclosures", "GetComplianceDisclosuresUseCase"]
