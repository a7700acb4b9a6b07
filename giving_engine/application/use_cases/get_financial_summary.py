"""Use case to compute financial summaries of verified donations."""

from datetime import date

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.domain.models import (
    FinancialSummary,
    LedgerStatistics,
    ReportingPeriod,
)
from giving_engine.domain.policies import ZeroGrowthPolicy
from giving_engine.domain.services.aggregation import (
    compute_financial_summary,
    compute_ledger_statistics,
)
from giving_engine.infrastructure.logging.logger import get_app_logger


class GetFinancialSummaryUseCase:
    """Compute period summaries from the ledger and category metadata."""

    def __init__(
        self,
        donation_repository: DonationRepositoryPort,
        category_repository: CategoryRepositoryPort,
        logger=None,
        growth_policy: ZeroGrowthPolicy = ZeroGrowthPolicy.HUNDRED_PERCENT,
    ) -> None:
        """Initialize the use case.

        Args:
            donation_repository: Ledger storage.
            category_repository: Category metadata used to resolve names.
            logger: Optional logger compatible with logging.Logger-like API.
            growth_policy: Handling of an empty comparison period.
        """
        self._donations = donation_repository
        self._categories = category_repository
        self._logger = logger or get_app_logger()
        self._growth_policy = growth_policy

    def execute(
        self,
        start_date: date,
        end_date: date,
        previous_start: date | None = None,
        previous_end: date | None = None,
    ) -> FinancialSummary:
        """Return the summary for a period, with growth when asked.

        Args:
            start_date: First day of the period.
            end_date: Last day of the period.
            previous_start: First day of the comparison period.
            previous_end: Last day of the comparison period.

        Returns:
            FinancialSummary: Totals and breakdowns of verified donations.

        Raises:
            ValueError: If a period ends before it starts, or only one
                bound of the comparison period is given.
        """
        period = self._period(start_date, end_date)
        categories = {category.id: category for category in self._categories.list_all()}

        previous = None
        if previous_start is not None or previous_end is not None:
            if previous_start is None or previous_end is None:
                raise ValueError("Comparison period needs both start and end dates")
            previous_period = self._period(previous_start, previous_end)
            previous = compute_financial_summary(
                self._donations.list_in_period(previous_start, previous_end),
                previous_period,
                categories=categories,
                logger=self._logger,
            )

        summary = compute_financial_summary(
            self._donations.list_in_period(start_date, end_date),
            period,
            categories=categories,
            previous=previous,
            growth_policy=self._growth_policy,
            logger=self._logger,
        )
        self._logger.info(
            f"Financial summary {start_date} to {end_date}: "
            f"total={summary.total_donations}, count={summary.donation_count}"
        )
        return summary

    def ledger_statistics(self) -> LedgerStatistics:
        """Return counts over the whole ledger by status and method."""
        return compute_ledger_statistics(self._donations.list_all())

    @staticmethod
    def _period(start_date: date, end_date: date) -> ReportingPeriod:
        if end_date < start_date:
            raise ValueError(f"Period ends before it starts: {start_date} > {end_date}")
        return ReportingPeriod(start=start_date, end=end_date)


__all__ = ["GetFinancialSummaryUseCase"]
