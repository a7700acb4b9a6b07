"""Use case serving role-sanitized donation views and exports."""

from datetime import date

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.clock import ClockPort
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.application.use_cases.get_financial_summary import (
    GetFinancialSummaryUseCase,
)
from giving_engine.domain.constants import Role
from giving_engine.domain.errors import AccessError
from giving_engine.domain.models import AccessContext
from giving_engine.domain.services.aggregation import compute_donor_giving_summary
from giving_engine.domain.services.sanitization import (
    ExportFieldPolicy,
    export_fields,
    require_subject_access,
    sanitize_donations,
    sanitize_donor_summary,
    sanitize_summary,
)
from giving_engine.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)


class RoleViewsUseCase:
    """Read donations and summaries through the role sanitizer.

    Every request takes an explicit AccessContext. Access denials and
    successful exports are written to the usage log.
    """

    def __init__(
        self,
        donation_repository: DonationRepositoryPort,
        category_repository: CategoryRepositoryPort,
        summary_use_case: GetFinancialSummaryUseCase,
        export_policy: ExportFieldPolicy,
        clock: ClockPort,
        logger=None,
        usage_logger=None,
    ) -> None:
        self._donations = donation_repository
        self._categories = category_repository
        self._summary_use_case = summary_use_case
        self._policy = export_policy
        self._clock = clock
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()

    def list_donations(
        self,
        context: AccessContext,
        start_date: date | None = None,
        end_date: date | None = None,
        donor_id: str | None = None,
    ) -> list[dict[str, object]]:
        """Return sanitized donation records.

        Args:
            context: Role and subject of the requester.
            start_date: Optional first day of the window.
            end_date: Optional last day of the window.
            donor_id: Donor the request is scoped to, if any.

        Returns:
            list[dict[str, object]]: Records holding only allowed fields.

        Raises:
            AccessError: If the role may not read the requested data.
        """
        try:
            subject_id = require_subject_access(context, donor_id)
            if subject_id is not None:
                donations = self._donations.query("donor_id", subject_id)
                if start_date is not None and end_date is not None:
                    donations = [
                        donation
                        for donation in donations
                        if start_date <= donation.donation_date <= end_date
                    ]
            elif start_date is not None and end_date is not None:
                donations = self._donations.list_in_period(start_date, end_date)
            else:
                donations = self._donations.list_all()
            donations = sorted(donations, key=lambda d: (d.donation_date, d.id))
            records = sanitize_donations(
                context,
                donations,
                self._policy,
                requested_subject_id=subject_id,
                category_names=self._category_names(),
            )
        except AccessError as exc:
            self._log_denial(context, exc)
            raise
        self._usage_logger.info(
            f"role={context.role.value} subject={context.subject_id} "
            f"read {len(records)} donations"
        )
        return records

    def financial_summary(
        self,
        context: AccessContext,
        start_date: date,
        end_date: date,
        previous_start: date | None = None,
        previous_end: date | None = None,
    ) -> dict[str, object]:
        """Return an organization-wide summary for non-donor roles."""
        if context.role == Role.SELF_ACCESS:
            exc = AccessError(
                "Organization-wide summaries are not available to donors",
                role=context.role.value,
                subject_id=context.subject_id,
            )
            self._log_denial(context, exc)
            raise exc
        summary = self._summary_use_case.execute(
            start_date, end_date, previous_start, previous_end
        )
        try:
            record = sanitize_summary(context, summary)
        except AccessError as exc:
            self._log_denial(context, exc)
            raise
        self._usage_logger.info(
            f"role={context.role.value} read summary {start_date} to {end_date}"
        )
        return record

    def donor_summary(
        self,
        context: AccessContext,
        donor_id: str | None = None,
        tax_year: int | None = None,
    ) -> dict[str, object]:
        """Return a donor's personal giving summary.

        Self-access requesters get their own summary when no donor is named.
        """
        try:
            subject_id = require_subject_access(context, donor_id)
            if subject_id is None:
                raise AccessError(
                    "A donor must be named for a personal summary",
                    role=context.role.value,
                    subject_id=None,
                )
            summary = compute_donor_giving_summary(
                self._donations.query("donor_id", subject_id),
                subject_id,
                self._clock.today(),
                tax_year=tax_year,
            )
            record = sanitize_donor_summary(context, summary)
        except AccessError as exc:
            self._log_denial(context, exc)
            raise
        self._usage_logger.info(
            f"role={context.role.value} read donor summary for {subject_id}"
        )
        return record

    def export_columns(self, context: AccessContext) -> tuple[str, ...]:
        """Return the closed list of export columns for the requester."""
        return export_fields(context.role, self._policy)

    def _category_names(self) -> dict[str, str]:
        return {category.id: category.name for category in self._categories.list_all()}

    def _log_denial(self, context: AccessContext, exc: AccessError) -> None:
        self._usage_logger.warning(
            f"{exc.code}: role={context.role.value} subject={context.subject_id} "
            f"requested={exc.subject_id}: {exc.message}"
        )


__all__ = ["RoleViewsUseCase"]
