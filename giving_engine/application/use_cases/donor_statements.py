"""Use case producing year-end giving statements and donation receipts."""

from threading import Lock

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.clock import ClockPort
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.application.use_cases.record_donation import (
    DonationLedgerUseCase,
)
from giving_engine.domain.constants import DonationStatus
from giving_engine.domain.errors import (
    AccessError,
    DateValidationError,
    LifecycleTransitionError,
    NotFoundError,
)
from giving_engine.domain.models import AccessContext
from giving_engine.domain.services.sanitization import (
    require_subject_access,
    sanitize_donor_document,
)
from giving_engine.domain.services.statements import (
    build_annual_statement,
    build_donation_receipt,
    next_receipt_number,
)
from giving_engine.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)

EARLIEST_STATEMENT_YEAR = 2000


class DonorStatementsUseCase:
    """Build statement and receipt data for donors.

    Documents are returned as plain records after passing the role
    sanitizer; rendering them is left to the caller. Issuing a receipt
    assigns the next ``R-<year>-<nnn>`` number and records it on the
    donation through the ledger, so the change is published like any other
    write.
    """

    def __init__(
        self,
        donation_repository: DonationRepositoryPort,
        category_repository: CategoryRepositoryPort,
        ledger: DonationLedgerUseCase,
        clock: ClockPort,
        logger=None,
        usage_logger=None,
    ) -> None:
        self._donations = donation_repository
        self._categories = category_repository
        self._ledger = ledger
        self._clock = clock
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()
        self._receipt_lock = Lock()

    def annual_statement(
        self,
        context: AccessContext,
        tax_year: int,
        donor_id: str | None = None,
    ) -> dict[str, object]:
        """Return the year-end statement of a donor.

        Args:
            context: Role and subject of the requester.
            tax_year: Statement year; not before 2000 nor after the current
                year.
            donor_id: Donor to report on; defaults to the self-access
                subject.

        Returns:
            dict[str, object]: Statement record.

        Raises:
            AccessError: If the requester may not read the donor's data.
            DateValidationError: If the tax year is out of range.
            NotFoundError: If the donor has no verified donations that year.
        """
        current_year = self._clock.today().year
        if not EARLIEST_STATEMENT_YEAR <= tax_year <= current_year:
            raise DateValidationError(
                f"Invalid tax year: {tax_year}", field="tax_year"
            )
        try:
            subject_id = require_subject_access(context, donor_id)
            if subject_id is None:
                raise AccessError(
                    "A donor must be named for a statement",
                    role=context.role.value,
                    subject_id=None,
                )
            statement = build_annual_statement(
                self._donations.query("donor_id", subject_id),
                subject_id,
                tax_year,
                generated_at=self._clock.now(),
                category_names=self._category_names(),
            )
            record = sanitize_donor_document(context, statement)
        except AccessError as exc:
            self._log_denial(context, exc)
            raise
        self._logger.info(
            f"Statement {tax_year} built for {subject_id}: "
            f"{statement.donation_count} donations, total={statement.total_amount}"
        )
        self._usage_logger.info(
            f"role={context.role.value} read {tax_year} statement for {subject_id}"
        )
        return record

    def donation_receipt(
        self,
        context: AccessContext,
        donation_id: str,
    ) -> dict[str, object]:
        """Return the receipt of a verified donation, issuing its number once.

        Args:
            context: Role and subject of the requester.
            donation_id: Donation to receipt.

        Returns:
            dict[str, object]: Receipt record.

        Raises:
            AccessError: If the requester may not read the donation.
            LifecycleTransitionError: If the donation is not verified.
            NotFoundError: If the donation does not exist.
        """
        with self._receipt_lock:
            donation = self._donations.get(donation_id)
            if donation is None:
                raise NotFoundError("Donation", donation_id)
            if donation.status != DonationStatus.VERIFIED:
                raise LifecycleTransitionError(
                    "Receipts are only issued for verified donations",
                    current_status=donation.status.value,
                    target_status=DonationStatus.VERIFIED.value,
                )
            receipt_number = donation.receipt_number or next_receipt_number(
                (d.receipt_number for d in self._donations.list_all()),
                donation.tax_year,
            )
            receipt = build_donation_receipt(
                donation,
                receipt_number,
                generated_at=self._clock.now(),
                category_names=self._category_names(),
            )
            try:
                record = sanitize_donor_document(context, receipt)
            except AccessError as exc:
                self._log_denial(context, exc)
                raise
            if not donation.is_receipt_sent or donation.receipt_number is None:
                self._ledger.mark_receipt_sent(donation_id, receipt_number)
                self._logger.info(
                    f"Receipt {receipt_number} issued for donation {donation_id}"
                )
        self._usage_logger.info(
            f"role={context.role.value} read receipt {receipt_number}"
        )
        return record

    def _category_names(self) -> dict[str, str]:
        return {category.id: category.name for category in self._categories.list_all()}

    def _log_denial(self, context: AccessContext, exc: AccessError) -> None:
        self._usage_logger.warning(
            f"{exc.code}: role={context.role.value} subject={context.subject_id} "
            f"requested={exc.subject_id}: {exc.message}"
        )


__all__ = ["DonorStatementsUseCase"]
