"""Use case recording donations and moving them through their lifecycle."""

from collections.abc import Callable, Iterable
from decimal import Decimal
import uuid

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.change_feed import ChangeFeedPort
from giving_engine.application.ports.clock import ClockPort
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.domain.constants import (
    DEFAULT_MAX_DONATION_AMOUNT,
    ChangeType,
    DonationStatus,
)
from giving_engine.domain.errors import (
    BatchValidationError,
    CategoryValidationError,
    NotFoundError,
    ValidationError,
)
from giving_engine.domain.models import (
    Category,
    ChangeEvent,
    Donation,
    DonationDraft,
)
from giving_engine.domain.policies import InactiveCategoryPolicy
from giving_engine.domain.services.lifecycle import (
    apply_edit,
    mark_receipt_sent,
    new_pending_donation,
    transition,
)
from giving_engine.domain.services.validation import validate_donation_draft
from giving_engine.infrastructure.logging.logger import get_app_logger

_TRANSITION_EVENTS = {
    DonationStatus.VERIFIED: ChangeType.VERIFIED,
    DonationStatus.VOID: ChangeType.VOIDED,
    DonationStatus.REFUNDED: ChangeType.REFUNDED,
}


def _new_donation_id() -> str:
    return uuid.uuid4().hex


class DonationLedgerUseCase:
    """Validate, record and transition ledger donations.

    Every successful write is published on the change feed so that category
    statistics and cached views follow the ledger.
    """

    def __init__(
        self,
        donation_repository: DonationRepositoryPort,
        category_repository: CategoryRepositoryPort,
        change_feed: ChangeFeedPort,
        clock: ClockPort,
        logger=None,
        max_amount: Decimal = DEFAULT_MAX_DONATION_AMOUNT,
        inactive_category_policy: InactiveCategoryPolicy = (
            InactiveCategoryPolicy.REJECT
        ),
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the use case.

        Args:
            donation_repository: Ledger storage.
            category_repository: Category metadata storage.
            change_feed: Feed receiving one event per write.
            clock: Source of timestamps and of the submission date.
            logger: Optional logger compatible with logging.Logger-like API.
            max_amount: Ceiling for a single donation amount.
            inactive_category_policy: Whether inactive categories accept
                new donations.
            id_factory: Optional generator of donation identifiers.
        """
        self._donations = donation_repository
        self._categories = category_repository
        self._change_feed = change_feed
        self._clock = clock
        self._logger = logger or get_app_logger()
        self._max_amount = max_amount
        self._inactive_policy = inactive_category_policy
        self._id_factory = id_factory or _new_donation_id

    def create(
        self,
        draft: DonationDraft,
        created_by: str | None = None,
    ) -> Donation:
        """Validate a draft and record it as a pending donation.

        Args:
            draft: Donation data supplied by the caller.
            created_by: Administrator recording the donation.

        Returns:
            Donation: The stored pending donation.

        Raises:
            ValidationError: If the draft or its category is invalid.
        """
        donation = self._build(draft, created_by)
        stored = self._donations.add(donation)
        self._logger.info(
            f"Donation {stored.id} recorded: amount={stored.amount}, "
            f"category={stored.category_id}"
        )
        self._publish(ChangeType.CREATED, stored, None)
        return stored

    def create_many(
        self,
        drafts: Iterable[DonationDraft],
        created_by: str | None = None,
    ) -> list[Donation]:
        """Record a batch of donations, or none of them.

        Raises:
            BatchValidationError: Listing every failing draft by index.
        """
        built: list[Donation] = []
        errors: list[tuple[int, ValidationError]] = []
        for index, draft in enumerate(drafts):
            try:
                built.append(self._build(draft, created_by))
            except ValidationError as exc:
                errors.append((index, exc))
        if errors:
            self._logger.warning(
                f"Batch rejected: {len(errors)} of {len(errors) + len(built)} "
                "donations failed validation"
            )
            raise BatchValidationError(errors)

        stored = []
        for donation in built:
            saved = self._donations.add(donation)
            self._publish(ChangeType.CREATED, saved, None)
            stored.append(saved)
        self._logger.info(f"Batch of {len(stored)} donations recorded")
        return stored

    def update(
        self,
        donation_id: str,
        draft: DonationDraft,
        updated_by: str | None = None,
    ) -> Donation:
        """Edit a pending donation.

        Raises:
            NotFoundError: If the donation does not exist.
            LifecycleTransitionError: If the donation is no longer pending.
            ValidationError: If the new data is invalid.
        """
        current = self._require_donation(donation_id)
        amount = validate_donation_draft(
            draft, today=self._clock.today(), max_amount=self._max_amount
        )
        category = self._resolve_category(draft.category_id)
        updated = apply_edit(
            current,
            draft,
            amount=amount,
            category=category,
            now=self._clock.now(),
            updated_by=updated_by,
        )
        stored = self._donations.save(updated)
        self._logger.info(f"Donation {donation_id} updated")
        self._publish(ChangeType.UPDATED, stored, current)
        return stored

    def verify(self, donation_id: str, verified_by: str) -> Donation:
        """Mark a pending donation as verified."""
        return self._transition(donation_id, DonationStatus.VERIFIED, verified_by)

    def void(self, donation_id: str, actor: str | None = None) -> Donation:
        """Void a verified donation; the record is retained."""
        return self._transition(donation_id, DonationStatus.VOID, actor)

    def refund(self, donation_id: str, actor: str | None = None) -> Donation:
        """Mark a verified donation as refunded; the record is retained."""
        return self._transition(donation_id, DonationStatus.REFUNDED, actor)

    def mark_receipt_sent(
        self,
        donation_id: str,
        receipt_number: str | None = None,
    ) -> Donation:
        """Record that the tax receipt for a donation was sent."""
        current = self._require_donation(donation_id)
        updated = mark_receipt_sent(
            current, now=self._clock.now(), receipt_number=receipt_number
        )
        stored = self._donations.save(updated)
        self._publish(ChangeType.UPDATED, stored, current)
        return stored

    def _transition(
        self,
        donation_id: str,
        target: DonationStatus,
        actor: str | None,
    ) -> Donation:
        current = self._require_donation(donation_id)
        updated = transition(current, target, now=self._clock.now(), actor=actor)
        stored = self._donations.save(updated)
        self._logger.info(
            f"Donation {donation_id} moved from {current.status.value} "
            f"to {target.value}"
        )
        self._publish(_TRANSITION_EVENTS[target], stored, current)
        return stored

    def _build(self, draft: DonationDraft, created_by: str | None) -> Donation:
        amount = validate_donation_draft(
            draft, today=self._clock.today(), max_amount=self._max_amount
        )
        category = self._resolve_category(draft.category_id)
        return new_pending_donation(
            draft,
            donation_id=self._id_factory(),
            amount=amount,
            category=category,
            now=self._clock.now(),
            created_by=created_by,
        )

    def _resolve_category(self, category_id: str) -> Category:
        category = self._categories.get(category_id)
        if category is None:
            raise CategoryValidationError(
                f"Category does not exist: {category_id}", field="category_id"
            )
        if not category.is_active:
            if self._inactive_policy == InactiveCategoryPolicy.REJECT:
                raise CategoryValidationError(
                    f"Category {category.name} is inactive",
                    field="category_id",
                )
            self._logger.warning(
                f"Donation recorded against inactive category {category.name}"
            )
        return category

    def _require_donation(self, donation_id: str) -> Donation:
        donation = self._donations.get(donation_id)
        if donation is None:
            raise NotFoundError("Donation", donation_id)
        return donation

    def _publish(
        self,
        change_type: ChangeType,
        donation: Donation,
        previous: Donation | None,
    ) -> None:
        self._change_feed.publish(
            ChangeEvent(
                change_type=change_type,
                donation_id=donation.id,
                donation=donation,
                previous=previous,
                sequence=self._change_feed.next_sequence(),
                occurred_at=self._clock.now(),
            )
        )


__all__ = ["DonationLedgerUseCase"]
