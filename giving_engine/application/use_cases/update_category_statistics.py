"""Use case maintaining per-category running statistics."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from threading import Lock

from giving_engine.application.ports.category_repository import (
    CategoryRepositoryPort,
)
from giving_engine.application.ports.change_feed import (
    ChangeFeedPort,
    Subscription,
)
from giving_engine.application.ports.clock import ClockPort
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.domain.constants import ChangeType
from giving_engine.domain.errors import (
    CategoryValidationError,
    ConsistencyError,
    NotFoundError,
)
from giving_engine.domain.models import (
    Category,
    CategoryStatistics,
    ChangeEvent,
    Donation,
)
from giving_engine.domain.policies import is_valid_category_name
from giving_engine.domain.services.statistics import (
    add_contribution,
    average_is_consistent,
    compute_statistics,
    remove_contribution,
    roll_forward,
    statistics_differences,
)
from giving_engine.infrastructure.logging.logger import get_app_logger

_STATISTICS_EVENTS = frozenset(
    {ChangeType.VERIFIED, ChangeType.VOIDED, ChangeType.REFUNDED}
)


@dataclass(frozen=True)
class ReconciliationAlert:
    """Drift found between stored and recalculated category statistics.

    Attributes:
        category_id: Category whose statistics drifted.
        category_name: Current category name.
        differences: Field name mapped to (stored, expected) values.
        detected_at: Time of the reconciliation run.
        repaired: Whether the stored statistics were overwritten.
    """

    category_id: str
    category_name: str
    differences: dict[str, tuple]
    detected_at: datetime
    repaired: bool = False

    @property
    def error(self) -> ConsistencyError:
        return ConsistencyError(self.category_id, self.differences)


class CategoryStatisticsUpdater:
    """Apply ledger change events to category running statistics.

    Statistics of one category are only written while holding that
    category's lock; different categories are updated in parallel. The set
    of donations contributing to each category is tracked so that repeated
    or out-of-order events leave the totals unchanged. A category's set is
    seeded by a full recalculation the first time it is touched.
    """

    def __init__(
        self,
        category_repository: CategoryRepositoryPort,
        donation_repository: DonationRepositoryPort,
        clock: ClockPort,
        change_feed: ChangeFeedPort | None = None,
        logger=None,
    ) -> None:
        """Initialize the updater.

        Args:
            category_repository: Storage for categories and their statistics.
            donation_repository: Authoritative ledger donations.
            clock: Source of the current time and tax year.
            change_feed: Optional feed receiving rename notifications.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._categories = category_repository
        self._donations = donation_repository
        self._clock = clock
        self._change_feed = change_feed
        self._logger = logger or get_app_logger()
        self._registry_lock = Lock()
        self._locks: dict[str, Lock] = {}
        self._contributing: dict[str, set[str]] = {}

    def subscribe(self, change_feed: ChangeFeedPort) -> Subscription:
        """Consume every event of the feed."""
        return change_feed.subscribe(self.apply_donation_event)

    def apply_donation_event(self, event: ChangeEvent) -> CategoryStatistics | None:
        """Apply one lifecycle event to the affected category.

        Args:
            event: Change event published by the ledger.

        Returns:
            CategoryStatistics | None: Statistics after the event, or None
            when the event does not affect statistics.
        """
        if event.change_type not in _STATISTICS_EVENTS:
            return None
        donation = event.donation
        if donation is None:
            return None
        category_id = donation.category_id
        with self._category_lock(category_id):
            category = self._require_category(category_id)
            contributors = self._contributors(category)
            if contributors is None:
                # First touch: the recalculation already reflects the event.
                return self._categories.get(category_id).statistics

            current_year = self._clock.today().year
            if event.change_type == ChangeType.VERIFIED:
                if donation.id in contributors:
                    self._logger.debug(f"Duplicate event ignored: {event.key}")
                    return category.statistics
                stats = add_contribution(category.statistics, donation, current_year)
                contributors.add(donation.id)
            else:
                if donation.id not in contributors:
                    self._logger.debug(f"Non-contributing event ignored: {event.key}")
                    return category.statistics
                contributors.discard(donation.id)
                stats = remove_contribution(
                    category.statistics,
                    donation,
                    current_year,
                    self._latest_date(category_id, contributors),
                )
            self._store(category, stats)

        self._logger.info(
            f"Category {category_id} statistics updated by {event.key}: "
            f"total={stats.total_amount}, count={stats.donation_count}"
        )
        return stats

    def recalculate(self, category_id: str) -> CategoryStatistics:
        """Recompute and store statistics from the authoritative ledger.

        Args:
            category_id: Category to recompute.

        Returns:
            CategoryStatistics: The recomputed statistics.

        Raises:
            NotFoundError: If the category does not exist.
        """
        with self._category_lock(category_id):
            category = self._require_category(category_id)
            stats = self._recalculate_locked(category)
        self._logger.info(
            f"Category {category_id} recalculated: total={stats.total_amount}, "
            f"count={stats.donation_count}"
        )
        return stats

    def reconcile(
        self,
        category_id: str,
        repair: bool = False,
    ) -> ReconciliationAlert | None:
        """Compare stored statistics with a recalculation.

        Stored statistics are kept as the last known good values unless
        ``repair`` is set.

        Args:
            category_id: Category to check.
            repair: Overwrite the stored statistics when they drifted.

        Returns:
            ReconciliationAlert | None: The detected drift, None when the
            stored statistics agree.
        """
        with self._category_lock(category_id):
            category = self._require_category(category_id)
            year = self._clock.today().year
            donations = self._category_donations(category_id)
            expected = compute_statistics(donations, year)
            stored = roll_forward(category.statistics, year)
            differences = statistics_differences(stored, expected)
            if not average_is_consistent(stored):
                differences.setdefault(
                    "average_donation",
                    (stored.average_donation, expected.average_donation),
                )
            if not differences:
                return None
            alert = ReconciliationAlert(
                category_id=category_id,
                category_name=category.name,
                differences=differences,
                detected_at=self._clock.now(),
                repaired=repair,
            )
            if repair:
                self._store(category, expected)
                self._contributing[category_id] = {
                    donation.id for donation in donations if donation.counts_toward_totals
                }

        self._logger.error(
            f"{alert.error.code}: {alert.error.message}"
            + (" (repaired)" if repair else "")
        )
        return alert

    def reconcile_all(self, repair: bool = False) -> list[ReconciliationAlert]:
        """Reconcile every category and return the alerts raised."""
        alerts = []
        for category in self._categories.list_all():
            alert = self.reconcile(category.id, repair=repair)
            if alert is not None:
                alerts.append(alert)
        self._logger.info(f"Reconciliation finished with {len(alerts)} alerts")
        return alerts

    def update_category(
        self,
        category_id: str,
        mutate: Callable[[Category], Category],
    ) -> Category:
        """Apply a metadata change while preserving the running statistics.

        Args:
            category_id: Category to change.
            mutate: Function returning the changed category.

        Returns:
            Category: The stored category.
        """
        with self._category_lock(category_id):
            category = self._require_category(category_id)
            changed = replace(
                mutate(category),
                id=category.id,
                statistics=category.statistics,
                updated_at=self._clock.now(),
            )
            return self._categories.save(changed)

    def rename_category(self, category_id: str, new_name: str) -> Category:
        """Rename a category and rewrite the name copied onto its donations.

        Raises:
            CategoryValidationError: If the name is invalid or already used.
            NotFoundError: If the category does not exist.
        """
        if not is_valid_category_name(new_name):
            raise CategoryValidationError(
                "Category name must be 1 to 100 characters", field="name"
            )
        name = new_name.strip()
        existing = self._categories.find_by_name(name)
        if existing is not None and existing.id != category_id:
            raise CategoryValidationError(
                f"Category name already exists: {name}", field="name"
            )

        renamed: list[tuple[Donation, Donation]] = []
        with self._category_lock(category_id):
            category = self._require_category(category_id)
            now = self._clock.now()
            stored = self._categories.save(replace(category, name=name, updated_at=now))
            for donation in self._category_donations(category_id):
                if donation.category_name == name:
                    continue
                updated = replace(donation, category_name=name, updated_at=now)
                self._donations.save(updated)
                renamed.append((donation, updated))

        if self._change_feed is not None:
            for previous, updated in renamed:
                self._change_feed.publish(
                    ChangeEvent(
                        change_type=ChangeType.UPDATED,
                        donation_id=updated.id,
                        donation=updated,
                        previous=previous,
                        sequence=self._change_feed.next_sequence(),
                        occurred_at=now,
                    )
                )
        self._logger.info(
            f"Category {category_id} renamed to {name}; "
            f"{len(renamed)} donations updated"
        )
        return stored

    @contextmanager
    def _category_lock(self, category_id: str) -> Iterator[None]:
        with self._registry_lock:
            lock = self._locks.setdefault(category_id, Lock())
        with lock:
            yield

    def _require_category(self, category_id: str) -> Category:
        category = self._categories.get(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def _contributors(self, category: Category) -> set[str] | None:
        """Return the contributing set, seeding it when first touched."""
        contributors = self._contributing.get(category.id)
        if contributors is None:
            self._recalculate_locked(category)
        return contributors

    def _recalculate_locked(self, category: Category) -> CategoryStatistics:
        donations = self._category_donations(category.id)
        stats = compute_statistics(donations, self._clock.today().year)
        self._store(category, stats)
        self._contributing[category.id] = {
            donation.id for donation in donations if donation.counts_toward_totals
        }
        return stats

    def _category_donations(self, category_id: str) -> list[Donation]:
        return self._donations.query("category_id", category_id)

    def _latest_date(self, category_id: str, contributors: set[str]):
        dates = [
            donation.donation_date
            for donation in self._category_donations(category_id)
            if donation.id in contributors
        ]
        return max(dates) if dates else None

    def _store(self, category: Category, stats: CategoryStatistics) -> None:
        self._categories.save(replace(category, statistics=stats))


__all__ = ["CategoryStatisticsUpdater", "ReconciliationAlert"]
