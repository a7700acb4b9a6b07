"""Per-subject read cache kept current by the ledger change feed."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from threading import Event, Lock

from giving_engine.application.ports.change_feed import (
    ChangeFeedPort,
    Subscription,
)
from giving_engine.application.ports.clock import ClockPort
from giving_engine.application.ports.donation_repository import (
    DonationRepositoryPort,
)
from giving_engine.domain.models import ChangeEvent, Donation, DonorGivingSummary
from giving_engine.domain.services.aggregation import compute_donor_giving_summary
from giving_engine.infrastructure.logging.logger import get_app_logger
from giving_engine.infrastructure.settings import DEFAULT_CACHE_TTL_SECONDS


@dataclass(frozen=True)
class CachedDonations:
    """A subject's donations and personal summary as last fetched.

    Attributes:
        subject_id: Donor the entry belongs to.
        donations: Donations of the donor, newest first.
        summary: Personal giving summary computed from ``donations``.
        fetched_at: Time the ledger was read.
        expires_at: Time after which the entry is refreshed on read.
    """

    subject_id: str
    donations: list[Donation]
    summary: DonorGivingSummary
    fetched_at: datetime
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class CacheStats:
    """Counters and entry ages of a SubjectDonationCache."""

    hits: int
    misses: int
    expired: int
    event_refreshes: int
    total_entries: int
    valid_entries: int
    expired_entries: int
    oldest_entry: datetime | None
    newest_entry: datetime | None


@dataclass(eq=False)
class _Refresh:
    generation: int
    version: int
    done: Event = field(default_factory=Event)
    result: CachedDonations | None = None
    error: Exception | None = None


class SubjectDonationCache:
    """Cache of per-donor donation lists and summaries.

    Entries expire after ``ttl_seconds``. Concurrent misses for the same
    subject share a single ledger read. Only the active subject is cached;
    change events for that donor overwrite its entry immediately and make
    any read already in flight obsolete. Switching or logging out bumps the
    generation so a refresh started earlier is never stored.
    """

    def __init__(
        self,
        repository: DonationRepositoryPort,
        change_feed: ChangeFeedPort,
        clock: ClockPort,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        logger=None,
    ) -> None:
        self._repository = repository
        self._change_feed = change_feed
        self._clock = clock
        self._ttl = timedelta(seconds=ttl_seconds)
        self._logger = logger or get_app_logger()
        self._lock = Lock()
        self._entries: dict[str, CachedDonations] = {}
        self._refreshes: dict[str, _Refresh] = {}
        self._generation = 0
        self._versions: dict[str, int] = {}
        self._active_subject: str | None = None
        self._subscription: Subscription | None = None
        self._hits = 0
        self._misses = 0
        self._expired = 0
        self._event_refreshes = 0

    @property
    def active_subject(self) -> str | None:
        return self._active_subject

    def activate_subject(self, subject_id: str) -> None:
        """Make a donor the active subject and follow their changes.

        Switching to another subject clears every entry and cancels the
        previous subscription.
        """
        with self._lock:
            if self._active_subject == subject_id:
                return
            self._reset_locked()
            self._active_subject = subject_id
            self._subscription = self._change_feed.subscribe(
                self._on_event, donor_id=subject_id
            )
        self._logger.info(f"Donation cache following donor {subject_id}")

    def get_cached(self, subject_id: str) -> CachedDonations:
        """Return the subject's entry, reading the ledger on miss or expiry.

        Reading a subject other than the active one switches to it first, so
        only the active subject's entries are ever cached.

        Args:
            subject_id: Donor whose donations are requested.

        Returns:
            CachedDonations: A valid entry for the subject.
        """
        self.activate_subject(subject_id)
        with self._lock:
            entry = self._entries.get(subject_id)
            if entry is not None and entry.is_valid(self._clock.now()):
                self._hits += 1
                return entry
            if entry is None:
                self._misses += 1
            else:
                self._expired += 1
            refresh = self._refreshes.get(subject_id)
            leader = refresh is None
            if leader:
                refresh = _Refresh(
                    generation=self._generation,
                    version=self._versions.get(subject_id, 0),
                )
                self._refreshes[subject_id] = refresh

        if not leader:
            refresh.done.wait()
            if refresh.error is not None:
                raise refresh.error
            return refresh.result

        try:
            result = self._load(subject_id)
        except Exception as exc:
            refresh.error = exc
            with self._lock:
                if self._refreshes.get(subject_id) is refresh:
                    del self._refreshes[subject_id]
            refresh.done.set()
            raise

        with self._lock:
            if self._refreshes.get(subject_id) is refresh:
                del self._refreshes[subject_id]
            if refresh.generation != self._generation:
                self._logger.debug(f"Discarded stale refresh for {subject_id}")
            elif refresh.version != self._versions.get(subject_id, 0):
                # A change event reloaded the entry while this read was running.
                self._logger.debug(f"Refresh for {subject_id} superseded by event")
                current = self._entries.get(subject_id)
                if current is not None and current.is_valid(self._clock.now()):
                    result = current
            else:
                self._entries[subject_id] = result
        refresh.result = result
        refresh.done.set()
        return result

    def invalidate(self, subject_id: str) -> None:
        """Drop the subject's entry; the next read goes to the ledger."""
        with self._lock:
            self._entries.pop(subject_id, None)

    def clear(self) -> None:
        """Drop every entry and discard refreshes in flight."""
        with self._lock:
            self._entries.clear()
            self._refreshes.clear()
            self._generation += 1

    def logout(self) -> None:
        """Forget the active subject, its subscription and all entries."""
        with self._lock:
            self._reset_locked()
            self._active_subject = None
        self._logger.info("Donation cache cleared on logout")

    def stats(self) -> CacheStats:
        """Return hit counters and the ages of the current entries."""
        with self._lock:
            now = self._clock.now()
            entries = list(self._entries.values())
            valid = sum(1 for entry in entries if entry.is_valid(now))
            fetched = [entry.fetched_at for entry in entries]
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                expired=self._expired,
                event_refreshes=self._event_refreshes,
                total_entries=len(entries),
                valid_entries=valid,
                expired_entries=len(entries) - valid,
                oldest_entry=min(fetched) if fetched else None,
                newest_entry=max(fetched) if fetched else None,
            )

    def _on_event(self, event: ChangeEvent) -> None:
        with self._lock:
            subject_id = self._active_subject
            if subject_id is None or subject_id not in event.donor_ids():
                return
            generation = self._generation
            version = self._versions.get(subject_id, 0) + 1
            self._versions[subject_id] = version
            # Readers arriving now start a fresh read instead of joining one
            # that began before the change.
            self._refreshes.pop(subject_id, None)
        try:
            result = self._load(subject_id)
        except Exception:
            with self._lock:
                if generation == self._generation:
                    self._entries.pop(subject_id, None)
            self._logger.error(
                f"Cache entry for {subject_id} dropped; reload after {event.key} failed"
            )
            raise
        with self._lock:
            if (
                generation != self._generation
                or version != self._versions.get(subject_id)
            ):
                return
            self._entries[subject_id] = result
            self._event_refreshes += 1
        self._logger.debug(
            f"Cache entry for {subject_id} refreshed by {event.key}"
        )

    def _load(self, subject_id: str) -> CachedDonations:
        donations = sorted(
            self._repository.query("donor_id", subject_id),
            key=lambda d: (d.donation_date, d.id),
            reverse=True,
        )
        summary = compute_donor_giving_summary(
            donations, subject_id, self._clock.today()
        )
        now = self._clock.now()
        return CachedDonations(
            subject_id=subject_id,
            donations=donations,
            summary=summary,
            fetched_at=now,
            expires_at=now + self._ttl,
        )

    def _reset_locked(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._entries.clear()
        self._refreshes.clear()
        self._generation += 1


__all__ = ["CachedDonations", "CacheStats", "SubjectDonationCache"]
