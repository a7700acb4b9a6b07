"""Port for ledger donation storage."""

from datetime import date
from typing import Protocol

from giving_engine.domain.models import Donation


class DonationRepositoryPort(Protocol):
    """Port exposing keyed access to ledger donations."""

    def add(self, donation: Donation) -> Donation:
        """Store a new donation and return it."""

    def get(self, donation_id: str) -> Donation | None:
        """Return a donation by id, or None when unknown."""

    def save(self, donation: Donation) -> Donation:
        """Replace an existing donation and return it."""

    def query(self, field: str, value: object) -> list[Donation]:
        """Return donations whose field equals the value."""

    def list_in_period(self, start: date, end: date) -> list[Donation]:
        """Return donations dated within the inclusive window."""

    def list_all(self) -> list[Donation]:
        """Return every donation in the ledger."""


__all__ = ["DonationRepositoryPort"]
