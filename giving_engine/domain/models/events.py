"""Domain model for ledger change events."""

from dataclasses import dataclass
from datetime import datetime

from giving_engine.domain.constants import ChangeType
from giving_engine.domain.models.donations import Donation


@dataclass(frozen=True)
class ChangeEvent:
    """A change to a ledger donation.

    Attributes:
        change_type: Kind of change.
        donation_id: Identifier of the changed donation.
        donation: Donation state after the change, None when deleted.
        previous: Donation state before the change, when known.
        sequence: Position of the event in the ledger's event log.
        occurred_at: Time the change was recorded.
    """

    change_type: ChangeType
    donation_id: str
    donation: Donation | None
    previous: Donation | None
    sequence: int
    occurred_at: datetime

    @property
    def key(self) -> str:
        """Return an identifier unique to this transition of the donation."""
        return f"{self.donation_id}:{self.change_type.value}"

    def donor_ids(self) -> set[str]:
        """Return donor ids touched by the change, before and after."""
        ids = set()
        for state in (self.donation, self.previous):
            if state is not None and state.donor_id:
                ids.add(state.donor_id)
        return ids

    def category_ids(self) -> set[str]:
        """Return category ids touched by the change, before and after."""
        ids = set()
        for state in (self.donation, self.previous):
            if state is not None and state.category_id:
                ids.add(state.category_id)
        return ids


__all__ = ["ChangeEvent"]
