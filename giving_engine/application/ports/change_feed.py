"""Port for the ledger change-event stream."""

from collections.abc import Callable
from typing import Protocol

from giving_engine.domain.models import ChangeEvent


class Subscription(Protocol):
    """Handle returned by a change-feed subscription."""

    def unsubscribe(self) -> None:
        """Stop delivering events to the subscriber."""


class ChangeFeedPort(Protocol):
    """Port publishing ledger changes to filtered subscribers."""

    def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every matching subscriber."""

    def subscribe(
        self,
        callback: Callable[[ChangeEvent], None],
        donor_id: str | None = None,
        category_id: str | None = None,
    ) -> Subscription:
        """Register a callback for events matching the filters."""

    def next_sequence(self) -> int:
        """Return the next position in the event log."""


__all__ = ["ChangeFeedPort", "Subscription"]
