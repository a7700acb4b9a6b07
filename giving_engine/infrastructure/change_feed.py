"""In-process change-event bus."""

from collections.abc import Callable
from dataclasses import dataclass
import itertools
from threading import Lock

from giving_engine.application.ports.change_feed import ChangeFeedPort
from giving_engine.domain.models import ChangeEvent
from giving_engine.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True, eq=False)
class _Subscriber:
    callback: Callable[[ChangeEvent], None]
    donor_id: str | None
    category_id: str | None

    def matches(self, event: ChangeEvent) -> bool:
        if self.donor_id is not None and self.donor_id not in event.donor_ids():
            return False
        if (
            self.category_id is not None
            and self.category_id not in event.category_ids()
        ):
            return False
        return True


class EventSubscription:
    """Handle that removes a subscriber from its bus."""

    def __init__(self, bus: "ChangeEventBus", subscriber: _Subscriber) -> None:
        self._bus = bus
        self._subscriber = subscriber
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._bus._remove(self._subscriber)
            self.active = False


class ChangeEventBus(ChangeFeedPort):
    """Synchronous publish/subscribe feed of ledger changes.

    Callbacks run on the publishing thread, outside the bus lock, so a
    subscriber may publish or subscribe from its callback. A failing
    subscriber is logged and does not stop delivery to the others.
    """

    def __init__(self, logger=None) -> None:
        self._logger = logger or get_app_logger()
        self._lock = Lock()
        self._subscribers: list[_Subscriber] = []
        self._sequence = itertools.count(1)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = [s for s in self._subscribers if s.matches(event)]
        for subscriber in targets:
            try:
                subscriber.callback(event)
            except Exception as exc:
                self._logger.error(
                    f"Subscriber failed on event {event.key} "
                    f"(sequence {event.sequence}): {exc}"
                )

    def subscribe(
        self,
        callback: Callable[[ChangeEvent], None],
        donor_id: str | None = None,
        category_id: str | None = None,
    ) -> EventSubscription:
        subscriber = _Subscriber(callback, donor_id, category_id)
        with self._lock:
            self._subscribers.append(subscriber)
        return EventSubscription(self, subscriber)

    def next_sequence(self) -> int:
        with self._lock:
            return next(self._sequence)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _remove(self, subscriber: _Subscriber) -> None:
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)


__all__ = ["ChangeEventBus", "EventSubscription"]
