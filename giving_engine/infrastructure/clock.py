"""Clock adapters satisfying the clock port."""

from datetime import date, datetime, timedelta, timezone

from giving_engine.application.ports.clock import ClockPort


class SystemClock(ClockPort):
    """Clock returning the actual system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return date.today()


class FixedClock(ClockPort):
    """Clock with controlled time for tests and replays.

    ``now()`` returns the same value until ``advance()`` or ``set_time()``
    is called.
    """

    def __init__(self, fixed_time: datetime | None = None) -> None:
        self._time = fixed_time or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def today(self) -> date:
        return self._time.date()

    def set_time(self, value: datetime) -> None:
        self._time = value

    def advance(self, seconds: float = 1) -> datetime:
        """Move the clock forward and return the new time."""
        self._time = self._time + timedelta(seconds=seconds)
        return self._time


__all__ = ["SystemClock", "FixedClock"]
