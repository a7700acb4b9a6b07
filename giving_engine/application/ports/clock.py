"""Port for reading the current time."""

from datetime import date, datetime
from typing import Protocol


class ClockPort(Protocol):
    """Injectable source of the current time."""

    def now(self) -> datetime:
        """Return the current timezone-aware time."""

    def today(self) -> date:
        """Return the current calendar date."""


__all__ = ["ClockPort"]
