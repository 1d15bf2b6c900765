"""
Clock -- the workshop's notion of "now" and "today".

Engines never call ``datetime.now()`` or ``date.today()``; services that
need "today" or "this month" receive a Clock through their constructor.
Calendar questions (which day an invoice belongs to, which month is
current) are answered in the clock's time zone, so a Canary Islands
workshop can pass ``ZoneInfo("Atlantic/Canary")`` and close the day at
local midnight.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta, tzinfo


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        ``now()`` returns a timezone-aware ``datetime`` in the clock's
        zone; ``today()`` is the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in the given zone (UTC unless told otherwise)."""

    def __init__(self, tz: tzinfo = UTC):
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz)


class DeterministicClock(Clock):
    """
    Test clock standing still until moved.

    Defaults to 2024-01-01 12:00 UTC.  Naive datetimes are refused so a
    test cannot silently depend on the machine's local zone.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = self._checked(fixed_time or datetime(2024, 1, 1, 12, 0, tzinfo=UTC))

    @staticmethod
    def _checked(value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("DeterministicClock requires a timezone-aware datetime")
        return value

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = self._checked(time)

    def advance(self, seconds: int = 1, *, days: int = 0) -> None:
        """Move forward by seconds plus whole days."""
        self._current += timedelta(days=days, seconds=seconds)
