"""
Injectable time source.

Services never call ``datetime.now()`` themselves: created_at, approved_at
and updated_at come from a Clock, and voucher numbers embed its UTC date.
SystemClock is the only place the kernel reads the real time.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current time, always timezone-aware."""

    def today(self) -> date:
        """UTC calendar date of ``now()``."""
        return self.now().astimezone(timezone.utc).date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Frozen clock for tests, starting at 2024-01-01 12:00 UTC.

    Time only moves through ``advance()`` or ``set_time()``.
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def set_time(self, moment: datetime) -> None:
        self._now = moment

    def advance(self, seconds: int = 1) -> None:
        self._now += timedelta(seconds=seconds)
