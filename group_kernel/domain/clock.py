"""
Injectable time source.

Inter-company transactions default their date to "today" and consolidated
reports carry a generation time.  Both read a ``Clock`` passed in by the
caller, never ``datetime.now()``, so a test can pin the date a transaction
number is derived from.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

# Default pinned instant: the close of the bundled sample period (2024-12)
GROUP_CLOSE_INSTANT = datetime(2024, 12, 31, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    """Source of timezone-aware UTC datetimes."""

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        """Calendar date of ``now()`` in UTC."""
        return self.now().astimezone(timezone.utc).date()


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    ``now()`` keeps returning the same instant until ``advance()`` or
    ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or GROUP_CLOSE_INSTANT

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1, days: int = 0) -> None:
        self._current += timedelta(days=days, seconds=seconds)
