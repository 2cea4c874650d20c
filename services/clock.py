# services/clock.py
"""
Injectable clock.

Services receive a Clock through their constructor so issue dates, due-date
arithmetic and overdue computation can be pinned in tests.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone


class Clock(ABC):
     """Abstract time source. ``now()`` is always timezone-aware UTC."""

     @abstractmethod
     def now(self) -> datetime:
          ...

     def today(self) -> date:
          return self.now().date()


class SystemClock(Clock):
     """Production clock backed by the system time."""

     def now(self) -> datetime:
          return datetime.now(timezone.utc)


class FixedClock(Clock):
     """Clock frozen at a given instant; ``advance_to`` moves it explicitly."""

     def __init__(self, fixed: datetime):
          self._now = _as_utc(fixed)

     def now(self) -> datetime:
          return self._now

     def advance_to(self, moment: datetime) -> None:
          self._now = _as_utc(moment)


def _as_utc(moment: datetime) -> datetime:
     if moment.tzinfo is None:
          return moment.replace(tzinfo=timezone.utc)
     return moment.astimezone(timezone.utc)
