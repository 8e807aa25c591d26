"""
Clock -- Deterministic time abstraction.

Responsibility:
    Provides an injectable clock so that engine code never calls
    ``datetime.now()`` or ``date.today()`` directly.  Carrying charges,
    late-lifting charges, and overdue interest all depend on "today";
    every such calculation takes an explicit ``as_of_date`` or a ``Clock``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O (except SystemClock,
    which is the one sanctioned I/O boundary for time).

Failure modes:
    - None.  ``resolve_as_of`` falls back to ``SystemClock`` only when the
      caller supplies neither a date nor a clock.

Audit relevance:
    Historical charge amounts can be reproduced exactly by replaying the
    calculation with a ``DeterministicClock`` (or an explicit date) set to
    the original calculation date.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone

from commodity_kernel.domain.values import DateLike, coerce_date


class Clock(ABC):
    """
    Abstract clock interface.

    Contract:
        Callers that need the current date pass a Clock (or an explicit
        date) into the engines.  Engines never read the wall clock.

    Guarantees:
        - ``now()`` returns a timezone-aware ``datetime``.
        - ``today()`` returns the calendar date of ``now()``.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time."""
        ...

    def now_utc(self) -> datetime:
        """Get the current UTC time."""
        return self.now().astimezone(timezone.utc)

    def today(self) -> date:
        """Get the current calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """
    Production clock that returns actual system time.

    Non-goals:
        Not suitable for deterministic replay or testing.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock with controlled time.

    Guarantees:
        - ``now()`` returns the same value on repeated calls until
          ``advance()``, ``advance_days()`` or ``set_time()`` is called.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._fixed_time = fixed_time or datetime(
            2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        )
        self._advance_seconds = 0

    @classmethod
    def on(cls, day: date) -> "DeterministicClock":
        """Clock fixed at noon UTC on ``day``."""
        return cls(datetime(day.year, day.month, day.day, 12, 0, 0, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._fixed_time + timedelta(seconds=self._advance_seconds)

    def set_time(self, time: datetime) -> None:
        """Set the clock to a specific time."""
        self._fixed_time = time
        self._advance_seconds = 0

    def advance(self, seconds: int = 1) -> None:
        """Advance the clock by the specified seconds."""
        self._advance_seconds += seconds

    def advance_days(self, days: int = 1) -> None:
        """Advance the clock by whole days."""
        self.advance(days * 86400)


def resolve_as_of(as_of_date: DateLike | None, clock: Clock | None = None) -> date:
    """
    Resolve the effective calculation date.

    An explicit ``as_of_date`` (date, datetime or ISO string) always wins;
    otherwise the supplied clock (default ``SystemClock``) provides today's
    date.
    """
    if as_of_date is not None:
        return coerce_date("as_of_date", as_of_date)
    return (clock or SystemClock()).today()
