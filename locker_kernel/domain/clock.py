"""
Clock -- injectable ledger time.

Responsibility:
    The registry never reads wall-clock time directly.  It asks a Clock for
    ``timestamp()`` (whole seconds since the epoch) to evaluate the release
    gate and ``now()`` to stamp records.

Architecture position:
    Kernel > Domain.  SystemClock is the only implementation that touches
    the real system time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """
    Source of ledger time.

    Guarantees:
        - ``now()`` is timezone-aware UTC.
        - ``timestamp()`` is ``now()`` truncated to whole seconds, the
          resolution release times are expressed in.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def timestamp(self) -> int:
        return int(self.now().timestamp())


class SystemClock(Clock):
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock that only moves when told to.

    Time is held as integer seconds so that stepping across a release time
    is exact.
    """

    DEFAULT_TIMESTAMP = 1_704_110_400  # 2024-01-01 12:00:00 UTC

    def __init__(self, fixed_time: datetime | None = None):
        if fixed_time is None:
            self._seconds = self.DEFAULT_TIMESTAMP
        else:
            self._seconds = int(fixed_time.timestamp())

    @classmethod
    def at_timestamp(cls, seconds: int) -> "DeterministicClock":
        clock = cls()
        clock._seconds = seconds
        return clock

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._seconds, tz=timezone.utc)

    def timestamp(self) -> int:
        return self._seconds

    def set_time(self, time: datetime) -> None:
        self._seconds = int(time.timestamp())

    def set_timestamp(self, seconds: int) -> None:
        self._seconds = seconds

    def advance(self, seconds: int = 1) -> None:
        self._seconds += seconds

    def tick(self) -> datetime:
        """Advance by one second and return the new time."""
        self.advance(1)
        return self.now()
