"""
Clock -- injectable source of the report timestamp.

Responsibility:
    Reports carry a ``generated_at`` stamp and nothing else in the engine
    reads wall-clock time.  Services receive a Clock so the stamp can be
    pinned in tests and reports stay reproducible.

Architecture position:
    Kernel > Domain.  SystemClock is the only place that touches real time.

Invariants:
    - ``now()`` is timezone-aware.
    - ``stamp()`` is ISO-8601 in UTC, so two clocks pinned to the same
      instant in different zones produce the same string.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Time source handed to services by constructor injection."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def stamp(self) -> str:
        """The current instant as an ISO-8601 UTC string."""
        return self.now().astimezone(timezone.utc).isoformat()


class SystemClock(Clock):
    """Real UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock pinned to a fixed instant; moves only when ``advance()`` is called.

    Defaults to noon UTC on 2026-01-01.  A naive ``pinned_at`` is rejected
    because report stamps must carry an offset.
    """

    def __init__(self, pinned_at: datetime | None = None):
        pinned_at = pinned_at or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        if pinned_at.tzinfo is None:
            raise ValueError("DeterministicClock needs a timezone-aware datetime")
        self._pinned_at = pinned_at

    def now(self) -> datetime:
        return self._pinned_at

    def advance(self, seconds: int = 1) -> datetime:
        """Move forward and return the new instant."""
        self._pinned_at += timedelta(seconds=seconds)
        return self._pinned_at
