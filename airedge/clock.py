"""Sources of the current UTC time."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone

MIN_UTC = datetime.min.replace(tzinfo=timezone.utc)
"""The earliest representable UTC datetime."""


class TimeProvider(ABC):
    """Provides the current time as a timezone-aware UTC datetime."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time."""


class StdTimeProvider(TimeProvider):
    """Time provider backed by the system clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def __repr__(self) -> str:
        return "StdTimeProvider()"


class MockTimeProvider(TimeProvider):
    """Time provider that always returns the same fixed time."""

    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def __repr__(self) -> str:
        return f"MockTimeProvider({self._now!r})"