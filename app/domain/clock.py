"""
app/domain/clock.py

Time sources for the reporting pipeline.

The normalizer falls back to "the current year" for submissions without a
usable reporting year or timestamp; that year always comes from an injected
clock rather than the wall clock directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class FixedClock:
    """Clock pinned to one instant. Used by tests and replays."""

    instant: datetime

    def now(self) -> datetime:
        if self.instant.tzinfo is None:
            return self.instant.replace(tzinfo=timezone.utc)
        return self.instant

    @classmethod
    def for_year(cls, year: int) -> "FixedClock":
        return cls(datetime(year, 6, 30, 12, 0, tzinfo=timezone.utc))
