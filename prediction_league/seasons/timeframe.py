"""Interval arithmetic over naive-UTC timestamps."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TimeFrame:
    """Interval ``[start, until]``; valid only when ``start < until``."""

    start: datetime
    until: datetime

    def is_valid(self) -> bool:
        return self.start < self.until

    def has_begun_by(self, ts: datetime) -> bool:
        return self.start <= ts

    def has_elapsed_by(self, ts: datetime) -> bool:
        return self.until <= ts

    def contains(self, ts: datetime) -> bool:
        """True while ``ts`` is inside the frame (begun, not yet elapsed)."""
        return self.has_begun_by(ts) and not self.has_elapsed_by(ts)

    def overlaps_with(self, other: "TimeFrame") -> bool:
        # Frames sharing only an endpoint do not overlap
        return max(self.start, other.start) < min(self.until, other.until)

    def begins_within(self, outer: "TimeFrame") -> bool:
        return outer.start <= self.start <= outer.until

    def ends_within(self, outer: "TimeFrame") -> bool:
        return outer.start <= self.until <= outer.until

    def lies_within(self, outer: "TimeFrame") -> bool:
        return self.begins_within(outer) and self.ends_within(outer)


@dataclass(frozen=True)
class SequencedTimeFrame:
    """A prediction window together with its place in the season.

    ``count`` is the 1-based index of ``current`` among ``total`` windows;
    ``next`` is the window that follows it, if any.
    """

    count: int
    total: int
    current: TimeFrame
    next: Optional[TimeFrame] = None

    @property
    def is_last(self) -> bool:
        return self.count == self.total
