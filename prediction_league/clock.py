"""Injectable time source.

Every timestamp handled by the league is a naive ``datetime`` in UTC, which
keeps comparisons consistent across SQLite and PostgreSQL columns.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

TS_OVERRIDE_FORMAT = "%Y%m%d%H%M%S"


def utc_now() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: datetime) -> datetime:
    """Normalise an aware or naive-UTC datetime to naive UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def local_datetime(tz_name: str, *args: int) -> datetime:
    """Build a naive UTC datetime from wall-clock components in ``tz_name``."""
    return to_utc_naive(datetime(*args, tzinfo=ZoneInfo(tz_name)))


def parse_ts_override(value: str, tz_name: str = "Europe/London") -> datetime:
    """Parse a ``YYYYMMDDhhmmss`` override interpreted in ``tz_name``."""
    parsed = datetime.strptime(value, TS_OVERRIDE_FORMAT)
    return to_utc_naive(parsed.replace(tzinfo=ZoneInfo(tz_name)))


class Clock(ABC):
    """Time source consumed by jobs and agents."""

    @abstractmethod
    def now(self) -> datetime:
        pass


class RealClock(Clock):
    def now(self) -> datetime:
        return utc_now()


class FrozenClock(Clock):
    """Clock fixed at a given instant (``--ts`` override and tests)."""

    def __init__(self, ts: datetime):
        self._ts = to_utc_naive(ts)

    def now(self) -> datetime:
        return self._ts

    def set(self, ts: datetime) -> None:
        self._ts = to_utc_naive(ts)
