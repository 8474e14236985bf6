"""Season model: time frames, prediction windows and completion rules."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, Sequence

from prediction_league.errors import SeasonNotFoundError, ValidationError
from prediction_league.seasons.timeframe import SequencedTimeFrame, TimeFrame

CLOSING_NOTICE = timedelta(hours=24)

# Rolling query frames used by the prediction-window jobs
OPEN_QUERY_LOOKBACK = timedelta(hours=24)
CLOSING_QUERY_LOOKAHEAD_FROM = timedelta(hours=12)
CLOSING_QUERY_LOOKAHEAD_UNTIL = timedelta(hours=36)
QUERY_EDGE = timedelta(minutes=1)


class WindowStatus(str, Enum):
    PENDING = "pending"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class SeasonState:
    """Snapshot of a season's acceptance state at an instant."""

    entries_status: WindowStatus
    predictions_status: WindowStatus
    predictions_closing: bool
    is_live: bool
    current_window: Optional[SequencedTimeFrame] = None
    next_window: Optional[TimeFrame] = None

    @property
    def is_accepting_entries(self) -> bool:
        return self.entries_status == WindowStatus.OPEN

    @property
    def is_accepting_predictions(self) -> bool:
        return self.predictions_status == WindowStatus.OPEN


def window_open_query_timeframe(ts: datetime) -> TimeFrame:
    """Frame in which a window must have opened to trigger open emails at ``ts``."""
    return TimeFrame(start=ts - OPEN_QUERY_LOOKBACK, until=ts - QUERY_EDGE)


def window_closing_query_timeframe(ts: datetime) -> TimeFrame:
    """Frame in which a window must close to trigger closing emails at ``ts``."""
    return TimeFrame(
        start=ts + CLOSING_QUERY_LOOKAHEAD_FROM,
        until=ts + CLOSING_QUERY_LOOKAHEAD_UNTIL - QUERY_EDGE,
    )


@dataclass(frozen=True)
class Season:
    """A league season and the windows that govern it."""

    id: str
    name: str
    entries_accepted: TimeFrame
    predictions_accepted: TimeFrame
    live: TimeFrame
    max_rounds: int
    team_ids: tuple = ()
    prediction_windows: tuple = ()
    client_id: Optional[str] = None

    def validate(self) -> None:
        """Raise ``ValidationError`` if any season invariant is broken."""
        reasons = []

        if not self.id:
            reasons.append("id is required")
        if self.max_rounds <= 0:
            reasons.append("max_rounds must be positive")
        for label, tf in (
            ("entries_accepted", self.entries_accepted),
            ("predictions_accepted", self.predictions_accepted),
            ("live", self.live),
        ):
            if not tf.is_valid():
                reasons.append(f"{label} is not a valid time frame")
        if self.entries_accepted.start > self.predictions_accepted.start:
            reasons.append("entries_accepted must begin no later than predictions_accepted")
        if len(set(self.team_ids)) != len(self.team_ids):
            reasons.append("team_ids must be unique")

        previous: Optional[TimeFrame] = None
        for idx, window in enumerate(self.prediction_windows, start=1):
            if not window.is_valid():
                reasons.append(f"prediction window {idx} is not a valid time frame")
            if not window.lies_within(self.predictions_accepted):
                reasons.append(f"prediction window {idx} lies outside predictions_accepted")
            if previous is not None:
                if window.start <= previous.start:
                    reasons.append(f"prediction window {idx} is out of order")
                if window.overlaps_with(previous):
                    reasons.append(f"prediction window {idx} overlaps its predecessor")
            previous = window

        if reasons:
            raise ValidationError(reasons, fields=[self.id])

    def is_live_at(self, ts: datetime) -> bool:
        return self.live.contains(ts)

    def state_at(self, ts: datetime) -> SeasonState:
        current = self._sequenced_window_at(ts)
        upcoming = next((w for w in self.prediction_windows if w.start > ts), None)

        if current is not None:
            predictions_status = WindowStatus.OPEN
        elif self.prediction_windows and not self.prediction_windows[0].has_begun_by(ts):
            predictions_status = WindowStatus.PENDING
        elif not self.prediction_windows and not self.predictions_accepted.has_begun_by(ts):
            predictions_status = WindowStatus.PENDING
        else:
            predictions_status = WindowStatus.CLOSED

        closing = current is not None and current.current.until - ts <= CLOSING_NOTICE

        return SeasonState(
            entries_status=_status_of(self.entries_accepted, ts),
            predictions_status=predictions_status,
            predictions_closing=closing,
            is_live=self.is_live_at(ts),
            current_window=current,
            next_window=upcoming,
        )

    def prediction_window_begins_within(self, tf: TimeFrame) -> Optional[SequencedTimeFrame]:
        return self._find_window(lambda w: w.begins_within(tf))

    def prediction_window_ends_within(self, tf: TimeFrame) -> Optional[SequencedTimeFrame]:
        return self._find_window(lambda w: w.ends_within(tf))

    def is_completed_by(self, rankings: Sequence) -> bool:
        """True iff every ranking has played ``max_rounds`` games."""
        if not rankings:
            return False
        return all(r.meta.played_games == self.max_rounds for r in rankings)

    def _sequenced(self, idx: int) -> SequencedTimeFrame:
        windows = self.prediction_windows
        return SequencedTimeFrame(
            count=idx + 1,
            total=len(windows),
            current=windows[idx],
            next=windows[idx + 1] if idx + 1 < len(windows) else None,
        )

    def _sequenced_window_at(self, ts: datetime) -> Optional[SequencedTimeFrame]:
        return self._find_window(lambda w: w.contains(ts))

    def _find_window(self, predicate) -> Optional[SequencedTimeFrame]:
        for idx, window in enumerate(self.prediction_windows):
            if predicate(window):
                return self._sequenced(idx)
        return None


def _status_of(tf: TimeFrame, ts: datetime) -> WindowStatus:
    if not tf.has_begun_by(ts):
        return WindowStatus.PENDING
    if tf.has_elapsed_by(ts):
        return WindowStatus.CLOSED
    return WindowStatus.OPEN


@dataclass
class SeasonCollection:
    """Read-only lookup of configured seasons."""

    seasons: dict = field(default_factory=dict)

    @classmethod
    def from_seasons(cls, seasons: Iterable[Season]) -> "SeasonCollection":
        return cls(seasons={s.id: s for s in seasons})

    def get_by_id(self, season_id: str) -> Season:
        season = self.seasons.get(season_id)
        if season is None:
            raise SeasonNotFoundError(season_id)
        return season

    def __contains__(self, season_id: str) -> bool:
        return season_id in self.seasons

    def __iter__(self):
        return iter(self.seasons.values())

    def __len__(self) -> int:
        return len(self.seasons)
