"""Season and time-frame models."""

from prediction_league.seasons.season import (
    Season,
    SeasonCollection,
    SeasonState,
    WindowStatus,
    window_closing_query_timeframe,
    window_open_query_timeframe,
)
from prediction_league.seasons.timeframe import SequencedTimeFrame, TimeFrame

__all__ = [
    "Season",
    "SeasonCollection",
    "SeasonState",
    "SequencedTimeFrame",
    "TimeFrame",
    "WindowStatus",
    "window_closing_query_timeframe",
    "window_open_query_timeframe",
]
