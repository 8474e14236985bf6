"""Daily jobs that notify entrants when a prediction window opens or is closing."""

import logging
from typing import Awaitable, Callable, Optional

from prediction_league.alerting import CommunicationsAgent
from prediction_league.clock import Clock
from prediction_league.entries import EntryAgent
from prediction_league.errors import MultiError
from prediction_league.jobs.fanout import bounded_fanout
from prediction_league.models import Entry
from prediction_league.seasons import (
    Season,
    SequencedTimeFrame,
    TimeFrame,
    window_closing_query_timeframe,
    window_open_query_timeframe,
)

logger = logging.getLogger(__name__)


class _PredictionWindowJob:
    tag = "WINDOW"

    def __init__(
        self,
        season: Season,
        clock: Clock,
        entries: EntryAgent,
        comms: CommunicationsAgent,
        fanout_limit: int = 10,
    ):
        self.season = season
        self.clock = clock
        self.entries = entries
        self.comms = comms
        self.fanout_limit = fanout_limit

    def query_timeframe(self) -> TimeFrame:
        raise NotImplementedError

    def find_window(self, tf: TimeFrame) -> Optional[SequencedTimeFrame]:
        raise NotImplementedError

    def issuer(self) -> Callable[[Entry, SequencedTimeFrame], Awaitable[None]]:
        raise NotImplementedError

    async def run(self) -> int:
        """Fan out notifications; return the number issued (raises MultiError on failures)."""
        window = self.find_window(self.query_timeframe())
        if window is None:
            logger.debug(f"[{self.tag}] {self.season.id}: no matching window")
            return 0

        entries = await self.entries.retrieve_entries_by_season(self.season.id, approved_only=True)
        issue = self.issuer()

        errors = await bounded_fanout(entries, lambda entry: issue(entry, window), self.fanout_limit)
        logger.info(
            f"[{self.tag}] {self.season.id}: window {window.count}/{window.total} "
            f"issued={len(entries) - len(errors)} failed={len(errors)}"
        )
        if errors:
            raise MultiError(errors)
        return len(entries)


class PredictionWindowOpenJob(_PredictionWindowJob):
    tag = "WINDOW_OPEN"

    def query_timeframe(self) -> TimeFrame:
        return window_open_query_timeframe(self.clock.now())

    def find_window(self, tf: TimeFrame) -> Optional[SequencedTimeFrame]:
        return self.season.prediction_window_begins_within(tf)

    def issuer(self):
        return self.comms.issue_prediction_window_open_email


class PredictionWindowClosingJob(_PredictionWindowJob):
    tag = "WINDOW_CLOSING"

    def query_timeframe(self) -> TimeFrame:
        return window_closing_query_timeframe(self.clock.now())

    def find_window(self, tf: TimeFrame) -> Optional[SequencedTimeFrame]:
        return self.season.prediction_window_ends_within(tf)

    def issuer(self):
        return self.comms.issue_prediction_window_closing_email
