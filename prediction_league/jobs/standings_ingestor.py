"""
Standings ingestion: poll upstream, upsert the round snapshot, score every
active prediction and notify entrants when a round is finalised.

Every write is an upsert keyed on (season, round) or (prediction, standings),
so a run aborted part-way is repaired by the next tick.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from prediction_league.alerting import CommunicationsAgent
from prediction_league.clock import Clock
from prediction_league.entries import EntryAgent
from prediction_league.errors import ConflictError, MismatchedRankingsError, UnknownTeamError
from prediction_league.etl import FootballDataSource
from prediction_league.jobs.fanout import bounded_fanout
from prediction_league.models import Entry, ScoredEntryPrediction, Standings
from prediction_league.repositories import ScoredEntryPredictionRepository, StandingsRepository
from prediction_league.scoring import RankingWithMeta, sort_by_position
from prediction_league.scoring.results import generate_scored_entry_prediction
from prediction_league.seasons import Season
from prediction_league.teams import TeamCollection
from prediction_league.telemetry import record_scored_prediction, record_standings_ingest

logger = logging.getLogger(__name__)


class IngestStatus(str, Enum):
    NO_PREDICTIONS = "no_predictions"
    NOT_LIVE = "not_live"
    TERMINAL = "terminal"
    SCORED = "scored"


@dataclass
class IngestResult:
    status: IngestStatus
    standings: Optional[Standings] = None
    finalised: bool = False
    scored: list[ScoredEntryPrediction] = field(default_factory=list)
    emails_issued: int = 0
    email_errors: list[Exception] = field(default_factory=list)


def validate_and_sort_rankings(
    rankings: Sequence[RankingWithMeta], teams: TeamCollection
) -> list[RankingWithMeta]:
    """Reject rankings naming unconfigured teams; order by position."""
    for ranking in rankings:
        if ranking.id not in teams:
            raise UnknownTeamError(ranking.id)
    return sort_by_position(rankings)


class StandingsIngestor:
    """Ingests standings for one season; at most one run in flight at a time."""

    def __init__(
        self,
        season: Season,
        clock: Clock,
        entries: EntryAgent,
        source: FootballDataSource,
        teams: TeamCollection,
        standings: StandingsRepository,
        scored: ScoredEntryPredictionRepository,
        comms: CommunicationsAgent,
        fanout_limit: int = 10,
    ):
        self.season = season
        self.clock = clock
        self.entries = entries
        self.source = source
        self.teams = teams
        self.standings = standings
        self.scored = scored
        self.comms = comms
        self.fanout_limit = fanout_limit
        self._lock = asyncio.Lock()

    async def run(self) -> IngestResult:
        async with self._lock:
            result = await self._ingest()
        record_standings_ingest(result.status.value)
        return result

    async def _ingest(self) -> IngestResult:
        season = self.season
        now = self.clock.now()

        try:
            active = await self.entries.retrieve_active_predictions(season, now)
        except ConflictError:
            logger.debug(f"[STANDINGS] {season.id}: season not live, skipping")
            return IngestResult(status=IngestStatus.NOT_LIVE)
        if not active:
            logger.info(f"[STANDINGS] {season.id}: no entry predictions")
            return IngestResult(status=IngestStatus.NO_PREDICTIONS)

        data = await self.source.retrieve_latest(season)
        rankings = validate_and_sort_rankings(data.rankings, self.teams)

        round_number = data.round_number
        if season.is_completed_by(rankings):
            # Upstream can report the final matchday one short once all games are played
            round_number = season.max_rounds

        standings, finalised = await self._upsert_standings(round_number, rankings, now)

        completes_season = season.is_completed_by(standings.ranking_items())
        if completes_season and standings.finalised and not finalised:
            logger.info(f"[STANDINGS] {season.id}: final round {standings.round_number} already finalised")
            return IngestResult(status=IngestStatus.TERMINAL, standings=standings)

        scored = await self._score_predictions(active, standings, now)

        if completes_season and not standings.finalised:
            standings.finalised = True
            standings.updated_at = now
            await self.standings.update(standings)
            finalised = True
            logger.info(f"[STANDINGS] {season.id}: finalised final round {standings.round_number}")

        result = IngestResult(
            status=IngestStatus.SCORED,
            standings=standings,
            finalised=finalised,
            scored=[s for _, s in scored],
        )

        if finalised:
            await self._issue_round_complete_emails(result, scored, standings, final_round=completes_season)

        logger.info(
            f"[STANDINGS] {season.id}: round {standings.round_number} scored={len(result.scored)} "
            f"finalised={finalised} emails={result.emails_issued} email_errors={len(result.email_errors)}"
        )
        return result

    async def _upsert_standings(
        self, round_number: int, rankings: list[RankingWithMeta], now
    ) -> tuple[Standings, bool]:
        """Return the snapshot to score and whether this call finalised it."""
        existing = await self.standings.find_by_season_and_round(self.season.id, round_number)
        if existing is not None:
            if existing.finalised:
                return existing, False
            existing.set_ranking_items(rankings)
            existing.updated_at = now
            await self.standings.update(existing)
            return existing, False

        if round_number > 1:
            pending = [
                s
                for s in await self.standings.list_by_season(self.season.id)
                if s.round_number < round_number and not s.finalised
            ]
            if pending:
                # Finalise earlier rounds first; the new round is created on the next tick
                for previous in pending:
                    previous.finalised = True
                    previous.updated_at = now
                    await self.standings.update(previous)
                latest = pending[-1]
                logger.info(
                    f"[STANDINGS] {self.season.id}: finalised round {latest.round_number}, "
                    f"deferring round {round_number}"
                )
                return latest, True

        standings = Standings(
            season_id=self.season.id,
            round_number=round_number,
            finalised=False,
            created_at=now,
        )
        standings.set_ranking_items(rankings)
        await self.standings.insert(standings)
        logger.info(f"[STANDINGS] {self.season.id}: created round {round_number}")
        return standings, False

    async def _score_predictions(self, active, standings: Standings, now) -> list[tuple[Entry, ScoredEntryPrediction]]:
        scored = []
        for entry, prediction in active:
            try:
                candidate = generate_scored_entry_prediction(prediction, standings, now)
            except MismatchedRankingsError as e:
                record_scored_prediction("mismatched")
                logger.warning(f"[STANDINGS] {self.season.id}: cannot score prediction {prediction.id}: {e}")
                continue

            existing = await self.scored.find(prediction.id, standings.id)
            if existing is None:
                await self.scored.insert(candidate)
                record_scored_prediction("insert")
                scored.append((entry, candidate))
                continue

            existing.rankings = candidate.rankings
            existing.score = candidate.score
            existing.updated_at = now
            await self.scored.update(existing)
            record_scored_prediction("update")
            scored.append((entry, existing))

        return scored

    async def _issue_round_complete_emails(
        self,
        result: IngestResult,
        scored: list[tuple[Entry, ScoredEntryPrediction]],
        standings: Standings,
        final_round: bool,
    ) -> None:
        async def _issue(item: tuple[Entry, ScoredEntryPrediction]) -> None:
            entry, scored_prediction = item
            await self.comms.issue_round_complete_email(entry, scored_prediction, standings, final_round)

        errors = await bounded_fanout(scored, _issue, self.fanout_limit)
        result.emails_issued = len(scored) - len(errors)
        result.email_errors = errors
        for err in errors:
            logger.error(f"[STANDINGS] {self.season.id}: round complete email failed: {err}")
