"""
Leaderboard aggregation.

Read-only view over scored predictions for one realm:
- per-round score is the most recently created scored prediction for that
  entry and round
- totals, best round and current round are derived from those per-round scores
- ordering is descending (total, best round, current round), then nickname
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from prediction_league.errors import StandingsNotFoundError
from prediction_league.models import Entry
from prediction_league.repositories import (
    EntryRepository,
    ScoredEntryPredictionRepository,
    ScoreRow,
    StandingsRepository,
)
from prediction_league.seasons import SeasonCollection

logger = logging.getLogger(__name__)


@dataclass
class LeaderBoardRanking:
    entry_id: str
    nickname: str
    position: int
    current_round_score: int = 0
    max_round_score: int = 0
    total_score: int = 0
    movement: int = 0


@dataclass
class LeaderBoard:
    season_id: str
    realm_name: str
    round_number: int
    rankings: list[LeaderBoardRanking] = field(default_factory=list)
    last_updated: Optional[datetime] = None


def latest_round_scores(rows: Iterable[ScoreRow]) -> dict[str, dict[int, int]]:
    """Map entry ID -> round -> score, keeping the most recently created row per round."""
    latest: dict[tuple[str, int], ScoreRow] = {}
    for row in rows:
        key = (row.entry_id, row.round_number)
        current = latest.get(key)
        if current is None or row.created_at > current.created_at:
            latest[key] = row

    scores: dict[str, dict[int, int]] = {}
    for (entry_id, round_number), row in latest.items():
        scores.setdefault(entry_id, {})[round_number] = row.score
    return scores


def rank_entries(
    round_scores: dict[str, dict[int, int]],
    entries: dict[str, Entry],
    round_number: int,
) -> list[LeaderBoardRanking]:
    """Aggregate per-round scores up to ``round_number`` into ordered rankings."""
    rankings = []
    for entry_id, by_round in round_scores.items():
        entry = entries.get(entry_id)
        if entry is None:
            continue
        considered = [score for rnd, score in by_round.items() if rnd <= round_number]
        if not considered:
            continue
        rankings.append(
            LeaderBoardRanking(
                entry_id=entry_id,
                nickname=entry.entrant_nickname,
                position=0,
                current_round_score=by_round.get(round_number, 0),
                max_round_score=max(considered),
                total_score=sum(considered),
            )
        )

    rankings.sort(key=lambda r: (-r.total_score, -r.max_round_score, -r.current_round_score, r.nickname))
    for idx, ranking in enumerate(rankings, start=1):
        ranking.position = idx
    return rankings


class LeaderBoardAgent:
    def __init__(
        self,
        seasons: SeasonCollection,
        entries: EntryRepository,
        standings: StandingsRepository,
        scored: ScoredEntryPredictionRepository,
    ):
        self.seasons = seasons
        self.entries = entries
        self.standings = standings
        self.scored = scored

    async def get_leaderboard(self, season_id: str, round_number: int, realm_name: str) -> LeaderBoard:
        """
        Build the realm's leaderboard as of ``round_number``.

        Raises:
            SeasonNotFoundError: unknown season.
            StandingsNotFoundError: no snapshot for ``round_number`` > 1.
        """
        self.seasons.get_by_id(season_id)

        standings = await self.standings.find_by_season_and_round(season_id, round_number)
        if standings is None and round_number != 1:
            raise StandingsNotFoundError(season_id, round_number)

        entries = await self.entries.list_by_realm(realm_name, season_id=season_id, approved_only=True)
        by_id = {e.id: e for e in entries}

        rows = await self.scored.list_score_rows(season_id, realm_name, round_number) if standings else []
        if not rows and round_number == 1:
            return self._empty(season_id, realm_name, entries, standings.last_updated if standings else None)

        round_scores = latest_round_scores(rows)
        rankings = rank_entries(round_scores, by_id, round_number)
        logger.debug(f"[LEADERBOARD] {season_id}/{realm_name} round {round_number}: {len(rankings)} ranked")

        if round_number > 1:
            previous = {r.entry_id: r.position for r in rank_entries(round_scores, by_id, round_number - 1)}
            for ranking in rankings:
                if ranking.entry_id in previous:
                    ranking.movement = previous[ranking.entry_id] - ranking.position

        return LeaderBoard(
            season_id=season_id,
            realm_name=realm_name,
            round_number=round_number,
            rankings=rankings,
            last_updated=standings.last_updated,
        )

    @staticmethod
    def _empty(
        season_id: str,
        realm_name: str,
        entries: list[Entry],
        last_updated: Optional[datetime],
    ) -> LeaderBoard:
        ordered = sorted(entries, key=lambda e: e.entrant_nickname)
        return LeaderBoard(
            season_id=season_id,
            realm_name=realm_name,
            round_number=1,
            rankings=[
                LeaderBoardRanking(entry_id=e.id, nickname=e.entrant_nickname, position=idx)
                for idx, e in enumerate(ordered, start=1)
            ],
            last_updated=last_updated,
        )
