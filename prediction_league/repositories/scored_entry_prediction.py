from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update

from prediction_league.errors import NotFoundError
from prediction_league.models import Entry, EntryPrediction, ScoredEntryPrediction, Standings
from prediction_league.repositories.base import Repository


@dataclass(frozen=True)
class ScoreRow:
    """One scored prediction flattened for leaderboard aggregation."""

    entry_id: str
    round_number: int
    score: int
    created_at: datetime


class ScoredEntryPredictionRepository(Repository):
    async def insert(self, scored: ScoredEntryPrediction) -> ScoredEntryPrediction:
        async with self._session("insert scored entry prediction") as session:
            session.add(scored)
            await session.commit()
        return scored

    async def update(self, scored: ScoredEntryPrediction) -> ScoredEntryPrediction:
        stmt = (
            update(ScoredEntryPrediction)
            .where(
                ScoredEntryPrediction.entry_prediction_id == scored.entry_prediction_id,
                ScoredEntryPrediction.standings_id == scored.standings_id,
            )
            .values(rankings=scored.rankings, score=scored.score, updated_at=scored.updated_at)
        )
        async with self._session("update scored entry prediction") as session:
            result = await session.execute(stmt)
            await session.commit()
        if result.rowcount == 0:
            raise NotFoundError(
                f"scored entry prediction not found: {scored.entry_prediction_id}/{scored.standings_id}"
            )
        return scored

    async def find(self, entry_prediction_id: str, standings_id: str) -> Optional[ScoredEntryPrediction]:
        async with self._session("find scored entry prediction") as session:
            return await session.get(ScoredEntryPrediction, (entry_prediction_id, standings_id))

    async def list_by_standings(self, standings_id: str) -> list[ScoredEntryPrediction]:
        query = select(ScoredEntryPrediction).where(ScoredEntryPrediction.standings_id == standings_id)
        async with self._session("list scored entry predictions") as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_score_rows(self, season_id: str, realm_name: str, max_round: int) -> list[ScoreRow]:
        """Scores of approved realm entries for every round up to ``max_round``."""
        query = (
            select(
                Entry.id,
                Standings.round_number,
                ScoredEntryPrediction.score,
                ScoredEntryPrediction.created_at,
            )
            .join(EntryPrediction, EntryPrediction.id == ScoredEntryPrediction.entry_prediction_id)
            .join(Entry, Entry.id == EntryPrediction.entry_id)
            .join(Standings, Standings.id == ScoredEntryPrediction.standings_id)
            .where(
                Standings.season_id == season_id,
                Standings.round_number <= max_round,
                Entry.realm_name == realm_name,
                Entry.approved_at.is_not(None),
            )
        )
        async with self._session("list score rows") as session:
            result = await session.execute(query)
            return [ScoreRow(*row) for row in result.all()]
