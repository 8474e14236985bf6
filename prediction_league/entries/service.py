"""Read-side entry operations used by the jobs, plus prediction creation."""

import logging
from datetime import datetime
from typing import Optional, Sequence

from prediction_league.errors import ConflictError, ValidationError
from prediction_league.models import Entry, EntryPrediction
from prediction_league.repositories import EntryPredictionRepository, EntryRepository
from prediction_league.seasons import Season

logger = logging.getLogger(__name__)


class EntryAgent:
    """Entries and their predictions, scoped to a season or realm."""

    def __init__(self, entries: EntryRepository, predictions: EntryPredictionRepository):
        self.entries = entries
        self.predictions = predictions

    async def retrieve_entries_by_season(self, season_id: str, approved_only: bool = True) -> list[Entry]:
        return await self.entries.list_by_season(season_id, approved_only=approved_only)

    async def retrieve_entries_by_realm(
        self, realm_name: str, season_id: Optional[str] = None, approved_only: bool = True
    ) -> list[Entry]:
        return await self.entries.list_by_realm(realm_name, season_id=season_id, approved_only=approved_only)

    async def retrieve_active_predictions(
        self, season: Season, ts: datetime
    ) -> list[tuple[Entry, EntryPrediction]]:
        """
        Latest prediction at ``ts`` for every approved entry in ``season``.

        Raises:
            ConflictError: if the season is not live at ``ts``.
        """
        if not season.is_live_at(ts):
            raise ConflictError(f"season {season.id} is not live")

        entries = await self.entries.list_by_season(season.id, approved_only=True)
        latest = await self.predictions.latest_for_entries_at([e.id for e in entries], ts)

        return [(entry, latest[entry.id]) for entry in entries if entry.id in latest]

    async def create_entry_prediction(
        self, entry: Entry, season: Season, rankings: Sequence[str], ts: datetime
    ) -> EntryPrediction:
        """Validate and append a new prediction for ``entry``."""
        reasons = []
        if len(rankings) != len(season.team_ids):
            reasons.append(f"expected {len(season.team_ids)} team IDs, got {len(rankings)}")
        if len(set(rankings)) != len(rankings):
            reasons.append("team IDs must be unique")
        unknown = [team_id for team_id in rankings if team_id not in season.team_ids]
        if unknown:
            reasons.append(f"unknown team IDs: {', '.join(unknown)}")
        if reasons:
            raise ValidationError(reasons, fields=["rankings"])

        prediction = EntryPrediction(entry_id=entry.id, rankings=list(rankings), created_at=ts)
        await self.predictions.insert(prediction)
        logger.info(f"[ENTRY] Stored prediction {prediction.id} for entry {entry.id}")
        return prediction
