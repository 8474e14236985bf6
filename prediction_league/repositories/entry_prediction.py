from datetime import datetime
from typing import Iterable

from sqlalchemy import select

from prediction_league.models import EntryPrediction
from prediction_league.repositories.base import Repository


class EntryPredictionRepository(Repository):
    async def insert(self, prediction: EntryPrediction) -> EntryPrediction:
        async with self._session("insert entry prediction") as session:
            session.add(prediction)
            await session.commit()
        return prediction

    async def list_by_entry(self, entry_id: str) -> list[EntryPrediction]:
        query = (
            select(EntryPrediction)
            .where(EntryPrediction.entry_id == entry_id)
            .order_by(EntryPrediction.created_at)
        )
        async with self._session("list entry predictions") as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def latest_for_entries_at(
        self, entry_ids: Iterable[str], ts: datetime
    ) -> dict[str, EntryPrediction]:
        """Map each entry ID to its prediction with the greatest ``created_at <= ts``."""
        ids = list(entry_ids)
        if not ids:
            return {}

        query = (
            select(EntryPrediction)
            .where(EntryPrediction.entry_id.in_(ids), EntryPrediction.created_at <= ts)
            .order_by(EntryPrediction.created_at.desc())
        )
        async with self._session("latest entry predictions") as session:
            result = await session.execute(query)
            rows = result.scalars().all()

        latest: dict[str, EntryPrediction] = {}
        for prediction in rows:
            latest.setdefault(prediction.entry_id, prediction)
        return latest
