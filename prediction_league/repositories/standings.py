from typing import Optional

from sqlalchemy import select, update

from prediction_league.errors import NotFoundError
from prediction_league.models import Standings
from prediction_league.repositories.base import Repository


class StandingsRepository(Repository):
    async def insert(self, standings: Standings) -> Standings:
        async with self._session("insert standings") as session:
            session.add(standings)
            await session.commit()
        return standings

    async def update(self, standings: Standings) -> Standings:
        """Persist rankings, finalised flag and updated_at of an existing snapshot."""
        stmt = (
            update(Standings)
            .where(Standings.id == standings.id)
            .values(
                rankings=standings.rankings,
                finalised=standings.finalised,
                updated_at=standings.updated_at,
            )
        )
        async with self._session("update standings") as session:
            result = await session.execute(stmt)
            await session.commit()
        if result.rowcount == 0:
            raise NotFoundError(f"standings not found: {standings.id}")
        return standings

    async def find_by_season_and_round(self, season_id: str, round_number: int) -> Optional[Standings]:
        query = select(Standings).where(
            Standings.season_id == season_id,
            Standings.round_number == round_number,
        )
        async with self._session("find standings") as session:
            result = await session.execute(query)
            return result.scalars().first()

    async def list_by_season(self, season_id: str) -> list[Standings]:
        query = select(Standings).where(Standings.season_id == season_id).order_by(Standings.round_number)
        async with self._session("list standings") as session:
            result = await session.execute(query)
            return list(result.scalars().all())
