from typing import Optional

from sqlalchemy import select

from prediction_league.errors import NotFoundError
from prediction_league.models import Entry
from prediction_league.repositories.base import Repository


class EntryRepository(Repository):
    async def insert(self, entry: Entry) -> Entry:
        async with self._session("insert entry") as session:
            session.add(entry)
            await session.commit()
        return entry

    async def get_by_id(self, entry_id: str) -> Entry:
        async with self._session("get entry") as session:
            entry = await session.get(Entry, entry_id)
        if entry is None:
            raise NotFoundError(f"entry not found: {entry_id}")
        return entry

    async def list_by_season(self, season_id: str, approved_only: bool = False) -> list[Entry]:
        query = select(Entry).where(Entry.season_id == season_id)
        if approved_only:
            query = query.where(Entry.approved_at.is_not(None))
        async with self._session("list entries by season") as session:
            result = await session.execute(query.order_by(Entry.created_at))
            return list(result.scalars().all())

    async def list_by_realm(
        self,
        realm_name: str,
        season_id: Optional[str] = None,
        approved_only: bool = False,
    ) -> list[Entry]:
        query = select(Entry).where(Entry.realm_name == realm_name)
        if season_id is not None:
            query = query.where(Entry.season_id == season_id)
        if approved_only:
            query = query.where(Entry.approved_at.is_not(None))
        async with self._session("list entries by realm") as session:
            result = await session.execute(query.order_by(Entry.created_at))
            return list(result.scalars().all())
