from datetime import datetime
from typing import Optional

from sqlalchemy import delete

from prediction_league.models import Token
from prediction_league.repositories.base import Repository


class TokenRepository(Repository):
    async def insert(self, token: Token) -> Token:
        async with self._session("insert token") as session:
            session.add(token)
            await session.commit()
        return token

    async def find(self, token_id: str) -> Optional[Token]:
        async with self._session("find token") as session:
            return await session.get(Token, token_id)

    async def delete(self, token_id: str) -> int:
        return await self._delete(delete(Token).where(Token.id == token_id), "delete token")

    async def delete_expired_as_of(self, ts: datetime) -> int:
        return await self._delete(delete(Token).where(Token.expires_at <= ts), "reap tokens")

    async def delete_in_flight(self, token_type: str, value: str, ts: datetime) -> int:
        stmt = delete(Token).where(
            Token.type == token_type,
            Token.value == value,
            Token.expires_at > ts,
        )
        return await self._delete(stmt, "delete in-flight tokens")

    async def _delete(self, stmt, action: str) -> int:
        async with self._session(action) as session:
            result = await session.execute(stmt)
            await session.commit()
        return result.rowcount
