"""Shared session handling and error translation for repositories."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from prediction_league.errors import ConflictError, TransientError

logger = logging.getLogger(__name__)


class Repository:
    """Base for repositories; one session per operation."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            try:
                yield session
            except IntegrityError as e:
                await session.rollback()
                raise ConflictError(f"{action}: {e.orig}") from e
            except (OperationalError, InterfaceError) as e:
                await session.rollback()
                logger.warning(f"[DB] {action} failed: {e}")
                raise TransientError(f"{action}: {e}") from e
