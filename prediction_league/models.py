"""Database models using SQLModel.

Timestamps are stored as naive UTC. Rankings are JSON columns holding an
ordered list.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from prediction_league.clock import utc_now
from prediction_league.scoring import RankingWithMeta, RankingWithScore


# Explicit so sqlmodel never maps datetime fields to a tz-aware column type
NAIVE_UTC = DateTime(timezone=False)


def new_id() -> str:
    return str(uuid.uuid4())


class EntryStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    READY = "ready"


class Entry(SQLModel, table=True):
    """One entrant's participation in a season, within a realm."""

    __tablename__ = "entry"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    short_code: str = Field(default="", max_length=50)
    season_id: str = Field(index=True, max_length=50)
    realm_name: str = Field(index=True, max_length=100)
    entrant_name: str = Field(max_length=100)
    entrant_nickname: str = Field(max_length=50)
    entrant_email: str = Field(max_length=255)
    status: EntryStatus = Field(default=EntryStatus.PENDING)
    payment_method: Optional[str] = Field(default=None, max_length=20)
    payment_ref: Optional[str] = Field(default=None, max_length=255)
    approved_at: Optional[datetime] = Field(default=None, index=True, sa_type=NAIVE_UTC)
    created_at: datetime = Field(default_factory=utc_now, sa_type=NAIVE_UTC)
    updated_at: Optional[datetime] = Field(default=None, sa_type=NAIVE_UTC)

    @property
    def is_approved(self) -> bool:
        return self.approved_at is not None


class EntryPrediction(SQLModel, table=True):
    """Append-only ordered guess of the final table."""

    __tablename__ = "entry_prediction"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    entry_id: str = Field(foreign_key="entry.id", index=True, max_length=36)
    rankings: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=NAIVE_UTC)


class Standings(SQLModel, table=True):
    """Upstream league table as of a round."""

    __tablename__ = "standings"
    __table_args__ = (UniqueConstraint("season_id", "round_number", name="uq_standings_season_round"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    season_id: str = Field(index=True, max_length=50)
    round_number: int = Field(description="Upstream match-day counter")
    rankings: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    finalised: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, sa_type=NAIVE_UTC)
    updated_at: Optional[datetime] = Field(default=None, sa_type=NAIVE_UTC)

    def ranking_items(self) -> list[RankingWithMeta]:
        return [RankingWithMeta.from_dict(r) for r in self.rankings]

    def set_ranking_items(self, items: list[RankingWithMeta]) -> None:
        self.rankings = [r.to_dict() for r in items]

    @property
    def last_updated(self) -> datetime:
        return self.updated_at or self.created_at


class ScoredEntryPrediction(SQLModel, table=True):
    """An entry prediction scored against one standings snapshot."""

    __tablename__ = "scored_entry_prediction"

    entry_prediction_id: str = Field(foreign_key="entry_prediction.id", primary_key=True, max_length=36)
    standings_id: str = Field(foreign_key="standings.id", primary_key=True, max_length=36)
    rankings: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    score: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=NAIVE_UTC)
    updated_at: Optional[datetime] = Field(default=None, sa_type=NAIVE_UTC)

    def ranking_items(self) -> list[RankingWithScore]:
        return [RankingWithScore.from_dict(r) for r in self.rankings]


class Token(SQLModel, table=True):
    """Short-lived opaque token bound to an entry."""

    __tablename__ = "token"

    id: str = Field(primary_key=True, max_length=36)
    type: str = Field(index=True, max_length=20)
    value: str = Field(index=True, max_length=255)
    issued_at: datetime = Field(sa_type=NAIVE_UTC)
    expires_at: datetime = Field(index=True, sa_type=NAIVE_UTC)
