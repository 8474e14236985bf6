"""Shared fixtures: in-memory database, a 20-team test season and fakes."""

import string
from datetime import datetime, timedelta

import pytest

from prediction_league.alerting import CommunicationsAgent, EmailQueue
from prediction_league.clock import FrozenClock
from prediction_league.database import create_engine, create_session_factory, init_db
from prediction_league.entries import EntryAgent
from prediction_league.etl import FootballDataSource, StandingsData
from prediction_league.models import Entry, EntryPrediction
from prediction_league.realms import Realm, RealmCollection
from prediction_league.repositories import (
    EntryPredictionRepository,
    EntryRepository,
    ScoredEntryPredictionRepository,
    StandingsRepository,
    TokenRepository,
)
from prediction_league.scoring import RankingMeta, RankingWithMeta
from prediction_league.seasons import Season, SeasonCollection, TimeFrame
from prediction_league.teams import Team, TeamCollection

TEAM_IDS = list(string.ascii_uppercase[:20])  # A..T
SEASON_ID = "S"
REALM_NAME = "test-realm"
NOW = datetime(2020, 10, 1, 12, 0)


def make_teams() -> TeamCollection:
    return TeamCollection.from_teams(
        Team(id=t, name=f"Team {t}", short_name=t, client_id=1000 + idx) for idx, t in enumerate(TEAM_IDS)
    )


def make_season(**overrides) -> Season:
    fields = dict(
        id=SEASON_ID,
        name="Test Season",
        client_id="TST",
        entries_accepted=TimeFrame(datetime(2020, 8, 1), datetime(2020, 9, 1)),
        predictions_accepted=TimeFrame(datetime(2020, 8, 1), datetime(2020, 12, 1)),
        live=TimeFrame(datetime(2020, 9, 1), datetime(2021, 6, 1)),
        prediction_windows=(
            TimeFrame(datetime(2020, 8, 1), datetime(2020, 9, 1)),
            TimeFrame(datetime(2020, 10, 7), datetime(2020, 10, 14)),
            TimeFrame(datetime(2020, 11, 11), datetime(2020, 11, 18)),
        ),
        team_ids=tuple(TEAM_IDS),
        max_rounds=38,
    )
    fields.update(overrides)
    return Season(**fields)


def make_rankings(order, played_games: int = 1) -> list[RankingWithMeta]:
    return [
        RankingWithMeta(id=team_id, position=idx, meta=RankingMeta(played_games=played_games))
        for idx, team_id in enumerate(order, start=1)
    ]


class FakeSource(FootballDataSource):
    """Returns whatever standings the test last configured."""

    def __init__(self):
        self.data = None
        self.calls = 0

    def set(self, round_number: int, order, played_games: int = None):
        self.data = StandingsData(
            season_id=SEASON_ID,
            round_number=round_number,
            rankings=make_rankings(order, played_games if played_games is not None else round_number),
        )

    async def retrieve_latest(self, season):
        self.calls += 1
        return self.data


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def teams():
    return make_teams()


@pytest.fixture
def season():
    return make_season()


@pytest.fixture
def seasons(season):
    return SeasonCollection.from_seasons([season])


@pytest.fixture
def realms():
    return RealmCollection([Realm(name=REALM_NAME, origin="https://league.test", season_id=SEASON_ID)])


@pytest.fixture
async def session_factory():
    engine = create_engine("sqlite://")
    await init_db(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def entry_repo(session_factory):
    return EntryRepository(session_factory)


@pytest.fixture
def prediction_repo(session_factory):
    return EntryPredictionRepository(session_factory)


@pytest.fixture
def standings_repo(session_factory):
    return StandingsRepository(session_factory)


@pytest.fixture
def scored_repo(session_factory):
    return ScoredEntryPredictionRepository(session_factory)


@pytest.fixture
def token_repo(session_factory):
    return TokenRepository(session_factory)


@pytest.fixture
def entry_agent(entry_repo, prediction_repo):
    return EntryAgent(entry_repo, prediction_repo)


@pytest.fixture
def email_queue():
    return EmailQueue(max_queue_size=100)


@pytest.fixture
def comms(email_queue, realms, seasons, teams):
    return CommunicationsAgent(email_queue, realms, seasons, teams)


@pytest.fixture
def add_entry(entry_repo, prediction_repo):
    """Insert an entry (approved by default) with an optional prediction."""

    async def _add(
        nickname: str,
        rankings=None,
        approved: bool = True,
        realm_name: str = REALM_NAME,
        predicted_at: datetime = NOW - timedelta(days=30),
    ) -> Entry:
        entry = Entry(
            season_id=SEASON_ID,
            realm_name=realm_name,
            entrant_name=f"{nickname.title()} Entrant",
            entrant_nickname=nickname,
            entrant_email=f"{nickname}@example.test",
            approved_at=NOW - timedelta(days=31) if approved else None,
        )
        await entry_repo.insert(entry)
        if rankings is not None:
            await prediction_repo.insert(
                EntryPrediction(entry_id=entry.id, rankings=list(rankings), created_at=predicted_at)
            )
        return entry

    return _add


async def drain(queue: EmailQueue) -> list:
    """Close the queue and collect everything that was offered."""
    await queue.close()
    return [email async for email in queue.stream()]
