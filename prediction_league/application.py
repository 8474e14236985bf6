"""Assembly site: builds every component from settings and wires them together."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import sessionmaker

from prediction_league.alerting import CommunicationsAgent, EmailClient, EmailQueue, MailgunClient
from prediction_league.clock import Clock
from prediction_league.config import Settings
from prediction_league.datastore import build_seasons, build_teams
from prediction_league.entries import EntryAgent
from prediction_league.etl import FootballDataOrgProvider, FootballDataSource
from prediction_league.jobs import (
    EmailQueueRunner,
    PredictionWindowClosingJob,
    PredictionWindowOpenJob,
    StandingsIngestor,
    TokenReaperJob,
)
from prediction_league.leaderboard import LeaderBoardAgent
from prediction_league.realms import RealmCollection, load_realms
from prediction_league.repositories import (
    EntryPredictionRepository,
    EntryRepository,
    ScoredEntryPredictionRepository,
    StandingsRepository,
    TokenRepository,
)
from prediction_league.scheduler import CronScheduler
from prediction_league.seasons import SeasonCollection
from prediction_league.teams import TeamCollection
from prediction_league.tokens import TokenAgent

logger = logging.getLogger(__name__)


@dataclass
class Application:
    settings: Settings
    clock: Clock
    teams: TeamCollection
    seasons: SeasonCollection
    realms: RealmCollection
    email_queue: EmailQueue
    comms: CommunicationsAgent
    entries: EntryAgent
    tokens: TokenAgent
    leaderboards: LeaderBoardAgent
    email_runner: EmailQueueRunner
    source: Optional[FootballDataSource] = None
    email_client: Optional[EmailClient] = None
    ingestors: dict = field(default_factory=dict)

    def build_scheduler(self) -> CronScheduler:
        """Register every per-season job plus the token reaper."""
        settings = self.settings
        scheduler = CronScheduler(timezone=settings.SCHEDULER_TIMEZONE)
        timeout = settings.WORKER_TIMEOUT_SECONDS
        limit = settings.EMAIL_FANOUT_CONCURRENCY

        for season in self.seasons:
            ingestor = self.ingestors.get(season.id)
            if ingestor is not None:
                scheduler.register(
                    f"retrieve_latest_standings:{season.id}",
                    f"Retrieve latest standings ({season.name})",
                    settings.STANDINGS_CRON,
                    ingestor.run,
                    timeout,
                    job="retrieve_latest_standings",
                    season_id=season.id,
                )

            open_job = PredictionWindowOpenJob(season, self.clock, self.entries, self.comms, limit)
            scheduler.register(
                f"prediction_window_open:{season.id}",
                f"Prediction window open ({season.name})",
                settings.WINDOW_OPEN_CRON,
                open_job.run,
                timeout,
                job="prediction_window_open",
                season_id=season.id,
            )

            closing_job = PredictionWindowClosingJob(season, self.clock, self.entries, self.comms, limit)
            scheduler.register(
                f"prediction_window_closing:{season.id}",
                f"Prediction window closing ({season.name})",
                settings.WINDOW_CLOSING_CRON,
                closing_job.run,
                timeout,
                job="prediction_window_closing",
                season_id=season.id,
            )

        reaper = TokenReaperJob(self.tokens, self.clock)
        scheduler.register(
            "token_reaper",
            "Reap expired tokens",
            settings.TOKEN_REAP_CRON,
            reaper.run,
            timeout,
            job="token_reaper",
        )
        return scheduler

    async def close(self) -> None:
        if self.source is not None:
            await self.source.close()
        if self.email_client is not None:
            await self.email_client.close()


def build_application(
    settings: Settings,
    clock: Clock,
    session_factory: sessionmaker,
    source: Optional[FootballDataSource] = None,
    email_client: Optional[EmailClient] = None,
) -> Application:
    """
    Build the application graph.

    ``source`` and ``email_client`` default to the football-data.org and
    Mailgun clients when their credentials are configured; without a
    football-data token no standings job is registered, and without a Mailgun
    key queued email is logged instead of sent.
    """
    teams = build_teams()
    seasons = build_seasons(clock.now())
    realms = load_realms(settings)
    realms.validate_seasons(s.id for s in seasons)

    if source is None and settings.FOOTBALL_DATA_API_TOKEN:
        source = FootballDataOrgProvider(settings.FOOTBALL_DATA_API_TOKEN, teams, settings.FOOTBALL_DATA_BASE_URL)
    if email_client is None and settings.MAILGUN_API_KEY:
        email_client = MailgunClient(settings.MAILGUN_API_KEY, settings.MAILGUN_BASE_URL)

    entry_repo = EntryRepository(session_factory)
    standings_repo = StandingsRepository(session_factory)
    scored_repo = ScoredEntryPredictionRepository(session_factory)

    queue = EmailQueue(max_queue_size=settings.EMAIL_QUEUE_SIZE)
    comms = CommunicationsAgent(queue, realms, seasons, teams, settings.SCHEDULER_TIMEZONE)
    entries = EntryAgent(entry_repo, EntryPredictionRepository(session_factory))

    ingestors = {}
    if source is not None:
        for season in seasons:
            if not season.client_id:
                continue
            ingestors[season.id] = StandingsIngestor(
                season=season,
                clock=clock,
                entries=entries,
                source=source,
                teams=teams,
                standings=standings_repo,
                scored=scored_repo,
                comms=comms,
                fanout_limit=settings.EMAIL_FANOUT_CONCURRENCY,
            )
    else:
        logger.info("[APP] FOOTBALL_DATA_API_TOKEN not set, standings ingestion disabled")

    if email_client is None:
        logger.info("[APP] MAILGUN_API_KEY not set, emails will be logged only")

    return Application(
        settings=settings,
        clock=clock,
        teams=teams,
        seasons=seasons,
        realms=realms,
        email_queue=queue,
        comms=comms,
        entries=entries,
        tokens=TokenAgent(TokenRepository(session_factory), clock),
        leaderboards=LeaderBoardAgent(seasons, entry_repo, standings_repo, scored_repo),
        email_runner=EmailQueueRunner(queue, email_client, settings.EMAIL_SEND_TIMEOUT_SECONDS),
        source=source,
        email_client=email_client,
        ingestors=ingestors,
    )
