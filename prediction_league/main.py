"""Process entry point: configure, assemble and supervise the league service."""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from prediction_league.application import build_application
from prediction_league.clock import Clock, FrozenClock, RealClock, parse_ts_override
from prediction_league.config import Settings, get_settings
from prediction_league.database import close_db, create_engine, create_session_factory, init_db
from prediction_league.server import HTTPServerWorker, create_app
from prediction_league.service import Service
from prediction_league.telemetry import init_sentry

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prediction league service")
    parser.add_argument(
        "--ts",
        default=None,
        help="Freeze the clock at YYYYMMDDhhmmss (scheduler timezone) for deterministic runs",
    )
    return parser.parse_args(argv)


def build_clock(ts: Optional[str], settings: Settings) -> Clock:
    if not ts:
        return RealClock()
    clock = FrozenClock(parse_ts_override(ts, settings.SCHEDULER_TIMEZONE))
    logger.warning(f"Clock frozen at {clock.now().isoformat()} UTC via --ts")
    return clock


async def serve(settings: Settings, clock: Clock) -> int:
    logger.info("Starting prediction league service...")
    if settings.MIGRATIONS_URL:
        logger.info(f"Migrations are applied externally from {settings.MIGRATIONS_URL}")

    engine = create_engine(settings.DATABASE_URL)
    await init_db(engine)

    application = build_application(settings, clock, create_session_factory(engine))
    scheduler = application.build_scheduler()
    http = HTTPServerWorker(create_app(application), settings.HOST, settings.PORT, settings.LOG_LEVEL)

    service = Service(
        [http, scheduler, application.email_runner],
        grace_period=settings.SHUTDOWN_GRACE_SECONDS,
    )
    try:
        return await service.run_all()
    finally:
        await application.close()
        await close_db(engine)


def main(argv: Optional[Sequence[str]] = None) -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = parse_args(argv)
    init_sentry(settings.SENTRY_DSN)

    clock = build_clock(args.ts, settings)
    sys.exit(asyncio.run(serve(settings, clock)))


if __name__ == "__main__":
    main()
