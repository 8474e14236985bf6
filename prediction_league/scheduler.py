"""Cron-style scheduler host for the league's background jobs."""

import asyncio
import logging
from typing import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from prediction_league.jobs import run_job

logger = logging.getLogger(__name__)


class CronScheduler:
    """
    Registry of cron specs to job callables, run as a supervised worker.

    Every job tick goes through ``run_job`` so failures and timeouts are
    logged and recorded rather than raised. Overlapping ticks of the same job
    are skipped (``max_instances=1``) and missed ticks coalesce into one.
    """

    def __init__(self, timezone: str = "Europe/London"):
        self.timezone = timezone
        self.scheduler = AsyncIOScheduler(timezone=timezone)
        self._stopped = asyncio.Event()

    def register(
        self,
        job_id: str,
        name: str,
        spec: str,
        func: Callable[[], Awaitable[object]],
        timeout: float,
        job: str,
        **tags,
    ) -> None:
        """Schedule ``func`` on cron ``spec``; ``job`` is the low-cardinality metrics family."""
        self.scheduler.add_job(
            run_job,
            trigger=CronTrigger.from_crontab(spec, timezone=self.timezone),
            args=[job, func, timeout],
            kwargs=tags,
            id=job_id,
            name=name,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info(f"[SCHEDULER] Registered {job_id} ({spec})")

    def job_ids(self) -> list[str]:
        return [job.id for job in self.scheduler.get_jobs()]

    async def run(self) -> None:
        self.scheduler.start()
        logger.info(f"[SCHEDULER] Started with {len(self.job_ids())} job(s), tz={self.timezone}")
        await self._stopped.wait()

    async def halt(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("[SCHEDULER] Stopped")
        self._stopped.set()
