"""APScheduler-based scheduling of full scrape runs.

A single cron job triggers the same run the CLI performs once. Job failures
are logged and never stop the scheduler.
"""

from typing import Awaitable, Callable, Optional

import structlog
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

logger = structlog.get_logger(__name__)

JOB_ID = "scrape_all"


class ScrapeScheduler:
    """Runs a scrape coroutine on a cron schedule."""

    def __init__(self, run_scrape: Callable[[], Awaitable[object]], cron: str = "0 0 * * *"):
        """Initialize the scheduler.

        Args:
            run_scrape: Coroutine function performing one full scrape
            cron: Crontab expression, evaluated in UTC
        """
        self.run_scrape = run_scrape
        self.cron = cron
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="scrape_scheduler")

    def start(self) -> Optional[Job]:
        """Register the cron job and start the scheduler.

        Must be called from within a running event loop.
        """
        if self.scheduler.running:
            self.logger.warning("scheduler_already_running")
            return self.scheduler.get_job(JOB_ID)

        job = self.scheduler.add_job(
            func=self._run_scrape_wrapper,
            trigger=CronTrigger.from_crontab(self.cron, timezone="UTC"),
            id=JOB_ID,
            name="Scrape all category URLs",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        self.logger.info(
            "scheduler_started",
            cron=self.cron,
            next_run=job.next_run_time.isoformat() if job.next_run_time else None,
        )
        return job

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    def is_running(self) -> bool:
        return self.scheduler.running

    async def _run_scrape_wrapper(self) -> None:
        """Job entry point; exceptions are logged so the next run still fires."""
        self.logger.info("scheduled_scrape_started")
        try:
            await self.run_scrape()
        except Exception as e:
            self.logger.error("scheduled_scrape_failed", error=str(e), exc_info=True)
            return
        self.logger.info("scheduled_scrape_finished")
