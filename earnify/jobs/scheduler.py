"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from earnify.config import settings
from earnify.jobs.daily_rollover import daily_rollover
from earnify.services.session_ledger import SessionLedger

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs(ledger: SessionLedger) -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("daily_rollover") is None:
        scheduler.add_job(
            daily_rollover,
            CronTrigger(
                hour=0,
                minute=settings.rollover_check_minute,
                second=1,
                timezone=settings.timezone,
            ),
            args=[ledger],
            id="daily_rollover",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
