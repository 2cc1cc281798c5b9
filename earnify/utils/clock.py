"""Wall clock and tick sources used by the mining session."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import date, datetime, tzinfo
from typing import Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class TickSubscription(Protocol):
    """Handle to a repeating tick source."""

    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class Clock(Protocol):
    """Supplies local "now" and a repeating tick source."""

    zone: tzinfo

    def now(self) -> datetime: ...

    def today(self) -> date: ...

    def every(self, seconds: float, callback: Callable[[], None]) -> TickSubscription: ...


class SchedulerSubscription:
    """Tick subscription backed by one APScheduler interval job."""

    def __init__(self, scheduler: BaseScheduler, job_id: str) -> None:
        self.scheduler = scheduler
        self.job_id = job_id
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Remove the interval job. Safe to call more than once."""
        if self._cancelled:
            return
        self._cancelled = True
        try:
            self.scheduler.remove_job(self.job_id)
        except JobLookupError:
            logger.debug("Tick job %s was already removed", self.job_id)


class SchedulerClock:
    """Clock reading local time in ``zone`` and ticking through ``scheduler``."""

    def __init__(self, scheduler: BaseScheduler, zone: tzinfo) -> None:
        self.scheduler = scheduler
        self.zone = zone

    def now(self) -> datetime:
        return datetime.now(tz=self.zone)

    def today(self) -> date:
        return self.now().date()

    def every(self, seconds: float, callback: Callable[[], None]) -> SchedulerSubscription:
        """Register ``callback`` to run every ``seconds`` until cancelled."""
        job_id = f"mining_tick_{uuid.uuid4().hex}"
        subscription = SchedulerSubscription(self.scheduler, job_id)

        def deliver() -> None:
            if subscription.cancelled:
                return
            callback()

        self.scheduler.add_job(
            deliver,
            IntervalTrigger(seconds=seconds, timezone=self.zone),
            id=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        return subscription
