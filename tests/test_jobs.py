"""Scheduled job and wiring tests."""

from __future__ import annotations

import asyncio
from datetime import UTC, timedelta

import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi.testclient import TestClient

from earnify.config import Settings
from earnify.dependencies import build_backend, build_ledger
from earnify.jobs.daily_rollover import daily_rollover
from earnify.jobs.scheduler import register_jobs, scheduler
from earnify.services.store import FileStore, MemoryStore
from earnify.utils.clock import SchedulerClock


def test_daily_rollover_starts_new_day(ledger, clock) -> None:
    """The midnight job rolls the day even when idle."""
    clock.jump(timedelta(days=1))

    asyncio.run(daily_rollover(ledger))

    assert ledger.state.last_active_date == clock.today()
    assert ledger.state.days_active == 2
    assert ledger.is_active is False


def test_daily_rollover_is_idempotent(ledger, clock) -> None:
    """Running twice on the same day counts the day once."""
    clock.jump(timedelta(days=1))
    asyncio.run(daily_rollover(ledger))
    asyncio.run(daily_rollover(ledger))

    assert ledger.state.days_active == 2


def test_register_jobs_adds_daily_rollover(ledger) -> None:
    """The rollover job is registered once on a cron trigger."""
    register_jobs(ledger)
    register_jobs(ledger)

    job = scheduler.get_job("daily_rollover")
    assert job is not None
    assert isinstance(job.trigger, CronTrigger)
    assert job.args == (ledger,)
    scheduler.remove_job("daily_rollover")


def test_build_backend(tmp_path) -> None:
    """Storage backends are chosen by configuration."""
    assert isinstance(build_backend(Settings(storage_backend="memory")), MemoryStore)
    file_backend = build_backend(Settings(storage_backend="file", storage_dir=str(tmp_path)))
    assert isinstance(file_backend, FileStore)
    with pytest.raises(ValueError):
        build_backend(Settings(storage_backend="cloud"))


def test_build_ledger_uses_scheduler_clock(tmp_path) -> None:
    """The production ledger ticks through the scheduler."""
    background = BackgroundScheduler(timezone=UTC)
    config = Settings(storage_backend="file", storage_dir=str(tmp_path), tick_interval_seconds=1)

    session_ledger = build_ledger(background, config)

    assert isinstance(session_ledger.clock, SchedulerClock)
    assert session_ledger.state.balance == 0
    assert session_ledger.toggle() is True
    assert len(background.get_jobs()) == 1
    assert session_ledger.toggle() is False
    assert background.get_jobs() == []


def test_app_lifespan_runs_ticks_without_periodic_jobs() -> None:
    """Mining ticks are scheduled even when the periodic jobs are switched off."""
    from earnify.main import app

    with TestClient(app) as running:
        assert scheduler.running
        assert scheduler.get_job("daily_rollover") is None

        response = running.post("/session/toggle")
        assert response.json()["is_active"] is True
        tick_jobs = [job for job in scheduler.get_jobs() if job.id.startswith("mining_tick_")]
        assert len(tick_jobs) == 1

    assert not scheduler.running
    assert [job for job in scheduler.get_jobs() if job.id.startswith("mining_tick_")] == []
    assert app.state.ledger is None
