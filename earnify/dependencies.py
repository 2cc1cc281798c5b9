"""FastAPI dependency injection helpers."""

from __future__ import annotations

from apscheduler.schedulers.base import BaseScheduler
from fastapi import Request

from earnify.config import Settings, settings
from earnify.services.session_ledger import SessionLedger
from earnify.services.store import FileStore, KeyValueStore, LedgerStore, MemoryStore
from earnify.utils.clock import SchedulerClock
from earnify.utils.errors import LedgerUnavailableError
from earnify.utils.time import resolve_timezone


def build_backend(config: Settings = settings) -> KeyValueStore:
    """Return the configured key-value backend."""
    if config.storage_backend == "memory":
        return MemoryStore()
    if config.storage_backend == "file":
        return FileStore(config.storage_dir)
    raise ValueError(f"Unknown storage backend: {config.storage_backend}")


def build_ledger(scheduler: BaseScheduler, config: Settings = settings) -> SessionLedger:
    """Load the ledger from storage and wire it to the scheduler clock."""
    clock = SchedulerClock(scheduler, resolve_timezone(config.timezone))
    store = LedgerStore(build_backend(config), config.storage_key, today=clock.today)
    return SessionLedger(store, clock, tick_interval_seconds=config.tick_interval_seconds)


def get_ledger(request: Request) -> SessionLedger:
    """Return the process-wide ledger created at startup."""
    ledger = getattr(request.app.state, "ledger", None)
    if ledger is None:
        raise LedgerUnavailableError()
    return ledger
