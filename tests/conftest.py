"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient


def _set_default_env() -> None:
    os.environ.setdefault("ENABLE_JOBS", "false")
    os.environ.setdefault("STORAGE_BACKEND", "memory")
    os.environ.setdefault("TIMEZONE", "UTC")


_set_default_env()

from earnify.schemas.ledger import LedgerState  # noqa: E402
from earnify.services.session_ledger import SessionLedger  # noqa: E402
from earnify.services.store import LedgerStore, MemoryStore  # noqa: E402

STORAGE_KEY = "earnify_data"


class ManualSubscription:
    """Tick subscription driven by ``ManualClock.advance``."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class ManualClock:
    """Deterministic clock: time only moves when a test moves it."""

    zone = UTC

    def __init__(self, start: datetime) -> None:
        self.current = start
        self.subscriptions: list[ManualSubscription] = []

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def every(self, seconds: float, callback: Callable[[], None]) -> ManualSubscription:
        subscription = ManualSubscription(callback)
        self.subscriptions.append(subscription)
        return subscription

    @property
    def live_subscriptions(self) -> list[ManualSubscription]:
        return [sub for sub in self.subscriptions if not sub.cancelled]

    def advance(self, seconds: int = 1) -> None:
        """Move time forward one second at a time, delivering ticks."""
        for _ in range(seconds):
            self.current += timedelta(seconds=1)
            for subscription in self.live_subscriptions:
                subscription.callback()

    def jump(self, delta: timedelta) -> None:
        """Move time without delivering ticks."""
        self.current += delta


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2026, 3, 10, 9, 0, tzinfo=UTC))


@pytest.fixture
def backend() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def store(backend: MemoryStore, clock: ManualClock) -> LedgerStore:
    return LedgerStore(backend, STORAGE_KEY, today=clock.today)


@pytest.fixture
def ledger(store: LedgerStore, clock: ManualClock) -> SessionLedger:
    return SessionLedger(store, clock)


@pytest.fixture
def make_ledger(
    backend: MemoryStore,
    store: LedgerStore,
    clock: ManualClock,
) -> Callable[..., SessionLedger]:
    """Build a ledger from a stored record with the given field overrides."""

    def factory(**fields) -> SessionLedger:
        fields.setdefault("last_active_date", clock.today())
        backend.set(STORAGE_KEY, LedgerStore.encode(LedgerState(**fields)))
        return SessionLedger(store, clock)

    return factory


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from earnify.main import app

    return TestClient(app)


@pytest.fixture
def api(client: TestClient, ledger: SessionLedger) -> Iterator[TestClient]:
    """Test client whose requests use the ``ledger`` fixture."""
    from earnify.dependencies import get_ledger
    from earnify.main import app

    app.dependency_overrides[get_ledger] = lambda: ledger
    yield client
    app.dependency_overrides.clear()
