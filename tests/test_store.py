"""Ledger persistence and schema migration tests."""

from __future__ import annotations

import json
from datetime import UTC, date, datetime

import pytest

from earnify.schemas.ledger import GOAL_SECONDS, HISTORY_LIMIT, EntryKind, LedgerEntry, LedgerState
from earnify.services.store import FileStore, LedgerStore, MemoryStore, migrate_record

TODAY = date(2026, 3, 10)


def _store(backend) -> LedgerStore:
    return LedgerStore(backend, "earnify_data", today=lambda: TODAY)


def _sample_state() -> LedgerState:
    return LedgerState(
        balance=2,
        elapsed_seconds=4321,
        last_active_date=date(2026, 3, 9),
        display_name="Asha",
        avatar_ref="data:image/png;base64,AAAA",
        total_earned=5,
        total_spent=3,
        days_active=7,
        history=[
            LedgerEntry(
                timestamp=datetime(2026, 3, 9, 18, 0, tzinfo=UTC),
                amount=3,
                kind=EntryKind.SPENT,
                description="Gift",
            ),
            LedgerEntry(
                timestamp=datetime(2026, 3, 8, 14, 0, tzinfo=UTC),
                amount=1,
                kind=EntryKind.EARNED,
                seconds_mined=GOAL_SECONDS,
                description="Daily mining goal completed",
            ),
        ],
    )


def test_save_then_load_returns_same_state() -> None:
    """A saved state loads back unchanged."""
    store = _store(MemoryStore())
    state = _sample_state()

    assert store.save(state) is True
    assert store.load() == state


def test_record_uses_camel_case_keys() -> None:
    """The stored record keeps the web client's field names."""
    backend = MemoryStore()
    _store(backend).save(_sample_state())

    record = json.loads(backend.data["earnify_data"])
    assert record["lastActiveDate"] == "2026-03-09"
    assert record["elapsedSeconds"] == 4321
    assert record["history"][0]["kind"] == "spent"
    assert record["history"][1]["secondsMined"] == GOAL_SECONDS


def test_missing_record_loads_defaults() -> None:
    """First run starts from the default state."""
    state = _store(MemoryStore()).load()
    assert state == LedgerState.initial(TODAY)


@pytest.mark.parametrize(
    "blob",
    [
        "{not json",
        "[]",
        json.dumps({"balance": 5, "totalEarned": 1, "totalSpent": 0, "lastActiveDate": "2026-03-09"}),
        json.dumps({"balance": 0, "elapsedSeconds": GOAL_SECONDS, "lastActiveDate": "2026-03-09"}),
        json.dumps({"balance": -1, "totalEarned": -1, "lastActiveDate": "2026-03-09"}),
        json.dumps({"balance": 0, "lastActiveDate": "yesterday"}),
        json.dumps({"balance": 0, "history": 5}),
        json.dumps({"balance": 0, "history": True}),
    ],
)
def test_unreadable_record_falls_back_to_defaults(blob: str) -> None:
    """Corrupt or inconsistent records never raise to the caller."""
    backend = MemoryStore({"earnify_data": blob})
    assert _store(backend).load() == LedgerState.initial(TODAY)


def test_pre_migration_record_is_upgraded() -> None:
    """Records from before the totals and history existed get defaults."""
    backend = MemoryStore(
        {
            "earnify_data": json.dumps(
                {
                    "balance": 4,
                    "elapsedSeconds": 600,
                    "lastActiveDate": "2026-03-09",
                    "displayName": "Asha",
                    "avatarRef": None,
                }
            )
        }
    )

    state = _store(backend).load()

    assert state.balance == 4
    assert state.total_earned == 4
    assert state.total_spent == 0
    assert state.days_active == 1
    assert state.history == []
    assert state.elapsed_seconds == 600


def test_original_client_record_is_upgraded() -> None:
    """Key names written by the original web client are renamed."""
    record = {
        "points": 1,
        "secondsDone": 120,
        "lastDate": "2026-03-09",
        "userName": "Ravi",
        "userAvatar": None,
        "totalPointsEarned": 2,
        "totalPointsSpent": 1,
        "daysActive": 3,
        "earningHistory": [
            {
                "date": "2026-03-09T10:00:00.000Z",
                "pointsEarned": 1,
                "secondsMined": 0,
                "type": "spent",
                "description": "Points spent",
            }
        ],
    }
    backend = MemoryStore({"earnify_data": json.dumps(record)})

    state = _store(backend).load()

    assert state.balance == 1
    assert state.elapsed_seconds == 120
    assert state.display_name == "Ravi"
    assert state.total_earned == 2
    assert state.total_spent == 1
    assert state.days_active == 3
    assert state.history[0].kind is EntryKind.SPENT
    assert state.history[0].amount == 1
    assert state.history[0].timestamp == datetime(2026, 3, 9, 10, 0, tzinfo=UTC)


def test_migrate_record_fills_every_missing_field() -> None:
    """An empty object migrates to a loadable default record."""
    upgraded = migrate_record({}, TODAY)
    assert upgraded == {
        "balance": 0,
        "elapsedSeconds": 0,
        "lastActiveDate": "2026-03-10",
        "displayName": "User",
        "totalEarned": 0,
        "totalSpent": 0,
        "daysActive": 1,
        "history": [],
    }
    assert LedgerState.model_validate(upgraded) == LedgerState.initial(TODAY)


def test_overlong_history_is_truncated_on_load() -> None:
    """Only the newest entries are kept from an oversized record."""
    entries = [
        {
            "timestamp": f"2026-03-09T10:{minute:02d}:00Z",
            "amount": 1,
            "kind": "earned",
            "secondsMined": GOAL_SECONDS,
            "description": "Daily mining goal completed",
        }
        for minute in range(59, -1, -1)
    ]
    record = {
        "balance": 60,
        "totalEarned": 60,
        "lastActiveDate": "2026-03-09",
        "history": entries,
    }
    backend = MemoryStore({"earnify_data": json.dumps(record)})

    state = _store(backend).load()

    assert len(state.history) == HISTORY_LIMIT
    assert state.history[0].timestamp.minute == 59


def test_file_store_round_trip(tmp_path) -> None:
    """The file backend persists across store instances."""
    state = _sample_state()
    _store(FileStore(tmp_path / "data")).save(state)

    assert (tmp_path / "data" / "earnify_data.json").exists()
    assert _store(FileStore(tmp_path / "data")).load() == state
    assert list((tmp_path / "data").glob("*.tmp")) == []


def test_file_store_missing_key_returns_none(tmp_path) -> None:
    """Absent keys read as None."""
    assert FileStore(tmp_path).get("nothing_here") is None


def test_file_store_write_failure_is_reported(tmp_path) -> None:
    """A directory that cannot be created makes set return False."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    backend = FileStore(blocker / "data")

    assert backend.set("earnify_data", "{}") is False
    assert _store(backend).save(_sample_state()) is False


@pytest.mark.parametrize("key", ["", "../escape", "with space", "a/b"])
def test_invalid_keys_are_rejected(key: str) -> None:
    """Keys cannot address paths outside the store."""
    with pytest.raises(ValueError):
        MemoryStore().get(key)


def test_unencodable_state_is_not_saved() -> None:
    """A state that cannot be written as UTF-8 JSON is reported, not raised."""
    backend = MemoryStore()
    store = _store(backend)
    state = LedgerState.initial(TODAY).model_copy(update={"display_name": "\ud800bad"})

    assert store.save(state) is False
    assert backend.data == {}
