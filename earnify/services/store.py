"""Durable key-value storage and the ledger record codec."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from earnify.schemas.ledger import DEFAULT_DISPLAY_NAME, LedgerState

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

# Key names written by the original web client, mapped to the current record.
LEGACY_FIELD_NAMES = {
    "points": "balance",
    "secondsDone": "elapsedSeconds",
    "lastDate": "lastActiveDate",
    "userName": "displayName",
    "userAvatar": "avatarRef",
    "totalPointsEarned": "totalEarned",
    "totalPointsSpent": "totalSpent",
    "earningHistory": "history",
}
LEGACY_ENTRY_FIELD_NAMES = {
    "date": "timestamp",
    "pointsEarned": "amount",
    "type": "kind",
}


class KeyValueStore(Protocol):
    """Synchronous string store. ``set`` reports success instead of raising."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> bool: ...


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.match(key):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class MemoryStore:
    """Process-local store, used for ephemeral runs and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self.data.get(_check_key(key))

    def set(self, key: str, value: str) -> bool:
        with self._lock:
            self.data[_check_key(key)] = value
        return True


class FileStore:
    """One JSON file per key under ``directory``."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_check_key(key)}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return None

    def set(self, key: str, value: str) -> bool:
        """Write through a temp file and atomic rename."""
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.warning("Could not write %s: %s", path, exc)
            return False
        return True


def migrate_record(record: dict[str, Any], today: date) -> dict[str, Any]:
    """Upgrade an older ledger record to the current schema.

    Legacy key names are renamed, then missing fields get defaults:
    ``totalEarned`` from ``balance``, ``totalSpent`` 0, ``daysActive`` 1,
    empty ``history``.
    """
    upgraded = dict(record)
    for old, new in LEGACY_FIELD_NAMES.items():
        if old in upgraded:
            value = upgraded.pop(old)
            upgraded.setdefault(new, value)

    def missing(field: str) -> bool:
        return upgraded.get(field) is None

    if missing("balance"):
        upgraded["balance"] = 0
    if missing("elapsedSeconds"):
        upgraded["elapsedSeconds"] = 0
    if missing("lastActiveDate"):
        upgraded["lastActiveDate"] = today.isoformat()
    if missing("displayName"):
        upgraded["displayName"] = DEFAULT_DISPLAY_NAME
    if missing("totalEarned"):
        upgraded["totalEarned"] = upgraded["balance"]
    if missing("totalSpent"):
        upgraded["totalSpent"] = 0
    if missing("daysActive"):
        upgraded["daysActive"] = 1
    if missing("history"):
        upgraded["history"] = []

    history = upgraded["history"]
    if not isinstance(history, list):
        return upgraded

    entries = []
    for entry in history:
        if isinstance(entry, dict):
            entry = dict(entry)
            for old, new in LEGACY_ENTRY_FIELD_NAMES.items():
                if old in entry:
                    value = entry.pop(old)
                    entry.setdefault(new, value)
        entries.append(entry)
    upgraded["history"] = entries
    return upgraded


class LedgerStore:
    """Loads, migrates and saves the ledger record under one key."""

    def __init__(
        self,
        backend: KeyValueStore,
        key: str,
        today: Callable[[], date],
    ) -> None:
        self.backend = backend
        self.key = _check_key(key)
        self.today = today

    def default_state(self) -> LedgerState:
        return LedgerState.initial(self.today())

    def decode(self, blob: str) -> LedgerState:
        """Parse a stored blob, upgrading older schemas.

        Raises:
            ValueError: The blob is not valid JSON or not a valid ledger record.
        """
        record = json.loads(blob)
        if not isinstance(record, dict):
            raise ValueError("Ledger record must be a JSON object")
        return LedgerState.model_validate(migrate_record(record, self.today()))

    @staticmethod
    def encode(state: LedgerState) -> str:
        return state.model_dump_json(by_alias=True)

    def load(self) -> LedgerState:
        """Return the stored state, or the default state when absent or unreadable."""
        blob = self.backend.get(self.key)
        if blob is None:
            logger.info("No stored ledger under %r, starting fresh", self.key)
            return self.default_state()
        try:
            return self.decode(blob)
        except (TypeError, ValueError, ValidationError) as exc:
            logger.warning("Stored ledger under %r is unreadable, using defaults: %s", self.key, exc)
            return self.default_state()

    def save(self, state: LedgerState) -> bool:
        """Persist ``state``. A failed write is logged and reported as ``False``."""
        try:
            blob = self.encode(state)
        except PydanticSerializationError as exc:
            logger.warning("Ledger could not be serialised, keeping in-memory state: %s", exc)
            return False
        saved = self.backend.set(self.key, blob)
        if not saved:
            logger.warning("Ledger save failed, keeping in-memory state")
        return saved
