"""Mining session state machine and point ledger."""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable
from datetime import date
from enum import StrEnum
from typing import Any

from earnify.schemas.ledger import (
    GOAL_SECONDS,
    HISTORY_LIMIT,
    EntryKind,
    LedgerEntry,
    LedgerState,
    LedgerView,
)
from earnify.services.store import LedgerStore
from earnify.utils.clock import Clock, TickSubscription
from earnify.utils.errors import InvalidInputError
from earnify.utils.time import format_duration

logger = logging.getLogger(__name__)

GOAL_DESCRIPTION = "Daily mining goal completed"
DEFAULT_SPEND_DESCRIPTION = "Points spent"

_UNSET: Any = object()


class SessionState(StrEnum):
    """Whether the accrual loop is running."""

    IDLE = "idle"
    MINING = "mining"


class LedgerEvent(StrEnum):
    """Notifications delivered to subscribers."""

    STATE_CHANGED = "state_changed"
    GOAL_REACHED = "goal_reached"


Listener = Callable[[LedgerEvent, LedgerView], None]


def prepend_entry(history: list[LedgerEntry], entry: LedgerEntry) -> list[LedgerEntry]:
    """Return ``history`` with ``entry`` first, keeping the newest entries only."""
    return [entry, *history][:HISTORY_LIMIT]


def progress_percent(elapsed_seconds: int) -> float:
    return elapsed_seconds / GOAL_SECONDS * 100


def require_text(value: str, field: str) -> str:
    """Return ``value`` if it can be stored as UTF-8 (no lone surrogates)."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInputError(f"{field} contains invalid characters") from exc
    return value


class SessionLedger:
    """Owns the ledger state, the mining session and its tick subscription.

    Every read-modify-write of the state happens under one lock: ticks arrive
    from scheduler threads while commands arrive from request threads. Each
    mutation is saved before listeners hear about it.
    """

    def __init__(
        self,
        store: LedgerStore,
        clock: Clock,
        tick_interval_seconds: float = 1.0,
    ) -> None:
        self.store = store
        self.clock = clock
        self.tick_interval_seconds = tick_interval_seconds
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._session = SessionState.IDLE
        self._subscription: TickSubscription | None = None
        self._session_token: object | None = None
        self._goal_pending = False
        self._state = store.load()
        self.roll_over()

    # -- queries -------------------------------------------------------

    @property
    def state(self) -> LedgerState:
        """Current persisted aggregate (treat as read-only)."""
        return self._state

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is SessionState.MINING

    def get_state(self) -> LedgerView:
        """Return the state plus derived fields for rendering."""
        with self._lock:
            return self._view()

    def consume_goal_reached(self) -> bool:
        """Return True once per goal completion, then False until the next one."""
        with self._lock:
            pending = self._goal_pending
            self._goal_pending = False
            return pending

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for state changes; returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # -- commands ------------------------------------------------------

    def toggle(self) -> bool:
        """Start or stop mining. Returns the new activity flag."""
        with self._lock:
            if self._session is SessionState.MINING:
                self._stop_mining()
            else:
                self._start_mining()
            self._notify(LedgerEvent.STATE_CHANGED)
            return self.is_active

    def on_tick(self) -> None:
        """Apply one elapsed second. Ignored unless mining."""
        with self._lock:
            if self._session is not SessionState.MINING:
                return
            self._apply_tick()

    def spend(self, amount: int, description: str = DEFAULT_SPEND_DESCRIPTION) -> bool:
        """Deduct ``amount`` points. Returns False when the balance is too low.

        Raises:
            InvalidInputError: ``amount`` is not a positive integer, or
                ``description`` cannot be stored.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidInputError("Amount must be a positive integer")
        require_text(description, "Description")

        with self._lock:
            state = self._state
            if amount > state.balance:
                logger.info("Spend of %s refused, balance is %s", amount, state.balance)
                return False

            entry = LedgerEntry(
                timestamp=self.clock.now(),
                amount=amount,
                kind=EntryKind.SPENT,
                seconds_mined=0,
                description=description,
            )
            self._commit(
                state.model_copy(
                    update={
                        "balance": state.balance - amount,
                        "total_spent": state.total_spent + amount,
                        "history": prepend_entry(state.history, entry),
                    }
                )
            )
            logger.info("Spent %s points (%s)", amount, description)
            return True

    def update_profile(
        self,
        display_name: str | None = None,
        avatar_ref: str | None = _UNSET,
    ) -> LedgerView:
        """Set profile metadata. Pass ``avatar_ref=None`` to remove the avatar."""
        update: dict[str, Any] = {}
        if display_name is not None:
            name = require_text(display_name, "Display name").strip()
            if not name:
                raise InvalidInputError("Display name cannot be blank")
            update["display_name"] = name
        if avatar_ref is not _UNSET:
            if avatar_ref is not None:
                require_text(avatar_ref, "Avatar")
            update["avatar_ref"] = avatar_ref

        with self._lock:
            if update:
                self._commit(self._state.model_copy(update=update))
            return self._view()

    def roll_over(self) -> bool:
        """Apply the day rollover if the calendar day has advanced."""
        with self._lock:
            today = self.clock.today()
            if today <= self._state.last_active_date:
                return False
            self._commit(self._rolled_over(self._state, today))
            return True

    def reset(self) -> LedgerView:
        """Stop mining and replace the state with a fresh default record."""
        with self._lock:
            self._stop_mining()
            self._goal_pending = False
            self._commit(self.store.default_state())
            logger.info("Ledger reset to defaults")
            return self._view()

    def close(self) -> None:
        """Cancel any running tick subscription."""
        with self._lock:
            if self.is_active:
                self._stop_mining()
                self._notify(LedgerEvent.STATE_CHANGED)

    # -- internals -----------------------------------------------------

    def _start_mining(self) -> None:
        token = object()
        self._session_token = token
        self._session = SessionState.MINING
        self._subscription = self.clock.every(
            self.tick_interval_seconds,
            functools.partial(self._on_scheduled_tick, token),
        )
        logger.info("Mining started at %s elapsed", format_duration(self._state.elapsed_seconds))

    def _stop_mining(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._session is SessionState.MINING:
            logger.info("Mining stopped at %s elapsed", format_duration(self._state.elapsed_seconds))
        self._session_token = None
        self._session = SessionState.IDLE

    def _on_scheduled_tick(self, token: object) -> None:
        with self._lock:
            if token is not self._session_token:
                return
            self.on_tick()

    def _apply_tick(self) -> None:
        state = self._state
        today = self.clock.today()
        goal_reached = False

        if today > state.last_active_date:
            state = self._rolled_over(state, today)
        elif state.elapsed_seconds + 1 >= GOAL_SECONDS:
            entry = LedgerEntry(
                timestamp=self.clock.now(),
                amount=1,
                kind=EntryKind.EARNED,
                seconds_mined=GOAL_SECONDS,
                description=GOAL_DESCRIPTION,
            )
            state = state.model_copy(
                update={
                    "balance": state.balance + 1,
                    "total_earned": state.total_earned + 1,
                    "elapsed_seconds": 0,
                    "history": prepend_entry(state.history, entry),
                }
            )
            self._stop_mining()
            goal_reached = True
        else:
            state = state.model_copy(update={"elapsed_seconds": state.elapsed_seconds + 1})

        self._commit(state)
        if goal_reached:
            self._goal_pending = True
            logger.info("Daily goal reached, balance is now %s", state.balance)
            self._notify(LedgerEvent.GOAL_REACHED)

    def _rolled_over(self, state: LedgerState, today: date) -> LedgerState:
        logger.info("Day rollover %s -> %s", state.last_active_date, today)
        return state.model_copy(
            update={
                "elapsed_seconds": 0,
                "days_active": state.days_active + 1,
                "last_active_date": today,
            }
        )

    def _commit(self, state: LedgerState) -> None:
        self._state = state
        self.store.save(state)
        self._notify(LedgerEvent.STATE_CHANGED)

    def _view(self) -> LedgerView:
        state = self._state
        return LedgerView(
            balance=state.balance,
            elapsed_seconds=state.elapsed_seconds,
            is_active=self.is_active,
            progress_percent=progress_percent(state.elapsed_seconds),
            formatted_elapsed=format_duration(state.elapsed_seconds),
            formatted_goal=format_duration(GOAL_SECONDS),
            total_earned=state.total_earned,
            total_spent=state.total_spent,
            days_active=state.days_active,
            last_active_date=state.last_active_date,
            display_name=state.display_name,
            avatar_ref=state.avatar_ref,
            history=list(state.history),
        )

    def _notify(self, event: LedgerEvent) -> None:
        if not self._listeners:
            return
        view = self._view()
        for listener in list(self._listeners):
            try:
                listener(event, view)
            except Exception:
                logger.exception("Ledger listener failed on %s", event)
