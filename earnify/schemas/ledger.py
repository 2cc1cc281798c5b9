"""Ledger schemas."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

GOAL_SECONDS = 18000
HISTORY_LIMIT = 50
DEFAULT_DISPLAY_NAME = "User"


class EntryKind(StrEnum):
    """Direction of a ledger entry."""

    EARNED = "earned"
    SPENT = "spent"


class LedgerEntry(BaseModel):
    """A single immutable history item."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    timestamp: datetime
    amount: int = Field(..., gt=0)
    kind: EntryKind
    seconds_mined: int = Field(default=0, ge=0)
    description: str = ""


class LedgerState(BaseModel):
    """The persisted aggregate, one record per user.

    Serialised with camelCase keys (``model_dump(by_alias=True)``) so the
    stored record keeps the shape the web client reads.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    balance: int = Field(default=0, ge=0)
    elapsed_seconds: int = Field(default=0, ge=0, lt=GOAL_SECONDS)
    last_active_date: date
    display_name: str = DEFAULT_DISPLAY_NAME
    avatar_ref: str | None = None
    total_earned: int = Field(default=0, ge=0)
    total_spent: int = Field(default=0, ge=0)
    days_active: int = Field(default=1, ge=1)
    history: list[LedgerEntry] = Field(default_factory=list)

    @field_validator("history")
    @classmethod
    def _keep_newest(cls, value: list[LedgerEntry]) -> list[LedgerEntry]:
        return value[:HISTORY_LIMIT]

    @model_validator(mode="after")
    def _check_balance(self) -> LedgerState:
        if self.balance != self.total_earned - self.total_spent:
            raise ValueError(
                f"balance {self.balance} does not match "
                f"earned {self.total_earned} - spent {self.total_spent}"
            )
        return self

    @classmethod
    def initial(cls, today: date) -> LedgerState:
        """Return the first-run state for ``today``."""
        return cls(last_active_date=today)


class LedgerView(BaseModel):
    """Read model handed to the presentation layer."""

    balance: int
    elapsed_seconds: int
    is_active: bool
    progress_percent: float
    formatted_elapsed: str
    formatted_goal: str
    goal_seconds: int = GOAL_SECONDS
    total_earned: int
    total_spent: int
    days_active: int
    last_active_date: date
    display_name: str
    avatar_ref: str | None = None
    history: list[LedgerEntry]


class SpendRequest(BaseModel):
    """Request body for spending points."""

    amount: int = Field(..., ge=1)
    description: str = Field(default="Points spent", min_length=1, max_length=200)


class RechargeRequest(BaseModel):
    """Request body for a mobile recharge paid with points."""

    mobile_number: str = Field(..., min_length=1, max_length=32)
    operator: str = Field(..., min_length=1)
