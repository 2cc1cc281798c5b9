"""Earnings page statistics derived from the ledger."""

from __future__ import annotations

from datetime import date, tzinfo

from earnify.schemas.earnings import DailyActivity, EarningsSummary
from earnify.schemas.ledger import EntryKind, LedgerState
from earnify.utils.time import last_n_days, local_date

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def average_per_day(total_earned: int, days_active: int) -> float:
    """Average points earned per active day, rounded to one decimal."""
    if days_active <= 0:
        return 0.0
    return round(total_earned / days_active, 1)


class EarningsService:
    """Compute summary and weekly activity from a ledger snapshot."""

    def __init__(self, state: LedgerState, zone: tzinfo) -> None:
        self.state = state
        self.zone = zone

    def summary(self) -> EarningsSummary:
        """Return lifetime totals for the earnings page."""
        state = self.state
        return EarningsSummary(
            balance=state.balance,
            total_earned=state.total_earned,
            total_spent=state.total_spent,
            days_active=state.days_active,
            average_per_day=average_per_day(state.total_earned, state.days_active),
        )

    def weekly_activity(self, today: date, days: int = 7) -> list[DailyActivity]:
        """Return per-day earned/spent totals for the last ``days`` days, oldest first."""
        buckets = {
            day: DailyActivity(date=day, day=DAY_NAMES[day.weekday()])
            for day in last_n_days(days, today)
        }
        for entry in self.state.history:
            bucket = buckets.get(local_date(entry.timestamp, self.zone))
            if bucket is None:
                continue
            if entry.kind is EntryKind.EARNED:
                bucket.earned += entry.amount
            else:
                bucket.spent += entry.amount
        return list(buckets.values())
