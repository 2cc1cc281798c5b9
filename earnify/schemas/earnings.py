"""Earnings statistics schemas."""

from datetime import date

from pydantic import BaseModel


class EarningsSummary(BaseModel):
    """Lifetime totals shown on the earnings page."""

    balance: int = 0
    total_earned: int = 0
    total_spent: int = 0
    days_active: int = 1
    average_per_day: float = 0.0


class DailyActivity(BaseModel):
    """Points earned and spent on one local calendar day."""

    date: date
    day: str
    earned: int = 0
    spent: int = 0
