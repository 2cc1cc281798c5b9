"""Earnings statistics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from earnify.dependencies import get_ledger
from earnify.services.earnings_service import EarningsService
from earnify.services.session_ledger import SessionLedger

router = APIRouter()


@router.get("")
def get_earnings(ledger: SessionLedger = Depends(get_ledger)) -> dict:
    """Return lifetime totals and the last seven days of activity."""
    clock = ledger.clock
    service = EarningsService(ledger.state, zone=clock.zone)
    return {
        "summary": service.summary().model_dump(mode="json"),
        "weekly": [day.model_dump(mode="json") for day in service.weekly_activity(clock.today())],
    }
