"""Mining session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from earnify.dependencies import get_ledger
from earnify.services.session_ledger import SessionLedger

router = APIRouter()


@router.post("/toggle")
def toggle_session(ledger: SessionLedger = Depends(get_ledger)) -> dict:
    """Start mining when idle, stop it when mining."""
    is_active = ledger.toggle()
    return {"is_active": is_active, "ledger": ledger.get_state().model_dump(mode="json")}


@router.post("/acknowledge")
def acknowledge_goal(ledger: SessionLedger = Depends(get_ledger)) -> dict:
    """Report whether a goal was reached since the last call (at most once each)."""
    return {"goal_just_reached": ledger.consume_goal_reached()}
