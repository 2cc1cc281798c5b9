"""Ledger endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from earnify.dependencies import get_ledger
from earnify.services.session_ledger import SessionLedger

router = APIRouter()


@router.get("")
def get_ledger_state(ledger: SessionLedger = Depends(get_ledger)) -> dict:
    """Return the ledger with derived progress fields."""
    return {"ledger": ledger.get_state().model_dump(mode="json")}


@router.get("/history")
def get_history(
    limit: int = Query(default=50, ge=1, le=50),
    offset: int = Query(default=0, ge=0),
    ledger: SessionLedger = Depends(get_ledger),
) -> dict:
    """Return history entries, newest first."""
    history = ledger.get_state().history
    entries = [entry.model_dump(mode="json") for entry in history[offset : offset + limit]]
    return {"entries": entries, "total": len(history)}


@router.post("/reset")
def reset_ledger(ledger: SessionLedger = Depends(get_ledger)) -> dict:
    """Clear all data and start over with a fresh ledger."""
    return {"ledger": ledger.reset().model_dump(mode="json")}
