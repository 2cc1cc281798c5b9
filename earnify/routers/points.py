"""Point spending endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from earnify.config import settings
from earnify.dependencies import get_ledger
from earnify.schemas.ledger import RechargeRequest, SpendRequest
from earnify.services.recharge_service import OPERATORS, RechargeService
from earnify.services.session_ledger import SessionLedger
from earnify.utils.errors import InsufficientPointsError

router = APIRouter()


@router.post("/spend")
def spend_points(
    payload: SpendRequest,
    ledger: SessionLedger = Depends(get_ledger),
) -> dict:
    """Spend points from the balance."""
    if not ledger.spend(payload.amount, payload.description):
        raise InsufficientPointsError(required=payload.amount, available=ledger.state.balance)
    return {"spent": True, "ledger": ledger.get_state().model_dump(mode="json")}


@router.get("/recharge/operators")
def list_operators() -> dict:
    """Return supported operators and the recharge price."""
    return {"operators": list(OPERATORS), "cost": settings.recharge_cost}


@router.post("/recharge")
def recharge(
    payload: RechargeRequest,
    ledger: SessionLedger = Depends(get_ledger),
) -> dict:
    """Pay for a mobile recharge with points."""
    service = RechargeService(ledger, cost=settings.recharge_cost)
    result = service.recharge(payload.mobile_number, payload.operator)
    return {"recharge": result}
