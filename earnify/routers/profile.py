"""Profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from earnify.dependencies import get_ledger
from earnify.schemas.profile import ProfileUpdate
from earnify.services.session_ledger import SessionLedger

router = APIRouter()


@router.patch("")
def update_profile(
    payload: ProfileUpdate,
    ledger: SessionLedger = Depends(get_ledger),
) -> dict:
    """Update display name and/or avatar."""
    view = ledger.update_profile(**payload.model_dump(exclude_unset=True))
    return {"display_name": view.display_name, "avatar_ref": view.avatar_ref}
