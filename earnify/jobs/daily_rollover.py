"""Daily rollover scheduled job."""

from __future__ import annotations

import asyncio
import logging

from earnify.services.session_ledger import SessionLedger

logger = logging.getLogger(__name__)


async def daily_rollover(ledger: SessionLedger) -> None:
    """Start a new mining day even when no session is running."""
    # roll_over takes the ledger lock and writes to storage; keep it off the loop.
    rolled = await asyncio.to_thread(ledger.roll_over)
    state = ledger.state
    if rolled:
        logger.info(
            "daily_rollover started %s (days active: %s)",
            state.last_active_date,
            state.days_active,
        )
    else:
        logger.info("daily_rollover found %s already current", state.last_active_date)
