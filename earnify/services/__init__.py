"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "EarningsService": "earnify.services.earnings_service",
    "FileStore": "earnify.services.store",
    "LedgerStore": "earnify.services.store",
    "MemoryStore": "earnify.services.store",
    "RechargeService": "earnify.services.recharge_service",
    "SessionLedger": "earnify.services.session_ledger",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
