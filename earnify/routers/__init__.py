"""API router package."""

from earnify.routers import earnings, ledger, points, profile, session

__all__ = [
    "earnings",
    "ledger",
    "points",
    "profile",
    "session",
]
