"""Background job modules for periodic Earnify tasks."""

from earnify.jobs.daily_rollover import daily_rollover

__all__ = [
    "daily_rollover",
]
