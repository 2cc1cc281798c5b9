"""Custom exception hierarchy for the Earnify API."""

from __future__ import annotations


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class InsufficientPointsError(AppError):
    """Raised when a user tries to spend more points than they have."""

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            message=(
                f"Insufficient points: need {required}, have {available}. "
                f"You need {required - available} more points."
            ),
            code="INSUFFICIENT_POINTS",
        )


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=422)


class LedgerUnavailableError(AppError):
    """Raised when a request arrives before the ledger has been loaded."""

    def __init__(self, reason: str = "Ledger is not initialised") -> None:
        super().__init__(message=reason, code="LEDGER_UNAVAILABLE", status_code=503)
