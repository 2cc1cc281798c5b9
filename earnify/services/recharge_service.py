"""Mobile recharge paid for with points."""

from __future__ import annotations

import logging
import re
from typing import Any

from earnify.services.session_ledger import SessionLedger
from earnify.utils.errors import InsufficientPointsError, InvalidInputError

logger = logging.getLogger(__name__)

OPERATORS = ("Jio", "Airtel", "Vi (Vodafone Idea)", "BSNL")
MOBILE_NUMBER_DIGITS = 10


def normalize_mobile_number(value: str) -> str:
    """Strip everything but digits and require a 10-digit number."""
    digits = re.sub(r"\D", "", value)
    if len(digits) != MOBILE_NUMBER_DIGITS:
        raise InvalidInputError("Please enter a valid 10-digit mobile number")
    return digits


class RechargeService:
    """Redeem points for a prepaid mobile recharge."""

    def __init__(self, ledger: SessionLedger, cost: int) -> None:
        self.ledger = ledger
        self.cost = cost

    def recharge(self, mobile_number: str, operator: str) -> dict[str, Any]:
        """Validate the request and spend ``cost`` points on it.

        Raises:
            InvalidInputError: Bad mobile number or unknown operator.
            InsufficientPointsError: The balance does not cover the cost.
        """
        number = normalize_mobile_number(mobile_number)
        if operator not in OPERATORS:
            raise InvalidInputError("Please select an operator")

        available = self.ledger.state.balance
        if available < self.cost:
            raise InsufficientPointsError(required=self.cost, available=available)

        if not self.ledger.spend(self.cost, f"Mobile recharge - {operator}"):
            raise InsufficientPointsError(required=self.cost, available=self.ledger.state.balance)

        logger.info("Recharged %s on %s for %s points", number[-4:].rjust(10, "*"), operator, self.cost)
        return {
            "mobile_number": number,
            "operator": operator,
            "cost": self.cost,
            "balance": self.ledger.state.balance,
        }
