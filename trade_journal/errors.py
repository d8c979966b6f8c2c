# trade_journal/errors.py

from typing import Any, Dict, Optional


class CalculationError(ValueError):
    """
    Base class for every calculator failure.

    Carries a stable machine-readable code plus details so the API layer
    can build a 400-class response without parsing messages.
    """

    code = "CALCULATION_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(CalculationError):
    """Raised when a required numeric input is missing, non-finite or non-positive."""

    code = "INVALID_INPUT"


class UnsupportedDirectionError(CalculationError):
    """Raised for a trade direction outside BUY_LONG / SELL_SHORT."""

    code = "UNSUPPORTED_DIRECTION"

    def __init__(self, direction: Any):
        super().__init__(
            f"Invalid trade direction: {direction}",
            {"trade_direction": str(direction)},
        )
        self.direction = direction


class InvalidTradeRecordError(CalculationError):
    """Raised when one record inside a batch is malformed. The whole batch fails."""

    code = "INVALID_TRADE_RECORD"

    def __init__(self, trade_id: Any, field: str, reason: str):
        super().__init__(
            f"Trade {trade_id}: {field} {reason}",
            {"trade_id": trade_id, "field": field},
        )
        self.trade_id = trade_id
        self.field = field


class ScoreConfigError(CalculationError):
    """Scoring tables are inconsistent. A deployment problem, not a user error."""

    code = "SCORE_CONFIG_ERROR"
    status_code = 500


class NoMatchingLevelError(ScoreConfigError):
    """No level band contains the score (gap or overlap in the level table)."""

    code = "NO_MATCHING_LEVEL"
