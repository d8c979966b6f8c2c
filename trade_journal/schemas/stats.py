from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from trade_journal.models.enums import Currency, PnlBucket


class PnlPoint(BaseModel):
    date: str  # YYYY-MM-DD, start of the bucket
    pnl: float


class AggregateStats(BaseModel):
    """
    Summary statistics over one currency's trades.
    Recomputed on every request, never persisted.
    """

    currency: Optional[Currency] = None
    bucket: PnlBucket = PnlBucket.DAY

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: float = 0.0

    total_pnl: float = 0.0
    avg_profit_per_trade: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0

    # Inputs for performance scoring
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    profit_factor: Optional[float] = None  # None when there are no losses
    pnl_std_dev: float = 0.0

    trades_by_type: Dict[str, int] = Field(default_factory=dict)
    emotional_state_distribution: Dict[str, int] = Field(default_factory=dict)
    pnl_over_time: List[PnlPoint] = Field(default_factory=list)


class CalendarDay(BaseModel):
    date: str
    pnl: float
    trade_count: int


class GroupPerformance(BaseModel):
    group: str
    total_trades: int
    winning_trades: int
    win_rate: float
    total_pnl: float
    avg_pnl: float


class StreakWarning(BaseModel):
    type: str = "LOSS_STREAK"
    severity: str
    message: str
    confidence: float


class StreakSummary(BaseModel):
    current_streak: int = 0  # +n wins, -n losses
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    warning: Optional[StreakWarning] = None
