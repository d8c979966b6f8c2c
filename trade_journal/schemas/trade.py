from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trade_journal.models.enums import Currency, EmotionalState, TradeDirection, TradeType

MAX_VALUE = Decimal("1000000000")
TIME_PATTERN = r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$"

# Columns that are NOT NULL on the trades table.
NOT_NULL_FIELDS = (
    "trade_date",
    "trade_type",
    "instrument",
    "trade_direction",
    "avg_buy_price",
    "avg_sell_price",
    "position_size",
    "leverage",
    "base_currency",
    "emotional_state",
    "is_impulsive",
)


class TradePnL(BaseModel):
    """Output of the P&L calculator for one trade."""

    pnl: Decimal
    pnl_percentage: Decimal
    risk_reward_ratio: Optional[Decimal] = None


class TradeBase(BaseModel):
    trade_date: datetime
    entry_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    exit_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    trade_type: TradeType
    instrument: str = Field(..., min_length=1, max_length=100)
    trade_direction: TradeDirection

    avg_buy_price: Decimal = Field(..., gt=Decimal("0"), le=MAX_VALUE)
    avg_sell_price: Decimal = Field(..., gt=Decimal("0"), le=MAX_VALUE)
    position_size: Decimal = Field(..., gt=Decimal("0"), le=MAX_VALUE)
    leverage: Decimal = Field(default=Decimal("1"), ge=Decimal("1"), le=Decimal("100"))

    base_currency: Currency = Currency.INR
    emotional_state: EmotionalState
    is_impulsive: bool = False
    initial_notes: Optional[str] = Field(default=None, max_length=2000)

    # Pre-trade planning
    setup_confidence: Optional[int] = Field(default=None, ge=1, le=10)
    strategy: Optional[str] = Field(default=None, max_length=100)
    stop_loss_price: Optional[Decimal] = Field(default=None, gt=Decimal("0"))
    take_profit_price: Optional[Decimal] = Field(default=None, gt=Decimal("0"))

    # Execution / reflection
    deviated_from_plan: Optional[bool] = None
    deviation_reason: Optional[str] = Field(default=None, max_length=1000)
    stress_level: Optional[int] = Field(default=None, ge=1, le=10)
    key_lesson: Optional[str] = Field(default=None, max_length=2000)
    what_went_well: Optional[str] = Field(default=None, max_length=2000)
    would_do_differently: Optional[str] = Field(default=None, max_length=2000)


class TradeCreate(TradeBase):
    pass


class TradeUpdate(BaseModel):
    """Partial update. Price fields trigger a P&L recompute."""

    trade_date: Optional[datetime] = None
    entry_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    exit_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    trade_type: Optional[TradeType] = None
    instrument: Optional[str] = Field(default=None, min_length=1, max_length=100)
    trade_direction: Optional[TradeDirection] = None

    avg_buy_price: Optional[Decimal] = Field(default=None, gt=Decimal("0"), le=MAX_VALUE)
    avg_sell_price: Optional[Decimal] = Field(default=None, gt=Decimal("0"), le=MAX_VALUE)
    position_size: Optional[Decimal] = Field(default=None, gt=Decimal("0"), le=MAX_VALUE)
    leverage: Optional[Decimal] = Field(default=None, ge=Decimal("1"), le=Decimal("100"))

    base_currency: Optional[Currency] = None
    emotional_state: Optional[EmotionalState] = None
    is_impulsive: Optional[bool] = None
    initial_notes: Optional[str] = Field(default=None, max_length=2000)

    setup_confidence: Optional[int] = Field(default=None, ge=1, le=10)
    strategy: Optional[str] = Field(default=None, max_length=100)
    stop_loss_price: Optional[Decimal] = Field(default=None, gt=Decimal("0"))
    take_profit_price: Optional[Decimal] = Field(default=None, gt=Decimal("0"))

    deviated_from_plan: Optional[bool] = None
    deviation_reason: Optional[str] = Field(default=None, max_length=1000)
    stress_level: Optional[int] = Field(default=None, ge=1, le=10)
    key_lesson: Optional[str] = Field(default=None, max_length=2000)
    what_went_well: Optional[str] = Field(default=None, max_length=2000)
    would_do_differently: Optional[str] = Field(default=None, max_length=2000)

    @field_validator(*NOT_NULL_FIELDS)
    @classmethod
    def _reject_null(cls, v):
        # Omit a field to leave it unchanged; null cannot clear a required column.
        if v is None:
            raise ValueError("may not be null")
        return v


class TradeOut(BaseModel):
    id: int
    trade_date: datetime
    entry_time: Optional[str] = None
    exit_time: Optional[str] = None
    trade_type: TradeType
    instrument: str
    trade_direction: TradeDirection

    avg_buy_price: float
    avg_sell_price: float
    position_size: float
    leverage: float = 1.0
    base_currency: Currency
    emotional_state: EmotionalState
    is_impulsive: bool = False

    # Computed by the P&L calculator
    pnl: float
    pnl_percentage: Optional[float] = None
    risk_reward_ratio: Optional[float] = None

    setup_confidence: Optional[int] = None
    strategy: Optional[str] = None
    stop_loss_price: Optional[float] = None
    take_profit_price: Optional[float] = None
    deviated_from_plan: Optional[bool] = None
    deviation_reason: Optional[str] = None
    stress_level: Optional[int] = None
    key_lesson: Optional[str] = None
    what_went_well: Optional[str] = None
    would_do_differently: Optional[str] = None
    initial_notes: Optional[str] = None

    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RecentTrade(BaseModel):
    id: int
    instrument: str
    pnl: float
    date: str
    currency: Currency


class TradeList(BaseModel):
    trades: List[TradeOut]
    total: int
    limit: int
    offset: int
