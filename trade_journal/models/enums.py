from enum import Enum


class TradeDirection(str, Enum):
    BUY_LONG = "BUY_LONG"
    SELL_SHORT = "SELL_SHORT"


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"


class TradeType(str, Enum):
    CRYPTO = "CRYPTO"
    STOCK = "STOCK"
    FUTURES = "FUTURES"
    OPTIONS = "OPTIONS"
    FUNDED_ACCOUNT = "FUNDED_ACCOUNT"


class EmotionalState(str, Enum):
    CONFIDENT = "CONFIDENT"
    FEARFUL = "FEARFUL"
    GREEDY = "GREEDY"
    ANXIOUS = "ANXIOUS"
    NEUTRAL = "NEUTRAL"
    EXCITED = "EXCITED"
    FRUSTRATED = "FRUSTRATED"


class PercentageBase(str, Enum):
    # Capital base used for pnl_percentage.
    BUY_NOTIONAL = "BUY_NOTIONAL"  # avg_buy_price * position_size, any direction
    MARGIN = "MARGIN"  # buy notional / leverage


class PnlBucket(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class BreakdownKey(str, Enum):
    INSTRUMENT = "instrument"
    TRADE_TYPE = "trade_type"
    EMOTIONAL_STATE = "emotional_state"


class TradeSortField(str, Enum):
    TRADE_DATE = "trade_date"
    PNL = "pnl"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
