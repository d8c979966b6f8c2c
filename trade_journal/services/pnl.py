from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from trade_journal.config import get_settings
from trade_journal.errors import InvalidInputError, UnsupportedDirectionError
from trade_journal.models.enums import PercentageBase, TradeDirection
from trade_journal.schemas.trade import TradePnL
from trade_journal.utils.records import as_decimal, enum_value, read_field

logger = logging.getLogger(__name__)

MAX_INPUT_VALUE = Decimal("1000000000")

CENTS = Decimal("0.01")
PCT_PLACES = Decimal("0.0001")


def _require_positive(name: str, value: Any) -> Decimal:
    d = as_decimal(value)
    if d is None:
        raise InvalidInputError(f"{name} must be a finite number.", {"field": name})
    if d <= 0:
        raise InvalidInputError(f"{name} must be greater than zero.", {"field": name})
    if d > MAX_INPUT_VALUE:
        raise InvalidInputError(f"{name} cannot exceed 1 billion.", {"field": name})
    return d


def parse_direction(value: Any) -> TradeDirection:
    if value is None:
        raise InvalidInputError("trade_direction is required.", {"field": "trade_direction"})
    if isinstance(value, TradeDirection):
        return value
    try:
        return TradeDirection(str(enum_value(value)).upper())
    except ValueError:
        raise UnsupportedDirectionError(value) from None


def calculate_pnl(
    *,
    trade_direction: Any,
    avg_buy_price: Any,
    avg_sell_price: Any,
    position_size: Any,
) -> Decimal:
    """
    Realized P&L of one closed trade, quantized to cents.

    BUY_LONG:   (sell - buy) * size
    SELL_SHORT: (buy - sell) * size

    Leverage is never multiplied in.
    """
    direction = parse_direction(trade_direction)
    buy = _require_positive("avg_buy_price", avg_buy_price)
    sell = _require_positive("avg_sell_price", avg_sell_price)
    size = _require_positive("position_size", position_size)

    if direction == TradeDirection.BUY_LONG:
        pnl = (sell - buy) * size
    else:
        pnl = (buy - sell) * size

    return pnl.quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_pnl_percentage(
    *,
    pnl: Any,
    avg_buy_price: Any,
    position_size: Any,
    leverage: Any = 1,
    base: PercentageBase = PercentageBase.BUY_NOTIONAL,
) -> Decimal:
    """
    P&L as a percentage of the capital base.

    BUY_NOTIONAL uses avg_buy_price * position_size for both directions.
    For SELL_SHORT that is the cover price, not the margin posted; MARGIN
    divides the notional by leverage instead.
    """
    pnl_d = as_decimal(pnl)
    if pnl_d is None:
        raise InvalidInputError("pnl must be a finite number.", {"field": "pnl"})

    buy = _require_positive("avg_buy_price", avg_buy_price)
    size = _require_positive("position_size", position_size)
    capital = buy * size

    if PercentageBase(base) == PercentageBase.MARGIN:
        lev = _require_positive("leverage", leverage if leverage is not None else 1)
        capital = capital / lev

    return (pnl_d / capital * 100).quantize(PCT_PLACES, rounding=ROUND_HALF_UP)


def calculate_risk_reward_ratio(
    *,
    entry_price: Any,
    stop_loss_price: Any,
    take_profit_price: Any,
) -> Optional[Decimal]:
    """
    |take_profit - entry| / |entry - stop_loss|.

    None when either level is missing. A stop placed at the entry has no
    risk distance and yields 0.
    """
    if stop_loss_price is None or take_profit_price is None:
        return None

    entry = _require_positive("entry_price", entry_price)
    stop = _require_positive("stop_loss_price", stop_loss_price)
    target = _require_positive("take_profit_price", take_profit_price)

    risk = abs(entry - stop)
    if risk == 0:
        return Decimal("0.00")

    reward = abs(target - entry)
    return (reward / risk).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_trade_pnl(trade: Any, *, base: Optional[PercentageBase] = None) -> TradePnL:
    """
    The one P&L entry point. Every write path (API create/update, the
    recalculation script) goes through here.

    `trade` may be a dict, an ORM Trade or any object exposing the fields.
    """
    if base is None:
        base = get_settings().pnl_percentage_base

    avg_buy_price = read_field(trade, "avg_buy_price")
    position_size = read_field(trade, "position_size")

    pnl = calculate_pnl(
        trade_direction=read_field(trade, "trade_direction"),
        avg_buy_price=avg_buy_price,
        avg_sell_price=read_field(trade, "avg_sell_price"),
        position_size=position_size,
    )

    pnl_percentage = calculate_pnl_percentage(
        pnl=pnl,
        avg_buy_price=avg_buy_price,
        position_size=position_size,
        leverage=read_field(trade, "leverage", 1),
        base=base,
    )

    # Entry reference is the buy price for both directions (historical convention).
    rr = calculate_risk_reward_ratio(
        entry_price=avg_buy_price,
        stop_loss_price=read_field(trade, "stop_loss_price"),
        take_profit_price=read_field(trade, "take_profit_price"),
    )

    logger.debug("pnl computed trade=%s pnl=%s pct=%s rr=%s", read_field(trade, "id"), pnl, pnl_percentage, rr)

    return TradePnL(pnl=pnl, pnl_percentage=pnl_percentage, risk_reward_ratio=rr)
