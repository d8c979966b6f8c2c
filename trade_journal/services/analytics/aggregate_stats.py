from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from trade_journal.errors import CalculationError, InvalidInputError, InvalidTradeRecordError
from trade_journal.models.enums import BreakdownKey, Currency, PnlBucket
from trade_journal.schemas.stats import AggregateStats, CalendarDay, GroupPerformance, PnlPoint
from trade_journal.services.pnl import calculate_pnl
from trade_journal.utils.records import as_date, as_decimal, enum_value, read_field, record_id

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
REQUIRED_NUMERIC_FIELDS = ("avg_buy_price", "avg_sell_price", "position_size")


class TradeRow(NamedTuple):
    """A validated trade reduced to what aggregation needs."""

    id: Any
    pnl: Decimal
    day: date
    currency: Currency
    trade_type: Optional[str]
    emotional_state: Optional[str]
    instrument: Optional[str]


def _round2(x) -> float:
    return round(float(x), 2)


def _parse_currency(value: Any) -> Optional[Currency]:
    if value is None:
        return None
    try:
        return Currency(enum_value(value))
    except ValueError:
        raise InvalidInputError(f"Unsupported currency: {value}", {"field": "currency"}) from None


def _parse_bucket(value: Any) -> PnlBucket:
    try:
        return PnlBucket(enum_value(value))
    except ValueError:
        raise InvalidInputError(f"Unsupported bucket: {value}", {"field": "bucket"}) from None


def _to_row(trade: Any, currency: Currency) -> TradeRow:
    trade_id = record_id(trade)

    for name in REQUIRED_NUMERIC_FIELDS:
        raw = read_field(trade, name)
        if raw is None:
            raise InvalidTradeRecordError(trade_id, name, "is missing")
        value = as_decimal(raw)
        if value is None:
            raise InvalidTradeRecordError(trade_id, name, "is not a finite number")
        if value <= 0:
            raise InvalidTradeRecordError(trade_id, name, "must be greater than zero")

    raw_pnl = read_field(trade, "pnl")
    if raw_pnl is None:
        # Not yet stored: derive it with the one P&L formula.
        try:
            pnl = calculate_pnl(
                trade_direction=read_field(trade, "trade_direction"),
                avg_buy_price=read_field(trade, "avg_buy_price"),
                avg_sell_price=read_field(trade, "avg_sell_price"),
                position_size=read_field(trade, "position_size"),
            )
        except CalculationError as exc:
            field = exc.details.get("field") or "trade_direction"
            raise InvalidTradeRecordError(trade_id, field, f"is invalid ({exc.message})") from exc
    else:
        pnl = as_decimal(raw_pnl)
        if pnl is None:
            raise InvalidTradeRecordError(trade_id, "pnl", "is not a finite number")

    day = as_date(read_field(trade, "trade_date"))
    if day is None:
        raise InvalidTradeRecordError(trade_id, "trade_date", "is missing or not a date")

    trade_type = read_field(trade, "trade_type")
    emotional_state = read_field(trade, "emotional_state")
    instrument = read_field(trade, "instrument")

    return TradeRow(
        id=trade_id,
        pnl=pnl,
        day=day,
        currency=currency,
        trade_type=enum_value(trade_type) if trade_type is not None else None,
        emotional_state=enum_value(emotional_state) if emotional_state is not None else None,
        instrument=str(instrument) if instrument is not None else None,
    )


def pair_trades(trades: Optional[Iterable[Any]], *, currency: Any = None) -> List[Tuple[TradeRow, Any]]:
    """
    Validate a batch and keep the trades in `currency`, each paired with
    its source record.

    Fails the whole batch on the first malformed record. Without a currency
    selector the batch must be single-currency: P&L is never summed across
    currencies.
    """
    if trades is None:
        raise InvalidInputError("trades must be a sequence, got None.", {"field": "trades"})

    wanted = _parse_currency(currency)
    pairs: List[Tuple[TradeRow, Any]] = []

    for trade in trades:
        raw_ccy = read_field(trade, "base_currency", Currency.INR)
        try:
            ccy = Currency(enum_value(raw_ccy))
        except ValueError:
            raise InvalidTradeRecordError(record_id(trade), "base_currency", "is not a supported currency") from None

        if wanted is not None and ccy != wanted:
            continue

        pairs.append((_to_row(trade, ccy), trade))

    if wanted is None:
        seen = {r.currency for r, _ in pairs}
        if len(seen) > 1:
            raise InvalidInputError(
                "Trades span multiple currencies; pass a currency selector.",
                {"currencies": sorted(c.value for c in seen)},
            )

    return pairs


def normalize_trades(trades: Optional[Iterable[Any]], *, currency: Any = None) -> List[TradeRow]:
    return [row for row, _ in pair_trades(trades, currency=currency)]


def bucket_start(day: date, bucket: PnlBucket) -> date:
    if bucket == PnlBucket.WEEK:
        return day - timedelta(days=day.weekday())  # ISO week, Monday
    if bucket == PnlBucket.MONTH:
        return day.replace(day=1)
    return day


def pnl_series(rows: Iterable[TradeRow], bucket: PnlBucket = PnlBucket.DAY) -> List[PnlPoint]:
    """Sparse, ascending P&L series. Buckets without trades are absent."""
    buckets: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    for r in rows:
        buckets[bucket_start(r.day, bucket)] += r.pnl

    return [PnlPoint(date=d.isoformat(), pnl=_round2(v)) for d, v in sorted(buckets.items())]


def _std_dev(values: List[Decimal]) -> Decimal:
    if len(values) < 2:
        return ZERO
    mean = sum(values, ZERO) / len(values)
    variance = sum(((v - mean) ** 2 for v in values), ZERO) / len(values)
    return variance.sqrt()


def compute_aggregate_stats(
    trades: Optional[Iterable[Any]],
    *,
    currency: Any = None,
    bucket: Any = PnlBucket.DAY,
) -> AggregateStats:
    """
    Reduce trades (each carrying a pnl) to dashboard statistics.

    - win_rate counts strictly positive P&L; 0 for an empty set
    - breakeven trades are neither winners nor losers
    - largest_win floors at 0, largest_loss ceils at 0
    - group counts and the P&L series are sparse
    """
    bucket = _parse_bucket(bucket)
    rows = normalize_trades(trades, currency=currency)

    selected = _parse_currency(currency)
    if selected is None and rows:
        selected = rows[0].currency

    total_trades = len(rows)
    if total_trades == 0:
        return AggregateStats(currency=selected, bucket=bucket)

    pnls = [r.pnl for r in rows]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]

    total_pnl = sum(pnls, ZERO)
    gross_profit = sum(wins, ZERO)
    gross_loss = sum(losses, ZERO)

    trades_by_type = Counter(r.trade_type for r in rows if r.trade_type is not None)
    emotions = Counter(r.emotional_state for r in rows if r.emotional_state is not None)

    stats = AggregateStats(
        currency=selected,
        bucket=bucket,
        total_trades=total_trades,
        winning_trades=len(wins),
        losing_trades=len(losses),
        breakeven_trades=total_trades - len(wins) - len(losses),
        win_rate=_round2(len(wins) / total_trades * 100),
        total_pnl=_round2(total_pnl),
        avg_profit_per_trade=_round2(total_pnl / total_trades),
        largest_win=_round2(max(max(pnls), ZERO)),
        largest_loss=_round2(min(min(pnls), ZERO)),
        gross_profit=_round2(gross_profit),
        gross_loss=_round2(gross_loss),
        avg_win=_round2(gross_profit / len(wins)) if wins else 0.0,
        avg_loss=_round2(gross_loss / len(losses)) if losses else 0.0,
        profit_factor=round(float(gross_profit / abs(gross_loss)), 4) if losses else None,
        pnl_std_dev=_round2(_std_dev(pnls)),
        trades_by_type=dict(trades_by_type),
        emotional_state_distribution=dict(emotions),
        pnl_over_time=pnl_series(rows, bucket),
    )

    logger.debug(
        "aggregate stats currency=%s trades=%d total_pnl=%s",
        selected.value if selected else None,
        total_trades,
        stats.total_pnl,
    )
    return stats


def compute_calendar(trades: Optional[Iterable[Any]], *, currency: Any = None) -> List[CalendarDay]:
    """Per-day P&L and trade count for the trading calendar."""
    rows = normalize_trades(trades, currency=currency)

    by_day: Dict[date, List] = defaultdict(lambda: [ZERO, 0])
    for r in rows:
        by_day[r.day][0] += r.pnl
        by_day[r.day][1] += 1

    return [
        CalendarDay(date=d.isoformat(), pnl=_round2(pnl), trade_count=count)
        for d, (pnl, count) in sorted(by_day.items())
    ]


def compute_group_performance(
    trades: Optional[Iterable[Any]],
    by: Any,
    *,
    currency: Any = None,
) -> List[GroupPerformance]:
    """Win rate and P&L per instrument, trade type or emotional state."""
    try:
        key = BreakdownKey(enum_value(by))
    except ValueError:
        raise InvalidInputError(f"Unsupported breakdown: {by}", {"field": "by"}) from None

    rows = normalize_trades(trades, currency=currency)

    groups: Dict[str, List[Decimal]] = defaultdict(list)
    for r in rows:
        groups[getattr(r, key.value) or "UNKNOWN"].append(r.pnl)

    out: List[GroupPerformance] = []
    for group, pnls in groups.items():
        total = sum(pnls, ZERO)
        winners = sum(1 for p in pnls if p > 0)
        out.append(
            GroupPerformance(
                group=group,
                total_trades=len(pnls),
                winning_trades=winners,
                win_rate=_round2(winners / len(pnls) * 100),
                total_pnl=_round2(total),
                avg_pnl=_round2(total / len(pnls)),
            )
        )

    out.sort(key=lambda g: (-g.total_pnl, g.group))
    return out
