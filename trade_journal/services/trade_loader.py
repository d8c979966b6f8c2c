from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.models.enums import (
    Currency,
    EmotionalState,
    TradeSortField,
    TradeType,
)
from trade_journal.models.trade import Trade


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _filtered(
    stmt: Select,
    *,
    currency: Optional[Currency] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    trade_type: Optional[TradeType] = None,
    emotional_state: Optional[EmotionalState] = None,
    is_impulsive: Optional[bool] = None,
) -> Select:
    """Shared WHERE clause. end_date is inclusive (whole UTC day)."""
    if currency is not None:
        stmt = stmt.where(Trade.base_currency == Currency(currency).value)
    if start_date is not None:
        stmt = stmt.where(Trade.trade_date >= _start_of(start_date))
    if end_date is not None:
        stmt = stmt.where(Trade.trade_date < _start_of(end_date + timedelta(days=1)))
    if trade_type is not None:
        stmt = stmt.where(Trade.trade_type == TradeType(trade_type).value)
    if emotional_state is not None:
        stmt = stmt.where(Trade.emotional_state == EmotionalState(emotional_state).value)
    if is_impulsive is not None:
        stmt = stmt.where(Trade.is_impulsive == is_impulsive)
    return stmt


def build_trade_query(
    *,
    limit: Optional[int] = None,
    offset: int = 0,
    sort_by: TradeSortField = TradeSortField.TRADE_DATE,
    descending: bool = False,
    **filters,
) -> Select:
    stmt = _filtered(select(Trade), **filters)

    column = getattr(Trade, TradeSortField(sort_by).value)
    if descending:
        stmt = stmt.order_by(column.desc(), Trade.id.desc())
    else:
        stmt = stmt.order_by(column.asc(), Trade.id.asc())

    if offset:
        stmt = stmt.offset(offset)
    if limit:
        stmt = stmt.limit(limit)
    return stmt


async def fetch_trades(
    db: AsyncSession,
    *,
    limit: Optional[int] = None,
    offset: int = 0,
    sort_by: TradeSortField = TradeSortField.TRADE_DATE,
    descending: bool = False,
    **filters,
) -> List[Trade]:
    """
    Load trades for the calculators and the trade list.

    Filters: currency, start_date, end_date, trade_type, emotional_state,
    is_impulsive. Ties on the sort column are broken by id.
    """
    stmt = build_trade_query(limit=limit, offset=offset, sort_by=sort_by, descending=descending, **filters)
    return list((await db.execute(stmt)).scalars().all())


async def count_trades(db: AsyncSession, **filters) -> int:
    stmt = _filtered(select(func.count()).select_from(Trade), **filters)
    return (await db.execute(stmt)).scalar_one()