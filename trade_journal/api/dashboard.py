from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.db.database import get_db
from trade_journal.models.enums import BreakdownKey, Currency, PnlBucket
from trade_journal.schemas.stats import AggregateStats, CalendarDay, GroupPerformance
from trade_journal.schemas.trade import RecentTrade
from trade_journal.services.analytics.aggregate_stats import (
    compute_aggregate_stats,
    compute_calendar,
    compute_group_performance,
)
from trade_journal.services.trade_loader import fetch_trades

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=AggregateStats)
async def dashboard_stats(
    currency: Currency,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    bucket: PnlBucket = PnlBucket.DAY,
    db: AsyncSession = Depends(get_db),
):
    """
    Stats for one currency. Recomputed from the trade set on every request.
    """
    trades = await fetch_trades(db, currency=currency, start_date=start_date, end_date=end_date)
    return compute_aggregate_stats(trades, currency=currency, bucket=bucket)


@router.get("/calendar", response_model=List[CalendarDay])
async def dashboard_calendar(
    currency: Currency,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
):
    trades = await fetch_trades(db, currency=currency, start_date=start_date, end_date=end_date)
    return compute_calendar(trades, currency=currency)


@router.get("/breakdown", response_model=List[GroupPerformance])
async def dashboard_breakdown(
    currency: Currency,
    by: BreakdownKey = BreakdownKey.INSTRUMENT,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
):
    trades = await fetch_trades(db, currency=currency, start_date=start_date, end_date=end_date)
    return compute_group_performance(trades, by, currency=currency)


@router.get("/recent-trades", response_model=List[RecentTrade])
async def recent_trades(
    limit: int = Query(5, ge=1, le=50),
    currency: Optional[Currency] = None,
    db: AsyncSession = Depends(get_db),
):
    trades = await fetch_trades(db, currency=currency, limit=limit, descending=True)
    return [
        RecentTrade(
            id=t.id,
            instrument=t.instrument,
            pnl=float(t.pnl),
            date=t.trade_date.date().isoformat(),
            currency=t.base_currency,
        )
        for t in trades
    ]
