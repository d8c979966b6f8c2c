from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.db.database import get_db
from trade_journal.models.enums import Currency, EmotionalState, SortOrder, TradeSortField, TradeType
from trade_journal.models.trade import Trade
from trade_journal.schemas.trade import TradeCreate, TradeList, TradeOut, TradeUpdate
from trade_journal.services.pnl import compute_trade_pnl
from trade_journal.services.trade_loader import count_trades, fetch_trades
from trade_journal.utils.records import enum_value

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])


# =================================================
# Helpers
# =================================================
async def _get_trade_or_404(db: AsyncSession, trade_id: int) -> Trade:
    result = await db.execute(select(Trade).where(Trade.id == trade_id))
    trade = result.scalar_one_or_none()
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


def _column_values(data: Dict[str, Any]) -> Dict[str, Any]:
    # Enum members are stored by value in plain string columns.
    return {k: enum_value(v) for k, v in data.items()}


def _apply_pnl(trade: Trade) -> None:
    """Stored P&L is only ever written from compute_trade_pnl."""
    result = compute_trade_pnl(trade)
    trade.pnl = result.pnl
    trade.pnl_percentage = result.pnl_percentage
    trade.risk_reward_ratio = result.risk_reward_ratio


# =================================================
# CREATE
# =================================================
@router.post("", response_model=TradeOut, status_code=201)
async def create_trade(
    payload: TradeCreate,
    db: AsyncSession = Depends(get_db),
):
    trade = Trade(**_column_values(payload.model_dump()))
    _apply_pnl(trade)

    db.add(trade)
    await db.commit()
    await db.refresh(trade)

    logger.info("trade created id=%s instrument=%s pnl=%s", trade.id, trade.instrument, trade.pnl)
    return TradeOut.model_validate(trade)


# =================================================
# READ
# =================================================
@router.get("", response_model=TradeList)
async def list_trades(
    currency: Optional[Currency] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    trade_type: Optional[TradeType] = None,
    emotional_state: Optional[EmotionalState] = None,
    is_impulsive: Optional[bool] = None,
    sort_by: TradeSortField = TradeSortField.TRADE_DATE,
    sort_order: SortOrder = SortOrder.DESC,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    filters = dict(
        currency=currency,
        start_date=start_date,
        end_date=end_date,
        trade_type=trade_type,
        emotional_state=emotional_state,
        is_impulsive=is_impulsive,
    )

    trades = await fetch_trades(
        db,
        limit=limit,
        offset=offset,
        sort_by=sort_by,
        descending=sort_order == SortOrder.DESC,
        **filters,
    )
    total = await count_trades(db, **filters)

    return TradeList(
        trades=[TradeOut.model_validate(t) for t in trades],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{trade_id}", response_model=TradeOut)
async def get_trade(
    trade_id: int,
    db: AsyncSession = Depends(get_db),
):
    trade = await _get_trade_or_404(db, trade_id)
    return TradeOut.model_validate(trade)


# =================================================
# UPDATE (P&L always recomputed)
# =================================================
@router.patch("/{trade_id}", response_model=TradeOut)
async def update_trade(
    trade_id: int,
    payload: TradeUpdate,
    db: AsyncSession = Depends(get_db),
):
    trade = await _get_trade_or_404(db, trade_id)

    for field, value in _column_values(payload.model_dump(exclude_unset=True)).items():
        setattr(trade, field, value)

    _apply_pnl(trade)

    await db.commit()
    await db.refresh(trade)

    return TradeOut.model_validate(trade)


# =================================================
# DELETE
# =================================================
@router.delete("/{trade_id}", status_code=204)
async def delete_trade(
    trade_id: int,
    db: AsyncSession = Depends(get_db),
):
    trade = await _get_trade_or_404(db, trade_id)
    await db.delete(trade)
    await db.commit()
