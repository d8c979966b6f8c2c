from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.config import get_settings
from trade_journal.db.database import get_db
from trade_journal.models.enums import Currency
from trade_journal.schemas.score import LevelTable, TraderScoreResponse
from trade_journal.services.analytics.aggregate_stats import compute_aggregate_stats
from trade_journal.services.analytics.behavior import compute_behavior_metrics
from trade_journal.services.analytics.streaks import compute_streaks
from trade_journal.services.analytics.trader_score import compute_trader_score, list_levels
from trade_journal.services.trade_loader import fetch_trades

router = APIRouter(prefix="/api/trader-score", tags=["trader-score"])


@router.get("", response_model=TraderScoreResponse)
async def trader_score(
    currency: Currency,
    db: AsyncSession = Depends(get_db),
):
    """
    Composite trader score for one currency's trades.

    The calculator scores any sample; small samples are only flagged
    (insufficient_data) so the client can decide how to present them.
    """
    settings = get_settings()
    trades = await fetch_trades(db, currency=currency)

    stats = compute_aggregate_stats(trades, currency=currency)
    behavior = compute_behavior_metrics(trades, currency=currency)

    return TraderScoreResponse(
        score=compute_trader_score(stats, behavior),
        behavior=behavior,
        streaks=compute_streaks(trades, currency=currency),
        total_trades=stats.total_trades,
        insufficient_data=stats.total_trades < settings.insight_min_trades,
        min_trades_for_insights=settings.insight_min_trades,
    )


@router.get("/levels", response_model=LevelTable)
async def trader_levels():
    return LevelTable(levels=list_levels())
