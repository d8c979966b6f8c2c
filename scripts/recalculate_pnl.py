"""
Recompute stored pnl / pnl_percentage / risk_reward_ratio for every trade.

Stored P&L is derived data; run this after a formula or config change
(e.g. PNL_PERCENTAGE_BASE) to bring existing rows back in line.

    python -m scripts.recalculate_pnl --dry-run
"""
import argparse
import asyncio
import logging
from typing import Any, Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trade_journal.config import get_settings
from trade_journal.db.database import get_async_sessionmaker
from trade_journal.errors import CalculationError
from trade_journal.models.trade import Trade
from trade_journal.services.pnl import compute_trade_pnl

logger = logging.getLogger(__name__)

DERIVED_FIELDS = ("pnl", "pnl_percentage", "risk_reward_ratio")


def reconcile_trade(trade: Any, *, apply: bool = True) -> bool:
    """
    Compare stored derived fields with a fresh computation.
    Returns True when the trade was (or would be) changed.
    """
    fresh = compute_trade_pnl(trade)
    changed = False

    for field in DERIVED_FIELDS:
        new = getattr(fresh, field)
        old = getattr(trade, field, None)
        if old == new:
            continue
        changed = True
        if apply:
            setattr(trade, field, new)

    return changed


async def recalculate_all(session: AsyncSession, *, dry_run: bool = False) -> Dict[str, int]:
    trades: List[Trade] = (
        await session.execute(select(Trade).order_by(Trade.id))
    ).scalars().all()

    updated = 0
    failed: List[Tuple[int, str]] = []

    for trade in trades:
        try:
            if reconcile_trade(trade, apply=not dry_run):
                updated += 1
        except CalculationError as exc:
            # One bad row must not block the rest of the batch.
            failed.append((trade.id, exc.code))
            logger.warning("trade %s skipped: %s", trade.id, exc)

    if dry_run:
        await session.rollback()
    else:
        await session.commit()

    logger.info(
        "recalculated pnl: scanned=%d updated=%d failed=%d dry_run=%s",
        len(trades), updated, len(failed), dry_run,
    )
    return {"scanned": len(trades), "updated": updated, "failed": len(failed)}


async def main(dry_run: bool) -> None:
    sessionmaker = get_async_sessionmaker()

    async with sessionmaker() as session:
        result = await recalculate_all(session, dry_run=dry_run)

    verb = "would update" if dry_run else "updated"
    print(f"{result['scanned']} trades scanned, {verb} {result['updated']}, {result['failed']} failed")


if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    parser = argparse.ArgumentParser(description="Recompute stored trade P&L")
    parser.add_argument("--dry-run", action="store_true", help="report changes without writing")
    args = parser.parse_args()

    asyncio.run(main(args.dry_run))
