from typing import Any, Iterable, Optional

from trade_journal.schemas.stats import StreakSummary, StreakWarning
from trade_journal.services.analytics.aggregate_stats import normalize_trades


def _loss_streak_warning(streak: int) -> Optional[StreakWarning]:
    """
    Awareness-only warning builder.
    No enforcement, no halting.
    """
    if streak >= 5:
        return StreakWarning(
            severity="HIGH",
            message=f"{streak} consecutive losses detected. Strongly consider stopping for the session.",
            confidence=0.9,
        )
    if streak >= 3:
        return StreakWarning(
            severity="MEDIUM",
            message=f"{streak} consecutive losses detected. Risk of tilt is elevated.",
            confidence=0.8,
        )
    if streak >= 2:
        return StreakWarning(
            severity="LOW",
            message=f"{streak} consecutive losses detected. Maintain discipline and reduce size.",
            confidence=0.65,
        )
    return None


def compute_streaks(trades: Iterable[Any], *, currency: Any = None) -> StreakSummary:
    """
    Win/loss streaks in trade-date order.

    current_streak is signed: +3 means three wins in a row, -2 two losses.
    A breakeven trade ends any streak.
    """
    rows = sorted(normalize_trades(trades, currency=currency), key=lambda r: r.day)

    current = 0
    longest_win = 0
    longest_loss = 0

    for r in rows:
        if r.pnl > 0:
            current = current + 1 if current > 0 else 1
        elif r.pnl < 0:
            current = current - 1 if current < 0 else -1
        else:
            current = 0

        longest_win = max(longest_win, current)
        longest_loss = max(longest_loss, -current)

    return StreakSummary(
        current_streak=current,
        longest_win_streak=longest_win,
        longest_loss_streak=longest_loss,
        warning=_loss_streak_warning(-current) if current < 0 else None,
    )
