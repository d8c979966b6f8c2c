from typing import Any, List, Mapping, Sequence

from trade_journal.errors import NoMatchingLevelError
from trade_journal.schemas.score import LevelBand, NextLevel, TraderLevel
from trade_journal.services.analytics.trader_score.config import TRADER_LEVELS


def list_levels(levels: Sequence[Mapping[str, Any]] = TRADER_LEVELS) -> List[LevelBand]:
    return [LevelBand(**band) for band in sorted(levels, key=lambda b: b["min_score"])]


def get_trader_level(score: int, levels: Sequence[Mapping[str, Any]] = TRADER_LEVELS) -> TraderLevel:
    """
    Band containing `score`, plus how far the next band is.

    A score no band contains means the table is broken; startup validation
    should have caught it.
    """
    bands = list_levels(levels)

    for i, band in enumerate(bands):
        if band.min_score <= score <= band.max_score:
            next_level = None
            if i + 1 < len(bands):
                nxt = bands[i + 1]
                next_level = NextLevel(name=nxt.name, points_needed=max(0, nxt.min_score - score))
            return TraderLevel(**band.model_dump(), next_level=next_level)

    raise NoMatchingLevelError(f"No level band contains score {score}.", {"score": score})
