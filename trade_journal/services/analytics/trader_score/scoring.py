from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from pydantic import ValidationError

from trade_journal.errors import InvalidInputError, ScoreConfigError
from trade_journal.schemas.score import BehaviorMetrics, CategoryScore, TraderScoreBreakdown
from trade_journal.schemas.stats import AggregateStats
from trade_journal.services.analytics.trader_score.config import (
    CATEGORIES,
    CATEGORY_METRICS,
    CATEGORY_WEIGHTS,
    DISCIPLINE,
    EMOTIONAL_INTELLIGENCE,
    LEARNING,
    PERFORMANCE,
    RISK_MANAGEMENT,
    TRADER_LEVELS,
    validate_score_config,
)
from trade_journal.services.analytics.trader_score.levels import get_trader_level

logger = logging.getLogger(__name__)

# 2.5 reward:risk (or profit factor) earns full marks.
RATIO_POINTS = 40


def _round(x: float) -> int:
    return int(Decimal(str(x)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, x))


def performance_metrics(stats: AggregateStats) -> Dict[str, float]:
    if stats.avg_loss < 0:
        reward_risk = stats.avg_win / abs(stats.avg_loss)
    else:
        reward_risk = 1.0
    profit_factor = stats.profit_factor if stats.profit_factor is not None else 1.0
    consistency = 100 - stats.pnl_std_dev / 10 if stats.total_trades >= 2 else 50.0

    return {
        "win_rate": stats.win_rate,
        "risk_reward": reward_risk * RATIO_POINTS,
        "profit_factor": profit_factor * RATIO_POINTS,
        "consistency": consistency,
    }


def category_metrics(stats: AggregateStats, behavior: BehaviorMetrics) -> Dict[str, Dict[str, float]]:
    """Every metric of every category, normalised to 0-100."""
    b = behavior
    raw = {
        DISCIPLINE: {
            "plan_adherence": b.plan_adherence,
            # Impulsive trades are penalised double.
            "impulsive_control": 100 - b.impulsive_trade_rate * 2,
            "stop_loss_respect": b.stop_loss_respect,
            "emotional_control": b.emotional_control,
        },
        PERFORMANCE: performance_metrics(stats),
        LEARNING: {
            "lessons_documented": b.lessons_documented,
            "mistake_repetition": b.mistake_repetition,
            "improvement_trend": b.improvement_trend,
            "reflection_quality": b.reflection_quality,
        },
        RISK_MANAGEMENT: {
            "position_sizing": b.position_sizing,
            "leverage_usage": b.leverage_usage,
            "drawdown_control": b.drawdown_control,
            "diversification": b.diversification,
        },
        EMOTIONAL_INTELLIGENCE: {
            "emotion_performance": b.emotion_performance,
            "stress_management": b.stress_management,
            "loss_recovery": b.loss_recovery,
            "confidence_calibration": b.confidence_calibration,
        },
    }
    return {cat: {name: _clamp(v) for name, v in metrics.items()} for cat, metrics in raw.items()}


def score_category(metrics: Mapping[str, float], metric_weights: Mapping[str, int]) -> int:
    total_weight = sum(metric_weights.values())
    weighted = sum(_clamp(metrics[name]) * w for name, w in metric_weights.items())
    return _round(_clamp(weighted / total_weight))


def combine_category_scores(
    scores: Mapping[str, float],
    weights: Mapping[str, int] = CATEGORY_WEIGHTS,
) -> int:
    """overall = round(sum(score * weight / 100)), clamped to [0, 100]."""
    missing = [c for c in weights if c not in scores]
    if missing:
        raise ScoreConfigError("Missing category scores.", {"missing": missing})

    overall = sum(_clamp(scores[c]) * w / 100 for c, w in weights.items())
    return _round(_clamp(overall))


def _coerce(model, value, name: str):
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        bad = sorted({".".join(str(p) for p in e["loc"]) for e in exc.errors()})
        raise InvalidInputError(f"{name} are malformed.", {"field": name, "invalid": bad}) from None


def _empty_breakdown(
    weights: Mapping[str, int],
    metric_weights: Mapping[str, Mapping[str, int]],
    levels: Sequence[Mapping[str, Any]],
) -> TraderScoreBreakdown:
    categories = {
        c: CategoryScore(score=0, weight=weights[c], metrics={m: 0 for m in metric_weights[c]})
        for c in CATEGORIES
    }
    return TraderScoreBreakdown(overall=0, level=get_trader_level(0, levels), **categories)


def compute_trader_score(
    stats: Any,
    behavior: Optional[Any] = None,
    *,
    weights: Mapping[str, int] = CATEGORY_WEIGHTS,
    metric_weights: Mapping[str, Mapping[str, int]] = CATEGORY_METRICS,
    levels: Sequence[Mapping[str, Any]] = TRADER_LEVELS,
) -> TraderScoreBreakdown:
    """
    Weighted composite score (0-100) over five categories, plus level.

    Accepts any trade count. Gating insights behind a minimum sample size
    is the caller's decision.
    """
    if stats is None:
        raise InvalidInputError("stats are required.", {"field": "stats"})

    if not (weights is CATEGORY_WEIGHTS and metric_weights is CATEGORY_METRICS and levels is TRADER_LEVELS):
        # The shipped tables are checked once at startup.
        validate_score_config(weights, metric_weights, levels)

    stats = _coerce(AggregateStats, stats, "stats")
    behavior = BehaviorMetrics() if behavior is None else _coerce(BehaviorMetrics, behavior, "behavior")

    if stats.total_trades == 0:
        return _empty_breakdown(weights, metric_weights, levels)

    metrics = category_metrics(stats, behavior)

    categories: Dict[str, CategoryScore] = {}
    for c in CATEGORIES:
        categories[c] = CategoryScore(
            score=score_category(metrics[c], metric_weights[c]),
            weight=weights[c],
            metrics={name: _round(v) for name, v in metrics[c].items()},
        )

    overall = combine_category_scores({c: cs.score for c, cs in categories.items()}, weights)

    logger.debug(
        "trader score overall=%d %s",
        overall,
        {c: cs.score for c, cs in categories.items()},
    )

    return TraderScoreBreakdown(overall=overall, level=get_trader_level(overall, levels), **categories)
