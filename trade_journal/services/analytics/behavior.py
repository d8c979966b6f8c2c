"""
Behavioural metrics for the trader score.

Reduces per-trade journal fields (plan deviation, stress, reflections,
confidence, sizing) into the 0-100 rates the score calculator weighs.
Pure interpretation layer: no DB access, no enforcement.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from trade_journal.errors import InvalidTradeRecordError
from trade_journal.schemas.score import BehaviorMetrics
from trade_journal.services.analytics.aggregate_stats import TradeRow, pair_trades
from trade_journal.utils.records import as_decimal, read_field, record_id

logger = logging.getLogger(__name__)

LESSON_MIN_CHARS = 10
REFLECTION_MIN_CHARS = 20
LOW_STRESS_MAX = 5
IMPROVEMENT_MIN_TRADES = 10

REFLECTION_FIELDS = ("key_lesson", "what_went_well", "would_do_differently")


def _clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, x))


def _pct(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def _text_longer_than(record: Any, name: str, min_chars: int) -> bool:
    value = read_field(record, name)
    return isinstance(value, str) and len(value.strip()) > min_chars


def _journal_rating(record: Any, name: str) -> Optional[float]:
    """1-10 self-rating (stress, confidence). None when not filled in."""
    raw = read_field(record, name)
    if raw is None:
        return None
    value = as_decimal(raw)
    if value is None or not 1 <= value <= 10:
        raise InvalidTradeRecordError(record_id(record), name, "must be a number from 1 to 10")
    return float(value)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


def _std(values: List[float]) -> float:
    mean = _mean(values)
    return (sum((v - mean) ** 2 for v in values) / len(values)) ** 0.5


# -------------------------------------------------
# Discipline
# -------------------------------------------------
def _emotional_control(records: List[Any]) -> float:
    stress = [_journal_rating(r, "stress_level") for r in records]
    reported = [s for s in stress if s is not None]
    if not reported:
        return 50.0
    return _pct(sum(1 for s in reported if s <= LOW_STRESS_MAX), len(reported))


# -------------------------------------------------
# Learning
# -------------------------------------------------
def _mistake_repetition(records: List[Any]) -> float:
    """100 minus the share of plan deviations whose reason was already seen."""
    reasons = []
    for r in records:
        reason = read_field(r, "deviation_reason")
        if read_field(r, "deviated_from_plan", False) and isinstance(reason, str) and reason.strip():
            reasons.append(reason.strip().lower())

    if not reasons:
        return 70.0

    seen = set()
    repeats = 0
    for reason in reasons:
        if reason in seen:
            repeats += 1
        seen.add(reason)

    return 100 - _pct(repeats, len(reasons))


def _improvement_trend(rows: List[TradeRow]) -> float:
    """Win rate of the newer half against the older half, centred on 50."""
    if len(rows) < IMPROVEMENT_MIN_TRADES:
        return 50.0

    half = len(rows) // 2
    old, new = rows[:half], rows[half:]

    old_wr = sum(1 for r in old if r.pnl > 0) / len(old)
    new_wr = sum(1 for r in new if r.pnl > 0) / len(new)

    improvement = (new_wr - old_wr) / (old_wr or 0.01) * 100
    return 50 + improvement


# -------------------------------------------------
# Risk management
# -------------------------------------------------
def _position_sizing(records: List[Any]) -> float:
    """Consistency of size: 100 minus the coefficient of variation in percent."""
    if len(records) < 2:
        return 50.0

    sizes = [float(as_decimal(read_field(r, "position_size"))) for r in records]
    mean = _mean(sizes)
    cv = _std(sizes) / mean if mean > 0 else 1.0
    return 100 - cv * 100


def _leverage_usage(records: List[Any]) -> float:
    levs = [float(as_decimal(read_field(r, "leverage", 1)) or 1) for r in records]
    avg = _mean(levs)
    if avg <= 2:
        return 100.0
    if avg <= 5:
        return 70.0
    if avg <= 10:
        return 40.0
    return 20.0


def _drawdown_control(rows: List[TradeRow]) -> float:
    cumulative = Decimal("0")
    peak = Decimal("0")
    trough = Decimal("0")
    max_drawdown = Decimal("0")

    for r in rows:
        cumulative += r.pnl
        peak = max(peak, cumulative)
        trough = min(trough, cumulative)
        max_drawdown = max(max_drawdown, peak - cumulative)

    if peak <= 0:
        # Never in profit: a curve that only went down gets no credit.
        return 0.0 if trough < 0 else 100.0

    drawdown_pct = float(max_drawdown / peak * 100)
    return 100 - drawdown_pct * 2


def _diversification(rows: List[TradeRow]) -> float:
    instruments = {r.instrument for r in rows if r.instrument}
    return min(100.0, len(instruments) * 20.0)


# -------------------------------------------------
# Emotional intelligence
# -------------------------------------------------
def _emotion_performance(rows: List[TradeRow]) -> float:
    """Share of emotional states whose average P&L is positive."""
    by_emotion: Dict[str, List[Decimal]] = defaultdict(list)
    for r in rows:
        if r.emotional_state:
            by_emotion[r.emotional_state].append(r.pnl)

    if not by_emotion:
        return 50.0

    good = sum(1 for pnls in by_emotion.values() if sum(pnls) / len(pnls) > 0)
    return _pct(good, len(by_emotion))


def _stress_management(records: List[Any]) -> float:
    reported = [s for s in (_journal_rating(r, "stress_level") for r in records) if s is not None]
    if not reported:
        return 50.0
    return 100 - _mean(reported) * 10


def _loss_recovery(rows: List[TradeRow]) -> float:
    """How often a loss is followed by a winning trade."""
    losses = 0
    recoveries = 0
    for current, following in zip(rows, rows[1:]):
        if current.pnl < 0:
            losses += 1
            if following.pnl > 0:
                recoveries += 1

    return _pct(recoveries, losses) if losses else 50.0


def _confidence_calibration(pairs) -> float:
    """
    High confidence should precede wins and low confidence losses.
    Full credit for a calibrated call, half for a near miss.
    """
    scored = [(row, _journal_rating(rec, "setup_confidence")) for row, rec in pairs]
    scored = [(row, conf) for row, conf in scored if conf is not None]
    if not scored:
        return 50.0

    total = 0.0
    for row, confidence in scored:
        is_win = row.pnl > 0
        if (is_win and confidence >= 7) or (not is_win and confidence <= 4):
            total += 100
        elif (is_win and confidence >= 5) or (not is_win and confidence <= 6):
            total += 50

    return total / len(scored)


def compute_behavior_metrics(trades: Iterable[Any], *, currency: Any = None) -> BehaviorMetrics:
    """
    Build the BehaviorMetrics bundle from a trade set.

    Trades are put in trade-date order first; trend, drawdown and recovery
    metrics depend on sequence. An empty set returns the field defaults.
    """
    pairs = sorted(pair_trades(trades, currency=currency), key=lambda p: p[0].day)
    if not pairs:
        return BehaviorMetrics()

    rows = [row for row, _ in pairs]
    records = [rec for _, rec in pairs]
    n = len(records)

    raw: Dict[str, float] = {
        "plan_adherence": _pct(sum(1 for r in records if not read_field(r, "deviated_from_plan", False)), n),
        "impulsive_trade_rate": _pct(sum(1 for r in records if read_field(r, "is_impulsive", False)), n),
        "stop_loss_respect": _pct(sum(1 for r in records if read_field(r, "stop_loss_price") is not None), n),
        "emotional_control": _emotional_control(records),
        "lessons_documented": _pct(sum(1 for r in records if _text_longer_than(r, "key_lesson", LESSON_MIN_CHARS)), n),
        "mistake_repetition": _mistake_repetition(records),
        "improvement_trend": _improvement_trend(rows),
        "reflection_quality": _pct(
            sum(1 for r in records if any(_text_longer_than(r, f, REFLECTION_MIN_CHARS) for f in REFLECTION_FIELDS)),
            n,
        ),
        "position_sizing": _position_sizing(records),
        "leverage_usage": _leverage_usage(records),
        "drawdown_control": _drawdown_control(rows),
        "diversification": _diversification(rows),
        "emotion_performance": _emotion_performance(rows),
        "stress_management": _stress_management(records),
        "loss_recovery": _loss_recovery(rows),
        "confidence_calibration": _confidence_calibration(pairs),
    }

    metrics = BehaviorMetrics(**{k: round(_clamp(v), 2) for k, v in raw.items()})
    logger.debug("behavior metrics over %d trades: %s", n, metrics.model_dump())
    return metrics
