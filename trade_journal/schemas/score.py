from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from trade_journal.schemas.stats import StreakSummary


def _metric(default: float):
    return Field(default=default, ge=0, le=100)


class BehaviorMetrics(BaseModel):
    """
    Per-trade behavioural signals reduced to 0-100 rates.

    Every field has a defined default: the value used when the journal holds
    no signal for that metric (e.g. nobody filled in stress levels).
    impulsive_trade_rate is the raw rate (higher is worse); everything else
    is already oriented so that higher is better.
    """

    # Discipline
    plan_adherence: float = _metric(0)
    impulsive_trade_rate: float = _metric(0)
    stop_loss_respect: float = _metric(0)
    emotional_control: float = _metric(50)

    # Learning
    lessons_documented: float = _metric(0)
    mistake_repetition: float = _metric(70)
    improvement_trend: float = _metric(50)
    reflection_quality: float = _metric(0)

    # Risk management
    position_sizing: float = _metric(50)
    leverage_usage: float = _metric(100)
    drawdown_control: float = _metric(100)
    diversification: float = _metric(0)

    # Emotional intelligence
    emotion_performance: float = _metric(50)
    stress_management: float = _metric(50)
    loss_recovery: float = _metric(50)
    confidence_calibration: float = _metric(50)


class CategoryScore(BaseModel):
    score: int
    weight: int
    metrics: Dict[str, int]


class NextLevel(BaseModel):
    name: str
    points_needed: int


class TraderLevel(BaseModel):
    level: int
    name: str
    min_score: int
    max_score: int
    description: str
    next_level: Optional[NextLevel] = None


class TraderScoreBreakdown(BaseModel):
    overall: int
    discipline: CategoryScore
    performance: CategoryScore
    learning: CategoryScore
    risk_management: CategoryScore
    emotional_intelligence: CategoryScore
    level: TraderLevel


class TraderScoreResponse(BaseModel):
    score: TraderScoreBreakdown
    behavior: BehaviorMetrics
    streaks: StreakSummary
    total_trades: int
    insufficient_data: bool
    min_trades_for_insights: int


class LevelBand(BaseModel):
    level: int
    name: str
    min_score: int
    max_score: int
    description: str


class LevelTable(BaseModel):
    levels: List[LevelBand]
