# trade_journal/services/analytics/trader_score/config.py
#
# Scoring tables. Adjust weights and bands here, nowhere else.
# validate_score_config() runs at application startup.

from typing import Any, Dict, List, Mapping, Sequence

from trade_journal.errors import NoMatchingLevelError, ScoreConfigError

DISCIPLINE = "discipline"
PERFORMANCE = "performance"
LEARNING = "learning"
RISK_MANAGEMENT = "risk_management"
EMOTIONAL_INTELLIGENCE = "emotional_intelligence"

CATEGORIES = (DISCIPLINE, PERFORMANCE, LEARNING, RISK_MANAGEMENT, EMOTIONAL_INTELLIGENCE)

# Percent of the overall score. Must sum to 100.
CATEGORY_WEIGHTS: Dict[str, int] = {
    DISCIPLINE: 30,
    PERFORMANCE: 25,
    LEARNING: 20,
    RISK_MANAGEMENT: 15,
    EMOTIONAL_INTELLIGENCE: 10,
}

# Relative weight of each metric inside its category (equal = simple mean).
CATEGORY_METRICS: Dict[str, Dict[str, int]] = {
    DISCIPLINE: {
        "plan_adherence": 1,
        "impulsive_control": 1,
        "stop_loss_respect": 1,
        "emotional_control": 1,
    },
    PERFORMANCE: {
        "win_rate": 1,
        "risk_reward": 1,
        "profit_factor": 1,
        "consistency": 1,
    },
    LEARNING: {
        "lessons_documented": 1,
        "mistake_repetition": 1,
        "improvement_trend": 1,
        "reflection_quality": 1,
    },
    RISK_MANAGEMENT: {
        "position_sizing": 1,
        "leverage_usage": 1,
        "drawdown_control": 1,
        "diversification": 1,
    },
    EMOTIONAL_INTELLIGENCE: {
        "emotion_performance": 1,
        "stress_management": 1,
        "loss_recovery": 1,
        "confidence_calibration": 1,
    },
}

# Integer bands covering 0..100 with no gaps or overlaps.
TRADER_LEVELS: List[Dict[str, Any]] = [
    {"level": 1, "name": "Novice Trader", "min_score": 0, "max_score": 20,
     "description": "Just starting your trading journey"},
    {"level": 2, "name": "Developing Trader", "min_score": 21, "max_score": 40,
     "description": "Learning the ropes"},
    {"level": 3, "name": "Competent Trader", "min_score": 41, "max_score": 60,
     "description": "Showing consistency"},
    {"level": 4, "name": "Proficient Trader", "min_score": 61, "max_score": 80,
     "description": "Strong performance"},
    {"level": 5, "name": "Expert Trader", "min_score": 81, "max_score": 95,
     "description": "Exceptional skills"},
    {"level": 6, "name": "Master Trader", "min_score": 96, "max_score": 100,
     "description": "Elite level"},
]


def validate_weights(
    weights: Mapping[str, int] = CATEGORY_WEIGHTS,
    metrics: Mapping[str, Mapping[str, int]] = CATEGORY_METRICS,
) -> None:
    missing = set(CATEGORIES) - set(weights)
    unknown = set(weights) - set(CATEGORIES)
    if missing or unknown:
        raise ScoreConfigError(
            "Category weights must name exactly the five score categories.",
            {"missing": sorted(missing), "unknown": sorted(unknown)},
        )

    if any(w < 0 for w in weights.values()):
        raise ScoreConfigError("Category weights cannot be negative.", {"weights": dict(weights)})

    total = sum(weights.values())
    if total != 100:
        raise ScoreConfigError(f"Category weights must sum to 100, got {total}.", {"weights": dict(weights)})

    for category in CATEGORIES:
        table = metrics.get(category)
        if not table:
            raise ScoreConfigError(f"No metrics configured for {category}.", {"category": category})
        if any(w <= 0 for w in table.values()):
            raise ScoreConfigError(f"Metric weights for {category} must be positive.", {"category": category})
        unknown_metrics = set(table) - set(CATEGORY_METRICS[category])
        if unknown_metrics:
            raise ScoreConfigError(
                f"Unknown metrics for {category}.",
                {"category": category, "unknown": sorted(unknown_metrics)},
            )


def validate_levels(levels: Sequence[Mapping[str, Any]] = TRADER_LEVELS) -> None:
    if not levels:
        raise NoMatchingLevelError("Level table is empty.")

    bands = sorted(levels, key=lambda b: b["min_score"])

    if bands[0]["min_score"] != 0:
        raise NoMatchingLevelError("Level table must start at 0.", {"first_min_score": bands[0]["min_score"]})
    if bands[-1]["max_score"] != 100:
        raise NoMatchingLevelError("Level table must end at 100.", {"last_max_score": bands[-1]["max_score"]})

    for band in bands:
        if band["min_score"] > band["max_score"]:
            raise NoMatchingLevelError(f"Level {band['name']} has min_score above max_score.", {"level": band["level"]})

    for prev, band in zip(bands, bands[1:]):
        expected = prev["max_score"] + 1
        if band["min_score"] > expected:
            raise NoMatchingLevelError(
                f"Gap between {prev['name']} and {band['name']}.",
                {"from": prev["max_score"], "to": band["min_score"]},
            )
        if band["min_score"] < expected:
            raise NoMatchingLevelError(
                f"{prev['name']} overlaps {band['name']}.",
                {"from": band["min_score"], "to": prev["max_score"]},
            )


def validate_score_config(
    weights: Mapping[str, int] = CATEGORY_WEIGHTS,
    metrics: Mapping[str, Mapping[str, int]] = CATEGORY_METRICS,
    levels: Sequence[Mapping[str, Any]] = TRADER_LEVELS,
) -> None:
    """Configuration-integrity check. Raises ScoreConfigError / NoMatchingLevelError."""
    validate_weights(weights, metrics)
    validate_levels(levels)
