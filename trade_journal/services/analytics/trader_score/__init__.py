from trade_journal.services.analytics.trader_score.config import (  # noqa: F401
    CATEGORY_METRICS,
    CATEGORY_WEIGHTS,
    TRADER_LEVELS,
    validate_score_config,
)
from trade_journal.services.analytics.trader_score.levels import get_trader_level, list_levels  # noqa: F401
from trade_journal.services.analytics.trader_score.scoring import (  # noqa: F401
    combine_category_scores,
    compute_trader_score,
)
