# Library boundary: the three calculators.

from trade_journal.services.analytics.aggregate_stats import compute_aggregate_stats  # noqa: F401
from trade_journal.services.analytics.trader_score import compute_trader_score  # noqa: F401
from trade_journal.services.pnl import compute_trade_pnl  # noqa: F401
