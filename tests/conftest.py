import itertools
from datetime import datetime, timezone

import pytest

_ids = itertools.count(1)


def _trade(**overrides):
    """
    Plain-dict trade with every field the calculators read.
    2024-03-04 is a Monday.
    """
    trade = {
        "id": next(_ids),
        "trade_date": datetime(2024, 3, 4, 10, 0, tzinfo=timezone.utc),
        "trade_type": "CRYPTO",
        "instrument": "BTCUSDT",
        "trade_direction": "BUY_LONG",
        "avg_buy_price": 100,
        "avg_sell_price": 110,
        "position_size": 1,
        "leverage": 1,
        "base_currency": "INR",
        "emotional_state": "NEUTRAL",
        "is_impulsive": False,
        "pnl": None,
    }
    trade.update(overrides)
    return trade


@pytest.fixture
def make_trade():
    return _trade
