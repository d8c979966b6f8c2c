from datetime import date, datetime, timezone

import pytest

from trade_journal.models.enums import Currency, TradeSortField, TradeType
from trade_journal.services.trade_loader import build_trade_query, count_trades, fetch_trades


# -------------------------------------------------
# Helpers
# -------------------------------------------------

class RecordingSession:
    def __init__(self, rows=()):
        self.rows = list(rows)
        self.statements = []

    async def execute(self, stmt):
        self.statements.append(stmt)
        return self

    def scalars(self):
        return self

    def all(self):
        return self.rows

    def scalar_one(self):
        return len(self.rows)


def compiled(stmt):
    c = stmt.compile()
    return str(c), c.params


# =================================================
# WHERE clause
# =================================================

def test_end_date_covers_the_whole_day():
    sql, params = compiled(build_trade_query(start_date=date(2024, 3, 1), end_date=date(2024, 3, 31)))

    assert "trades.trade_date >= :trade_date_1" in sql
    assert "trades.trade_date < :trade_date_2" in sql
    assert params["trade_date_1"] == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert params["trade_date_2"] == datetime(2024, 4, 1, tzinfo=timezone.utc)


def test_currency_filter_uses_stored_code():
    sql, params = compiled(build_trade_query(currency=Currency.USD))

    assert "trades.base_currency = :base_currency_1" in sql
    assert params["base_currency_1"] == "USD"


def test_no_filters_no_where_clause():
    sql, _ = compiled(build_trade_query())

    assert "WHERE" not in sql
    assert "ORDER BY trades.trade_date ASC, trades.id ASC" in sql


def test_journal_filters():
    sql, params = compiled(build_trade_query(trade_type=TradeType.STOCK, emotional_state="GREEDY", is_impulsive=True))

    assert params["trade_type_1"] == "STOCK"
    assert params["emotional_state_1"] == "GREEDY"
    assert "trades.is_impulsive" in sql


def test_sorting_and_pagination():
    sql, _ = compiled(build_trade_query(sort_by=TradeSortField.PNL, descending=True, limit=20, offset=40))

    assert "ORDER BY trades.pnl DESC, trades.id DESC" in sql
    assert "LIMIT" in sql
    assert "OFFSET" in sql


# =================================================
# Session round trips
# =================================================

@pytest.mark.asyncio
async def test_fetch_trades_executes_filtered_query():
    session = RecordingSession(rows=["a", "b"])

    rows = await fetch_trades(session, currency=Currency.INR, end_date=date(2024, 1, 31))

    assert rows == ["a", "b"]
    sql, params = compiled(session.statements[0])
    assert params["base_currency_1"] == "INR"
    assert params["trade_date_1"] == datetime(2024, 2, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_count_trades_shares_the_filters():
    session = RecordingSession(rows=[1, 2, 3])

    total = await count_trades(session, currency=Currency.USD, start_date=date(2024, 1, 1))

    assert total == 3
    sql, params = compiled(session.statements[0])
    assert "count(*)" in sql
    assert params["base_currency_1"] == "USD"
    assert params["trade_date_1"] == datetime(2024, 1, 1, tzinfo=timezone.utc)
