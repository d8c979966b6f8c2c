from datetime import date, datetime, timezone
from decimal import Decimal

from trade_journal.api import dashboard, trader_score
from trade_journal.models.enums import Currency
from trade_journal.models.trade import Trade


def make_orm_trade(id, pnl, day=4, **overrides):
    fields = dict(
        id=id,
        trade_date=datetime(2024, 3, day, 9, 30, tzinfo=timezone.utc),
        trade_type="CRYPTO",
        instrument="BTCUSDT",
        trade_direction="BUY_LONG",
        avg_buy_price=Decimal("100"),
        avg_sell_price=Decimal("110"),
        position_size=Decimal("1"),
        leverage=Decimal("1"),
        base_currency="INR",
        emotional_state="NEUTRAL",
        is_impulsive=False,
        pnl=Decimal(str(pnl)),
    )
    fields.update(overrides)
    return Trade(**fields)


# =================================================
# Dashboard
# =================================================

def test_stats_endpoint(client, patch_fetch):
    calls = patch_fetch(dashboard, [make_orm_trade(1, 100), make_orm_trade(2, -40, day=5)])

    response = client.get(
        "/api/dashboard/stats",
        params={"currency": "INR", "start_date": "2024-03-01", "end_date": "2024-03-31"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total_pnl"] == 60
    assert body["win_rate"] == 50
    assert body["largest_win"] == 100
    assert body["largest_loss"] == -40
    assert body["currency"] == "INR"
    assert [p["date"] for p in body["pnl_over_time"]] == ["2024-03-04", "2024-03-05"]

    assert calls == [
        {"currency": Currency.INR, "start_date": date(2024, 3, 1), "end_date": date(2024, 3, 31)}
    ]


def test_stats_requires_currency(client, patch_fetch):
    patch_fetch(dashboard, [])

    response = client.get("/api/dashboard/stats")

    assert response.status_code == 422


def test_malformed_trade_returns_error_envelope(client, patch_fetch):
    patch_fetch(dashboard, [make_orm_trade(7, 10, position_size=None)])

    response = client.get("/api/dashboard/stats", params={"currency": "INR"})

    assert response.status_code == 400
    assert response.json() == {
        "error": {
            "code": "INVALID_TRADE_RECORD",
            "message": "Trade 7: position_size is missing",
            "details": {"trade_id": 7, "field": "position_size"},
        }
    }


def test_calendar_endpoint(client, patch_fetch):
    patch_fetch(dashboard, [make_orm_trade(1, 10), make_orm_trade(2, 5), make_orm_trade(3, -1, day=6)])

    response = client.get("/api/dashboard/calendar", params={"currency": "INR"})

    assert response.status_code == 200
    assert response.json() == [
        {"date": "2024-03-04", "pnl": 15.0, "trade_count": 2},
        {"date": "2024-03-06", "pnl": -1.0, "trade_count": 1},
    ]


def test_breakdown_endpoint(client, patch_fetch):
    patch_fetch(
        dashboard,
        [
            make_orm_trade(1, 10, trade_type="STOCK"),
            make_orm_trade(2, -3, trade_type="CRYPTO"),
        ],
    )

    response = client.get("/api/dashboard/breakdown", params={"currency": "INR", "by": "trade_type"})

    assert response.status_code == 200
    assert [g["group"] for g in response.json()] == ["STOCK", "CRYPTO"]


def test_recent_trades(client, patch_fetch):
    calls = patch_fetch(dashboard, [make_orm_trade(2, -4, day=5), make_orm_trade(1, 12)])

    response = client.get("/api/dashboard/recent-trades", params={"limit": 2})

    assert response.status_code == 200
    assert response.json() == [
        {"id": 2, "instrument": "BTCUSDT", "pnl": -4.0, "date": "2024-03-05", "currency": "INR"},
        {"id": 1, "instrument": "BTCUSDT", "pnl": 12.0, "date": "2024-03-04", "currency": "INR"},
    ]
    assert calls[0]["limit"] == 2
    assert calls[0]["descending"] is True


def test_recent_trades_limit_is_bounded(client, patch_fetch):
    patch_fetch(dashboard, [])

    assert client.get("/api/dashboard/recent-trades", params={"limit": 51}).status_code == 422


# =================================================
# Trader score
# =================================================

def test_trader_score_flags_small_samples(client, patch_fetch):
    patch_fetch(trader_score, [make_orm_trade(i, 10, day=i) for i in range(1, 4)])

    response = client.get("/api/trader-score", params={"currency": "INR"})

    assert response.status_code == 200
    body = response.json()
    assert body["total_trades"] == 3
    assert body["insufficient_data"] is True
    assert body["min_trades_for_insights"] == 10
    assert 0 <= body["score"]["overall"] <= 100
    assert body["streaks"]["current_streak"] == 3
    assert body["score"]["level"]["name"]


def test_trader_score_with_enough_trades(client, patch_fetch):
    trades = [make_orm_trade(i, 10 if i % 3 else -5, day=i) for i in range(1, 13)]
    patch_fetch(trader_score, trades)

    body = client.get("/api/trader-score", params={"currency": "INR"}).json()

    assert body["total_trades"] == 12
    assert body["insufficient_data"] is False


def test_trader_levels(client):
    response = client.get("/api/trader-score/levels")

    assert response.status_code == 200
    levels = response.json()["levels"]
    assert levels[0]["min_score"] == 0
    assert levels[-1]["max_score"] == 100
    assert len(levels) == 6
