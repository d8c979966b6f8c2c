from decimal import Decimal

import pytest

from trade_journal.errors import InvalidInputError, UnsupportedDirectionError
from trade_journal.models.enums import PercentageBase, TradeDirection
from trade_journal.services.pnl import (
    calculate_pnl,
    calculate_pnl_percentage,
    calculate_risk_reward_ratio,
    compute_trade_pnl,
)


# -------------------------------------------------
# calculate_pnl
# -------------------------------------------------

def test_long_trade_profit():
    pnl = calculate_pnl(
        trade_direction="BUY_LONG",
        avg_buy_price=100,
        avg_sell_price=110,
        position_size=10,
    )

    assert pnl == Decimal("100.00")


def test_short_trade_profit():
    pnl = calculate_pnl(
        trade_direction=TradeDirection.SELL_SHORT,
        avg_buy_price=100,
        avg_sell_price=90,
        position_size=5,
    )

    assert pnl == Decimal("50.00")


def test_long_and_short_are_mirror_images():
    args = dict(avg_buy_price="123.45", avg_sell_price="130.10", position_size="3")

    long_pnl = calculate_pnl(trade_direction="BUY_LONG", **args)
    short_pnl = calculate_pnl(trade_direction="SELL_SHORT", **args)

    assert long_pnl == -short_pnl
    assert long_pnl == Decimal("19.95")


@pytest.mark.parametrize(
    "first,second,size",
    [("100", "110", "10"), ("0.5", "0.37", "1200"), ("64250.5", "63980", "0.015")],
)
def test_swapping_prices_and_direction_keeps_pnl(first, second, size):
    long_pnl = calculate_pnl(
        trade_direction="BUY_LONG",
        avg_buy_price=first,
        avg_sell_price=second,
        position_size=size,
    )
    short_pnl = calculate_pnl(
        trade_direction="SELL_SHORT",
        avg_buy_price=second,
        avg_sell_price=first,
        position_size=size,
    )

    assert long_pnl == short_pnl


def test_direction_is_case_insensitive():
    pnl = calculate_pnl(
        trade_direction="buy_long",
        avg_buy_price=10,
        avg_sell_price=12,
        position_size=2,
    )

    assert pnl == Decimal("4.00")


def test_pnl_rounds_half_up_to_cents():
    pnl = calculate_pnl(
        trade_direction="BUY_LONG",
        avg_buy_price=1,
        avg_sell_price=1.005,
        position_size=1,
    )

    assert pnl == Decimal("0.01")


def test_float_inputs_do_not_leak_binary_error():
    pnl = calculate_pnl(
        trade_direction="BUY_LONG",
        avg_buy_price=0.1,
        avg_sell_price=0.3,
        position_size=3,
    )

    assert pnl == Decimal("0.60")


def test_breakeven_trade():
    pnl = calculate_pnl(
        trade_direction="SELL_SHORT",
        avg_buy_price=50,
        avg_sell_price=50,
        position_size=7,
    )

    assert pnl == Decimal("0.00")


@pytest.mark.parametrize("bad", [0, -5, "abc", float("nan"), float("inf"), None, True])
def test_invalid_position_size(bad):
    with pytest.raises(InvalidInputError) as exc:
        calculate_pnl(
            trade_direction="BUY_LONG",
            avg_buy_price=100,
            avg_sell_price=110,
            position_size=bad,
        )

    assert exc.value.details["field"] == "position_size"
    assert exc.value.code == "INVALID_INPUT"


def test_price_above_one_billion_rejected():
    with pytest.raises(InvalidInputError) as exc:
        calculate_pnl(
            trade_direction="BUY_LONG",
            avg_buy_price=Decimal("1000000001"),
            avg_sell_price=110,
            position_size=1,
        )

    assert exc.value.details["field"] == "avg_buy_price"


def test_one_billion_is_allowed():
    pnl = calculate_pnl(
        trade_direction="BUY_LONG",
        avg_buy_price=Decimal("1000000000"),
        avg_sell_price=Decimal("1000000000"),
        position_size=1,
    )

    assert pnl == Decimal("0.00")


def test_unknown_direction():
    with pytest.raises(UnsupportedDirectionError) as exc:
        calculate_pnl(
            trade_direction="SIDEWAYS",
            avg_buy_price=100,
            avg_sell_price=110,
            position_size=1,
        )

    assert exc.value.details == {"trade_direction": "SIDEWAYS"}


def test_missing_direction():
    with pytest.raises(InvalidInputError):
        calculate_pnl(
            trade_direction=None,
            avg_buy_price=100,
            avg_sell_price=110,
            position_size=1,
        )


# -------------------------------------------------
# calculate_pnl_percentage
# -------------------------------------------------

def test_percentage_on_buy_notional():
    pct = calculate_pnl_percentage(pnl=Decimal("100"), avg_buy_price=100, position_size=10)

    assert pct == Decimal("10.0000")


def test_short_percentage_uses_buy_price_by_default():
    # Cover price is the base for shorts too (observed behaviour).
    pct = calculate_pnl_percentage(pnl=Decimal("50"), avg_buy_price=100, position_size=5)

    assert pct == Decimal("10.0000")


def test_percentage_ignores_leverage_on_notional_base():
    pct = calculate_pnl_percentage(pnl=Decimal("100"), avg_buy_price=100, position_size=10, leverage=10)

    assert pct == Decimal("10.0000")


def test_percentage_on_margin_base():
    pct = calculate_pnl_percentage(
        pnl=Decimal("100"),
        avg_buy_price=100,
        position_size=10,
        leverage=5,
        base=PercentageBase.MARGIN,
    )

    assert pct == Decimal("50.0000")


def test_percentage_rounds_to_four_places():
    pct = calculate_pnl_percentage(pnl=Decimal("1"), avg_buy_price=3, position_size=1)

    assert pct == Decimal("33.3333")


def test_percentage_rejects_bad_pnl():
    with pytest.raises(InvalidInputError):
        calculate_pnl_percentage(pnl="n/a", avg_buy_price=100, position_size=1)


# -------------------------------------------------
# calculate_risk_reward_ratio
# -------------------------------------------------

def test_risk_reward_ratio():
    rr = calculate_risk_reward_ratio(entry_price=100, stop_loss_price=95, take_profit_price=110)

    assert rr == Decimal("2.00")


def test_risk_reward_for_short_levels():
    rr = calculate_risk_reward_ratio(entry_price=100, stop_loss_price=104, take_profit_price=88)

    assert rr == Decimal("3.00")


def test_risk_reward_missing_levels():
    assert calculate_risk_reward_ratio(entry_price=100, stop_loss_price=None, take_profit_price=110) is None
    assert calculate_risk_reward_ratio(entry_price=100, stop_loss_price=95, take_profit_price=None) is None


def test_risk_reward_stop_at_entry():
    rr = calculate_risk_reward_ratio(entry_price=100, stop_loss_price=100, take_profit_price=110)

    assert rr == Decimal("0")


# -------------------------------------------------
# compute_trade_pnl
# -------------------------------------------------

def test_compute_trade_pnl_from_dict(make_trade):
    trade = make_trade(
        trade_direction="BUY_LONG",
        avg_buy_price=100,
        avg_sell_price=110,
        position_size=10,
        stop_loss_price=95,
        take_profit_price=115,
    )

    result = compute_trade_pnl(trade, base=PercentageBase.BUY_NOTIONAL)

    assert result.pnl == Decimal("100.00")
    assert result.pnl_percentage == Decimal("10.0000")
    assert result.risk_reward_ratio == Decimal("3.00")


def test_compute_trade_pnl_never_multiplies_leverage(make_trade):
    plain = compute_trade_pnl(make_trade(leverage=1), base=PercentageBase.BUY_NOTIONAL)
    levered = compute_trade_pnl(make_trade(leverage=20), base=PercentageBase.BUY_NOTIONAL)

    assert plain.pnl == levered.pnl == Decimal("10.00")


def test_compute_trade_pnl_from_orm_instance():
    from trade_journal.models.trade import Trade

    trade = Trade(
        trade_direction="SELL_SHORT",
        avg_buy_price=Decimal("100"),
        avg_sell_price=Decimal("90"),
        position_size=Decimal("5"),
        leverage=Decimal("2"),
    )

    result = compute_trade_pnl(trade, base=PercentageBase.MARGIN)

    assert result.pnl == Decimal("50.00")
    assert result.pnl_percentage == Decimal("20.0000")
    assert result.risk_reward_ratio is None
