from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.core.copy_trading import (
    CopyTradingConfig,
    FixedAllocation,
    PercentageAllocation,
    TimeRange,
    Trend,
    aggregate_portfolio,
    build_copied_trader,
    performance_series,
    revalue,
)
from app.services.trader_metrics import Trader

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _copied(trader_id, capital, value=None, max_drawdown=None):
    config = CopyTradingConfig(
        traderId=trader_id,
        allocation=FixedAllocation(amount=capital),
        maxDrawdown=max_drawdown,
    )
    copied = build_copied_trader(Trader(id=trader_id, username=trader_id), Decimal(capital), config, NOW)
    if value is not None:
        copied = revalue(copied, Decimal(value))
    return copied


def test_from_form_builds_tagged_allocation():
    fixed = CopyTradingConfig.from_form({"traderId": "t1", "allocationType": "fixed", "amount": 1000})
    pct = CopyTradingConfig.from_form({"traderId": "t1", "allocationType": "percentage", "percentage": 25})

    assert isinstance(fixed.allocation, FixedAllocation)
    assert fixed.allocation.amount == Decimal("1000")
    assert isinstance(pct.allocation, PercentageAllocation)
    assert pct.allocation.percentage == Decimal("25")


@pytest.mark.parametrize("form", [
    {"traderId": "t1", "allocationType": "fixed"},
    {"traderId": "t1", "allocationType": "fixed", "amount": 10, "percentage": 5},
    {"traderId": "t1", "allocationType": "percentage", "amount": 10},
    {"traderId": "t1", "allocationType": "percentage", "percentage": 150},
    {"traderId": "t1", "allocationType": "fixed", "amount": 0},
    {"traderId": "t1", "allocationType": "leverage", "amount": 10},
])
def test_from_form_rejects_invalid_shapes(form):
    with pytest.raises(ValueError):
        CopyTradingConfig.from_form(form)


def test_config_accepts_discriminated_payload():
    config = CopyTradingConfig.model_validate({
        "traderId": "t1",
        "allocation": {"allocationType": "percentage", "percentage": "12.5"},
        "stopCopying": True,
    })

    assert isinstance(config.allocation, PercentageAllocation)
    assert config.stop_copying


def test_new_copied_trader_is_valued_at_capital():
    copied = _copied("t1", "1000")

    assert copied.current_value == copied.capital_allocated == Decimal("1000")
    assert copied.returns == 0
    assert copied.returns_percent == 0
    assert copied.trend == Trend.UP
    assert [p.value for p in copied.chart_data] == [Decimal("1000")]
    assert copied.copied_at == NOW
    assert copied.is_active


def test_revalue_updates_returns_and_trend():
    copied = revalue(_copied("t1", "1000"), Decimal("900"))

    assert copied.returns == Decimal("-100.00")
    assert copied.returns_percent == -10
    assert copied.trend == Trend.DOWN
    assert copied.copied_at == NOW
    assert len(copied.chart_data) == 2


def test_sparkline_keeps_last_eleven_samples():
    copied = _copied("t1", "100")
    for value in range(101, 121):
        copied = revalue(copied, Decimal(value))

    assert len(copied.chart_data) == 11
    assert copied.chart_data[-1].value == Decimal("120")
    assert copied.chart_data[0].value == Decimal("110")


def test_max_drawdown_deactivates():
    copied = _copied("t1", "1000", max_drawdown=Decimal("20"))

    copied = revalue(copied, Decimal("1500"))
    assert copied.is_active

    # 1500 -> 1250 is a 16.7% drawdown from peak
    copied = revalue(copied, Decimal("1250"))
    assert copied.is_active

    copied = revalue(copied, Decimal("1200"))
    assert copied.drawdown_percent == 20
    assert not copied.is_active


def test_aggregate_portfolio():
    copied = [_copied("a", "2500", "3212.50"), _copied("b", "1800", "1578.60")]

    metrics = aggregate_portfolio(copied)

    assert metrics.total_copied_capital == Decimal("4300.00")
    assert metrics.total_portfolio_value == Decimal("4791.10")
    assert metrics.lifetime_copy_pnl == Decimal("491.10")
    assert metrics.roi_percent == 11.4
    assert metrics.pnl_24h == Decimal("17.19")


def test_aggregate_portfolio_is_order_independent():
    copied = [_copied("a", "10.10", "11.11"), _copied("b", "20.20", "19.19"), _copied("c", "0.01", "0.02")]

    assert aggregate_portfolio(copied) == aggregate_portfolio(list(reversed(copied)))


def test_aggregate_empty_portfolio():
    metrics = aggregate_portfolio([])

    assert metrics.total_portfolio_value == 0
    assert metrics.roi_percent == 0


def test_performance_series_window_and_labels():
    history = [
        (NOW - timedelta(days=40), Decimal("1000")),
        (NOW - timedelta(days=2), Decimal("1100")),
        (NOW - timedelta(days=1), Decimal("1050")),
    ]

    points = performance_series(history, TimeRange.ONE_MONTH, NOW)

    assert [p.value for p in points] == [Decimal("1000"), Decimal("1100"), Decimal("1050")]
    assert [p.pnl for p in points] == [Decimal("0"), Decimal("100"), Decimal("-50")]
    assert points[0].date == "May 2"
    assert points[-1].date == "May 31"


def test_performance_series_day_uses_clock_labels():
    history = [(NOW - timedelta(hours=3), Decimal("50"))]

    points = performance_series(history, TimeRange.ONE_DAY, NOW)

    assert [p.date for p in points] == ["9:00 AM"]
