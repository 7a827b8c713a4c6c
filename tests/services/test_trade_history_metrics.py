from datetime import datetime, timedelta, timezone

import pytest

from app.providers.polymarket import Fill, SubgraphPosition
from app.services.trader_metrics import (
    markets_active_from_positions,
    price_std_dev,
    risk_score_from_fills,
    roi_from_fills,
    win_rate_from_fills,
)

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def _fill(price, amount="100", days_ago=1, market="m1"):
    ts = int((NOW - timedelta(days=days_ago)).timestamp())
    return Fill(id=f"{market}-{price}-{days_ago}", market=market, price=str(price), amount=str(amount), timestamp=str(ts))


def test_win_rate_counts_fills_priced_above_half():
    fills = [_fill(0.7), _fill(0.5), _fill(0.2), _fill(0.9)]

    assert win_rate_from_fills(fills) == 50
    assert win_rate_from_fills([]) == 0


def test_price_std_dev():
    assert price_std_dev([_fill(0.5)]) == 0
    assert price_std_dev([_fill(0.2), _fill(0.6)]) == pytest.approx(0.2)


def test_risk_score_components():
    assert risk_score_from_fills([]) == 50

    # 2 fills: frequency 6, size 30 * 0.1 = 3, volatility min(0.2 * 10, 1) * 40 = 40
    fills = [_fill(0.2, amount=100), _fill(0.6, amount=100)]
    assert risk_score_from_fills(fills) == 49

    # Saturated: 10+ fills, avg >= 1000, std >= 0.1
    heavy = [_fill(p, amount=5000) for p in (0.1, 0.9) * 6]
    assert risk_score_from_fills(heavy) == 100


def test_risk_score_ignores_garbage_numbers():
    fills = [Fill(price="x", amount="y", timestamp="z")]

    assert risk_score_from_fills(fills) == 3


def test_roi_windows():
    fills = [
        _fill(0.8, amount=100, days_ago=2),   # win: cost 80, payout 100
        _fill(0.4, amount=100, days_ago=3),   # loss: cost 40
        _fill(0.5, amount=1000, days_ago=20),  # loss: cost 500 (30d window only)
    ]

    # 7d: (100 - 120) / 120
    assert roi_from_fills(fills, 7, NOW) == pytest.approx(-16.7)
    # 30d: (100 - 620) / 620
    assert roi_from_fills(fills, 30, NOW) == pytest.approx(-83.9)


def test_roi_is_zero_without_recent_fills():
    assert roi_from_fills([_fill(0.9, days_ago=40)], 30, NOW) == 0
    assert roi_from_fills([], 7, NOW) == 0


def test_markets_active_counts_distinct_markets():
    positions = [
        SubgraphPosition(market="m1", outcome="Yes", size="1"),
        SubgraphPosition(market="m1", outcome="No", size="2"),
        SubgraphPosition(market="m2", outcome="Yes", size="3"),
    ]

    assert markets_active_from_positions(positions) == 2
    assert markets_active_from_positions([]) == 0
