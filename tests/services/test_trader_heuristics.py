import math

import pytest

from app.providers.polymarket import LeaderboardRecord
from app.services.trader_metrics import (
    WinRateJitter,
    derive_risk_score,
    derive_roi,
    derive_win_rate,
    estimate_markets_active,
    estimate_total_trades,
    format_address,
    leaderboard_record_to_trader,
    safe_float,
)


@pytest.mark.parametrize("raw, expected", [
    ("12.5", 12.5),
    (None, 0.0),
    ("", 0.0),
    ("abc", 0.0),
    ("nan", 0.0),
    ("inf", 0.0),
    (3, 3.0),
])
def test_safe_float(raw, expected):
    assert safe_float(raw) == expected


def test_roi_from_pnl_and_volume():
    assert derive_roi(1000, 5000) == 20
    assert derive_roi(-200, 3000) == -6.67
    assert derive_roi(500, 0) == 0


def test_win_rate_brackets():
    # Profitable: 55 + ratio * 400, capped at 75 before the rank bonus
    assert derive_win_rate(1000, 100000, index=20) == pytest.approx(59.0)
    assert derive_win_rate(1000, 5000, index=20) == 75
    # Losing: 50 + ratio * 50, floored at 40
    assert derive_win_rate(-200, 3000, index=20) == pytest.approx(50 - 200 / 3000 * 50)
    assert derive_win_rate(-5000, 1000, index=20) == 40
    # Break-even
    assert derive_win_rate(0, 1000, index=20) == 50


def test_win_rate_rank_bonus():
    assert derive_win_rate(0, 0, index=0) == 52
    assert derive_win_rate(0, 0, index=7) == 51
    assert derive_win_rate(0, 0, index=10) == 50
    assert derive_win_rate(1000, 5000, index=0) == 77


def test_win_rate_jitter_is_clamped():
    assert derive_win_rate(1000, 5000, index=0, jitter=10) == 80
    assert derive_win_rate(-5000, 1000, index=20, jitter=-10) == 40


@pytest.mark.parametrize("pnl", [-1e9, -500.0, 0.0, 0.01, 250.0, 1e9])
@pytest.mark.parametrize("vol", [0.0, 1.0, 3000.0, 1e12])
@pytest.mark.parametrize("index", [0, 6, 50])
def test_derivations_are_total(pnl, vol, index):
    roi = derive_roi(pnl, vol)
    win_rate = derive_win_rate(pnl, vol, index)
    risk = derive_risk_score(pnl, vol)

    assert all(math.isfinite(v) for v in (roi, win_rate, risk))
    assert 40 <= win_rate <= 80
    assert 20 <= risk <= 80
    if vol == 0:
        assert roi == 0


def test_risk_score_formula():
    assert derive_risk_score(1000, 5000) == pytest.approx(31.5)
    assert derive_risk_score(0, 0) == 30
    assert derive_risk_score(-1e6, 0) == 80


def test_activity_estimates():
    assert estimate_markets_active(0) == 1
    assert estimate_markets_active(12000) == 2
    assert estimate_markets_active(1e9) == 20
    assert estimate_total_trades(0) == 10
    assert estimate_total_trades(5000) == 50


def test_format_address():
    assert format_address("0x1234567890abcdef1234567890abcdef12345678") == "0x1234...5678"
    assert format_address("") == ""
    assert format_address(None) == ""


def test_jitter_disabled_by_default():
    jitter = WinRateJitter()

    assert not jitter.enabled
    assert jitter.sample() == 0.0


def test_jitter_is_seeded_and_bounded():
    first = [WinRateJitter(2.0, seed=7).sample() for _ in range(3)]
    a = WinRateJitter(2.0, seed=7)
    b = WinRateJitter(2.0, seed=7)

    samples_a = [a.sample() for _ in range(20)]
    samples_b = [b.sample() for _ in range(20)]

    assert samples_a == samples_b
    assert all(-2.0 <= s <= 2.0 for s in samples_a)
    assert len(set(first)) == 1


def test_record_to_trader():
    record = LeaderboardRecord(
        proxyWallet="0x1234567890abcdef1234567890abcdef12345678",
        pnl="1000",
        vol="5000",
        verifiedBadge=True,
        profileImage="https://img.test/a.png",
    )

    trader = leaderboard_record_to_trader(record, index=20)

    assert trader.id == "0x1234567890abcdef1234567890abcdef12345678"
    assert trader.username == "0x1234...5678"
    assert trader.avatar == "https://img.test/a.png"
    assert trader.roi_30d == 20
    assert trader.roi_7d == 6
    assert trader.win_rate == 75
    assert trader.risk_score == 32
    assert trader.markets_active == 1
    assert trader.total_trades == 50
    assert trader.followers == 1000


def test_record_to_trader_fallback_identity():
    trader = leaderboard_record_to_trader(LeaderboardRecord(pnl="abc", vol=None), index=3)

    assert trader.id == "trader-3"
    assert trader.username == "Trader4"
    assert trader.roi_30d == 0
    assert trader.followers is None


def test_record_to_trader_prefers_user_name():
    trader = leaderboard_record_to_trader(LeaderboardRecord(user="0xabc", userName="whale"), index=0)

    assert trader.username == "whale"
    assert trader.id == "0xabc"
