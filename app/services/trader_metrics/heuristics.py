"""
Leaderboard Heuristics

The leaderboard only reports PnL and volume per account. Win rate, risk and
activity are estimated from those two numbers so traders can be compared on
the dashboard. None of these functions raise: unparsable input falls back to a
neutral value.
"""

from __future__ import annotations

import math
import random
from typing import Any, Optional

from app.providers.polymarket import LeaderboardRecord
from .models import Trader

# Assumed average trade size when estimating trade counts from volume
AVG_TRADE_SIZE_USD = 100
VOLUME_PER_MARKET_USD = 5000
MAX_MARKETS_ACTIVE = 20
VERIFIED_FOLLOWERS = 1000
ROI_7D_SHARE = 0.3

WIN_RATE_FLOOR = 40.0
WIN_RATE_CEILING = 80.0
RISK_FLOOR = 20.0
RISK_CEILING = 80.0


def safe_float(value: Any, default: float = 0.0) -> float:
    """Parse a number, returning ``default`` for missing, unparsable or non-finite input."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _ratio(pnl: float, vol: float) -> float:
    return pnl / vol if vol > 0 else 0.0


def derive_roi(pnl: float, vol: float) -> float:
    """PnL as a percentage of traded volume, 0 when there is no volume."""
    return round(_ratio(pnl, vol) * 100, 2)


def derive_win_rate(pnl: float, vol: float, index: int, jitter: float = 0.0) -> float:
    """
    Estimate a win rate (percent) from PnL/volume and leaderboard position.

    Profitable accounts land in 55-75, losing accounts in 40-50, and the
    first ten rows of the leaderboard get a small bonus. The result is
    always within [40, 80].
    """
    ratio = _ratio(pnl, vol)

    win_rate = 50.0
    if pnl > 0 and ratio > 0:
        win_rate = min(75.0, 55 + ratio * 400)
    elif pnl < 0:
        win_rate = max(40.0, 50 + ratio * 50)

    if index < 5:
        win_rate = min(WIN_RATE_CEILING, win_rate + 2)
    elif index < 10:
        win_rate = min(75.0, win_rate + 1)

    return _clamp(win_rate + jitter, WIN_RATE_FLOOR, WIN_RATE_CEILING)


def derive_risk_score(pnl: float, vol: float) -> float:
    """Bigger books and bigger swings read as riskier; always within [20, 80]."""
    return _clamp(30 + vol / 10000 + abs(pnl) / 1000, RISK_FLOOR, RISK_CEILING)


def estimate_markets_active(vol: float) -> int:
    """Roughly one market per $5k of volume, between 1 and 20."""
    return int(_clamp(math.floor(vol / VOLUME_PER_MARKET_USD), 1, MAX_MARKETS_ACTIVE))


def estimate_total_trades(vol: float) -> int:
    return max(10, math.floor(vol / AVG_TRADE_SIZE_USD))


def format_address(address: Optional[str]) -> str:
    """Shorten an address to ``0x1234...abcd``; empty input gives an empty string."""
    if not address:
        return ""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


class WinRateJitter:
    """
    Optional cosmetic noise added to estimated win rates.

    Many leaderboard rows share the same PnL/volume bracket and would otherwise
    display identical win rates. Amplitude 0 (the default) disables it; a seed
    makes the sequence reproducible.
    """

    def __init__(self, amplitude: float = 0.0, seed: Optional[int] = None):
        self.amplitude = abs(amplitude)
        self._rng = random.Random(seed)

    @property
    def enabled(self) -> bool:
        return self.amplitude > 0

    def sample(self) -> float:
        if not self.enabled:
            return 0.0
        return self._rng.uniform(-self.amplitude, self.amplitude)


def leaderboard_record_to_trader(
    record: LeaderboardRecord,
    index: int,
    jitter: Optional[WinRateJitter] = None,
) -> Trader:
    """Build a dashboard trader from the ``index``-th (0-based) leaderboard row."""
    pnl = safe_float(record.pnl)
    vol = max(0.0, safe_float(record.vol))
    address = record.address

    roi = derive_roi(pnl, vol)
    noise = jitter.sample() if jitter else 0.0

    return Trader(
        id=address or f"trader-{index}",
        username=record.user_name or format_address(address) or f"Trader{index + 1}",
        avatar=record.profile_image,
        winRate=round(derive_win_rate(pnl, vol, index, noise), 1),
        roi7d=round(roi * ROI_7D_SHARE, 1),
        roi30d=round(roi, 1),
        riskScore=round(derive_risk_score(pnl, vol)),
        marketsActive=estimate_markets_active(vol),
        totalTrades=estimate_total_trades(vol),
        followers=VERIFIED_FOLLOWERS if record.verified_badge else None,
    )
