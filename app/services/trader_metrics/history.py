"""
Trade History Metrics

Per-account metrics computed from subgraph fills and positions. Fills carry no
resolution data, so outcomes are approximated: a fill bought above 0.5 is
treated as a winning position paying 1 per share.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from app.providers.polymarket import Fill, SubgraphPosition
from .heuristics import safe_float

WIN_PRICE_THRESHOLD = 0.5


def _is_win(fill: Fill) -> bool:
    return safe_float(fill.price) > WIN_PRICE_THRESHOLD


def win_rate_from_fills(fills: Sequence[Fill]) -> float:
    """Percentage of fills priced above 0.5; 0 with no fills."""
    if not fills:
        return 0.0
    wins = sum(1 for fill in fills if _is_win(fill))
    return wins / len(fills) * 100


def price_std_dev(fills: Sequence[Fill]) -> float:
    """Population standard deviation of fill prices; 0 with fewer than two fills."""
    if len(fills) < 2:
        return 0.0
    prices = [safe_float(fill.price) for fill in fills]
    mean = sum(prices) / len(prices)
    variance = sum((p - mean) ** 2 for p in prices) / len(prices)
    return math.sqrt(variance)


def risk_score_from_fills(fills: Sequence[Fill]) -> int:
    """
    Score 0-100 built from three capped components:
    trade frequency (up to 30), average size (up to 30) and price volatility (up to 40).
    Returns 50 with no fills.
    """
    if not fills:
        return 50

    avg_amount = sum(safe_float(fill.amount) for fill in fills) / len(fills)

    frequency_risk = min(len(fills) / 10, 1) * 30
    size_risk = min(max(avg_amount, 0) / 1000, 1) * 30
    volatility_risk = min(price_std_dev(fills) * 10, 1) * 40

    return round(frequency_risk + size_risk + volatility_risk)


def fills_since(fills: Iterable[Fill], cutoff: datetime) -> List[Fill]:
    """Fills strictly newer than ``cutoff``."""
    threshold = cutoff.timestamp()
    return [fill for fill in fills if safe_float(fill.timestamp) > threshold]


def roi_from_fills(
    fills: Sequence[Fill],
    window_days: int,
    now: Optional[datetime] = None,
) -> float:
    """
    ROI (percent, 1 decimal) over the last ``window_days`` days.

    Cost is ``price * amount`` per fill; payout is ``amount`` for fills counted
    as wins and nothing otherwise. Returns 0 when the window holds no cost.
    """
    now = now or datetime.now(timezone.utc)
    recent = fills_since(fills, now - timedelta(days=window_days))

    cost = 0.0
    payout = 0.0
    for fill in recent:
        amount = max(safe_float(fill.amount), 0.0)
        cost += safe_float(fill.price) * amount
        if _is_win(fill):
            payout += amount

    if cost <= 0:
        return 0.0
    return round((payout - cost) / cost * 100, 1)


def markets_active_from_positions(positions: Sequence[SubgraphPosition]) -> int:
    """Number of distinct markets the account holds positions in."""
    return len({p.market for p in positions if p.market})
