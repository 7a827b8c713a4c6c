"""
Sample traders served when the leaderboard is unreachable and nothing is cached.
"""

from __future__ import annotations

from typing import List

from .models import Trader, TopTrader
from .ranking import rank_by_win_rate_descending

_SAMPLE_TRADERS = [
    # id, username, win rate, roi 7d, roi 30d, risk
    ("trader-1", "KalshiPro", 68.5, 12.3, 35.2, 28),
    ("trader-2", "MarketWizard", 72.1, 8.7, 28.9, 35),
    ("trader-3", "TradeMaster", 65.3, 15.2, 42.1, 22),
    ("trader-4", "EliteTrader", 70.8, 6.4, 31.5, 32),
    ("trader-5", "ProfitSeeker", 58.2, 9.8, 25.7, 45),
]


def sample_traders() -> List[Trader]:
    traders = []
    for i, (trader_id, username, win_rate, roi_7d, roi_30d, risk) in enumerate(_SAMPLE_TRADERS):
        traders.append(Trader(
            id=trader_id,
            username=username,
            winRate=win_rate,
            roi7d=roi_7d,
            roi30d=roi_30d,
            riskScore=risk,
            marketsActive=8 + i * 3,
            totalTrades=150 + i * 60,
        ))
    return traders


def sample_top_traders(limit: int) -> List[TopTrader]:
    """Sample traders ranked by win rate and cut to ``limit``."""
    return rank_by_win_rate_descending(sample_traders())[:max(limit, 0)]
