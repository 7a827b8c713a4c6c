"""
Trader Metrics Service

Turn raw leaderboard rows and account history into comparable trader metrics.
"""

from .models import Trader, TopTrader, UserPerformance
from .heuristics import (
    WinRateJitter,
    safe_float,
    derive_roi,
    derive_win_rate,
    derive_risk_score,
    estimate_markets_active,
    estimate_total_trades,
    format_address,
    leaderboard_record_to_trader,
)
from .history import (
    win_rate_from_fills,
    price_std_dev,
    risk_score_from_fills,
    roi_from_fills,
    markets_active_from_positions,
)
from .ranking import rank_by_win_rate_descending, with_copy_status
from .fallback import sample_traders, sample_top_traders
from .leaderboard import (
    TopTradersResult,
    TopTradersService,
    build_top_traders,
    get_top_traders_service,
)
from .tracker import PerformanceTracker, get_performance_tracker
from .feed import TopTradersFeed

__all__ = [
    # Models
    "Trader",
    "TopTrader",
    "UserPerformance",
    # Heuristics
    "WinRateJitter",
    "safe_float",
    "derive_roi",
    "derive_win_rate",
    "derive_risk_score",
    "estimate_markets_active",
    "estimate_total_trades",
    "format_address",
    "leaderboard_record_to_trader",
    # History
    "win_rate_from_fills",
    "price_std_dev",
    "risk_score_from_fills",
    "roi_from_fills",
    "markets_active_from_positions",
    # Ranking
    "rank_by_win_rate_descending",
    "with_copy_status",
    "sample_traders",
    "sample_top_traders",
    # Services
    "TopTradersResult",
    "TopTradersService",
    "build_top_traders",
    "get_top_traders_service",
    "PerformanceTracker",
    "get_performance_tracker",
    "TopTradersFeed",
]
