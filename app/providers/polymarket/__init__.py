"""
Polymarket Providers

Read-only clients for Polymarket's public services.
Uses Gamma API for market discovery, Data API for the trader leaderboard,
and the activity/positions subgraphs for per-account fills and positions.
"""

from .errors import UpstreamError
from .models import (
    Market,
    MarketFilter,
    LeaderboardRecord,
    Fill,
    SubgraphPosition,
    PageResult,
)
from .gamma import GammaClient, get_gamma_client
from .leaderboard import LeaderboardClient, get_leaderboard_client, merge_pages
from .subgraph import SubgraphClient, get_subgraph_client

__all__ = [
    # Errors
    "UpstreamError",
    # Models
    "Market",
    "MarketFilter",
    "LeaderboardRecord",
    "Fill",
    "SubgraphPosition",
    "PageResult",
    # Clients
    "GammaClient",
    "get_gamma_client",
    "LeaderboardClient",
    "get_leaderboard_client",
    "merge_pages",
    "SubgraphClient",
    "get_subgraph_client",
]
