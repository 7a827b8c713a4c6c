"""
Account Performance Tracker

Summarise a single account's trading from its subgraph fills and positions.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from app.config import settings
from app.providers.polymarket import SubgraphClient, get_subgraph_client
from .history import (
    markets_active_from_positions,
    risk_score_from_fills,
    roi_from_fills,
    win_rate_from_fills,
)
from .models import UserPerformance

logger = logging.getLogger(__name__)


class PerformanceTracker:
    """Builds ``UserPerformance`` summaries for wallet addresses."""

    def __init__(
        self,
        client: Optional[SubgraphClient] = None,
        trades_limit: Optional[int] = None,
    ):
        self.client = client or get_subgraph_client()
        self.trades_limit = trades_limit or settings.user_trades_limit

    async def get_user_performance(
        self,
        address: str,
        now: Optional[datetime] = None,
    ) -> UserPerformance:
        """
        Get performance metrics for an account.

        Fills and positions are fetched concurrently. Either source failing
        degrades to an empty list, so this always returns a result.

        Args:
            address: Wallet address (any case)
            now: Reference time for the 7d/30d ROI windows

        Returns:
            Performance summary
        """
        fills, positions = await asyncio.gather(
            self.client.fetch_user_trades(address, self.trades_limit),
            self.client.fetch_user_positions(address),
        )
        now = now or datetime.now(timezone.utc)

        logger.info(f"Computing performance for {address}: {len(fills)} fills, {len(positions)} positions")

        return UserPerformance(
            totalTrades=len(fills),
            winRate=win_rate_from_fills(fills),
            roi7d=roi_from_fills(fills, 7, now),
            roi30d=roi_from_fills(fills, 30, now),
            riskScore=risk_score_from_fills(fills),
            marketsActive=markets_active_from_positions(positions),
        )


# Singleton instance
_tracker_instance: Optional[PerformanceTracker] = None


def get_performance_tracker() -> PerformanceTracker:
    """Get singleton performance tracker instance."""
    global _tracker_instance
    if _tracker_instance is None:
        _tracker_instance = PerformanceTracker()
    return _tracker_instance
