"""
Top Traders Service

Fetch the Polymarket leaderboard, derive dashboard metrics for each row and
rank the result by estimated win rate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from app.cache import TTLCache, cache as default_cache
from app.config import settings
from app.providers.polymarket import (
    LeaderboardClient,
    LeaderboardRecord,
    UpstreamError,
    get_leaderboard_client,
)
from .fallback import sample_top_traders
from .heuristics import WinRateJitter, leaderboard_record_to_trader
from .models import TopTrader
from .ranking import rank_by_win_rate_descending

logger = logging.getLogger(__name__)


@dataclass
class TopTradersResult:
    """Ranked traders plus whether they came from a fallback source."""

    traders: List[TopTrader] = field(default_factory=list)
    fallback: bool = False
    error: Optional[str] = None


def build_top_traders(
    records: List[LeaderboardRecord],
    limit: int,
    jitter: Optional[WinRateJitter] = None,
) -> List[TopTrader]:
    """Derive metrics for leaderboard rows (in upstream order), rank by win rate, keep the top ``limit``."""
    traders = [
        leaderboard_record_to_trader(record, index, jitter)
        for index, record in enumerate(records)
    ]
    return rank_by_win_rate_descending(traders)[:max(limit, 0)]


class TopTradersService:
    """
    Top traders by estimated win rate.

    Successful results are cached per limit. When the leaderboard cannot be
    read, the last cached result for that limit is served, or the built-in
    sample traders when nothing is cached.
    """

    def __init__(
        self,
        client: Optional[LeaderboardClient] = None,
        result_cache: Optional[TTLCache] = None,
        jitter: Optional[WinRateJitter] = None,
    ):
        self.client = client or get_leaderboard_client()
        self.cache = result_cache if result_cache is not None else default_cache
        self.jitter = jitter or WinRateJitter(settings.win_rate_jitter, settings.win_rate_jitter_seed)

    async def fetch_top_traders(self, limit: int) -> List[TopTrader]:
        """
        Fetch and rank traders straight from the leaderboard.

        Raises:
            UpstreamError: If the first leaderboard page cannot be read
        """
        records = await self.client.fetch_leaderboard(limit)
        traders = build_top_traders(records, limit, self.jitter)
        logger.info(f"Ranked {len(traders)} traders from {len(records)} leaderboard rows")
        return traders

    async def get_top_traders(self, limit: Optional[int] = None) -> TopTradersResult:
        """Get top traders, degrading to cached or sample data on upstream failure."""
        limit = limit or settings.top_traders_default_limit
        key = self._cache_key(limit)

        try:
            traders = await self.fetch_top_traders(limit)
        except UpstreamError as e:
            logger.warning(f"Leaderboard unavailable, serving fallback traders: {e}")
            cached = await self.cache.get(key)
            traders = cached if cached is not None else sample_top_traders(limit)
            return TopTradersResult(traders=traders, fallback=True, error=str(e))

        await self.cache.set(key, traders)
        return TopTradersResult(traders=traders)

    @staticmethod
    def _cache_key(limit: int) -> str:
        return f"top_traders:{limit}"


# Singleton instance
_service_instance: Optional[TopTradersService] = None


def get_top_traders_service() -> TopTradersService:
    """Get singleton top traders service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = TopTradersService()
    return _service_instance
