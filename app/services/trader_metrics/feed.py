"""
Top Traders Feed

Client-side leaderboard state. Each fetch is tagged with the order it was
issued in; a response that arrives after a newer request was issued is
dropped, so the displayed list never regresses to an older request.
"""

from __future__ import annotations

import itertools
import logging
from typing import Awaitable, Callable, List, Optional

from app.config import settings
from .leaderboard import TopTradersResult
from .models import TopTrader

logger = logging.getLogger(__name__)

FetchTopTraders = Callable[[int], Awaitable[TopTradersResult]]


class TopTradersFeed:
    """Holds the currently displayed leaderboard and applies fetch results in issuance order."""

    def __init__(
        self,
        fetch: FetchTopTraders,
        limit: Optional[int] = None,
        page_size: Optional[int] = None,
    ):
        self._fetch = fetch
        self.limit = limit or settings.top_traders_default_limit
        self.page_size = page_size or settings.leaderboard_page_size

        self.traders: List[TopTrader] = []
        self.fallback = False
        self.error: Optional[str] = None

        self._issued = itertools.count(1)
        self._latest = 0
        self._applied = 0

    @property
    def loading(self) -> bool:
        return self._applied < self._latest

    async def refresh(self, limit: Optional[int] = None) -> bool:
        """
        Fetch the leaderboard for ``limit`` (default: the current limit).

        A failed fetch keeps the displayed traders and limit and records the
        error with ``fallback`` set, unless a newer request has been issued meanwhile.

        Returns:
            True if the response was applied, False if a newer request superseded it
        """
        limit = limit or self.limit
        seq = next(self._issued)
        self._latest = seq

        try:
            result = await self._fetch(limit)
        except Exception as e:
            logger.exception(f"Leaderboard refresh #{seq} failed")
            result = TopTradersResult(traders=self.traders, fallback=True, error=str(e) or e.__class__.__name__)
            limit = self.limit

        if seq != self._latest:
            logger.debug(f"Discarding superseded leaderboard response #{seq} (latest #{self._latest})")
            return False
        self.limit = limit
        self.traders = list(result.traders)
        self.fallback = result.fallback
        self.error = result.error
        self._applied = seq
        return True

    async def load_more(self) -> bool:
        """Extend the list by one page."""
        return await self.refresh(self.limit + self.page_size)
