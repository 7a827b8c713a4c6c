"""
Polymarket Data API Leaderboard Client

The ``/v1/leaderboard`` endpoint caps each response at a fixed page size, so a
request for N traders fans out into ``ceil(N / page_size)`` concurrent page
requests that are joined back together in request order.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from ..base import Provider
from ...config import settings
from .errors import UpstreamError
from .models import LeaderboardRecord, PageResult

logger = logging.getLogger(__name__)


class LeaderboardClient(Provider):
    """Client for the paged Polymarket trader leaderboard."""

    name = "leaderboard"

    def __init__(
        self,
        base_url: Optional[str] = None,
        page_size: Optional[int] = None,
        retries: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.data_api_url).rstrip("/")
        self.page_size = page_size or settings.leaderboard_page_size
        self.retries = settings.leaderboard_retry_attempts if retries is None else retries
        self.timeout_s = timeout or settings.request_timeout_seconds
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout_s,
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None

    async def ready(self) -> bool:
        return bool(self.base_url)

    async def health_check(self) -> Dict[str, Any]:
        page = await self.fetch_page(offset=0, limit=1)
        if page.ok:
            return {"status": "healthy", "base_url": self.base_url}
        return {"status": "unhealthy", "base_url": self.base_url, "error": page.error}

    def page_offsets(self, limit: int) -> List[int]:
        """Offsets of the page requests needed to cover ``limit`` rows."""
        if limit <= 0:
            return []
        pages = math.ceil(limit / self.page_size)
        return [i * self.page_size for i in range(pages)]

    async def fetch_leaderboard(self, limit: int) -> List[LeaderboardRecord]:
        """
        Fetch up to ``limit`` leaderboard rows.

        Pages are requested concurrently and concatenated in request order.
        A failed secondary page contributes no rows.

        Raises:
            UpstreamError: If the first page fails
        """
        offsets = self.page_offsets(limit)
        if not offsets:
            return []

        pages = await asyncio.gather(*[
            self.fetch_page(offset=offset, limit=min(self.page_size, limit - offset))
            for offset in offsets
        ])
        return merge_pages(pages)

    async def fetch_page(self, offset: int, limit: int) -> PageResult:
        """Fetch one page, retrying once (by default) before giving up."""
        params = {
            "category": settings.leaderboard_category,
            "timePeriod": settings.leaderboard_time_period,
            "orderBy": settings.leaderboard_order_by,
            "limit": str(limit),
            "offset": str(offset),
        }

        error = "no attempt made"
        for attempt in range(self.retries + 1):
            try:
                rows = await self._request(params)
                return PageResult(offset=offset, records=_parse_rows(rows))
            except UpstreamError as e:
                error = str(e)
                logger.warning(
                    f"Leaderboard page offset={offset} attempt {attempt + 1}/{self.retries + 1} failed: {e}"
                )
        return PageResult(offset=offset, error=error)

    async def _request(self, params: Dict[str, str]) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(f"{self.base_url}/v1/leaderboard", params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"request failed: {e}", provider=self.name) from e

        if response.is_error:
            raise UpstreamError(
                f"Polymarket API error: {response.reason_phrase or response.status_code}",
                status_code=response.status_code,
                provider=self.name,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("invalid JSON body", status_code=response.status_code, provider=self.name) from e


def merge_pages(pages: List[PageResult]) -> List[LeaderboardRecord]:
    """Concatenate successful pages in request order; the first page must succeed."""
    if not pages:
        return []

    first = min(pages, key=lambda p: p.offset)
    if not first.ok:
        raise UpstreamError(first.error or "first leaderboard page failed", provider=LeaderboardClient.name)

    records: List[LeaderboardRecord] = []
    for page in sorted(pages, key=lambda p: p.offset):
        if page.ok:
            records.extend(page.records)
        else:
            logger.warning(f"Dropping leaderboard page offset={page.offset}: {page.error}")
    return records


def _parse_rows(data: Any) -> List[LeaderboardRecord]:
    rows = data if isinstance(data, list) else []
    records = []
    for row in rows:
        try:
            records.append(LeaderboardRecord.model_validate(row))
        except ValueError as e:
            logger.warning(f"Failed to parse leaderboard row: {e}")
    return records


# Singleton instance
_client_instance: Optional[LeaderboardClient] = None


def get_leaderboard_client() -> LeaderboardClient:
    """Get singleton leaderboard client instance."""
    global _client_instance
    if _client_instance is None:
        _client_instance = LeaderboardClient()
    return _client_instance
