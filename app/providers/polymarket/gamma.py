"""
Polymarket Gamma API Client

Market discovery and metadata (gamma-api.polymarket.com).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..base import Provider
from ...config import settings
from .errors import UpstreamError
from .models import Market, MarketFilter

logger = logging.getLogger(__name__)


def _unwrap_results(data: Any) -> List[Any]:
    """Gamma answers either with a bare list or ``{"results": [...]}``."""
    if isinstance(data, dict):
        data = data.get("results") or []
    return data if isinstance(data, list) else []


class GammaClient(Provider):
    """Client for Polymarket's market discovery API."""

    name = "gamma"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.gamma_api_url).rstrip("/")
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
        try:
            await self.fetch_markets(MarketFilter(limit=1))
            return {"status": "healthy", "base_url": self.base_url}
        except UpstreamError as e:
            return {"status": "unhealthy", "base_url": self.base_url, "error": str(e)}

    async def fetch_markets(self, market_filter: Optional[MarketFilter] = None) -> List[Market]:
        """
        Get markets matching a filter.

        Args:
            market_filter: Fields left as ``None`` are omitted from the query

        Returns:
            List of markets (unparseable rows are skipped)

        Raises:
            UpstreamError: On transport failure or a non-2xx response
        """
        params = (market_filter or MarketFilter()).to_query_params()
        data = await self._get_json("/markets", params)

        markets = []
        for item in _unwrap_results(data):
            try:
                markets.append(Market.model_validate(item))
            except ValueError as e:
                logger.warning(f"Failed to parse market: {e}")
        return markets

    async def get_market(self, market_id: str) -> Optional[Market]:
        """Get a single market by ID or slug; ``None`` when it does not exist or cannot be read."""
        try:
            data = await self._get_json(f"/markets/{market_id}")
        except UpstreamError as e:
            if e.status_code != 404:
                logger.error(f"Failed to get market {market_id}: {e}")
            return None
        try:
            return Market.model_validate(data)
        except ValueError as e:
            logger.warning(f"Failed to parse market {market_id}: {e}")
            return None

    async def get_categories(self) -> List[str]:
        """Get market category names (best effort)."""
        try:
            data = await self._get_json("/categories")
        except UpstreamError as e:
            logger.error(f"Failed to get categories: {e}")
            return []

        names = []
        for item in _unwrap_results(data):
            if isinstance(item, dict):
                name = item.get("name") or item.get("label")
                if name:
                    names.append(str(name))
            elif item:
                names.append(str(item))
        return names

    async def get_events(self, limit: Optional[int] = None, offset: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get events (collections of markets) as raw records (best effort)."""
        params = {}
        if limit:
            params["limit"] = str(limit)
        if offset:
            params["offset"] = str(offset)
        try:
            data = await self._get_json("/events", params)
        except UpstreamError as e:
            logger.error(f"Failed to get events: {e}")
            return []
        return [item for item in _unwrap_results(data) if isinstance(item, dict)]

    async def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(f"{self.base_url}{path}", params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"request failed: {e}", provider=self.name) from e

        if response.is_error:
            raise UpstreamError(
                f"Gamma API error: {response.reason_phrase or response.status_code}",
                status_code=response.status_code,
                provider=self.name,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("invalid JSON body", status_code=response.status_code, provider=self.name) from e


# Singleton instance
_client_instance: Optional[GammaClient] = None


def get_gamma_client() -> GammaClient:
    """Get singleton Gamma client instance."""
    global _client_instance
    if _client_instance is None:
        _client_instance = GammaClient()
    return _client_instance
