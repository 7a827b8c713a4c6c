"""
Polymarket Subgraph Client

GraphQL queries against the public activity (fills) and positions subgraphs.
These calls enrich the dashboard on a best-effort basis: every failure is
logged and turned into an empty result.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..base import Provider
from ...config import settings
from .errors import UpstreamError
from .models import Fill, SubgraphPosition

logger = logging.getLogger(__name__)


USER_FILLS_QUERY = """
query GetUserTrades($user: String!, $limit: Int!) {
  fills(
    where: { user: $user }
    orderBy: timestamp
    orderDirection: desc
    first: $limit
  ) {
    id
    user
    market
    outcome
    price
    amount
    timestamp
  }
}
"""

USER_POSITIONS_QUERY = """
query GetUserPositions($user: String!) {
  positions(
    where: { user: $user }
  ) {
    user
    market
    outcome
    size
    averagePrice
  }
}
"""


class SubgraphClient(Provider):
    """Client for the activity and positions subgraphs."""

    name = "subgraph"

    def __init__(
        self,
        activity_url: Optional[str] = None,
        positions_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.activity_url = activity_url or settings.activity_subgraph_url
        self.positions_url = positions_url or settings.positions_subgraph_url
        self.timeout_s = timeout or settings.request_timeout_seconds
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout_s,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None

    async def ready(self) -> bool:
        return bool(self.activity_url and self.positions_url)

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self.query(self.positions_url, "{ _meta { block { number } } }", {})
            return {"status": "healthy"}
        except UpstreamError as e:
            return {"status": "unhealthy", "error": str(e)}

    async def fetch_user_trades(self, address: str, limit: int = 1000) -> List[Fill]:
        """
        Get an account's most recent fills, newest first.

        Args:
            address: Account address (lower-cased before querying)
            limit: Max fills to return

        Returns:
            List of fills, empty on any failure
        """
        try:
            data = await self.query(
                self.activity_url,
                USER_FILLS_QUERY,
                {"user": address.lower(), "limit": limit},
            )
        except UpstreamError as e:
            logger.error(f"Failed to fetch fills for {address}: {e}")
            return []
        return _parse_list(data.get("fills"), Fill)

    async def fetch_user_positions(self, address: str) -> List[SubgraphPosition]:
        """Get an account's open positions, empty on any failure."""
        try:
            data = await self.query(
                self.positions_url,
                USER_POSITIONS_QUERY,
                {"user": address.lower()},
            )
        except UpstreamError as e:
            logger.error(f"Failed to fetch positions for {address}: {e}")
            return []
        return _parse_list(data.get("positions"), SubgraphPosition)

    async def query(self, url: str, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute a GraphQL query and return its ``data`` object.

        Raises:
            UpstreamError: On transport failure, non-2xx, or a GraphQL ``errors`` payload
        """
        client = await self._get_client()
        try:
            response = await client.post(url, json={"query": query, "variables": variables})
        except httpx.HTTPError as e:
            raise UpstreamError(f"request failed: {e}", provider=self.name) from e

        if response.is_error:
            raise UpstreamError(
                f"Subgraph error: {response.reason_phrase or response.status_code}",
                status_code=response.status_code,
                provider=self.name,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError("invalid JSON body", status_code=response.status_code, provider=self.name) from e

        if not isinstance(body, dict):
            raise UpstreamError("unexpected response shape", provider=self.name)
        errors = body.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise UpstreamError(f"GraphQL error: {message}", provider=self.name)

        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise UpstreamError("unexpected data shape", provider=self.name)
        return data


def _parse_list(items: Any, model):
    if not isinstance(items, list):
        return []
    parsed = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValueError as e:
            logger.warning(f"Failed to parse {model.__name__}: {e}")
    return parsed


# Singleton instance
_client_instance: Optional[SubgraphClient] = None


def get_subgraph_client() -> SubgraphClient:
    """Get singleton subgraph client instance."""
    global _client_instance
    if _client_instance is None:
        _client_instance = SubgraphClient()
    return _client_instance
