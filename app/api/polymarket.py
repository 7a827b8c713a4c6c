"""
Polymarket API Endpoints

Read-only proxy endpoints for the copy-trading dashboard: market discovery,
the ranked top-traders leaderboard and per-account performance.

Upstream outages never surface as errors: the response carries an ``error``
message, a fallback payload and ``fallback: true``. Only unexpected failures
return HTTP 500.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.config import settings
from app.providers.polymarket import (
    GammaClient,
    MarketFilter,
    UpstreamError,
    get_gamma_client,
)
from app.services.trader_metrics import (
    PerformanceTracker,
    TopTradersService,
    get_performance_tracker,
    get_top_traders_service,
)
from .errors import failure_body, require_param

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Polymarket"])


# =============================================================================
# Dependencies
# =============================================================================


def get_gamma() -> GammaClient:
    return get_gamma_client()


def get_top_traders() -> TopTradersService:
    return get_top_traders_service()


def get_tracker() -> PerformanceTracker:
    return get_performance_tracker()


# =============================================================================
# Markets
# =============================================================================


@router.get("/markets")
async def list_markets(
    active: Optional[bool] = Query(None, description="Only active markets"),
    closed: Optional[bool] = Query(None, description="Only closed markets"),
    limit: int = Query(50, ge=1),
    offset: int = Query(0, ge=0),
    category: Optional[str] = Query(None),
    gamma: GammaClient = Depends(get_gamma),
) -> Any:
    """List Polymarket markets."""
    market_filter = MarketFilter(
        active=active,
        closed=closed,
        limit=limit,
        offset=offset,
        category=category or None,
    )
    try:
        markets = await gamma.fetch_markets(market_filter)
        return {"markets": [m.model_dump(by_alias=True) for m in markets]}
    except UpstreamError as e:
        logger.warning(f"Markets unavailable: {e}")
        return {**failure_body("Failed to fetch markets", e, markets=[]), "fallback": True}
    except Exception as e:
        logger.exception("Unexpected error fetching markets")
        return JSONResponse(status_code=500, content=failure_body("Failed to fetch markets", e, markets=[]))


# =============================================================================
# Top Traders
# =============================================================================


@router.get("/top-traders")
async def list_top_traders(
    limit: int = Query(settings.top_traders_default_limit, ge=1),
    service: TopTradersService = Depends(get_top_traders),
) -> Any:
    """Top traders ranked by estimated win rate (rank 1 = highest)."""
    try:
        result = await service.get_top_traders(limit)
    except Exception as e:
        logger.exception("Unexpected error fetching top traders")
        return JSONResponse(
            status_code=500,
            content=failure_body("Failed to fetch top traders from Polymarket", e, traders=[]),
        )

    body: Dict[str, Any] = {
        "traders": [t.model_dump(by_alias=True) for t in result.traders],
        "fallback": result.fallback,
    }
    if result.error:
        body["error"] = "Failed to fetch top traders from Polymarket"
        body["message"] = result.error
    return body


# =============================================================================
# User Performance
# =============================================================================


@router.get("/user-performance")
async def user_performance(
    address: Optional[str] = Query(None, description="Wallet address"),
    tracker: PerformanceTracker = Depends(get_tracker),
) -> Any:
    """Performance metrics for one account, derived from its fills and positions."""
    address = require_param(address, "address", "User address is required")
    try:
        performance = await tracker.get_user_performance(address)
        return {"performance": performance.model_dump(by_alias=True)}
    except Exception as e:
        logger.exception(f"Unexpected error computing performance for {address}")
        return JSONResponse(
            status_code=500,
            content=failure_body("Failed to fetch user performance", e, performance=None),
        )
