"""
Trader Metrics Models

Display-ready trader summaries derived from leaderboard rows and trade history.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


def _finite(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


class Trader(BaseModel):
    """A trader as shown on the dashboard."""

    id: str
    username: str
    avatar: Optional[str] = None

    # Percentages
    win_rate: float = Field(50.0, alias="winRate")
    roi_7d: float = Field(0.0, alias="roi7d")
    roi_30d: float = Field(0.0, alias="roi30d")

    # 0 (safe) - 100 (risky)
    risk_score: float = Field(50.0, alias="riskScore")

    markets_active: int = Field(0, alias="marketsActive", ge=0)
    total_trades: int = Field(0, alias="totalTrades", ge=0)
    followers: Optional[int] = None

    class Config:
        populate_by_name = True

    @field_validator("win_rate", mode="before")
    @classmethod
    def _clamp_win_rate(cls, value: Any) -> float:
        return min(100.0, max(0.0, _finite(value, 50.0)))

    @field_validator("risk_score", mode="before")
    @classmethod
    def _clamp_risk(cls, value: Any) -> float:
        return min(100.0, max(0.0, _finite(value, 50.0)))

    @field_validator("roi_7d", "roi_30d", mode="before")
    @classmethod
    def _finite_roi(cls, value: Any) -> float:
        return _finite(value)


class TopTrader(Trader):
    """A leaderboard entry with its dense 1-based rank."""

    rank: int = Field(..., ge=1)
    is_copied: bool = Field(False, alias="isCopied")


class UserPerformance(BaseModel):
    """Performance summary for a single account, derived from its fills and positions."""

    total_trades: int = Field(0, alias="totalTrades")
    win_rate: float = Field(0.0, alias="winRate")
    roi_7d: float = Field(0.0, alias="roi7d")
    roi_30d: float = Field(0.0, alias="roi30d")
    risk_score: float = Field(50.0, alias="riskScore")
    markets_active: int = Field(0, alias="marketsActive")

    class Config:
        populate_by_name = True

    @classmethod
    def empty(cls) -> "UserPerformance":
        """Neutral result used when an account's history cannot be read."""
        return cls()
