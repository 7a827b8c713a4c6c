"""
Polymarket Data Models

Raw record shapes returned by the Gamma API, the Data API leaderboard and the
activity/positions subgraphs. Numeric fields arrive as strings upstream and are
kept as-is here; the metrics layer is responsible for parsing them.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


class MarketFilter(BaseModel):
    """Query filter for Gamma market discovery. ``None`` fields are not sent."""

    active: Optional[bool] = None
    closed: Optional[bool] = None
    archived: Optional[bool] = None
    limit: Optional[int] = Field(None, ge=0)
    offset: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None

    def to_query_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for name, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, bool):
                params[name] = str(value).lower()
            elif value != "":
                params[name] = str(value)
        return params


class Market(BaseModel):
    """A Polymarket prediction market as served by the Gamma API."""

    class Config:
        populate_by_name = True
        extra = "ignore"

    id: str = Field("", description="Gamma market ID")
    condition_id: str = Field("", alias="conditionId")
    question: str = Field("", description="Market question")
    slug: str = Field("")
    description: str = Field("")
    image: Optional[str] = None
    icon: Optional[str] = None

    active: bool = True
    closed: bool = False
    archived: bool = False

    # Gamma returns these as decimal strings
    liquidity: str = Field("0")
    volume: str = Field("0")

    end_date: Optional[str] = Field(None, alias="endDate")
    start_date: Optional[str] = Field(None, alias="startDate")

    outcomes: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    tags: List[Any] = Field(default_factory=list)

    @field_validator("id", "condition_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("liquidity", "volume", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> str:
        return "0" if value is None else str(value)

    @field_validator("outcomes", mode="before")
    @classmethod
    def _decode_outcomes(cls, value: Any) -> List[str]:
        # Gamma encodes list fields as JSON strings on some endpoints
        if value is None:
            return []
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except ValueError:
                return [value]
            return [str(v) for v in decoded] if isinstance(decoded, list) else [str(decoded)]
        return [str(v) for v in value]

    @field_validator("tags", mode="before")
    @classmethod
    def _default_tags(cls, value: Any) -> List[Any]:
        return value or []


class LeaderboardRecord(BaseModel):
    """One row of the Data API ``/v1/leaderboard`` response."""

    class Config:
        populate_by_name = True
        extra = "ignore"

    proxy_wallet: Optional[str] = Field(None, alias="proxyWallet")
    user: Optional[str] = None
    user_name: Optional[str] = Field(None, alias="userName")
    profile_image: Optional[str] = Field(None, alias="profileImage")
    verified_badge: bool = Field(False, alias="verifiedBadge")
    rank: Optional[Union[int, str]] = None
    pnl: Optional[Union[float, str]] = None
    vol: Optional[Union[float, str]] = None

    @field_validator("verified_badge", mode="before")
    @classmethod
    def _badge(cls, value: Any) -> bool:
        return bool(value)

    @property
    def address(self) -> str:
        return self.proxy_wallet or self.user or ""


class Fill(BaseModel):
    """An executed trade from the activity subgraph."""

    class Config:
        extra = "ignore"

    id: str = ""
    user: str = ""
    market: str = ""
    outcome: str = ""
    price: str = "0"
    amount: str = "0"
    timestamp: str = "0"

    @field_validator("price", "amount", "timestamp", mode="before")
    @classmethod
    def _as_string(cls, value: Any) -> str:
        return "0" if value is None else str(value)


class SubgraphPosition(BaseModel):
    """Open exposure to one market outcome from the positions subgraph."""

    class Config:
        populate_by_name = True
        extra = "ignore"

    user: str = ""
    market: str = ""
    outcome: str = ""
    size: str = "0"
    average_price: str = Field("0", alias="averagePrice")

    @field_validator("size", "average_price", mode="before")
    @classmethod
    def _as_string(cls, value: Any) -> str:
        return "0" if value is None else str(value)


class PageResult(BaseModel):
    """Outcome of one leaderboard page request: records, or the error that replaced them."""

    offset: int
    records: List[LeaderboardRecord] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
