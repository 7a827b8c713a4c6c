"""
Copy Trading Models

Copy configuration, copied-trader positions and portfolio summaries held by
the client state store.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from app.services.trader_metrics import Trader

MAX_SPARKLINE_POINTS = 11


class AllocationType(str, Enum):
    """How capital is assigned to a copied trader."""

    FIXED = "fixed"  # Fixed USD amount
    PERCENTAGE = "percentage"  # % of current portfolio value


class FixedAllocation(BaseModel):
    allocation_type: Literal["fixed"] = Field("fixed", alias="allocationType")
    amount: Decimal = Field(..., gt=0)

    class Config:
        populate_by_name = True


class PercentageAllocation(BaseModel):
    allocation_type: Literal["percentage"] = Field("percentage", alias="allocationType")
    percentage: Decimal = Field(..., ge=0, le=100)

    class Config:
        populate_by_name = True


Allocation = Annotated[
    Union[FixedAllocation, PercentageAllocation],
    Field(discriminator="allocation_type"),
]


class CopyTradingConfig(BaseModel):
    """A request to start copying a trader."""

    trader_id: str = Field(..., alias="traderId")
    allocation: Allocation
    max_drawdown: Optional[Decimal] = Field(None, alias="maxDrawdown", ge=0, le=100)
    stop_copying: bool = Field(False, alias="stopCopying")

    class Config:
        populate_by_name = True

    @classmethod
    def from_form(cls, data: dict[str, Any]) -> "CopyTradingConfig":
        """
        Build a config from the flat form shape
        (``allocationType`` plus exactly one of ``amount`` / ``percentage``).

        Raises:
            ValueError: If the type is unknown or the fields do not match it
        """
        allocation_type = AllocationType(data.get("allocationType", AllocationType.FIXED))
        amount = data.get("amount")
        percentage = data.get("percentage")

        if allocation_type == AllocationType.FIXED:
            if amount is None or percentage is not None:
                raise ValueError("fixed allocation requires 'amount' and no 'percentage'")
            allocation: Any = FixedAllocation(amount=amount)
        else:
            if percentage is None or amount is not None:
                raise ValueError("percentage allocation requires 'percentage' and no 'amount'")
            allocation = PercentageAllocation(percentage=percentage)

        return cls(
            traderId=data.get("traderId"),
            allocation=allocation,
            maxDrawdown=data.get("maxDrawdown"),
            stopCopying=bool(data.get("stopCopying", False)),
        )


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"


class SparklinePoint(BaseModel):
    value: Decimal


class CopiedTrader(Trader):
    """A trader being copied, valued since the moment of copy."""

    capital_allocated: Decimal = Field(..., alias="capitalAllocated", ge=0)
    current_value: Decimal = Field(..., alias="currentValue", ge=0)
    returns: Decimal = Decimal("0")
    returns_percent: float = Field(0.0, alias="returnsPercent")
    trend: Trend = Trend.UP
    chart_data: List[SparklinePoint] = Field(default_factory=list, alias="chartData")
    copied_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="copiedAt")
    is_active: bool = Field(True, alias="isActive")

    # Deactivated once the drawdown from peak reaches this percentage
    max_drawdown: Optional[Decimal] = Field(None, alias="maxDrawdown")
    peak_value: Decimal = Field(Decimal("0"), alias="peakValue")

    @field_validator("chart_data")
    @classmethod
    def _trim_sparkline(cls, points: List[SparklinePoint]) -> List[SparklinePoint]:
        return points[-MAX_SPARKLINE_POINTS:]

    @model_validator(mode="after")
    def _peak_at_least_capital(self) -> "CopiedTrader":
        floor = max(self.capital_allocated, self.current_value)
        if self.peak_value < floor:
            self.peak_value = floor
        return self

    @property
    def drawdown_percent(self) -> Decimal:
        """Decline from the highest value seen, as a percentage of that peak."""
        if self.peak_value <= 0:
            return Decimal("0")
        return (self.peak_value - self.current_value) / self.peak_value * 100


class PortfolioMetrics(BaseModel):
    """Totals over the copied set. Money is rounded to cents, ROI to one decimal."""

    total_portfolio_value: Decimal = Field(Decimal("0"), alias="totalPortfolioValue")
    total_copied_capital: Decimal = Field(Decimal("0"), alias="totalCopiedCapital")
    lifetime_copy_pnl: Decimal = Field(Decimal("0"), alias="lifetimeCopyPnL")
    roi_percent: float = Field(0.0, alias="roiPercent")
    pnl_24h: Decimal = Field(Decimal("0"), alias="pnl24h")

    class Config:
        populate_by_name = True


class TimeRange(str, Enum):
    """Performance chart window."""

    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    ONE_YEAR = "1Y"

    @property
    def days(self) -> int:
        return {"1D": 1, "1W": 7, "1M": 30, "3M": 90, "1Y": 365}[self.value]


class PerformanceDataPoint(BaseModel):
    date: str
    value: Decimal
    pnl: Decimal
