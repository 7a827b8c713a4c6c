"""
Copy Trading Module

Client-side state for copying Polymarket traders: configuration, valuation
of copied positions and portfolio totals.
"""

from .models import (
    AllocationType,
    FixedAllocation,
    PercentageAllocation,
    CopyTradingConfig,
    CopiedTrader,
    SparklinePoint,
    Trend,
    PortfolioMetrics,
    TimeRange,
    PerformanceDataPoint,
)
from .portfolio import (
    aggregate_portfolio,
    build_copied_trader,
    capital_for,
    revalue,
    performance_series,
)
from .store import CopyTradingStore, StoreSnapshot

__all__ = [
    # Models
    "AllocationType",
    "FixedAllocation",
    "PercentageAllocation",
    "CopyTradingConfig",
    "CopiedTrader",
    "SparklinePoint",
    "Trend",
    "PortfolioMetrics",
    "TimeRange",
    "PerformanceDataPoint",
    # Valuation
    "aggregate_portfolio",
    "build_copied_trader",
    "capital_for",
    "revalue",
    "performance_series",
    # Store
    "CopyTradingStore",
    "StoreSnapshot",
]
