"""
Portfolio Valuation

Pure functions over copied traders: building a new position, revaluing it,
aggregating the portfolio and rendering value history for charts.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from app.services.trader_metrics import Trader
from .models import (
    MAX_SPARKLINE_POINTS,
    AllocationType,
    CopiedTrader,
    CopyTradingConfig,
    PerformanceDataPoint,
    PortfolioMetrics,
    SparklinePoint,
    TimeRange,
    Trend,
)

CENTS = Decimal("0.01")

# Share of lifetime PnL reported as the last day's PnL. There is no
# persisted daily history to compute a real 24h window from.
PNL_24H_SHARE = Decimal("0.035")

ValueSample = Tuple[datetime, Decimal]


def to_cents(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_value(value: Any) -> Decimal:
    """
    Parse a valuation into a Decimal.

    Raises:
        ValueError: If ``value`` is not a finite number
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"invalid valuation: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"invalid valuation: {value!r}")
    return amount


def aggregate_portfolio(copied: Iterable[CopiedTrader]) -> PortfolioMetrics:
    """Totals over the copied set; independent of order."""
    total_capital = Decimal("0")
    total_value = Decimal("0")
    for trader in copied:
        total_capital += trader.capital_allocated
        total_value += trader.current_value

    total_capital = to_cents(total_capital)
    total_value = to_cents(total_value)
    pnl = total_value - total_capital
    roi = float(pnl / total_capital * 100) if total_capital > 0 else 0.0

    return PortfolioMetrics(
        totalPortfolioValue=total_value,
        totalCopiedCapital=total_capital,
        lifetimeCopyPnL=pnl,
        roiPercent=round(roi, 1),
        pnl24h=to_cents(pnl * PNL_24H_SHARE),
    )


def capital_for(config: CopyTradingConfig, metrics: PortfolioMetrics) -> Decimal:
    """Capital to allocate: the fixed amount, or a percentage of current portfolio value."""
    allocation = config.allocation
    if allocation.allocation_type == AllocationType.FIXED.value:
        return to_cents(allocation.amount)
    return to_cents(metrics.total_portfolio_value * allocation.percentage / 100)


def build_copied_trader(
    trader: Trader,
    capital: Decimal,
    config: CopyTradingConfig,
    now: Optional[datetime] = None,
) -> CopiedTrader:
    """A freshly copied trader, valued at exactly its allocated capital."""
    fields = trader.model_dump(include=set(Trader.model_fields))
    return CopiedTrader(
        **fields,
        capitalAllocated=capital,
        currentValue=capital,
        returns=Decimal("0"),
        returnsPercent=0.0,
        trend=Trend.UP,
        chartData=[SparklinePoint(value=capital)],
        copiedAt=now or datetime.now(timezone.utc),
        isActive=not config.stop_copying,
        maxDrawdown=config.max_drawdown,
    )


def revalue(copied: CopiedTrader, current_value: Decimal) -> CopiedTrader:
    """
    Return ``copied`` marked at ``current_value``.

    Recomputes returns and trend, appends a sparkline sample and deactivates
    the entry once its drawdown from peak reaches ``max_drawdown``.
    """
    current_value = to_cents(max(Decimal(current_value), Decimal("0")))
    returns = current_value - copied.capital_allocated
    returns_percent = (
        round(float(returns / copied.capital_allocated * 100), 1)
        if copied.capital_allocated > 0
        else 0.0
    )

    updated = copied.model_copy(update={
        "current_value": current_value,
        "returns": returns,
        "returns_percent": returns_percent,
        "trend": Trend.UP if returns_percent >= 0 else Trend.DOWN,
        "chart_data": [*copied.chart_data, SparklinePoint(value=current_value)][-MAX_SPARKLINE_POINTS:],
        "peak_value": max(copied.peak_value, current_value),
    })

    if (
        updated.is_active
        and updated.max_drawdown is not None
        and updated.drawdown_percent >= updated.max_drawdown
    ):
        updated = updated.model_copy(update={"is_active": False})
    return updated


def _label(moment: datetime, time_range: TimeRange) -> str:
    if time_range == TimeRange.ONE_DAY:
        return f"{moment:%I:%M %p}".lstrip("0")
    return f"{moment:%b} {moment.day}"


def performance_series(
    history: Sequence[ValueSample],
    time_range: TimeRange,
    now: Optional[datetime] = None,
) -> List[PerformanceDataPoint]:
    """
    Chart points for the samples inside ``time_range``.

    The last sample before the window, if any, is shown at the window start so
    the line does not begin mid-air. ``pnl`` is the change from the previous point.
    """
    now = now or datetime.now(timezone.utc)
    start = now - timedelta(days=time_range.days)

    before = [sample for sample in history if sample[0] < start]
    window = [sample for sample in history if start <= sample[0] <= now]
    if before:
        window.insert(0, (start, before[-1][1]))

    points: List[PerformanceDataPoint] = []
    previous: Optional[Decimal] = None
    for moment, value in window:
        pnl = Decimal("0") if previous is None else value - previous
        points.append(PerformanceDataPoint(
            date=_label(moment, time_range),
            value=to_cents(value),
            pnl=to_cents(pnl),
        ))
        previous = value
    return points
