"""
Copy Trading Store

Observable client-side state for the copy-trading dashboard. All changes go
through named commands; each command runs under a lock, recomputes portfolio
metrics from the copied set and then notifies subscribers with an immutable
snapshot.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from app.services.trader_metrics import TopTrader, Trader, with_copy_status
from .models import (
    CopiedTrader,
    CopyTradingConfig,
    PerformanceDataPoint,
    PortfolioMetrics,
    TimeRange,
)
from .portfolio import (
    ValueSample,
    aggregate_portfolio,
    build_copied_trader,
    capital_for,
    parse_value,
    performance_series,
    revalue,
)

logger = logging.getLogger(__name__)

MAX_HISTORY_SAMPLES = 5000


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time view of the store handed to subscribers."""

    copied_traders: Tuple[CopiedTrader, ...] = ()
    selected_trader_id: Optional[str] = None
    time_range: TimeRange = TimeRange.ONE_MONTH
    portfolio_metrics: PortfolioMetrics = field(default_factory=PortfolioMetrics)
    version: int = 0

    @property
    def copied_ids(self) -> List[str]:
        return [t.id for t in self.copied_traders]


Listener = Callable[[StoreSnapshot], None]


class CopyTradingStore:
    """
    Copied traders, selection and portfolio totals for one dashboard session.

    ``portfolio_metrics`` is never written directly; it is refolded from the
    copied set inside every mutation, so it cannot drift from the entries.
    """

    def __init__(self, initial: Sequence[CopiedTrader] = ()):
        self._lock = threading.RLock()
        self._notify_lock = threading.RLock()
        self._version = 0
        self._delivered = 0
        self._listeners: List[Listener] = []
        self._copied: List[CopiedTrader] = list(initial)
        self._selected_id: Optional[str] = None
        self._time_range = TimeRange.ONE_MONTH
        self._metrics = aggregate_portfolio(self._copied)
        self._history: List[ValueSample] = []
        if self._copied:
            self._record_value()

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    @property
    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return self._snapshot()

    @property
    def copied_traders(self) -> Tuple[CopiedTrader, ...]:
        return self.snapshot.copied_traders

    @property
    def portfolio_metrics(self) -> PortfolioMetrics:
        return self.snapshot.portfolio_metrics

    @property
    def selected_trader_id(self) -> Optional[str]:
        return self.snapshot.selected_trader_id

    @property
    def time_range(self) -> TimeRange:
        return self.snapshot.time_range

    def get_copied_trader(self, trader_id: str) -> Optional[CopiedTrader]:
        with self._lock:
            return next((t for t in self._copied if t.id == trader_id), None)

    def is_copied(self, trader_id: str) -> bool:
        return self.get_copied_trader(trader_id) is not None

    def top_traders_view(self, top_traders: Sequence[TopTrader]) -> List[TopTrader]:
        """Leaderboard rows with ``is_copied`` set from the current copied set."""
        return with_copy_status(top_traders, self.snapshot.copied_ids)

    def performance_series(self, now: Optional[datetime] = None) -> List[PerformanceDataPoint]:
        """Portfolio value history for the selected time range."""
        with self._lock:
            history = list(self._history)
            time_range = self._time_range
        return performance_series(history, time_range, now)

    # ------------------------------------------------------------------ #
    # Subscriptions
    # ------------------------------------------------------------------ #

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def add_copied_trader(
        self,
        config: CopyTradingConfig,
        trader: Trader,
        now: Optional[datetime] = None,
    ) -> Optional[CopiedTrader]:
        """
        Start copying ``trader``.

        Returns the new entry, or ``None`` if the trader is already copied
        (in which case nothing changes and nobody is notified).
        """
        with self._lock:
            if any(t.id == trader.id for t in self._copied):
                logger.debug(f"Trader {trader.id} already copied, ignoring")
                return None

            capital = capital_for(config, self._metrics)
            copied = build_copied_trader(trader, capital, config, now)
            self._copied.append(copied)
            self._commit(now)

        logger.info(f"Copying trader {trader.id} with capital {capital}")
        self._notify()
        return copied

    def remove_copied_trader(self, trader_id: str, now: Optional[datetime] = None) -> bool:
        """Stop copying a trader; clears the selection if it pointed at them."""
        with self._lock:
            remaining = [t for t in self._copied if t.id != trader_id]
            if len(remaining) == len(self._copied):
                return False

            self._copied = remaining
            if self._selected_id == trader_id:
                self._selected_id = None
            self._commit(now)

        logger.info(f"Stopped copying trader {trader_id}")
        self._notify()
        return True

    def set_selected_trader(self, trader_id: Optional[str]) -> None:
        with self._lock:
            if trader_id == self._selected_id:
                return
            self._selected_id = trader_id
            self._version += 1
        self._notify()

    def set_time_range(self, time_range: TimeRange) -> None:
        time_range = TimeRange(time_range)
        with self._lock:
            if time_range == self._time_range:
                return
            self._time_range = time_range
            self._version += 1
        self._notify()

    def set_active(self, trader_id: str, active: bool) -> bool:
        """Pause or resume copying a trader."""
        with self._lock:
            index = self._index_of(trader_id)
            if index is None or self._copied[index].is_active == active:
                return False
            self._copied[index] = self._copied[index].model_copy(update={"is_active": active})
            self._version += 1
        self._notify()
        return True

    def mark_to_market(
        self,
        values: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> List[str]:
        """
        Apply current valuations keyed by trader id.

        Unknown ids are ignored. Returns the ids that were revalued.

        Raises:
            ValueError: If any value is not a finite number. Nothing is applied.
        """
        parsed = {trader_id: parse_value(value) for trader_id, value in values.items()}

        updated: List[str] = []
        deactivated: List[str] = []
        with self._lock:
            copied = list(self._copied)
            for trader_id, value in parsed.items():
                index = self._index_of(trader_id)
                if index is None:
                    continue
                before = copied[index]
                after = revalue(before, value)
                if before.is_active and not after.is_active:
                    deactivated.append(trader_id)
                copied[index] = after
                updated.append(trader_id)

            if not updated:
                return []
            self._copied = copied
            self._commit(now)

        for trader_id in deactivated:
            logger.warning(f"Max drawdown reached for {trader_id}, copying stopped")
        self._notify()
        return updated

    # ------------------------------------------------------------------ #
    # Internals (callers hold the lock, except _notify)
    # ------------------------------------------------------------------ #

    def _index_of(self, trader_id: str) -> Optional[int]:
        for i, trader in enumerate(self._copied):
            if trader.id == trader_id:
                return i
        return None

    def _commit(self, now: Optional[datetime] = None) -> None:
        self._metrics = aggregate_portfolio(self._copied)
        self._version += 1
        self._record_value(now)

    def _record_value(self, now: Optional[datetime] = None) -> None:
        self._history.append((now or datetime.now(timezone.utc), self._metrics.total_portfolio_value))
        if len(self._history) > MAX_HISTORY_SAMPLES:
            del self._history[: len(self._history) - MAX_HISTORY_SAMPLES]

    def _snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            copied_traders=tuple(self._copied),
            selected_trader_id=self._selected_id,
            time_range=self._time_range,
            portfolio_metrics=self._metrics,
            version=self._version,
        )

    def _notify(self) -> None:
        # Snapshots reach listeners in version order; an older one is never delivered
        # after a newer one, including when a listener itself mutates the store.
        with self._notify_lock:
            with self._lock:
                snapshot = self._snapshot()
                listeners = list(self._listeners)
            if snapshot.version <= self._delivered:
                return
            self._delivered = snapshot.version

            for listener in listeners:
                if self._delivered > snapshot.version:
                    return
                try:
                    listener(snapshot)
                except Exception:
                    logger.exception("Store listener failed")
