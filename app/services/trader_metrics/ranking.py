"""Leaderboard ordering."""

from __future__ import annotations

from typing import Collection, List, Sequence

from .models import Trader, TopTrader


def rank_by_win_rate_descending(traders: Sequence[Trader]) -> List[TopTrader]:
    """
    Order traders by win rate, highest first, and assign ranks 1..N.

    ``sorted`` is stable, so traders with equal win rates keep their input order.
    """
    ordered = sorted(traders, key=lambda t: t.win_rate, reverse=True)
    return [
        TopTrader(**trader.model_dump(exclude={"rank"}), rank=i + 1)
        for i, trader in enumerate(ordered)
    ]


def with_copy_status(top_traders: Sequence[TopTrader], copied_ids: Collection[str]) -> List[TopTrader]:
    """Return copies of ``top_traders`` with ``is_copied`` reflecting ``copied_ids``."""
    copied = set(copied_ids)
    return [
        trader.model_copy(update={"is_copied": trader.id in copied})
        for trader in top_traders
    ]
