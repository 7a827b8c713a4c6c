#!/usr/bin/env python3
"""Simple CLI for checking the copy-trading backend against live Polymarket data"""

import argparse
import asyncio
from typing import List, Optional

from app.logging_config import setup_logging
from app.providers.polymarket import GammaClient, MarketFilter, UpstreamError
from app.services.trader_metrics import (
    PerformanceTracker,
    TopTrader,
    TopTradersService,
    UserPerformance,
    safe_float,
)


def print_top_traders(traders: List[TopTrader], fallback: bool = False):
    """Pretty print the ranked leaderboard"""
    if not traders:
        print("❌ No traders available")
        return

    source = "💾 fallback data" if fallback else "🔄 live"
    print(f"\n🏆 Top Traders ({source})")
    print("=" * 78)
    print(f"{'#':>3}  {'Trader':<22} {'Win %':>6} {'ROI 7d':>7} {'ROI 30d':>8} {'Risk':>5} {'Mkts':>5} {'Trades':>7}")
    print("-" * 78)
    for t in traders:
        print(
            f"{t.rank:>3}  {t.username[:22]:<22} {t.win_rate:>6.1f} {t.roi_7d:>7.1f} "
            f"{t.roi_30d:>8.1f} {t.risk_score:>5.0f} {t.markets_active:>5} {t.total_trades:>7}"
        )


def print_performance(address: str, performance: UserPerformance):
    print(f"\n📈 Performance for {address}")
    print("=" * 50)
    print(f"Total trades:   {performance.total_trades}")
    print(f"Win rate:       {performance.win_rate:.1f}%")
    print(f"ROI 7d:         {performance.roi_7d:.1f}%")
    print(f"ROI 30d:        {performance.roi_30d:.1f}%")
    print(f"Risk score:     {performance.risk_score:.0f}")
    print(f"Markets active: {performance.markets_active}")


async def cli_top_traders(limit: int):
    print(f"🔍 Fetching top {limit} traders...")
    service = TopTradersService()
    try:
        result = await service.get_top_traders(limit)
    finally:
        await service.client.close()
    print_top_traders(result.traders, result.fallback)
    if result.error:
        print(f"\n⚠️  Upstream error: {result.error}")


async def cli_performance(address: str):
    print(f"🔍 Fetching fills and positions for {address}...")
    tracker = PerformanceTracker()
    try:
        performance = await tracker.get_user_performance(address)
    finally:
        await tracker.client.close()
    print_performance(address, performance)


async def cli_markets(limit: int, category: Optional[str] = None, active_only: bool = False):
    gamma = GammaClient()
    try:
        markets = await gamma.fetch_markets(MarketFilter(
            active=True if active_only else None,
            limit=limit,
            category=category,
        ))
    except UpstreamError as e:
        print(f"❌ Error: {e}")
        return
    finally:
        await gamma.close()

    print(f"\n📊 Markets ({len(markets)})")
    print("-" * 78)
    for i, market in enumerate(markets, 1):
        print(f"{i:3d}. {market.question[:60]:<60} vol ${safe_float(market.volume):,.0f}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Copy Trading Dashboard CLI")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command")

    traders_parser = subparsers.add_parser("top-traders", help="Show traders ranked by estimated win rate")
    traders_parser.add_argument("--limit", type=int, default=20, help="Number of traders (default: 20)")

    perf_parser = subparsers.add_parser("performance", help="Show performance metrics for an account")
    perf_parser.add_argument("address", help="Wallet address")

    markets_parser = subparsers.add_parser("markets", help="List markets")
    markets_parser.add_argument("--limit", type=int, default=20, help="Number of markets (default: 20)")
    markets_parser.add_argument("--category", help="Category filter")
    markets_parser.add_argument("--active", action="store_true", help="Only active markets")

    return parser


async def main():
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return

    command = args.command.lower()

    if command == "top-traders":
        if args.limit <= 0:
            raise ValueError("Limit must be positive")
        await cli_top_traders(args.limit)

    elif command == "performance":
        await cli_performance(args.address)

    elif command == "markets":
        await cli_markets(args.limit, args.category, args.active)

    else:
        print(f"❌ Unknown command: {command}")
        parser.print_help()


if __name__ == "__main__":
    asyncio.run(main())
