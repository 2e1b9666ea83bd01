#!/usr/bin/env python3
"""
One-shot check of the monitor's sources.

Runs a single adapter call and prints what the monitor would see, without
touching the database or Discord.

Usage:
    python scripts/check_sources.py --handle elonmusk
    python scripts/check_sources.py --search "solana memecoin" --headful
    python scripts/check_sources.py --mint <MINT>
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from solcerer.alerts import format_usd_compact
from solcerer.api import DexScreenerClient, HeliusClient
from solcerer.core import detect_whale_moves
from solcerer.models import SEARCH_PREFIX, SourceType, normalize_key
from solcerer.scrapers import SessionCredentials, SessionProvider, SocialAdapter
from config.monitor_settings import (
    DEXSCREENER_URL,
    HELIUS_API_KEY,
    HELIUS_API_URL,
    HTTP_TIMEOUT_SECONDS,
    WHALE_THRESHOLD_USD,
    WHALE_TRANSACTION_LIMIT,
    X_AUTH_TOKEN,
    X_CT0,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


async def check_social(target: str, headless: bool):
    """Scrape a profile or live search once."""
    print("\n" + "=" * 60)
    print(f"CHECKING X: {target}")
    print("=" * 60)

    provider = SessionProvider(SessionCredentials(X_AUTH_TOKEN, X_CT0), headless=headless)
    adapter = SocialAdapter(provider)
    posts = await adapter.fetch_posts(target)

    print(f"\nGot {len(posts)} posts")
    for post in posts:
        when = post.posted_at.strftime("%Y-%m-%d %H:%M")
        text = post.content.replace("\n", " ")[:80]
        print(f"  - [{post.kind.value}] {when} @{post.author_handle}: {text}")
        print(f"    {post.url}  likes={post.likes:,} reposts={post.reposts:,}")


async def check_mint(mint: str):
    """Fetch a snapshot and recent whale-sized transfers for a mint."""
    print("\n" + "=" * 60)
    print(f"CHECKING MINT: {mint}")
    print("=" * 60)

    async with DexScreenerClient(DEXSCREENER_URL, timeout=HTTP_TIMEOUT_SECONDS) as prices:
        snapshot = await prices.get_snapshot(mint)

    if snapshot is None:
        print("\n1. No DexScreener pairs found")
    else:
        print(f"\n1. {snapshot.name} ({snapshot.symbol})")
        print(f"   Price:      ${snapshot.price:.8f}")
        print(f"   Market cap: {format_usd_compact(snapshot.market_cap)}")
        print(f"   Liquidity:  {format_usd_compact(snapshot.liquidity)}")
        print(f"   24h volume: {format_usd_compact(snapshot.volume)}")

    async with HeliusClient(HELIUS_API_KEY, HELIUS_API_URL, timeout=HTTP_TIMEOUT_SECONDS) as helius:
        transfers = await helius.get_recent_transfers(mint, limit=WHALE_TRANSACTION_LIMIT)

    print(f"\n2. Got {len(transfers)} transfer legs")
    if snapshot is None or not transfers:
        return

    moves = detect_whale_moves(transfers, mint, snapshot.price, WHALE_THRESHOLD_USD)
    print(f"   {len(moves)} at or above ${WHALE_THRESHOLD_USD:,}")
    for move in moves:
        print(f"   - {move.side.upper()} ${move.usd_value:,.0f} by {move.short_wallet} "
              f"({move.signature[:16]}...)")


async def main():
    parser = argparse.ArgumentParser(description="One-shot check of monitor sources")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--handle", help="X handle to scrape (with or without @)")
    group.add_argument("--search", help="X live-search query")
    group.add_argument("--mint", help="Token mint for price and whale checks")
    parser.add_argument("--headful", action="store_true", help="Show the browser window")
    args = parser.parse_args()

    try:
        if args.handle:
            await check_social(normalize_key(SourceType.SOCIAL, args.handle), not args.headful)
        elif args.search:
            await check_social(f"{SEARCH_PREFIX}{args.search}", not args.headful)
        else:
            await check_mint(args.mint)
    except Exception as e:
        logger.exception(f"Check failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
