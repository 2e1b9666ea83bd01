"""
API Package
===========

External API clients for market data and on-chain activity.

Components:
- dexscreener.py: DexScreenerClient (price / market cap snapshots)
- helius.py: HeliusClient (recent token transfers)
"""

from .dexscreener import DexScreenerClient, parse_snapshot
from .helius import HeliusClient, parse_transfers

__all__ = [
    "DexScreenerClient",
    "parse_snapshot",
    "HeliusClient",
    "parse_transfers",
]
