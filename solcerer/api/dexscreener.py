"""
DexScreener API Client

Single responsibility: fetch market snapshots (price, market cap, liquidity,
volume) for token mints.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from solcerer.models import MarketSnapshot

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.dexscreener.com/latest/dex/tokens"


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_snapshot(mint: str, data: Optional[Dict[str, Any]]) -> Optional[MarketSnapshot]:
    """
    Build a snapshot from a /tokens response using the first pair.

    Returns:
        MarketSnapshot, or None if the token has no pairs
    """
    pairs = (data or {}).get("pairs") or []
    if not pairs:
        return None

    pair = pairs[0]
    base = pair.get("baseToken") or {}
    return MarketSnapshot(
        mint=mint,
        price=_to_float(pair.get("priceUsd")),
        market_cap=_to_float(pair.get("marketCap") or pair.get("fdv")),
        liquidity=_to_float((pair.get("liquidity") or {}).get("usd")),
        volume=_to_float((pair.get("volume") or {}).get("h24")),
        name=base.get("name") or "Unknown",
        symbol=base.get("symbol") or "???",
        url=pair.get("url"),
    )


class DexScreenerClient:
    """
    Async client for the DexScreener token endpoint.

    One request per call, no retries: the polling interval is the retry.
    """

    def __init__(self, url: str = DEFAULT_URL, timeout: float = 15):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Create session if needed."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )

    async def close(self):
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _request(self, path: str) -> Optional[Any]:
        """
        GET a JSON document.

        Returns:
            JSON response or None on failure
        """
        await self._ensure_session()
        try:
            async with self._session.get(f"{self.url}/{path}") as response:
                if response.status == 429:
                    logger.warning("DexScreener rate limited (429)")
                    return None
                if response.status != 200:
                    logger.error(f"DexScreener error {response.status} for {path}")
                    return None
                return await response.json(content_type=None)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"DexScreener request error for {path}: {type(e).__name__}: {e}")
            return None
        except ValueError as e:
            logger.error(f"DexScreener returned malformed JSON for {path}: {e}")
            return None

    async def get_snapshot(self, mint: str) -> Optional[MarketSnapshot]:
        """
        Get the current market snapshot for a mint.

        Args:
            mint: Token mint address

        Returns:
            MarketSnapshot or None if unavailable
        """
        data = await self._request(mint)
        snapshot = parse_snapshot(mint, data)
        if snapshot is None:
            logger.info(f"No price data for {mint}")
        return snapshot
