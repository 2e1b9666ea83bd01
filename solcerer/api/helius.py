"""
Helius API Client

Single responsibility: fetch recent token transfers for an address from the
Helius enhanced transactions API.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import aiohttp

from solcerer.models import TokenTransfer

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.helius.xyz/v0"


def parse_transfers(transactions: Optional[List[dict]]) -> List[TokenTransfer]:
    """
    Flatten enhanced transactions into token transfer legs.

    Transactions without a signature are skipped; missing amounts count as 0.
    """
    transfers: List[TokenTransfer] = []
    if not isinstance(transactions, list):
        return transfers

    for tx in transactions:
        if not isinstance(tx, dict):
            continue
        signature = tx.get("signature")
        if not signature:
            continue

        timestamp = None
        if tx.get("timestamp"):
            try:
                timestamp = datetime.fromtimestamp(int(tx["timestamp"]), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError):
                timestamp = None

        for leg in tx.get("tokenTransfers") or []:
            try:
                amount = float(leg.get("tokenAmount") or 0)
            except (TypeError, ValueError):
                amount = 0.0

            transfers.append(TokenTransfer(
                signature=signature,
                mint=leg.get("mint") or "",
                amount=amount,
                from_account=leg.get("fromUserAccount") or None,
                to_account=leg.get("toUserAccount") or None,
                timestamp=timestamp,
            ))

    return transfers


class HeliusClient:
    """
    Async client for Helius enhanced transactions.

    One request per call, no retries: the polling interval is the retry.
    """

    def __init__(self, api_key: str, url: str = DEFAULT_URL, timeout: float = 15):
        self.api_key = api_key
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

        if not self.api_key:
            logger.warning("HELIUS_API_KEY not set; whale monitoring will find no transfers")

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

    async def _request(self, path: str, params: dict) -> Optional[Any]:
        """
        GET a JSON document. The api key never appears in logs.

        Returns:
            JSON response or None on failure
        """
        await self._ensure_session()
        query = dict(params, **{"api-key": self.api_key})
        try:
            async with self._session.get(f"{self.url}/{path}", params=query) as response:
                if response.status == 429:
                    logger.warning("Helius rate limited (429)")
                    return None
                if response.status != 200:
                    logger.error(f"Helius error {response.status} for {path}")
                    return None
                return await response.json(content_type=None)

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Helius request error for {path}: {type(e).__name__}")
            return None
        except ValueError as e:
            logger.error(f"Helius returned malformed JSON for {path}: {e}")
            return None

    async def get_recent_transfers(self, address: str, limit: int = 20) -> List[TokenTransfer]:
        """
        Get token transfers from the most recent transactions of an address.

        Args:
            address: Account or mint address
            limit: Number of transactions to fetch

        Returns:
            List of TokenTransfer (empty on failure)
        """
        if not self.api_key:
            return []

        data = await self._request(f"addresses/{address}/transactions", {"limit": limit})
        return parse_transfers(data)
