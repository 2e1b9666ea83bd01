"""
Source Workers
==============

One worker per source type; each exposes `tick()` for its PollingLoop.

Every tick lists tracked entities, resolves the output channel and then
processes entities one at a time. A failure for one entity is logged and the
tick moves on to the next.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Protocol, Set

from solcerer.alerts import (
    AlertCategory,
    DeliverySink,
    DiscordWebhookChannel,
    build_post_message,
    build_price_alert_message,
    build_whale_message,
)
from solcerer.core import AlertEvaluator, DedupEngine, detect_whale_moves, effective_watermarks, group_by_mint
from solcerer.db import MonitorDatabase
from solcerer.models import MarketSnapshot, RawObservation, SourceType, TokenTransfer

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class SourceAdapter(Protocol):
    async def fetch(self, entity_key: str) -> List[RawObservation]:
        ...


class SnapshotSource(Protocol):
    async def get_snapshot(self, mint: str) -> Optional[MarketSnapshot]:
        ...


class TransferSource(Protocol):
    async def get_recent_transfers(self, address: str, limit: int = 20) -> List[TokenTransfer]:
        ...


class SocialWorker:
    """New posts from tracked handles and live searches."""

    def __init__(
        self,
        db: MonitorDatabase,
        adapter: SourceAdapter,
        dedup: DedupEngine,
        sink: DeliverySink,
        max_handles: int = 10,
        fetch_delay: float = 2.0,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.db = db
        self.adapter = adapter
        self.dedup = dedup
        self.sink = sink
        self.max_handles = max_handles
        self.fetch_delay = fetch_delay
        self._sleep = sleep

    async def tick(self) -> int:
        """
        Check every tracked social key once.

        Returns:
            Number of posts delivered
        """
        entities = self.db.get_tracked_entities(SourceType.SOCIAL)
        if not entities:
            logger.debug("No tracked social entities")
            return 0

        watermarks = effective_watermarks(entities)
        keys = list(watermarks)
        if len(keys) > self.max_handles:
            logger.warning(
                f"{len(keys)} tracked social keys, checking the first {self.max_handles} this tick"
            )
            keys = keys[:self.max_handles]

        channel = self.sink.resolve_channel(AlertCategory.TRACKED_POSTS)
        if channel is None:
            logger.error("Tracked-posts channel unavailable, skipping social tick")
            return 0

        logger.info(f"Checking {len(keys)} social keys")
        delivered = 0
        for key in keys:
            try:
                delivered += await self._process(key, watermarks[key], channel)
            except Exception:
                logger.exception(f"Social check failed for {key}")
            finally:
                await self._sleep(self.fetch_delay)

        if delivered:
            logger.info(f"Delivered {delivered} new posts")
        return delivered

    async def _process(self, key: str, watermark, channel: DiscordWebhookChannel) -> int:
        observations = await self.adapter.fetch(key)
        fresh = self.dedup.filter(watermark, observations)

        for observation in fresh:
            self.dedup.record(observation)
            await self.sink.deliver(channel, build_post_message(observation))

        return len(fresh)


class PriceAlertWorker:
    """One-shot market-cap / price threshold alerts."""

    def __init__(
        self,
        db: MonitorDatabase,
        prices: SnapshotSource,
        sink: DeliverySink,
        fetch_delay: float = 0.5,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.db = db
        self.prices = prices
        self.sink = sink
        self.evaluator = AlertEvaluator(db)
        self.fetch_delay = fetch_delay
        self._sleep = sleep

    async def tick(self) -> int:
        """
        Evaluate active alerts, one snapshot per unique mint.

        Returns:
            Number of alerts fired
        """
        alerts = self.db.get_active_price_alerts()
        if not alerts:
            logger.debug("No active price alerts")
            return 0

        channel = self.sink.resolve_channel(AlertCategory.PRICE_ALERTS)
        if channel is None:
            logger.error("Price-alerts channel unavailable, skipping price tick")
            return 0

        by_mint = group_by_mint(alerts)
        logger.info(f"Checking {len(alerts)} price alerts across {len(by_mint)} mints")

        fired = 0
        for mint, mint_alerts in by_mint.items():
            try:
                snapshot = await self.prices.get_snapshot(mint)
                if snapshot is None:
                    logger.warning(f"No market data for {mint}")
                    continue

                for alert in self.evaluator.evaluate(mint_alerts, snapshot):
                    await self.sink.deliver(channel, build_price_alert_message(alert, snapshot))
                    fired += 1
            except Exception:
                logger.exception(f"Price check failed for {mint}")
            finally:
                await self._sleep(self.fetch_delay)

        return fired


class WhaleWorker:
    """Large buys and sells of tracked mints."""

    def __init__(
        self,
        db: MonitorDatabase,
        transfers: TransferSource,
        prices: SnapshotSource,
        dedup: DedupEngine,
        sink: DeliverySink,
        threshold_usd: float = 10_000,
        max_mints: int = 20,
        transaction_limit: int = 20,
        fetch_delay: float = 1.0,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.db = db
        self.transfers = transfers
        self.prices = prices
        self.dedup = dedup
        self.sink = sink
        self.threshold_usd = threshold_usd
        self.max_mints = max_mints
        self.transaction_limit = transaction_limit
        self.fetch_delay = fetch_delay
        self._sleep = sleep

    async def tick(self) -> int:
        """
        Scan recent transfers of every tracked mint.

        Returns:
            Number of whale alerts delivered
        """
        entities = self.db.get_tracked_entities(SourceType.WHALE)
        mints = list(dict.fromkeys(entity.key for entity in entities))
        if not mints:
            logger.debug("No whale-tracked mints")
            return 0

        if len(mints) > self.max_mints:
            logger.warning(f"{len(mints)} whale-tracked mints, checking the first {self.max_mints}")
            mints = mints[:self.max_mints]

        channel = self.sink.resolve_channel(AlertCategory.WHALE_MOVES)
        if channel is None:
            logger.error("Whale-moves channel unavailable, skipping whale tick")
            return 0

        # Signatures delivered this tick (a transaction can move several legs)
        delivered_signatures: Set[str] = set()
        delivered = 0
        for mint in mints:
            try:
                delivered += await self._process(mint, channel, delivered_signatures)
            except Exception:
                logger.exception(f"Whale check failed for {mint}")
            finally:
                await self._sleep(self.fetch_delay)

        return delivered

    async def _process(
        self,
        mint: str,
        channel: DiscordWebhookChannel,
        delivered_signatures: Set[str],
    ) -> int:
        transfers = await self.transfers.get_recent_transfers(mint, limit=self.transaction_limit)
        if not transfers:
            return 0

        snapshot = await self.prices.get_snapshot(mint)
        if snapshot is None or snapshot.price <= 0:
            logger.debug(f"No price for {mint}, cannot value transfers")
            return 0

        count = 0
        for move in detect_whale_moves(transfers, mint, snapshot.price, self.threshold_usd):
            if move.signature in delivered_signatures or self.dedup.is_seen(move.signature):
                continue

            delivered_signatures.add(move.signature)
            self.dedup.record(move.to_observation())
            await self.sink.deliver(channel, build_whale_message(move, snapshot))
            count += 1

        return count
