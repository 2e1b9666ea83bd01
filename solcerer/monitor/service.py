"""
Monitor Service
===============

Wires the store, adapters, delivery sink and the three polling loops, and
owns the service lifecycle (start, signal-driven shutdown, cleanup).
"""

import asyncio
import logging
import signal
from typing import Dict, Iterable, Optional

from config.monitor_settings import (
    DB_PATH,
    DELIVERY_PACING_SECONDS,
    DEXSCREENER_URL,
    HEADLESS_MODE,
    HELIUS_API_KEY,
    HELIUS_API_URL,
    HTTP_TIMEOUT_SECONDS,
    CONTENT_WAIT_TIMEOUT_MS,
    LOG_RETENTION_DAYS,
    MAX_DESCRIPTION_LENGTH,
    MAX_EMISSIONS_PER_TICK,
    MAX_POSTS_PER_FETCH,
    NAVIGATION_TIMEOUT_MS,
    PRICE_FETCH_DELAY_SECONDS,
    PRICE_POLL_INTERVAL_SECONDS,
    PRICE_STARTUP_DELAY_SECONDS,
    SCROLL_CYCLES,
    SCROLL_DELAY_MS,
    SETTLE_DELAY_MS,
    SOCIAL_FETCH_DELAY_SECONDS,
    SOCIAL_MAX_HANDLES,
    SOCIAL_POLL_INTERVAL_SECONDS,
    SOCIAL_STARTUP_DELAY_SECONDS,
    WHALE_FETCH_DELAY_SECONDS,
    WHALE_MAX_MINTS,
    WHALE_POLL_INTERVAL_SECONDS,
    WHALE_STARTUP_DELAY_SECONDS,
    WHALE_THRESHOLD_USD,
    WHALE_TRANSACTION_LIMIT,
    X_AUTH_TOKEN,
    X_CT0,
    get_webhook_urls,
)
from solcerer.alerts import DeliverySink
from solcerer.api import DexScreenerClient, HeliusClient
from solcerer.core import DedupEngine
from solcerer.db import MonitorDatabase
from solcerer.scrapers import SessionCredentials, SessionProvider, SocialAdapter

from .scheduler import PollingLoop
from .workers import PriceAlertWorker, SocialWorker, WhaleWorker

logger = logging.getLogger(__name__)

LOOP_NAMES = ("social", "price", "whale")


def parse_only(value: Optional[str]) -> tuple:
    """
    Parse a comma-separated loop selection ("social,whale").

    Raises:
        ValueError: On an unknown loop name
    """
    if not value:
        return LOOP_NAMES
    names = tuple(dict.fromkeys(part.strip().lower() for part in value.split(",") if part.strip()))
    unknown = [name for name in names if name not in LOOP_NAMES]
    if unknown:
        raise ValueError(f"Unknown loop(s): {', '.join(unknown)} (choose from {', '.join(LOOP_NAMES)})")
    return names


class MonitorService:
    """
    Continuous monitoring service.

    Runs three independent loops:
    - social: new posts from tracked X handles / searches
    - price: one-shot market-cap / price threshold alerts
    - whale: large transfers of tracked mints
    """

    def __init__(
        self,
        dry_run: bool = False,
        only: Iterable[str] = LOOP_NAMES,
        headless: bool = HEADLESS_MODE,
        db: Optional[MonitorDatabase] = None,
        webhook_urls: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the monitor service.

        Args:
            dry_run: If True, print alerts instead of posting to Discord
            only: Loop names to run (default: all)
            headless: Run the scraping browser headless
            db: Store to use (default: DB_PATH)
            webhook_urls: Category -> webhook URL (default: from environment)
        """
        self.dry_run = dry_run
        self.only = tuple(only)
        self.running = False
        self._stop_event: Optional[asyncio.Event] = None

        self.db = db or MonitorDatabase(DB_PATH)
        self.sink = DeliverySink(
            webhook_urls if webhook_urls is not None else get_webhook_urls(),
            dry_run=dry_run,
            pacing_seconds=DELIVERY_PACING_SECONDS,
            max_description_length=MAX_DESCRIPTION_LENGTH,
        )

        self.prices = DexScreenerClient(DEXSCREENER_URL, timeout=HTTP_TIMEOUT_SECONDS)
        self.transfers = HeliusClient(HELIUS_API_KEY, HELIUS_API_URL, timeout=HTTP_TIMEOUT_SECONDS)
        self.social_adapter = SocialAdapter(
            SessionProvider(
                SessionCredentials(auth_token=X_AUTH_TOKEN, ct0=X_CT0),
                headless=headless,
                default_timeout_ms=NAVIGATION_TIMEOUT_MS,
            ),
            navigation_timeout_ms=NAVIGATION_TIMEOUT_MS,
            content_wait_timeout_ms=CONTENT_WAIT_TIMEOUT_MS,
            settle_delay_ms=SETTLE_DELAY_MS,
            scroll_cycles=SCROLL_CYCLES,
            scroll_delay_ms=SCROLL_DELAY_MS,
            max_posts=MAX_POSTS_PER_FETCH,
        )

        dedup = DedupEngine(self.db, max_per_tick=MAX_EMISSIONS_PER_TICK)
        self.workers = {
            "social": SocialWorker(
                self.db, self.social_adapter, dedup, self.sink,
                max_handles=SOCIAL_MAX_HANDLES,
                fetch_delay=SOCIAL_FETCH_DELAY_SECONDS,
            ),
            "price": PriceAlertWorker(
                self.db, self.prices, self.sink,
                fetch_delay=PRICE_FETCH_DELAY_SECONDS,
            ),
            "whale": WhaleWorker(
                self.db, self.transfers, self.prices, dedup, self.sink,
                threshold_usd=WHALE_THRESHOLD_USD,
                max_mints=WHALE_MAX_MINTS,
                transaction_limit=WHALE_TRANSACTION_LIMIT,
                fetch_delay=WHALE_FETCH_DELAY_SECONDS,
            ),
        }

        timings = {
            "social": (SOCIAL_POLL_INTERVAL_SECONDS, SOCIAL_STARTUP_DELAY_SECONDS),
            "price": (PRICE_POLL_INTERVAL_SECONDS, PRICE_STARTUP_DELAY_SECONDS),
            "whale": (WHALE_POLL_INTERVAL_SECONDS, WHALE_STARTUP_DELAY_SECONDS),
        }
        self.loops: Dict[str, PollingLoop] = {
            name: PollingLoop(
                name,
                self.workers[name].tick,
                interval=timings[name][0],
                startup_delay=timings[name][1],
            )
            for name in self.only
        }

    def _handle_shutdown(self):
        """Handle shutdown signals gracefully."""
        logger.info("Shutdown signal received, stopping monitor...")
        self.stop()

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._handle_shutdown)
            except NotImplementedError:
                # Windows event loops
                logger.debug(f"Signal handler for {sig.name} not supported")

    async def run(self):
        """Main entry point - run the loops until stopped."""
        self.running = True
        self._stop_event = asyncio.Event()

        logger.info("=" * 60)
        logger.info("SOLCERER MONITOR SERVICE STARTING")
        logger.info("=" * 60)
        logger.info(f"Loops: {', '.join(self.loops)}")
        logger.info(f"Dry run: {self.dry_run}")

        pruned = self.db.prune_logs(LOG_RETENTION_DAYS)
        if pruned:
            logger.info(f"Pruned {pruned} old log entries")

        self._install_signal_handlers()

        try:
            for polling_loop in self.loops.values():
                polling_loop.start()
            await self._stop_event.wait()
        finally:
            await self.shutdown()

    def stop(self):
        """Request a graceful stop."""
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()

    async def shutdown(self):
        """Stop every loop and release HTTP sessions."""
        for polling_loop in self.loops.values():
            await polling_loop.stop()
        await self.prices.close()
        await self.transfers.close()
        self.running = False
        logger.info("SOLCERER MONITOR SERVICE STOPPED")
