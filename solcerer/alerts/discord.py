"""
Discord Webhook Delivery
========================

Delivery sink for the monitor service. Each alert category posts to its own
Discord webhook:
- tracked_posts: new posts from tracked handles / searches
- price_alerts: fired market-cap / price thresholds
- whale_moves: large buys and sells of tracked mints

Webhook URLs embed a secret token, so they are never logged.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

import requests

from .formatting import COLOR_UP, AlertMessage

logger = logging.getLogger(__name__)

WEBHOOK_URL_RE = re.compile(
    r"^https://(?:(?:ptb|canary)\.)?discord(?:app)?\.com/api/webhooks/\d+/[\w-]+$"
)

REQUEST_TIMEOUT_SECONDS = 10
DEFAULT_PACING_SECONDS = 1.0


class AlertCategory(str, Enum):
    TRACKED_POSTS = "tracked_posts"
    PRICE_ALERTS = "price_alerts"
    WHALE_MOVES = "whale_moves"


def is_valid_webhook_url(url: Optional[str]) -> bool:
    return bool(url) and WEBHOOK_URL_RE.match(url) is not None


@dataclass
class WebhookConfig:
    """Configuration for one webhook channel."""
    url: str
    dry_run: bool = False
    max_description_length: int = 4000
    username: str = "Solcerer"


class DiscordWebhookChannel:
    """
    Sends AlertMessages to a single Discord webhook.

    send() is blocking (requests); DeliverySink runs it in a worker thread.
    """

    def __init__(self, config: WebhookConfig, name: str = "discord"):
        self.config = config
        self.name = name
        self._validate()

    def _validate(self):
        """Validate configuration."""
        if not self.config.dry_run and not self.config.url:
            raise ValueError(f"Webhook URL for {self.name} is required (or use --dry-run)")

    def build_payload(self, message: AlertMessage) -> dict:
        payload = {
            "username": self.config.username,
            "embeds": [message.to_embed(self.config.max_description_length)],
        }
        if message.content:
            payload["content"] = message.content
        return payload

    def send(self, message: AlertMessage) -> bool:
        """
        Post a message to the webhook.

        Args:
            message: Alert to deliver

        Returns:
            True if Discord accepted the message
        """
        if self.config.dry_run:
            logger.info(f"[DRY RUN] Would send to #{self.name}: {message.title}")
            print(f"\n{'='*60}")
            print(f"[DRY RUN] Discord Alert (#{self.name}):")
            print("="*60)
            if message.content:
                print(message.content)
            print(message.to_text())
            print("="*60 + "\n")
            return True

        try:
            response = requests.post(
                self.config.url,
                json=self.build_payload(message),
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            logger.info(f"Discord alert sent to #{self.name}: {message.title}")
            return True

        except requests.exceptions.Timeout:
            logger.error(f"Discord request to #{self.name} timed out")
            return False
        except requests.exceptions.HTTPError as e:
            # Status code only, the URL carries the webhook token
            status_code = e.response.status_code if e.response is not None else "unknown"
            logger.error(f"Discord HTTP error for #{self.name}: {status_code}")
            if status_code == 429:
                logger.warning("Discord rate limit hit (429)")
            return False
        except requests.exceptions.ConnectionError:
            logger.error("Discord connection error - network issue")
            return False
        except requests.exceptions.RequestException:
            logger.error(f"Discord request to #{self.name} failed")
            return False


class DeliverySink:
    """
    Resolves category channels and delivers messages with pacing.

    Args:
        webhook_urls: Category value -> webhook URL
        dry_run: Print messages instead of posting
        pacing_seconds: Pause after each delivery
        sleep: Injectable async sleep
    """

    def __init__(
        self,
        webhook_urls: Dict[str, str],
        dry_run: bool = False,
        pacing_seconds: float = DEFAULT_PACING_SECONDS,
        max_description_length: int = 4000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.webhook_urls = dict(webhook_urls)
        self.dry_run = dry_run
        self.pacing_seconds = pacing_seconds
        self.max_description_length = max_description_length
        self._sleep = sleep

    def resolve_channel(self, category: AlertCategory) -> Optional[DiscordWebhookChannel]:
        """
        Get the channel for a category.

        Returns:
            The channel, or None if its webhook is missing or malformed
        """
        name = AlertCategory(category).value
        url = self.webhook_urls.get(name, "")

        if not self.dry_run:
            if not url:
                logger.error(f"No webhook configured for #{name}")
                return None
            if not is_valid_webhook_url(url):
                logger.error(f"Webhook for #{name} is not a Discord webhook URL")
                return None

        return DiscordWebhookChannel(
            WebhookConfig(
                url=url,
                dry_run=self.dry_run,
                max_description_length=self.max_description_length,
            ),
            name=name,
        )

    async def deliver(self, channel: DiscordWebhookChannel, message: AlertMessage) -> bool:
        """Send off the event loop, then wait out the pacing delay."""
        try:
            return await asyncio.to_thread(channel.send, message)
        except Exception:
            logger.exception(f"Unexpected error delivering to #{channel.name}")
            return False
        finally:
            await self._sleep(self.pacing_seconds)


def send_test_alert(
    category: AlertCategory,
    webhook_urls: Optional[Dict[str, str]] = None,
    dry_run: bool = False,
) -> bool:
    """
    Send a test alert to verify a category's webhook.

    Args:
        category: Category to test
        webhook_urls: Category -> URL (default: from config)
        dry_run: If True, print message instead of sending

    Returns:
        True if successful
    """
    if webhook_urls is None:
        from config.monitor_settings import get_webhook_urls
        webhook_urls = get_webhook_urls()

    sink = DeliverySink(webhook_urls, dry_run=dry_run)
    channel = sink.resolve_channel(category)
    if channel is None:
        return False

    return channel.send(AlertMessage(
        title="✅ Solcerer monitor test",
        description=f"Test alert - #{channel.name} webhook configuration verified.",
        color=COLOR_UP,
    ))
