"""
Alerts Package
==============

Delivery sink and message formatting.

Components:
- discord.py: DeliverySink, DiscordWebhookChannel (one webhook per category)
- formatting.py: AlertMessage builders for posts, price alerts and whale moves
"""

from .discord import (
    AlertCategory,
    DeliverySink,
    DiscordWebhookChannel,
    WebhookConfig,
    is_valid_webhook_url,
    send_test_alert,
)
from .formatting import (
    AlertMessage,
    EmbedField,
    build_post_message,
    build_price_alert_message,
    build_whale_message,
    format_usd_compact,
)

__all__ = [
    "AlertCategory",
    "DeliverySink",
    "DiscordWebhookChannel",
    "WebhookConfig",
    "is_valid_webhook_url",
    "send_test_alert",
    "AlertMessage",
    "EmbedField",
    "build_post_message",
    "build_price_alert_message",
    "build_whale_message",
    "format_usd_compact",
]
