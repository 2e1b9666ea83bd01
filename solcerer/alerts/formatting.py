"""
Alert Message Builders
======================

Turns observations, fired price alerts and whale moves into AlertMessage
objects (rendered as Discord embeds by discord.py).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from solcerer.models import ABOVE, MarketSnapshot, PriceAlert, RawObservation, WhaleMove

# Embed colours
COLOR_POST = 0x1DA1F2       # Twitter blue
COLOR_REPOST = 0x17BF63     # Green
COLOR_QUOTE = 0x794BC4      # Purple
COLOR_REPLY = 0xFFAD1F      # Orange
COLOR_UP = 0x00FF00
COLOR_DOWN = 0xFF0000

QUOTE_EXCERPT_LENGTH = 200


@dataclass
class EmbedField:
    name: str
    value: str
    inline: bool = True


@dataclass
class AlertMessage:
    """A structured, channel-agnostic alert."""
    title: str
    description: str = ""
    color: int = COLOR_POST
    fields: List[EmbedField] = field(default_factory=list)
    url: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    author_name: Optional[str] = None
    author_url: Optional[str] = None
    content: Optional[str] = None   # Plain text above the embed (mentions)

    def to_embed(self, max_description_length: int = 4000) -> Dict[str, Any]:
        description = self.description
        if len(description) > max_description_length:
            description = description[:max_description_length] + "..."

        embed: Dict[str, Any] = {
            "title": self.title,
            "description": description,
            "color": self.color,
            "timestamp": self.timestamp.isoformat(),
            "fields": [
                {"name": f.name, "value": f.value, "inline": f.inline}
                for f in self.fields
            ],
        }
        if self.url:
            embed["url"] = self.url
        if self.author_name:
            embed["author"] = {"name": self.author_name}
            if self.author_url:
                embed["author"]["url"] = self.author_url
        return embed

    def to_text(self) -> str:
        """Plain-text rendering for dry runs and logs."""
        lines = [self.title]
        if self.description:
            lines.append(self.description)
        for f in self.fields:
            lines.append(f"{f.name}: {f.value}")
        if self.url:
            lines.append(self.url)
        return "\n".join(lines)


def format_usd_compact(value: float) -> str:
    """
    Format a USD amount with a B/M/K suffix.

    Examples:
        1_500_000_000 -> "$1.50B"
        2_345_000 -> "$2.35M"
        950 -> "$950"
    """
    if value >= 1_000_000_000:
        return f"${value / 1_000_000_000:.2f}B"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"${value / 1_000:.2f}K"
    return f"${value:,.0f}"


def build_post_message(observation: RawObservation) -> AlertMessage:
    """Alert for a new post on a tracked handle or search."""
    post = observation.payload
    author = post.get("author_handle") or observation.entity_key
    kind = post.get("kind", "original")
    description = post.get("content") or ""

    title = f"@{author}"
    color = COLOR_POST
    if kind == "repost":
        reposter = post.get("reposted_by") or observation.entity_key
        title = f"🔁 @{reposter} reposted @{author}"
        color = COLOR_REPOST
    elif kind == "quote":
        title = f"💬 @{author} quoted"
        quoted = post.get("quoted_content")
        if quoted:
            excerpt = quoted[:QUOTE_EXCERPT_LENGTH]
            if len(quoted) > QUOTE_EXCERPT_LENGTH:
                excerpt += "..."
            description = f"{description}\n\n> {excerpt}"
        color = COLOR_QUOTE
    elif kind == "reply":
        replying_to = post.get("replying_to")
        title = f"↩️ @{author} replied to {replying_to}" if replying_to else f"↩️ @{author} replied"
        color = COLOR_REPLY

    fields = [
        EmbedField("❤️ Likes", f"{int(post.get('likes') or 0):,}"),
        EmbedField("🔁 Reposts", f"{int(post.get('reposts') or 0):,}"),
    ]
    if post.get("views"):
        fields.append(EmbedField("👁 Views", f"{int(post['views']):,}"))

    url = post.get("url")
    return AlertMessage(
        title=title,
        description=description,
        color=color,
        fields=fields,
        url=url,
        timestamp=observation.timestamp,
        author_name=title,
        author_url=url,
    )


def build_price_alert_message(alert: PriceAlert, snapshot: MarketSnapshot) -> AlertMessage:
    """Alert for a fired market-cap / price threshold."""
    if alert.metric == "price":
        target = f"${alert.threshold:,.6f}"
        metric_label = "price"
    else:
        target = format_usd_compact(alert.threshold)
        metric_label = "market cap"

    return AlertMessage(
        title="🚨 Price Alert Triggered!",
        description=(
            f"**{snapshot.name} ({snapshot.symbol})** {metric_label} has gone "
            f"**{alert.direction}** {target}"
        ),
        color=COLOR_UP if alert.direction == ABOVE else COLOR_DOWN,
        fields=[
            EmbedField("Current MC", format_usd_compact(snapshot.market_cap)),
            EmbedField("Current Price", f"${snapshot.price:.6f}"),
            EmbedField("Target", f"{alert.direction} {target}"),
            EmbedField("Mint", f"`{alert.mint}`", inline=False),
        ],
        url=snapshot.url,
        content=f"<@{alert.subscriber_id}>",
    )


def build_whale_message(move: WhaleMove, snapshot: Optional[MarketSnapshot]) -> AlertMessage:
    """Alert for a whale buy or sell."""
    name = snapshot.name if snapshot else "Unknown"
    symbol = snapshot.symbol if snapshot else "???"
    is_sell = move.side == "sell"

    return AlertMessage(
        title=f"🐋 Whale {'Sell' if is_sell else 'Buy'} Detected!",
        description=f"**{name} ({symbol})**",
        color=COLOR_DOWN if is_sell else COLOR_UP,
        fields=[
            EmbedField("Amount", f"{move.transfer.amount:,.2f} {symbol}"),
            EmbedField("Value", f"${move.usd_value:,.2f}"),
            EmbedField("Wallet", f"`{move.short_wallet}`"),
            EmbedField("Mint", f"`{move.transfer.mint}`", inline=False),
        ],
        url=f"https://solscan.io/tx/{move.signature}",
        timestamp=move.transfer.timestamp or datetime.now(timezone.utc),
    )
