"""
Market Models
=============

Dataclasses for price alerts, market snapshots and on-chain transfers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .entity import RawObservation, SourceType


ABOVE = "above"
BELOW = "below"
DIRECTIONS = (ABOVE, BELOW)

METRIC_MARKET_CAP = "market_cap"
METRIC_PRICE = "price"


@dataclass
class PriceAlert:
    """
    A one-shot threshold alert registered by a subscriber.

    Once triggered it is never evaluated again.
    """
    alert_id: int
    subscriber_id: str
    mint: str
    direction: str              # "above" or "below"
    threshold: float
    metric: str = METRIC_MARKET_CAP
    triggered: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def identity(self) -> str:
        """Stable identity: subscriber + mint + direction + threshold."""
        return f"{self.subscriber_id}:{self.mint}:{self.direction}:{self.threshold:g}"


@dataclass
class MarketSnapshot:
    """Current market data for a token (first DEX pair)."""
    mint: str
    price: float = 0.0
    market_cap: float = 0.0
    liquidity: float = 0.0
    volume: float = 0.0
    name: str = "Unknown"
    symbol: str = "???"
    url: Optional[str] = None

    def metric(self, name: str) -> float:
        """Value of the metric a price alert watches."""
        if name == METRIC_PRICE:
            return self.price
        return self.market_cap


@dataclass
class TokenTransfer:
    """One token transfer leg inside an on-chain transaction."""
    signature: str
    mint: str
    amount: float
    from_account: Optional[str] = None
    to_account: Optional[str] = None
    timestamp: Optional[datetime] = None


@dataclass
class WhaleMove:
    """A transfer whose USD value meets the whale threshold."""
    transfer: TokenTransfer
    usd_value: float
    side: str                   # "buy" or "sell"
    wallet: Optional[str]

    @property
    def signature(self) -> str:
        return self.transfer.signature

    @property
    def short_wallet(self) -> str:
        if not self.wallet:
            return "Unknown"
        return f"{self.wallet[:4]}...{self.wallet[-4:]}"

    def to_observation(self) -> RawObservation:
        """Wrap this move as an observation keyed by transaction signature."""
        payload: Dict[str, Any] = {
            'signature': self.signature,
            'mint': self.transfer.mint,
            'wallet': self.wallet,
            'amount': self.transfer.amount,
            'usd_value': self.usd_value,
            'side': self.side,
        }
        return RawObservation(
            source_type=SourceType.WHALE,
            dedup_key=self.signature,
            entity_key=self.transfer.mint,
            timestamp=self.transfer.timestamp or datetime.now(timezone.utc),
            payload=payload,
        )
