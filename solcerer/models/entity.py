"""
Entity Models
=============

Dataclasses for tracked entities and the raw observations adapters produce.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


SEARCH_PREFIX = "search:"


class SourceType(Enum):
    """Kind of upstream a tracked entity is polled from."""
    SOCIAL = "social"
    PRICE_ALERT = "watchlist-price-alert"
    WHALE = "watchlist-whale"


def normalize_key(source_type: SourceType, key: str) -> str:
    """
    Normalize an entity key for storage and grouping.

    Social handles are case-insensitive and may be given with a leading "@".
    Search queries keep their case. Mints are case-sensitive (base58).
    """
    key = key.strip()
    if source_type is SourceType.SOCIAL and not key.startswith(SEARCH_PREFIX):
        return key.lstrip("@").lower()
    return key


@dataclass
class TrackedEntity:
    """One subscriber's registration of a (source type, key) pair."""
    source_type: SourceType
    key: str
    subscriber_id: str
    watermark: Optional[datetime] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def effective_watermark(self) -> datetime:
        """Watermark cut-off; falls back to the subscription time."""
        return self.watermark if self.watermark is not None else self.created_at


@dataclass
class RawObservation:
    """
    A single event seen on an upstream source.

    dedup_key is the stable identifier used for at-most-once delivery
    (post id, transaction signature, ...). Observations are rebuilt on every
    fetch and never persisted as-is.
    """
    source_type: SourceType
    dedup_key: str
    entity_key: str
    timestamp: datetime
    payload: Dict[str, Any] = field(default_factory=dict)
