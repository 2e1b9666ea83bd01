"""
Shared Data Models
==================

This package contains dataclasses used across the project.
"""

from .entity import (
    SEARCH_PREFIX,
    RawObservation,
    SourceType,
    TrackedEntity,
    normalize_key,
)
from .post import Post, PostKind
from .market import (
    ABOVE,
    BELOW,
    METRIC_MARKET_CAP,
    METRIC_PRICE,
    MarketSnapshot,
    PriceAlert,
    TokenTransfer,
    WhaleMove,
)

__all__ = [
    "SEARCH_PREFIX",
    "RawObservation",
    "SourceType",
    "TrackedEntity",
    "normalize_key",
    "Post",
    "PostKind",
    "ABOVE",
    "BELOW",
    "METRIC_MARKET_CAP",
    "METRIC_PRICE",
    "MarketSnapshot",
    "PriceAlert",
    "TokenTransfer",
    "WhaleMove",
]
