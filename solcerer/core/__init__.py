# Core business logic
from .dedup import DedupEngine, effective_watermarks
from .price_alerts import AlertEvaluator, group_by_mint, should_fire
from .whales import BUY, SELL, classify_transfer, detect_whale_moves

__all__ = [
    "DedupEngine",
    "effective_watermarks",
    "AlertEvaluator",
    "group_by_mint",
    "should_fire",
    "BUY",
    "SELL",
    "classify_transfer",
    "detect_whale_moves",
]
