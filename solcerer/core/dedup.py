"""
Dedup / Watermark Engine

Decides which observations are genuinely new:
1. Watermark: anything at or before the subscription cut-off is dropped
2. Seen-set: keys already delivered are dropped (one batched lookup)
3. Cap: at most max_per_tick per entity, oldest first

Recording happens before delivery. If the write fails the event is still
delivered, accepting a rare duplicate over a lost alert.
"""

import logging
import sqlite3
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from solcerer.db import MonitorDatabase
from solcerer.models import RawObservation, TrackedEntity

logger = logging.getLogger(__name__)

DEFAULT_MAX_PER_TICK = 5


def effective_watermarks(entities: Iterable[TrackedEntity]) -> Dict[str, datetime]:
    """
    One watermark per key: the earliest across its subscribers.

    Keys keep the order in which they were first seen.
    """
    watermarks: Dict[str, datetime] = {}
    for entity in entities:
        current = watermarks.get(entity.key)
        candidate = entity.effective_watermark
        if current is None or candidate < current:
            watermarks[entity.key] = candidate
    return watermarks


class DedupEngine:
    """Filters raw observations down to deliverable, never-seen events."""

    def __init__(self, db: MonitorDatabase, max_per_tick: int = DEFAULT_MAX_PER_TICK):
        self.db = db
        self.max_per_tick = max_per_tick

    def filter(
        self,
        watermark: Optional[datetime],
        observations: List[RawObservation],
    ) -> List[RawObservation]:
        """
        Return observations eligible for delivery, oldest first.

        Args:
            watermark: Entity cut-off (observations at or before it are dropped)
            observations: Fresh adapter output for one entity

        Returns:
            New observations, capped at max_per_tick
        """
        if watermark is not None:
            candidates = [o for o in observations if o.timestamp > watermark]
        else:
            candidates = list(observations)

        if not candidates:
            return []

        seen = self.db.seen_keys(o.dedup_key for o in candidates)

        fresh: List[RawObservation] = []
        batch_keys = set()
        for obs in candidates:
            if obs.dedup_key in seen or obs.dedup_key in batch_keys:
                continue
            batch_keys.add(obs.dedup_key)
            fresh.append(obs)

        fresh.sort(key=lambda o: o.timestamp)

        if len(fresh) > self.max_per_tick:
            logger.info(
                f"{fresh[0].entity_key}: {len(fresh)} new events, "
                f"delivering oldest {self.max_per_tick} this tick"
            )
            fresh = fresh[:self.max_per_tick]

        return fresh

    def is_seen(self, dedup_key: str) -> bool:
        """Single lookup, for callers that check candidates one at a time."""
        return self.db.has_seen(dedup_key)

    def record(self, observation: RawObservation) -> bool:
        """
        Persist an observation as delivered.

        Returns:
            True if the record was written; False if it already existed or
            the write failed (logged)
        """
        try:
            return self.db.record_seen(
                observation.dedup_key,
                observation.source_type,
                observation.entity_key,
                observation.payload,
            )
        except sqlite3.Error as e:
            logger.error(f"Failed to record {observation.dedup_key} as seen: {e}")
            return False
