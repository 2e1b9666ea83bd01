"""
Price Alert Evaluation

One-shot threshold alerts on market cap (or price). Boundaries are inclusive
in both directions. An alert is tripped in the store before it is delivered
and is never evaluated again.
"""

import logging
import sqlite3
from collections import OrderedDict
from typing import Dict, List

from solcerer.db import MonitorDatabase
from solcerer.models import ABOVE, BELOW, MarketSnapshot, PriceAlert

logger = logging.getLogger(__name__)


def should_fire(direction: str, value: float, threshold: float) -> bool:
    """
    Check a metric value against an alert threshold.

    above: value >= threshold
    below: value <= threshold
    """
    if direction == ABOVE:
        return value >= threshold
    if direction == BELOW:
        return value <= threshold
    logger.warning(f"Unknown alert direction: {direction}")
    return False


def group_by_mint(alerts: List[PriceAlert]) -> Dict[str, List[PriceAlert]]:
    """Group alerts so each mint is fetched once per tick."""
    grouped: Dict[str, List[PriceAlert]] = OrderedDict()
    for alert in alerts:
        grouped.setdefault(alert.mint, []).append(alert)
    return grouped


class AlertEvaluator:
    """Evaluates alerts against a snapshot and trips the ones that fire."""

    def __init__(self, db: MonitorDatabase):
        self.db = db

    def evaluate(self, alerts: List[PriceAlert], snapshot: MarketSnapshot) -> List[PriceAlert]:
        """
        Evaluate every non-tripped alert independently.

        Args:
            alerts: Alerts registered against snapshot.mint
            snapshot: Current market data

        Returns:
            Alerts that fired this call (already tripped)
        """
        fired: List[PriceAlert] = []

        for alert in alerts:
            if alert.triggered:
                continue

            value = snapshot.metric(alert.metric)
            if not should_fire(alert.direction, value, alert.threshold):
                continue

            if not self._trip(alert):
                continue

            alert.triggered = True
            logger.info(
                f"Alert {alert.alert_id} fired: {snapshot.symbol} {alert.metric} "
                f"{value:,.2f} {alert.direction} {alert.threshold:,.2f}"
            )
            fired.append(alert)

        return fired

    def _trip(self, alert: PriceAlert) -> bool:
        """
        Flip the alert to tripped.

        Returns False only when the store says it was already tripped. A
        write failure still lets the alert fire.
        """
        try:
            if self.db.trip(alert.alert_id):
                return True
            logger.debug(f"Alert {alert.alert_id} already tripped, skipping")
            return False
        except sqlite3.Error as e:
            logger.error(f"Failed to trip alert {alert.alert_id}: {e}")
            return True
