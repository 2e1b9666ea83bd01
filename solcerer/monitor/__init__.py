"""
Monitor Service Package
=======================

Continuous polling of tracked sources with alert delivery.

Components:
- scheduler.py: PollingLoop (fixed interval, single-flight ticks)
- workers.py: SocialWorker, PriceAlertWorker, WhaleWorker
- service.py: MonitorService (wiring and lifecycle)
"""

from .scheduler import PollingLoop
from .workers import PriceAlertWorker, SocialWorker, WhaleWorker
from .service import MonitorService, parse_only

__all__ = [
    "PollingLoop",
    "SocialWorker",
    "PriceAlertWorker",
    "WhaleWorker",
    "MonitorService",
    "parse_only",
]
