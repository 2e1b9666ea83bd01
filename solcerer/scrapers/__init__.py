"""
Scrapers Package
================

Browser-based extraction for adversarial sources.

Components:
- session.py: SessionProvider (fingerprinted, authenticated Playwright sessions)
- social.py: SocialAdapter (X profile / live-search timelines)
- parsing.py: DOM item parsing (permalinks, post kind, engagement counts)
"""

from .parsing import parse_count, parse_permalink, parse_raw_post, parse_raw_posts
from .session import (
    BrowserSession,
    Fingerprint,
    SessionCredentials,
    SessionProvider,
)
from .social import SocialAdapter, build_url

__all__ = [
    "parse_count",
    "parse_permalink",
    "parse_raw_post",
    "parse_raw_posts",
    "BrowserSession",
    "Fingerprint",
    "SessionCredentials",
    "SessionProvider",
    "SocialAdapter",
    "build_url",
]
