"""
Timeline Parsing
================

Turns the raw dicts extracted from X timeline DOM into Post objects.

The DOM script (see social.EXTRACT_POSTS_JS) only collects strings; every
interpretation (ids, handles, post kind, engagement counts) happens here so
that layout changes only touch one place.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from solcerer.models import SEARCH_PREFIX, Post, PostKind

logger = logging.getLogger(__name__)

PERMALINK_RE = re.compile(r"/([A-Za-z0-9_]{1,15})/status/(\d+)")
COUNT_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)([KMB])?(?![A-Za-z])", re.IGNORECASE)

REPOST_MARKERS = ("reposted", "retweeted")
REPLY_MARKER = "replying to"

MULTIPLIERS = {
    "K": 1_000,
    "M": 1_000_000,
    "B": 1_000_000_000,
}


def parse_count(text: Optional[str]) -> int:
    """
    Parse an engagement count as shown in the timeline.

    Examples:
        "1.2K" -> 1200
        "3M" -> 3000000
        "42" -> 42
        "1,234 Likes. Like" -> 1234
        "" -> 0
    """
    if not text:
        return 0

    match = COUNT_RE.search(text.strip())
    if not match:
        return 0

    number, suffix = match.groups()
    try:
        value = float(number.replace(",", ""))
    except ValueError:
        return 0

    if suffix:
        value *= MULTIPLIERS[suffix.upper()]

    return int(round(value))


def parse_permalink(href: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Extract (author_handle, post_id) from a status permalink.

    "/elonmusk/status/1790000000000000000" -> ("elonmusk", "1790000000000000000")
    """
    if not href:
        return None
    match = PERMALINK_RE.search(href)
    if not match:
        return None
    return match.group(1), match.group(2)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a <time datetime="..."> value ("2024-05-01T12:00:00.000Z")."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _reposter(raw: Dict[str, Any], target: str) -> Optional[str]:
    # On a profile page the reposter is the profile owner. Search results
    # only carry a display name ("Alice reposted").
    if not target.startswith(SEARCH_PREFIX):
        return target
    context = (raw.get("socialContext") or "").strip()
    for marker in REPOST_MARKERS:
        idx = context.lower().find(marker)
        if idx > 0:
            return context[:idx].strip() or None
    return None


def classify_post(raw: Dict[str, Any]) -> PostKind:
    """
    Classify a timeline item from its structural markers.

    - a "reposted by" social context -> repost
    - a nested post container -> quote
    - a "Replying to" marker -> reply
    """
    social_context = (raw.get("socialContext") or "").lower()
    if any(marker in social_context for marker in REPOST_MARKERS):
        return PostKind.REPOST
    if raw.get("hasQuote"):
        return PostKind.QUOTE
    if REPLY_MARKER in (raw.get("replyContext") or "").lower():
        return PostKind.REPLY
    return PostKind.ORIGINAL


def parse_raw_post(raw: Dict[str, Any], target: str) -> Optional[Post]:
    """
    Build a Post from one extracted timeline item.

    Args:
        raw: Dict produced by the DOM extraction script
        target: Profile handle or search query that was scraped

    Returns:
        Post, or None if the item has no permalink id or timestamp
    """
    permalink = None
    for href in raw.get("permalinks") or []:
        permalink = parse_permalink(href)
        if permalink:
            break

    if not permalink:
        logger.debug(f"Skipping item without permalink on {target}")
        return None

    author, post_id = permalink
    posted_at = parse_timestamp(raw.get("datetime"))
    if posted_at is None:
        logger.debug(f"Skipping post {post_id} without timestamp")
        return None

    kind = classify_post(raw)
    reposted_by = _reposter(raw, target) if kind is PostKind.REPOST else None

    replying_to = None
    if kind is PostKind.REPLY:
        reply_text = raw.get("replyContext") or ""
        mentions = re.findall(r"@\w+", reply_text)
        replying_to = " ".join(mentions) if mentions else None

    return Post(
        post_id=post_id,
        author_handle=author,
        content=raw.get("text") or "",
        posted_at=posted_at,
        kind=kind,
        reposted_by=reposted_by,
        quoted_content=(raw.get("quotedText") or None) if kind is PostKind.QUOTE else None,
        replying_to=replying_to,
        likes=parse_count(raw.get("likes")),
        reposts=parse_count(raw.get("reposts")),
        replies=parse_count(raw.get("replies")),
        views=parse_count(raw.get("views")),
    )


def parse_raw_posts(items: List[Dict[str, Any]], target: str, limit: int = 10) -> List[Post]:
    """
    Parse extracted items, dropping unusable and duplicate ones.

    Returns at most `limit` posts, most recent first.
    """
    posts: List[Post] = []
    seen_ids = set()

    for raw in items or []:
        try:
            post = parse_raw_post(raw, target)
        except (TypeError, AttributeError) as e:
            logger.debug(f"Error parsing item on {target}: {e}")
            continue

        if post is None or post.post_id in seen_ids:
            continue
        seen_ids.add(post.post_id)
        posts.append(post)

    posts.sort(key=lambda p: p.posted_at, reverse=True)
    return posts[:limit]
