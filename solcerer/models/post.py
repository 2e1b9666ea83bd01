"""
Post Models
===========

Dataclasses for posts scraped from X (Twitter) profile and search pages.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .entity import RawObservation, SourceType


class PostKind(Enum):
    ORIGINAL = "original"
    REPOST = "repost"
    QUOTE = "quote"
    REPLY = "reply"


@dataclass
class Post:
    """A post as rendered in a timeline."""
    post_id: str
    author_handle: str          # Original author (differs from target on reposts)
    content: str
    posted_at: datetime
    kind: PostKind = PostKind.ORIGINAL
    reposted_by: Optional[str] = None
    quoted_content: Optional[str] = None
    replying_to: Optional[str] = None
    likes: int = 0
    reposts: int = 0
    replies: int = 0
    views: int = 0

    @property
    def url(self) -> str:
        return f"https://x.com/{self.author_handle}/status/{self.post_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'post_id': self.post_id,
            'author_handle': self.author_handle,
            'content': self.content,
            'posted_at': self.posted_at.isoformat(),
            'kind': self.kind.value,
            'reposted_by': self.reposted_by,
            'quoted_content': self.quoted_content,
            'replying_to': self.replying_to,
            'likes': self.likes,
            'reposts': self.reposts,
            'replies': self.replies,
            'views': self.views,
            'url': self.url,
        }

    def to_observation(self, entity_key: str) -> RawObservation:
        """Wrap this post as an observation for the tracked entity."""
        return RawObservation(
            source_type=SourceType.SOCIAL,
            dedup_key=self.post_id,
            entity_key=entity_key,
            timestamp=self.posted_at,
            payload=self.to_dict(),
        )
