"""Tests for timeline item parsing."""

from datetime import datetime, timezone

import pytest

from solcerer.models import PostKind
from solcerer.scrapers import parse_count, parse_permalink, parse_raw_post, parse_raw_posts


def create_raw(post_id="1790000000000000001", author="alice", when="2026-01-15T13:00:00.000Z", **extra):
    raw = {
        "permalinks": [f"/{author}/status/{post_id}"],
        "text": "gm",
        "quotedText": "",
        "datetime": when,
        "socialContext": "",
        "replyContext": "",
        "hasQuote": False,
        "likes": "",
        "reposts": "",
        "replies": "",
        "views": "",
    }
    raw.update(extra)
    return raw


class TestParseCount:
    @pytest.mark.parametrize("text,expected", [
        ("1.2K", 1200),
        ("3M", 3_000_000),
        ("42", 42),
        ("", 0),
        (None, 0),
        ("2B", 2_000_000_000),
        ("1,234", 1234),
        ("1,234 Likes. Like", 1234),
        ("12 Bookmarks", 12),
        ("5.6k", 5600),
        ("Like", 0),
    ])
    def test_examples(self, text, expected):
        assert parse_count(text) == expected


class TestParsePermalink:
    def test_status_link(self):
        assert parse_permalink("/Alice_01/status/123") == ("Alice_01", "123")

    def test_absolute_link(self):
        assert parse_permalink("https://x.com/bob/status/456/analytics") == ("bob", "456")

    def test_not_a_status(self):
        assert parse_permalink("/alice/likes") is None
        assert parse_permalink(None) is None


class TestParseRawPost:
    def test_original(self):
        post = parse_raw_post(create_raw(likes="1.2K", reposts="30", views="10K"), "alice")

        assert post.post_id == "1790000000000000001"
        assert post.author_handle == "alice"
        assert post.kind is PostKind.ORIGINAL
        assert post.posted_at == datetime(2026, 1, 15, 13, 0, tzinfo=timezone.utc)
        assert (post.likes, post.reposts, post.views) == (1200, 30, 10_000)
        assert post.url == "https://x.com/alice/status/1790000000000000001"

    def test_repost_on_profile(self):
        post = parse_raw_post(create_raw(author="bob", socialContext="alice reposted"), "alice")

        assert post.kind is PostKind.REPOST
        assert post.author_handle == "bob"
        assert post.reposted_by == "alice"

    def test_repost_in_search_uses_display_name(self):
        raw = create_raw(author="bob", socialContext="Alice Smith reposted")
        post = parse_raw_post(raw, "search:$BONK")

        assert post.reposted_by == "Alice Smith"

    def test_quote(self):
        post = parse_raw_post(create_raw(hasQuote=True, quotedText="original take"), "alice")

        assert post.kind is PostKind.QUOTE
        assert post.quoted_content == "original take"

    def test_reply(self):
        post = parse_raw_post(create_raw(replyContext="Replying to @bob and @carol"), "alice")

        assert post.kind is PostKind.REPLY
        assert post.replying_to == "@bob @carol"

    def test_skips_items_without_permalink(self):
        assert parse_raw_post(create_raw(permalinks=["/alice/photo"]), "alice") is None

    def test_skips_items_without_timestamp(self):
        assert parse_raw_post(create_raw(datetime=None), "alice") is None
        assert parse_raw_post(create_raw(datetime="yesterday"), "alice") is None


class TestParseRawPosts:
    def test_dedupes_sorts_and_limits(self):
        items = [
            create_raw("1", when="2026-01-15T10:00:00.000Z"),
            create_raw("3", when="2026-01-15T12:00:00.000Z"),
            create_raw("1", when="2026-01-15T10:00:00.000Z"),
            create_raw("2", when="2026-01-15T11:00:00.000Z"),
            {"permalinks": None},
        ]

        posts = parse_raw_posts(items, "alice", limit=2)

        assert [p.post_id for p in posts] == ["3", "2"]
