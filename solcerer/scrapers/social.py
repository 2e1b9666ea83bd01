"""
X (Twitter) Timeline Scraper
============================

Browser-based scraper for X profile and live-search timelines.
Uses Playwright through SessionProvider for a fresh, fingerprinted session
per fetch.

Pages:
    https://x.com/{handle}
    https://x.com/search?q={query}&src=typed_query&f=live

A slow or blocked page degrades to "probably empty" instead of hanging.
"""

import logging
from typing import List
from urllib.parse import quote

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from solcerer.models import SEARCH_PREFIX, Post, RawObservation
from .parsing import parse_raw_posts
from .session import SessionProvider

logger = logging.getLogger(__name__)

BASE_URL = "https://x.com"
POST_SELECTOR = 'article[data-testid="tweet"]'

# Collects raw strings only; interpretation lives in parsing.py
EXTRACT_POSTS_JS = """
() => {
    const items = [];
    const label = (root, testId) => {
        const el = root.querySelector(`[data-testid="${testId}"]`);
        if (!el) return '';
        return el.getAttribute('aria-label') || el.innerText || '';
    };

    document.querySelectorAll('article[data-testid="tweet"]').forEach((article) => {
        const textEls = article.querySelectorAll('[data-testid="tweetText"]');
        const timeEl = article.querySelector('time');
        const timeLink = timeEl ? timeEl.closest('a') : null;

        const permalinks = [];
        if (timeLink) permalinks.push(timeLink.getAttribute('href'));
        article.querySelectorAll('a[href*="/status/"]').forEach((a) => {
            permalinks.push(a.getAttribute('href'));
        });

        const contextEl = article.querySelector('[data-testid="socialContext"]');
        const quoteEl = article.querySelector('div[role="link"] [data-testid="User-Name"]');
        const replyEl = Array.from(article.querySelectorAll('div[dir="ltr"]'))
            .find((d) => (d.innerText || '').startsWith('Replying to'));
        const viewsEl = article.querySelector('a[href$="/analytics"]');

        items.push({
            permalinks: permalinks,
            text: textEls.length ? textEls[0].innerText : '',
            quotedText: textEls.length > 1 ? textEls[1].innerText : '',
            datetime: timeEl ? timeEl.getAttribute('datetime') : null,
            socialContext: contextEl ? contextEl.innerText : '',
            replyContext: replyEl ? replyEl.innerText : '',
            hasQuote: textEls.length > 1 || !!quoteEl,
            likes: label(article, 'like') || label(article, 'unlike'),
            reposts: label(article, 'retweet') || label(article, 'unretweet'),
            replies: label(article, 'reply'),
            views: viewsEl ? (viewsEl.getAttribute('aria-label') || viewsEl.innerText || '') : '',
        });
    });

    return items;
}
"""


def build_url(target: str) -> str:
    """Profile URL for a handle, live-search URL for a "search:" key."""
    if target.startswith(SEARCH_PREFIX):
        query = target[len(SEARCH_PREFIX):].strip()
        return f"{BASE_URL}/search?q={quote(query)}&src=typed_query&f=live"
    return f"{BASE_URL}/{target.lstrip('@')}"


class SocialAdapter:
    """
    Scrapes the latest posts for a handle or search query.

    Strategy:
    1. Open a disposable session (fresh fingerprint + cookies)
    2. Navigate and wait (bounded) for post containers
    3. Scroll a few times to trigger lazy loading
    4. Extract raw items with one DOM script and parse them in Python
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        navigation_timeout_ms: int = 30_000,
        content_wait_timeout_ms: int = 15_000,
        settle_delay_ms: int = 5_000,
        scroll_cycles: int = 2,
        scroll_delay_ms: int = 2_000,
        max_posts: int = 10,
    ):
        self.session_provider = session_provider
        self.navigation_timeout_ms = navigation_timeout_ms
        self.content_wait_timeout_ms = content_wait_timeout_ms
        self.settle_delay_ms = settle_delay_ms
        self.scroll_cycles = scroll_cycles
        self.scroll_delay_ms = scroll_delay_ms
        self.max_posts = max_posts

    async def fetch(self, entity_key: str) -> List[RawObservation]:
        """Latest posts for the entity as observations, most recent first."""
        posts = await self.fetch_posts(entity_key)
        return [post.to_observation(entity_key) for post in posts]

    async def fetch_posts(self, target: str) -> List[Post]:
        """
        Scrape a profile or live search.

        Never raises: any failure is logged and yields an empty list.

        Args:
            target: Handle ("elonmusk") or search key ("search:$BONK")

        Returns:
            Up to max_posts posts, most recent first
        """
        url = build_url(target)
        logger.info(f"Scraping {target} from {url}")

        try:
            async with self.session_provider.session() as session:
                page = session.page
                await page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)
                await self._wait_for_posts(page, target)

                for _ in range(self.scroll_cycles):
                    await page.evaluate("window.scrollBy(0, 1000)")
                    await page.wait_for_timeout(self.scroll_delay_ms)

                items = await page.evaluate(EXTRACT_POSTS_JS)

        except PlaywrightTimeout:
            logger.warning(f"Timeout loading {url}")
            return []
        except PlaywrightError as e:
            logger.error(f"Browser error scraping {target}: {e}")
            return []
        except Exception as e:
            logger.error(f"Error scraping {target}: {e}")
            return []

        posts = parse_raw_posts(items, target, limit=self.max_posts)
        logger.info(f"Found {len(posts)} posts for {target}")
        return posts

    async def _wait_for_posts(self, page, target: str):
        """Wait for post containers, falling back to a fixed settle delay."""
        try:
            await page.wait_for_selector(POST_SELECTOR, timeout=self.content_wait_timeout_ms)
        except PlaywrightTimeout:
            logger.debug(f"No posts rendered for {target} after {self.content_wait_timeout_ms}ms")
            await page.wait_for_timeout(self.settle_delay_ms)
