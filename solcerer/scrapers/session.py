"""
Browser Session Provider
========================

Issues disposable, fingerprint-randomized Playwright sessions for X.

Every acquisition:
1. Picks a fingerprint (viewport, timezone, locale, user agent) from a pool
2. Launches Chromium with an isolated context carrying that fingerprint
3. Injects the auth_token / ct0 session cookies
4. Patches automation signals before any navigation
5. Tears everything down on exit, success or failure
"""

import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Dict, List, Optional

from playwright.async_api import Page, async_playwright

logger = logging.getLogger(__name__)

COOKIE_DOMAIN = ".x.com"

VIEWPORTS: List[Dict[str, int]] = [
    {"width": 1920, "height": 1080},
    {"width": 1536, "height": 864},
    {"width": 1440, "height": 900},
    {"width": 1366, "height": 768},
    {"width": 1280, "height": 800},
]

TIMEZONES = [
    "America/New_York",
    "America/Chicago",
    "America/Los_Angeles",
    "Europe/London",
    "Europe/Berlin",
]

LOCALES = ["en-US", "en-GB", "en-CA"]

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
]

# Runs in every frame before page scripts
STEALTH_JS = """
(() => {
    Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
    Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
    Object.defineProperty(navigator, 'languages', { get: () => [navigator.language, 'en'] });
    window.chrome = window.chrome || { runtime: {} };
    const originalQuery = window.navigator.permissions && window.navigator.permissions.query;
    if (originalQuery) {
        window.navigator.permissions.query = (parameters) => (
            parameters.name === 'notifications'
                ? Promise.resolve({ state: Notification.permission })
                : originalQuery(parameters)
        );
    }
})();
"""

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
]


@dataclass
class Fingerprint:
    """Browser identity presented for one session."""
    viewport: Dict[str, int]
    timezone_id: str
    locale: str
    user_agent: str


@dataclass
class SessionCredentials:
    """Cookies lifted from a logged-in X browser session."""
    auth_token: str = ""
    ct0: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.auth_token and self.ct0)

    def to_cookies(self) -> List[dict]:
        cookies = []
        for name, value in (("auth_token", self.auth_token), ("ct0", self.ct0)):
            if not value:
                continue
            cookies.append({
                "name": name,
                "value": value,
                "domain": COOKIE_DOMAIN,
                "path": "/",
                "httpOnly": name == "auth_token",
                "secure": True,
                "sameSite": "None",
            })
        return cookies


@dataclass
class BrowserSession:
    """A live page bound to one fingerprint. Valid only inside session()."""
    page: Page
    fingerprint: Fingerprint


class SessionProvider:
    """
    Produces one disposable browser session per fetch.

    Usage:
        provider = SessionProvider(SessionCredentials(auth_token, ct0))
        async with provider.session() as session:
            await session.page.goto(url)
    """

    def __init__(
        self,
        credentials: Optional[SessionCredentials] = None,
        headless: bool = True,
        default_timeout_ms: int = 30_000,
        rng: Optional[random.Random] = None,
        playwright_factory: Callable = async_playwright,
    ):
        self.credentials = credentials or SessionCredentials()
        self.headless = headless
        self.default_timeout_ms = default_timeout_ms
        self._rng = rng or random.Random()
        self._playwright_factory = playwright_factory

        if not self.credentials.is_complete:
            logger.warning("X session cookies not fully configured; timelines may render partially")

    def pick_fingerprint(self) -> Fingerprint:
        """Draw a fresh fingerprint tuple from the candidate pools."""
        return Fingerprint(
            viewport=dict(self._rng.choice(VIEWPORTS)),
            timezone_id=self._rng.choice(TIMEZONES),
            locale=self._rng.choice(LOCALES),
            user_agent=self._rng.choice(USER_AGENTS),
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[BrowserSession]:
        """Launch an isolated, authenticated browser context for one fetch."""
        fingerprint = self.pick_fingerprint()
        playwright = None
        browser = None
        context = None

        try:
            playwright = await self._playwright_factory().start()
            browser = await playwright.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
            )
            context = await browser.new_context(
                viewport=fingerprint.viewport,
                timezone_id=fingerprint.timezone_id,
                locale=fingerprint.locale,
                user_agent=fingerprint.user_agent,
            )
            cookies = self.credentials.to_cookies()
            if cookies:
                await context.add_cookies(cookies)
            await context.add_init_script(STEALTH_JS)

            page = await context.new_page()
            page.set_default_timeout(self.default_timeout_ms)

            logger.debug(
                f"Session opened ({fingerprint.viewport['width']}x{fingerprint.viewport['height']}, "
                f"{fingerprint.locale}, {fingerprint.timezone_id})"
            )
            yield BrowserSession(page=page, fingerprint=fingerprint)

        finally:
            await self._close(playwright, browser, context)

    async def _close(self, playwright, browser, context):
        """Release every resource that was opened, ignoring teardown errors."""
        for resource, closer in ((context, "close"), (browser, "close"), (playwright, "stop")):
            if resource is None:
                continue
            try:
                await getattr(resource, closer)()
            except Exception as e:
                logger.debug(f"Error during session teardown: {e}")
        logger.debug("Session closed")
