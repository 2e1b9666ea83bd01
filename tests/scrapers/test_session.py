"""Tests for the browser session provider."""

import random

import pytest

from solcerer.scrapers import SessionCredentials, SessionProvider
from solcerer.scrapers.session import LOCALES, STEALTH_JS, TIMEZONES, USER_AGENTS, VIEWPORTS


class TestPickFingerprint:
    def test_drawn_from_pools(self):
        provider = SessionProvider(rng=random.Random(7))

        fingerprint = provider.pick_fingerprint()

        assert fingerprint.viewport in VIEWPORTS
        assert fingerprint.timezone_id in TIMEZONES
        assert fingerprint.locale in LOCALES
        assert fingerprint.user_agent in USER_AGENTS

    def test_seeded_rng_is_reproducible(self):
        first = SessionProvider(rng=random.Random(3)).pick_fingerprint()
        second = SessionProvider(rng=random.Random(3)).pick_fingerprint()

        assert first == second


class TestSessionCredentials:
    def test_cookies_for_x(self):
        cookies = SessionCredentials("token", "csrf").to_cookies()

        assert [c["name"] for c in cookies] == ["auth_token", "ct0"]
        assert all(c["domain"] == ".x.com" for c in cookies)

    def test_missing_values_are_skipped(self):
        credentials = SessionCredentials("token", "")

        assert not credentials.is_complete
        assert [c["name"] for c in credentials.to_cookies()] == ["auth_token"]


class TestSession:
    async def test_configures_context(self, make_playwright):
        playwright, factory = make_playwright()
        provider = SessionProvider(
            SessionCredentials("token", "csrf"),
            headless=True,
            default_timeout_ms=12_000,
            rng=random.Random(1),
            playwright_factory=factory,
        )

        async with provider.session() as session:
            assert session.page is playwright.page
            options = playwright.context.options
            assert options["viewport"] == session.fingerprint.viewport
            assert options["locale"] == session.fingerprint.locale
            assert options["timezone_id"] == session.fingerprint.timezone_id
            assert options["user_agent"] == session.fingerprint.user_agent

        assert playwright.chromium.launch_kwargs["headless"] is True
        assert {c["name"] for c in playwright.context.cookies} == {"auth_token", "ct0"}
        assert playwright.context.init_scripts == [STEALTH_JS]
        assert playwright.page.default_timeout == 12_000

    async def test_tears_down_after_success(self, make_playwright):
        playwright, factory = make_playwright()
        provider = SessionProvider(playwright_factory=factory)

        async with provider.session():
            pass

        assert playwright.context.closed
        assert playwright.browser.closed
        assert playwright.stopped

    async def test_tears_down_after_failure(self, make_playwright):
        playwright, factory = make_playwright()
        provider = SessionProvider(playwright_factory=factory)

        with pytest.raises(RuntimeError):
            async with provider.session():
                raise RuntimeError("navigation blew up")

        assert playwright.context.closed
        assert playwright.browser.closed
        assert playwright.stopped

    async def test_partial_setup_is_released(self, make_playwright):
        playwright, factory = make_playwright(context_error=RuntimeError("no context"))
        provider = SessionProvider(playwright_factory=factory)

        with pytest.raises(RuntimeError):
            async with provider.session():
                pass

        assert playwright.browser.closed
        assert playwright.stopped
        assert not playwright.context.closed

    async def test_no_cookies_without_credentials(self, make_playwright):
        playwright, factory = make_playwright()

        async with SessionProvider(playwright_factory=factory).session():
            pass

        assert playwright.context.cookies == []
