"""Fake Playwright objects for session and scraper tests."""

import pytest


class FakePage:
    def __init__(self, items=None, goto_error=None, wait_error=None, evaluate_error=None):
        self.items = items or []
        self.goto_error = goto_error
        self.wait_error = wait_error
        self.evaluate_error = evaluate_error
        self.default_timeout = None
        self.calls = []

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout

    async def goto(self, url, wait_until=None, timeout=None):
        self.calls.append(("goto", url))
        if self.goto_error:
            raise self.goto_error

    async def wait_for_selector(self, selector, timeout=None):
        self.calls.append(("wait_for_selector", selector))
        if self.wait_error:
            raise self.wait_error

    async def wait_for_timeout(self, timeout):
        self.calls.append(("wait_for_timeout", timeout))

    async def evaluate(self, script):
        if script.startswith("window.scrollBy"):
            self.calls.append(("scroll", script))
            return None
        self.calls.append(("extract", None))
        if self.evaluate_error:
            raise self.evaluate_error
        return self.items


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.options = {}
        self.cookies = []
        self.init_scripts = []
        self.closed = False

    async def add_cookies(self, cookies):
        self.cookies.extend(cookies)

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, context, context_error=None):
        self.context = context
        self.context_error = context_error
        self.closed = False

    async def new_context(self, **options):
        if self.context_error:
            raise self.context_error
        self.context.options = options
        return self.context

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser):
        self.browser = browser
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        return self.browser


class FakePlaywright:
    def __init__(self, page, context_error=None):
        self.page = page
        self.context = FakeContext(page)
        self.browser = FakeBrowser(self.context, context_error=context_error)
        self.chromium = FakeChromium(self.browser)
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakeManager:
    """Stands in for the object async_playwright() returns."""

    def __init__(self, playwright):
        self.playwright = playwright

    async def start(self):
        return self.playwright


@pytest.fixture
def make_playwright():
    """
    Build a fake Playwright stack.

    Returns (playwright, factory); pass factory as playwright_factory.
    """
    def _make(page=None, context_error=None):
        playwright = FakePlaywright(page or FakePage(), context_error=context_error)
        return playwright, lambda: FakeManager(playwright)
    return _make


@pytest.fixture
def make_page():
    """FakePage factory."""
    return FakePage
