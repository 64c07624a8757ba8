"""
Tests for the Playwright session wrapper, using stand-ins for the
context, page and route objects instead of a real browser.
"""

import asyncio

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeout

from trustscan.auth.variants import CookieAuth, CookieSpec
from trustscan.errors import SessionError
from trustscan.run_config import ScanConfig
from trustscan.session import BrowserSession


class FakeRequest:
    def __init__(self, resource_type, url):
        self.resource_type = resource_type
        self.url = url


class FakeRoute:
    def __init__(self, resource_type, url="https://example.com/app.js"):
        self.request = FakeRequest(resource_type, url)
        self.outcome = None

    async def abort(self):
        self.outcome = "aborted"

    async def continue_(self):
        self.outcome = "continued"


class NavPage:
    """Page whose ``goto`` and DOM wait can be told to fail."""

    def __init__(self, goto_error=None, dom_error=None, evaluate_result=None, evaluate_error=None):
        self.goto_error = goto_error
        self.dom_error = dom_error
        self.evaluate_result = evaluate_result
        self.evaluate_error = evaluate_error
        self.load_states = []
        self.init_scripts = []
        self.handlers = {}

    async def goto(self, url, **kwargs):
        if self.goto_error:
            raise self.goto_error

    async def wait_for_load_state(self, state):
        self.load_states.append(state)
        if self.dom_error:
            raise self.dom_error

    async def evaluate(self, script):
        if self.evaluate_error:
            raise self.evaluate_error
        return self.evaluate_result

    async def add_init_script(self, script=None):
        self.init_scripts.append(script)

    def on(self, event, handler):
        self.handlers[event] = handler

    async def close(self):
        pass


class FakeContext:
    def __init__(self):
        self.cookies = []
        self.pages = []
        self.closed = 0

    async def add_cookies(self, cookies):
        self.cookies.extend(cookies)

    async def new_page(self):
        page = NavPage()
        self.pages.append(page)
        return page

    async def close(self):
        self.closed += 1


def make_session(auth=None):
    return BrowserSession(ScanConfig(start_url="https://example.com", auth=auth))


class TestRequestFilter:

    @pytest.mark.parametrize("resource_type", ["image", "media", "font"])
    def test_heavy_assets_aborted(self, resource_type):
        route = FakeRoute(resource_type, "https://example.com/hero.bin")
        asyncio.run(make_session()._filter_request(route))
        assert route.outcome == "aborted"

    @pytest.mark.parametrize("url", [
        "https://www.googletagmanager.com/gtm.js?id=GTM-1",
        "https://www.google-analytics.com/analytics.js",
        "https://static.hotjar.com/c/hotjar-1.js",
        "https://cdn.segment.com/analytics.min.js",
    ])
    def test_tracker_scripts_aborted(self, url):
        route = FakeRoute("script", url)
        asyncio.run(make_session()._filter_request(route))
        assert route.outcome == "aborted"

    @pytest.mark.parametrize("resource_type, url", [
        ("document", "https://example.com/"),
        ("script", "https://example.com/app.js"),
        ("stylesheet", "https://example.com/site.css"),
        ("xhr", "https://www.google-analytics.com/collect"),
    ])
    def test_everything_else_continues(self, resource_type, url):
        route = FakeRoute(resource_type, url)
        asyncio.run(make_session()._filter_request(route))
        assert route.outcome == "continued"


class TestVisitPage:

    def test_loaded_with_metrics(self):
        page = NavPage(evaluate_result={"ttfb": 120.44, "fcp": 300, "domLoad": -4})
        load = asyncio.run(make_session().visit_page(page, "https://example.com"))
        assert load.loaded
        assert load.metrics.ttfb == 120.4
        assert load.metrics.fcp == 300.0
        assert load.metrics.dom_load == 0.0
        assert page.load_states == []

    def test_network_idle_timeout_falls_back_to_dom(self):
        page = NavPage(goto_error=PlaywrightTimeout("networkidle"), evaluate_result=None)
        load = asyncio.run(make_session().visit_page(page, "https://example.com"))
        assert page.load_states == ["domcontentloaded"]
        assert load.loaded
        assert load.metrics is None

    def test_navigation_error_reported_not_raised(self):
        page = NavPage(goto_error=RuntimeError("net::ERR_NAME_NOT_RESOLVED"))
        load = asyncio.run(make_session().visit_page(page, "https://dns-fails.invalid"))
        assert not load.loaded
        assert load.metrics is None

    def test_failed_dom_fallback_is_not_loaded(self):
        page = NavPage(goto_error=PlaywrightTimeout("networkidle"),
                       dom_error=RuntimeError("target closed"))
        load = asyncio.run(make_session().visit_page(page, "https://example.com"))
        assert not load.loaded

    def test_metrics_error_still_loaded(self):
        page = NavPage(evaluate_error=RuntimeError("context destroyed"))
        load = asyncio.run(make_session().visit_page(page, "https://example.com"))
        assert load.loaded
        assert load.metrics is None


class TestExtractLinks:

    def test_non_strings_and_empty_dropped(self):
        page = NavPage(evaluate_result=["/a", None, "", 7, "/b"])
        assert asyncio.run(make_session().extract_links(page)) == ["/a", "/b"]

    def test_evaluate_error_gives_no_links(self):
        page = NavPage(evaluate_error=RuntimeError("detached"))
        assert asyncio.run(make_session().extract_links(page)) == []


class TestAuthInjection:

    def test_cookies_and_local_storage_applied(self):
        spec = CookieSpec("sid", "abc", "example.com")
        session = make_session(CookieAuth(cookies=(spec,), local_storage={"token": "t-1"}))
        context = FakeContext()
        session._context = context

        async def scenario():
            await session._apply_cookie_auth()
            return await session.create_page()

        page = asyncio.run(scenario())
        assert context.cookies == [spec.to_playwright()]
        assert len(page.init_scripts) == 1
        assert '"token": "t-1"' in page.init_scripts[0]
        assert "localStorage.setItem" in page.init_scripts[0]

    def test_anonymous_session_adds_nothing(self):
        session = make_session()
        context = FakeContext()
        session._context = context

        async def scenario():
            await session._apply_cookie_auth()
            return await session.create_page()

        page = asyncio.run(scenario())
        assert context.cookies == []
        assert page.init_scripts == []

    def test_create_page_before_init(self):
        with pytest.raises(SessionError):
            asyncio.run(make_session().create_page())

    def test_close_is_idempotent(self):
        session = make_session()
        context = FakeContext()
        session._context = context

        async def scenario():
            await session.close()
            await session.close()

        asyncio.run(scenario())
        assert context.closed == 1
