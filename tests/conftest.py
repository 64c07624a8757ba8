"""
Shared fakes for the scanner tests.

Nothing here starts a browser: ``FakePage`` / ``FakeSession`` stand in for
the Playwright objects the orchestrator and analyzers talk to.
"""

from contextlib import asynccontextmanager
from typing import Dict, List

import pytest

from trustscan.analyzers.base import BaseAnalyzer
from trustscan.models import Category, Issue, PageLoad, PerfMetrics, Severity
from trustscan.utils import canonical_url


class FakePage:
    """Records ``evaluate`` calls and answers them from a canned value."""

    def __init__(self, evaluate_result=None, html="", evaluate_error=None):
        self.url = "about:blank"
        self.evaluate_result = evaluate_result
        self.evaluate_error = evaluate_error
        self.html = html
        self.evaluate_calls: List[tuple] = []
        self.script_tags: List[dict] = []
        self.closed = False

    async def evaluate(self, script, *args):
        self.evaluate_calls.append((script, args))
        if self.evaluate_error is not None:
            raise self.evaluate_error
        if callable(self.evaluate_result):
            return self.evaluate_result(*args)
        return self.evaluate_result

    async def content(self):
        return self.html

    async def add_script_tag(self, **kwargs):
        self.script_tags.append(kwargs)

    async def close(self):
        self.closed = True


class FakeSession:
    """Serves a static link map instead of a real site."""

    def __init__(self, links: Dict[str, List[str]] = None, fail_urls=()):
        self.links = {canonical_url(k): list(v) for k, v in (links or {}).items()}
        self.fail_urls = {canonical_url(u) for u in fail_urls}
        self.visited: List[str] = []
        self.pages: List[FakePage] = []
        self.logins = 0
        self.entered = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    @asynccontextmanager
    async def page(self):
        page = FakePage()
        self.pages.append(page)
        try:
            yield page
        finally:
            await page.close()

    async def visit_page(self, page, url):
        """Never raises, like ``BrowserSession.visit_page``."""
        self.visited.append(url)
        if canonical_url(url) in self.fail_urls:
            page.url = "chrome-error://chromewebdata/"
            return PageLoad(loaded=False)
        page.url = url
        return PageLoad(loaded=True, metrics=PerfMetrics(ttfb=12.0, fcp=40.0, dom_load=80.0))

    async def extract_links(self, page):
        return list(self.links.get(canonical_url(page.url), []))

    async def perform_login(self, page):
        self.logins += 1
        return True


class OneIssueAnalyzer(BaseAnalyzer):
    """Reports a single Low content issue per page."""

    @property
    def name(self) -> str:
        return "one-issue"

    async def analyze(self, page, url):
        return [Issue(
            category=Category.CONTENT,
            severity=Severity.LOW,
            url=url,
            description="Placeholder finding",
            remediation="Fix the placeholder.",
        )]


class ExplodingAnalyzer(BaseAnalyzer):

    @property
    def name(self) -> str:
        return "exploding"

    async def analyze(self, page, url):
        raise RuntimeError("analyzer bug")


def make_issue(category=Category.CONTENT, severity=Severity.LOW, url="https://example.com",
               description="Something is off", remediation="Fix it."):
    return Issue(
        category=category,
        severity=severity,
        url=url,
        description=description,
        remediation=remediation,
    )


@pytest.fixture
def fake_page():
    return FakePage()
