"""
Playwright browser session shared by all pages of one scan.

A single browser and a single BrowserContext are launched per scan so
cookies set by a login carry over to every page. Each crawl task borrows a
short-lived page through ``page()``. Heavy assets and third-party trackers
are aborted at the context router. Response and console events from every
page go to the network observer.

``init`` raises ``SessionError`` when Chromium or its context cannot be
created; ``visit_page`` reports navigation failures as ``PageLoad(loaded=False)``.
"""

from __future__ import annotations

import json
import logging
import re
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeout

from .auth.login_manager import LoginManager
from .auth.variants import BasicAuth, CookieAuth
from .errors import SessionError
from .models import PageLoad, PerfMetrics
from .run_config import ScanConfig

logger = logging.getLogger(__name__)

SKIPPED_RESOURCES = {"image", "media", "font"}

TRACKER_SCRIPT_RE = re.compile(
    r"google[-_]?analytics|googletagmanager|doubleclick\.net|facebook\.net"
    r"|hotjar\.|segment\.(?:com|io)|mixpanel\.|amplitude\.",
    re.IGNORECASE,
)

CHROMIUM_FLAGS = (
    "--no-sandbox",
    "--no-first-run",
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-default-apps",
    "--disable-background-networking",
    "--disable-sync",
    "--disable-translate",
)

_PERF_METRICS_JS = """
() => {
    const nav = performance.getEntriesByType('navigation')[0];
    if (!nav) return null;
    const paint = performance.getEntriesByName('first-contentful-paint')[0];
    return {
        ttfb: nav.responseStart - nav.requestStart,
        fcp: paint ? paint.startTime : 0,
        domLoad: nav.domContentLoadedEventEnd - nav.startTime,
    };
}
"""

_LINKS_JS = """
() => {
    const seen = new Set();
    const result = [];
    document.querySelectorAll('a').forEach(a => {
        const href = a.getAttribute('href');
        if (href && !seen.has(href)) {
            seen.add(href);
            result.push(href);
        }
    });
    return result;
}
"""


def _local_storage_script(entries) -> str:
    payload = json.dumps(dict(entries))
    return (
        "(() => {"
        f" const data = {payload};"
        " try { for (const [k, v] of Object.entries(data)) { window.localStorage.setItem(k, v); } }"
        " catch (e) {}"
        " })();"
    )


class BrowserSession:
    """Owns the browser for one scan.

    Usage::

        async with BrowserSession(config, observer=network) as session:
            async with session.page() as page:
                load = await session.visit_page(page, url)
                links = await session.extract_links(page)
    """

    def __init__(self, config: ScanConfig, observer=None):
        self.config = config
        self.observer = observer
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self) -> "BrowserSession":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> None:
        """Start Chromium and the shared context, then install auth and routing."""
        viewport = {"width": self.config.viewport_width, "height": self.config.viewport_height}
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless, args=list(CHROMIUM_FLAGS),
            )
            self._context = await self._browser.new_context(
                user_agent=self.config.user_agent, viewport=viewport,
            )
        except Exception as e:
            logger.error(f"[SESSION] Could not start Chromium: {e}")
            await self.close()
            raise SessionError(f"Failed to start browser: {e}") from e

        await self._apply_cookie_auth()
        await self._context.route("**/*", self._filter_request)
        logger.info(f"[SESSION] Chromium ready (headless={self.config.headless})")

    async def _apply_cookie_auth(self) -> None:
        auth = self.config.auth
        if not isinstance(auth, CookieAuth) or not auth.cookies:
            return
        try:
            await self._context.add_cookies([c.to_playwright() for c in auth.cookies])
            logger.info(f"[AUTH] Added {len(auth.cookies)} session cookies")
        except Exception as e:
            logger.error(f"[AUTH] Failed to add cookies: {e}; continuing unauthenticated")

    async def _filter_request(self, route) -> None:
        kind = route.request.resource_type
        if kind in SKIPPED_RESOURCES or (
            kind == "script" and TRACKER_SCRIPT_RE.search(route.request.url)
        ):
            await route.abort()
        else:
            await route.continue_()

    async def close(self) -> None:
        """Tear down context, browser and driver. Idempotent."""
        context, browser, driver = self._context, self._browser, self._playwright
        self._context = self._browser = self._playwright = None
        for label, closer in (
            ("context", context.close if context else None),
            ("browser", browser.close if browser else None),
            ("driver", driver.stop if driver else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.debug(f"[SESSION] Closing {label}: {e}")

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def create_page(self) -> Page:
        """Open a new page with auth replay and event forwarding attached."""
        if self._context is None:
            raise SessionError("Session not initialized")

        page = await self._context.new_page()

        auth = self.config.auth
        if isinstance(auth, CookieAuth) and auth.local_storage:
            await page.add_init_script(script=_local_storage_script(auth.local_storage))

        if self.observer is not None:
            page.on("response", self.observer.on_response)
            page.on("console", lambda msg: self.observer.on_console(msg, page.url))

        return page

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Yield a fresh page and close it on every exit path."""
        page = await self.create_page()
        try:
            yield page
        finally:
            try:
                await page.close()
            except Exception as e:
                logger.debug(f"[SESSION] Page close: {e}")

    async def visit_page(self, page: Page, url: str) -> PageLoad:
        """Navigate *page* to *url* with the two-tier wait.

        ``networkidle`` is tried first; if it times out the page still counts
        as loaded once ``domcontentloaded`` fires. Never raises: any other
        navigation error comes back as ``PageLoad(loaded=False)``.
        """
        logger.info(f"[CRAWL] Navigating to {url[:100]}")
        try:
            try:
                await page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=self.config.navigation_timeout_ms,
                )
            except PlaywrightTimeout:
                logger.debug(f"[CRAWL] Network idle timed out for {url[:80]}; waiting for DOM")
                await page.wait_for_load_state("domcontentloaded")
        except Exception as e:
            logger.warning(f"[CRAWL] Failed to load {url[:100]}: {e}")
            return PageLoad(loaded=False)

        return PageLoad(loaded=True, metrics=await self._collect_metrics(page))

    async def _collect_metrics(self, page: Page) -> Optional[PerfMetrics]:
        try:
            raw = await page.evaluate(_PERF_METRICS_JS)
        except Exception as e:
            logger.debug(f"[CRAWL] Timing metrics unavailable: {e}")
            return None
        if not raw:
            return None
        return PerfMetrics(
            ttfb=round(max(float(raw.get("ttfb") or 0), 0.0), 1),
            fcp=round(max(float(raw.get("fcp") or 0), 0.0), 1),
            dom_load=round(max(float(raw.get("domLoad") or 0), 0.0), 1),
        )

    async def perform_login(self, page: Page) -> bool:
        """Run the form login for ``BasicAuth`` scans. No-op otherwise."""
        auth = self.config.auth
        if not isinstance(auth, BasicAuth) or not auth.is_complete:
            return False
        try:
            return await LoginManager(auth).login(page)
        except Exception as e:
            logger.error(f"[AUTH] Basic login failed: {e}")
            return False

    async def extract_links(self, page: Page) -> List[str]:
        """Return every distinct ``href`` on the page, in document order."""
        try:
            hrefs = await page.evaluate(_LINKS_JS)
        except Exception as e:
            logger.warning(f"[CRAWL] Failed to extract links: {e}")
            return []
        return [h for h in (hrefs or []) if isinstance(h, str) and h]

