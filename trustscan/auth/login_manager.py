"""
Form login for ``BasicAuth`` scans.

The username, password and submit controls are located by trying a list of
common selectors in order. When no submit control is visible the password
field receives Enter instead. Logins that stay on the same document (SPAs)
are accepted without a navigation. A page without recognisable fields is
skipped with a warning. Credential values are never written to the log.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeout

from .variants import BasicAuth

logger = logging.getLogger(__name__)

USER_FIELDS = (
    "input[type=email]", "#email", "#username", "#userName", "#user", "#login",
    "input[name=email]", "input[name=username]", "input[name=user]", "input[name=login]",
    "input[name*=user]", "input[name*=login]",
    "input[autocomplete=username]",
    "input[type=text]",
)
PASSWORD_FIELDS = (
    "input[type=password]", "#password", "#pwd",
    "input[name=password]", "input[name=pwd]",
)
SUBMIT_CONTROLS = (
    "button[type=submit]", "input[type=submit]",
    "button:has-text('Sign in')", "button:has-text('Sign In')",
    "button:has-text('Log in')", "button:has-text('Login')",
)

_FIELD_TIMEOUT_MS = 5000
_SUBMIT_NAVIGATION_TIMEOUT_MS = 10_000
_ENTER_SETTLE_S = 3.0


class LoginManager:
    """Fills and submits a login form found by selector heuristics.

    Usage::

        manager = LoginManager(BasicAuth(login_url, "admin", "secret"))
        await manager.login(page)
    """

    def __init__(self, auth: BasicAuth):
        self.auth = auth

    async def login(self, page: Page) -> bool:
        """Navigate to the login URL and submit the form.

        Returns:
            True if a form was found and submitted, False otherwise.
            Never raises for a missing form.
        """
        logger.info(f"[AUTH] Attempting form login at {self.auth.login_url[:80]}")

        try:
            await page.goto(self.auth.login_url, wait_until="networkidle")
        except PlaywrightTimeout:
            logger.warning("[AUTH] Login page did not reach network idle; filling the form anyway")

        user_field = await self._find_field(page, USER_FIELDS)
        pass_field = await self._find_field(page, PASSWORD_FIELDS)
        if not user_field or not pass_field:
            logger.warning("[AUTH] No username or password field found; scanning unauthenticated")
            return False

        await user_field.fill(self.auth.username)
        await pass_field.fill(self.auth.password)

        submit = await self._find_field(page, SUBMIT_CONTROLS)
        if submit:
            try:
                async with page.expect_navigation(timeout=_SUBMIT_NAVIGATION_TIMEOUT_MS):
                    await submit.click()
            except PlaywrightTimeout:
                logger.info("[AUTH] No navigation after submit (SPA login?)")
            logger.info("[AUTH] Login form submitted")
        else:
            await pass_field.press("Enter")
            logger.info("[AUTH] No submit control found; pressed Enter")
            await asyncio.sleep(_ENTER_SETTLE_S)

        return True

    async def _find_field(self, page: Page, selectors: Sequence[str]):
        """Return the first visible element matching any selector, or None."""
        for selector in selectors:
            try:
                handle = await page.query_selector(selector)
                if handle and await handle.is_visible():
                    logger.debug(f"[AUTH] Matched {selector}")
                    return handle
            except Exception:
                continue

        # Last resort: wait briefly for the combined selector to render
        try:
            return await page.wait_for_selector(
                ", ".join(selectors), timeout=_FIELD_TIMEOUT_MS, state="visible"
            )
        except PlaywrightTimeout:
            return None
