"""
Network Observer
================
Session-lifetime listener for ``response`` and ``console`` events.

Unlike the per-page analyzers it is not run by the pipeline: the session
forwards events from every page it opens, and the collected issues form
the *global* stream handed to the aggregator at the end of the scan.

Rules:
    - HTTP status >= 400 on any response   → Network  (>= 500 High, else Medium)
    - TTFB > 1000 ms                       → Performance (> 3000 ms High)
    - console message of type ``error``    → Functional, Medium
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from ..models import Category, Issue, Severity

logger = logging.getLogger(__name__)

SLOW_TTFB_MS = 1000
VERY_SLOW_TTFB_MS = 3000
_MAX_CONSOLE_TEXT = 300


def response_issues(url: str, status: int, ttfb_ms: Optional[float]) -> List[Issue]:
    """Issues for one observed response."""
    issues: List[Issue] = []

    if status >= 400:
        issues.append(Issue(
            category=Category.NETWORK,
            severity=Severity.HIGH if status >= 500 else Severity.MEDIUM,
            url=url,
            description=f"HTTP Error {status} for resource",
            user_impact="Content failed to load, potentially leaving broken UI or functionality.",
            remediation="Check server logs or file paths.",
            location="Global",
        ))

    if ttfb_ms is not None and ttfb_ms > SLOW_TTFB_MS:
        issues.append(Issue(
            category=Category.PERFORMANCE,
            severity=Severity.HIGH if ttfb_ms > VERY_SLOW_TTFB_MS else Severity.MEDIUM,
            url=url,
            description=f"Slow Server Response (TTFB: {round(ttfb_ms)}ms)",
            user_impact="User has to wait a long time before seeing any content.",
            remediation="Optimize server-side processing or database queries.",
            location="Global",
        ))

    return issues


def console_issue(message_type: str, text: str, page_url: str) -> Optional[Issue]:
    """Issue for one console message, or None if it is not an error."""
    if message_type != "error":
        return None
    return Issue(
        category=Category.FUNCTIONAL,
        severity=Severity.MEDIUM,
        url=page_url,
        description=f"JavaScript Error: {text[:_MAX_CONSOLE_TEXT]}",
        user_impact="Features may not work as expected.",
        remediation="Fix the JavaScript exception thrown in the console.",
    )


def _ttfb(response) -> Optional[float]:
    try:
        timing = response.request.timing
    except Exception:
        return None
    start = timing.get("responseStart", -1) if timing else -1
    return float(start) if start is not None and start >= 0 else None


class NetworkObserver:
    """Collects global issues from browser events. Async-safe."""

    def __init__(self):
        self._issues: List[Issue] = []
        self._lock = asyncio.Lock()
        self.responses_seen = 0

    async def on_response(self, response) -> None:
        try:
            found = response_issues(response.url, response.status, _ttfb(response))
        except Exception as e:
            logger.debug(f"[NETWORK] Could not inspect response: {e}")
            return
        async with self._lock:
            self.responses_seen += 1
            self._issues.extend(found)
        for issue in found:
            logger.debug(f"[NETWORK] {issue.description} — {issue.url[:80]}")

    async def on_console(self, message, page_url: str) -> None:
        try:
            issue = console_issue(message.type, message.text, page_url)
        except Exception as e:
            logger.debug(f"[NETWORK] Could not inspect console message: {e}")
            return
        if issue is None:
            return
        async with self._lock:
            self._issues.append(issue)

    async def snapshot(self) -> List[Issue]:
        """Copy of every global issue collected so far, in arrival order."""
        async with self._lock:
            return list(self._issues)
