"""
Issue Aggregator
================
Collects the global issue stream (network observer) and every page's
``PageResult``, then merges them into one deduplicated list.

Dedup rule: two issues are the same finding when they share
``(description, url)``. The first occurrence wins and discovery order is
kept: global issues first, then pages in completion order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Sequence, Set, Tuple

from .models import Issue, PageResult

logger = logging.getLogger(__name__)


class IssueAggregator:
    """Async-safe collector shared by every crawl task of one scan."""

    def __init__(self):
        self._global: List[Issue] = []
        self._pages: List[PageResult] = []
        self._lock = asyncio.Lock()

    async def add_global(self, issues: Iterable[Issue]) -> None:
        async with self._lock:
            self._global.extend(issues)

    async def add_page(self, result: PageResult) -> None:
        async with self._lock:
            self._pages.append(result)

    @property
    def page_results(self) -> List[PageResult]:
        return list(self._pages)

    @property
    def global_issues(self) -> List[Issue]:
        return list(self._global)

    async def merged(self) -> List[Issue]:
        """Deduplicated view of everything collected so far."""
        async with self._lock:
            return self.merge(self._global, self._pages)

    # ------------------------------------------------------------------
    # Pure helpers
    # ------------------------------------------------------------------

    @staticmethod
    def merge(global_issues: Sequence[Issue], page_results: Sequence[PageResult]) -> List[Issue]:
        combined: List[Issue] = list(global_issues)
        for result in page_results:
            combined.extend(result.issues)
        unique = IssueAggregator.dedupe(combined)
        if len(unique) != len(combined):
            logger.info(f"[AGGREGATE] {len(combined) - len(unique)} duplicate issues collapsed")
        return unique

    @staticmethod
    def dedupe(issues: Iterable[Issue]) -> List[Issue]:
        """Keep the first issue per ``(description, url)``, preserving order."""
        seen: Set[Tuple[str, str]] = set()
        unique: List[Issue] = []
        for issue in issues:
            key = issue.dedup_key
            if key in seen:
                continue
            seen.add(key)
            unique.append(issue)
        return unique
