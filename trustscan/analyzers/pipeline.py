"""
Analyzer Pipeline
=================
Runs every registered analyzer against one loaded page, concurrently.

Failure isolation:
    An analyzer that raises is logged and contributes zero issues. The
    other analyzers' results are kept and the page itself does not fail.

Output order is registration order, independent of completion order.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import List, Sequence

from ..models import Issue
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)


class AnalyzerPipeline:
    """Fan-out of ``analyze(page, url)`` over a fixed analyzer list."""

    def __init__(self, analyzers: Sequence[BaseAnalyzer]):
        self.analyzers: List[BaseAnalyzer] = list(analyzers)
        self.failures: Counter = Counter()

    async def run(self, page, url: str) -> List[Issue]:
        active = [a for a in self.analyzers if a.should_run(url)]
        skipped = len(self.analyzers) - len(active)
        if skipped:
            logger.debug(f"[ANALYZER] {skipped} analyzer(s) sampled out for {url[:80]}")

        results = await asyncio.gather(
            *(a.analyze(page, url) for a in active),
            return_exceptions=True,
        )

        issues: List[Issue] = []
        for analyzer, result in zip(active, results):
            if isinstance(result, BaseException):
                self.failures[analyzer.name] += 1
                logger.warning(
                    f"[ANALYZER] {analyzer.name} failed on {url[:80]}: "
                    f"{type(result).__name__}: {result}"
                )
                continue
            issues.extend(result or [])

        logger.info(f"[ANALYZER] {len(issues)} issues on {url[:80]} ({len(active)} analyzers)")
        return issues
