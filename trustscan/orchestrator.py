"""
Crawl Orchestrator
==================
Batch-barrier breadth-first crawl over one ``BrowserSession``.

Architecture:
- ``Frontier`` owns the queue and the visited set (lock-guarded)
- Up to ``concurrency`` entries are popped per batch and run with
  ``asyncio.gather``; the next batch starts only when every task of the
  current one has finished
- Each task: reserve URL → open page → navigate → analyzer pipeline →
  record ``PageResult`` → enqueue same-origin links at ``depth + 1``
- A page that fails to load keeps its visited slot but is neither
  analyzed nor recorded
- The page is closed on every exit path; a failing task is logged and
  never retried, and its siblings are unaffected

State machine: ``IDLE → RUNNING → DRAINED``. An orchestrator runs once.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .aggregator import IssueAggregator
from .analyzers.pipeline import AnalyzerPipeline
from .frontier import Frontier, FrontierEntry
from .models import PageResult
from .monitor import PageTiming, ScanMonitor
from .run_config import ScanConfig
from .utils import resolve_links

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str, Dict[str, Any]], None]


class CrawlState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINED = "drained"


class CrawlOrchestrator:
    """
    Drives one crawl to completion.

    Usage::

        orchestrator = CrawlOrchestrator(config, session, pipeline)
        orchestrator.set_progress_callback(lambda done, url, stats: ...)
        results = await orchestrator.run()
    """

    def __init__(
        self,
        config: ScanConfig,
        session,
        pipeline: AnalyzerPipeline,
        aggregator: Optional[IssueAggregator] = None,
        monitor: Optional[ScanMonitor] = None,
        frontier: Optional[Frontier] = None,
    ):
        self.config = config
        self.session = session
        self.pipeline = pipeline
        self.aggregator = aggregator or IssueAggregator()
        self.monitor = monitor or ScanMonitor()
        self.frontier = frontier or Frontier(config.max_pages, config.max_depth)
        self.state = CrawlState.IDLE
        self._pages_done = 0
        self._progress_callback: Optional[ProgressCallback] = None

    def set_progress_callback(self, callback: ProgressCallback) -> None:
        """Set callback: callback(pages_done, url, stats)"""
        self._progress_callback = callback

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(self) -> List[PageResult]:
        if self.state is not CrawlState.IDLE:
            raise RuntimeError(f"Orchestrator already {self.state.value}")
        self.state = CrawlState.RUNNING

        await self.frontier.push(self.config.start_url, 0)
        await self.monitor.record_enqueue(1)
        logger.info(
            f"[CRAWL] Starting crawl of {self.config.start_url} "
            f"(max_pages={self.config.max_pages}, max_depth={self.config.max_depth}, "
            f"batch={self.config.concurrency})"
        )

        batch_no = 0
        while not self.frontier.should_stop():
            batch = await self.frontier.pop_batch(self.config.concurrency)
            if not batch:
                break
            batch_no += 1
            logger.info(f"[CRAWL] Batch {batch_no}: {len(batch)} pages")

            outcomes = await asyncio.gather(
                *(self._process(entry) for entry in batch),
                return_exceptions=True,
            )
            for entry, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(f"[CRAWL] Task for {entry.url[:80]} crashed: {outcome}")
            await self.monitor.record_batch()

        self.state = CrawlState.DRAINED
        results = self.aggregator.page_results
        logger.info(
            f"[CRAWL] Drained — {len(results)} pages scanned, "
            f"{self.frontier.queued_count} left in queue"
        )
        return results

    @property
    def stop_reason(self) -> str:
        if self.frontier.visited_count >= self.config.max_pages:
            return f"MAX_PAGES limit reached ({self.config.max_pages})"
        return "Queue exhausted"

    # ------------------------------------------------------------------
    # Per-page task
    # ------------------------------------------------------------------

    async def _process(self, entry: FrontierEntry) -> None:
        url, depth = entry.url, entry.depth
        if depth > self.config.max_depth:
            return
        if not await self.frontier.reserve(url):
            logger.debug(f"[CRAWL] Skip {url[:80]} (visited or cap reached)")
            return

        timing = PageTiming(url=url)
        t_start = time.monotonic()
        try:
            async with self.session.page() as page:
                load = await self.session.visit_page(page, url)
                t_nav = time.monotonic()
                timing.navigate_ms = (t_nav - t_start) * 1000
                if not load.loaded:
                    timing.status = "failed"
                    timing.total_ms = timing.navigate_ms
                    await self.monitor.record_page(timing)
                    logger.warning(f"[CRAWL] Skipping {url[:100]}: page did not load")
                    return

                issues = await self.pipeline.run(page, url)
                timing.analyze_ms = (time.monotonic() - t_nav) * 1000

                hrefs = await self.session.extract_links(page)
                links = resolve_links(hrefs, self.config.start_url)
        except Exception as e:
            timing.status = "failed"
            timing.total_ms = (time.monotonic() - t_start) * 1000
            await self.monitor.record_page(timing)
            logger.error(f"[CRAWL] Failed to crawl {url[:100]}: {e}")
            return

        result = PageResult(
            url=url,
            issues=tuple(issues),
            links=tuple(links),
            depth=depth,
            perf_metrics=load.metrics,
        )
        await self.aggregator.add_page(result)

        enqueued = 0
        if depth < self.config.max_depth:
            for link in links:
                if await self.frontier.push(link, depth + 1):
                    enqueued += 1
            if enqueued:
                await self.monitor.record_enqueue(enqueued)

        timing.total_ms = (time.monotonic() - t_start) * 1000
        timing.issue_count = len(issues)
        timing.link_count = len(links)
        await self.monitor.record_page(timing)

        self._pages_done += 1
        logger.info(
            f"[CRAWL] ✓ {url[:80]} depth={depth} issues={len(issues)} "
            f"links={len(links)} (+{enqueued} queued) {timing.total_ms:.0f}ms"
        )
        self._notify(url)

    def _notify(self, url: str) -> None:
        if not self._progress_callback:
            return
        stats = {
            "visited": self.frontier.visited_count,
            "queued": self.frontier.queued_count,
            "max_pages": self.config.max_pages,
        }
        try:
            self._progress_callback(self._pages_done, url, stats)
        except Exception as e:
            logger.debug(f"[CRAWL] Progress callback error: {e}")
