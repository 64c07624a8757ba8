"""
Scan Coordinator
================
Wires one scan end to end:

    cache lookup → BrowserSession → (form login) → CrawlOrchestrator
    → IssueAggregator (global + page issues) → ReportAssembler → cache save

Cache policy:
    Only unauthenticated scans touch the cache. A cached report is served
    when it is fresh and was produced with the same ``maxPages`` /
    ``maxDepth``; every completed unauthenticated scan is saved.

``SessionError`` (browser could not start) propagates; every other
failure is absorbed into a degraded report.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from .aggregator import IssueAggregator
from .analyzers import AnalyzerPipeline, BaseAnalyzer, NetworkObserver, default_analyzers
from .auth.variants import BasicAuth
from .models import FinalReport
from .monitor import ScanMetrics, ScanMonitor
from .orchestrator import CrawlOrchestrator, ProgressCallback
from .report import ReportAssembler
from .run_config import ScanConfig, Settings
from .session import BrowserSession
from .store import ReportStore

logger = logging.getLogger(__name__)

SessionFactory = Callable[[ScanConfig, NetworkObserver], BrowserSession]


class ScanCoordinator:
    """
    Runs a full scan and returns the ``FinalReport``.

    Usage::

        coordinator = ScanCoordinator(ScanConfig(start_url="https://example.com"))
        report = await coordinator.run()
    """

    def __init__(
        self,
        config: ScanConfig,
        settings: Optional[Settings] = None,
        *,
        store: Optional[ReportStore] = None,
        analyzers: Optional[Sequence[BaseAnalyzer]] = None,
        session_factory: Optional[SessionFactory] = None,
        use_cache: bool = True,
    ):
        self.config = config
        self.settings = settings or Settings.from_env()
        self.use_cache = use_cache and self.settings.cache_enabled
        if store is None and self.use_cache:
            store = ReportStore(
                self.settings.cache_dir,
                max_age_hours=self.settings.cache_ttl_hours,
            )
        self.store = store
        self._analyzers = list(analyzers) if analyzers is not None else None
        self._session_factory = session_factory or (
            lambda cfg, observer: BrowserSession(cfg, observer=observer)
        )
        self._progress_callback: Optional[ProgressCallback] = None
        self.last_metrics: Optional[ScanMetrics] = None
        self.from_cache = False

    def set_progress_callback(self, callback: ProgressCallback) -> None:
        """Set callback: callback(pages_done, url, stats)"""
        self._progress_callback = callback

    @property
    def cacheable(self) -> bool:
        return self.use_cache and self.store is not None and self.config.auth is None

    def _build_analyzers(self) -> List[BaseAnalyzer]:
        if self._analyzers is not None:
            return self._analyzers
        return default_analyzers(self.settings)

    # ------------------------------------------------------------------

    async def run(self) -> FinalReport:
        self.config.log_summary()

        if self.cacheable:
            cached = self.store.get_report(self.config.start_url, self.config.limits())
            if cached is not None:
                self.from_cache = True
                return cached

        network = NetworkObserver()
        aggregator = IssueAggregator()
        monitor = ScanMonitor()
        pipeline = AnalyzerPipeline(self._build_analyzers())

        await monitor.start()
        stop_reason = "Session error"
        try:
            async with self._session_factory(self.config, network) as session:
                if isinstance(self.config.auth, BasicAuth):
                    async with session.page() as page:
                        await session.perform_login(page)

                orchestrator = CrawlOrchestrator(
                    self.config, session, pipeline,
                    aggregator=aggregator, monitor=monitor,
                )
                if self._progress_callback:
                    orchestrator.set_progress_callback(self._progress_callback)
                await orchestrator.run()
                stop_reason = orchestrator.stop_reason
        finally:
            await monitor.stop(stop_reason)

        self.last_metrics = await monitor.snapshot()
        logger.info("\n" + monitor.format_summary(self.last_metrics))
        if pipeline.failures:
            logger.warning(f"[ANALYZER] Failures by analyzer: {dict(pipeline.failures)}")

        await aggregator.add_global(await network.snapshot())
        issues = await aggregator.merged()
        report = ReportAssembler(self.config.start_url).assemble(issues, aggregator.page_results)

        if self.cacheable:
            self.store.save_report(self.config.start_url, report, self.config.limits())
        return report


def run_scan(
    config: ScanConfig,
    settings: Optional[Settings] = None,
    *,
    use_cache: bool = True,
    progress_callback: Optional[ProgressCallback] = None,
) -> FinalReport:
    """Run a scan synchronously and return the report."""
    coordinator = ScanCoordinator(config, settings, use_cache=use_cache)
    if progress_callback:
        coordinator.set_progress_callback(progress_callback)
    return asyncio.run(coordinator.run())
