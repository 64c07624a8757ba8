"""
Per-scan counters and page timings.

The orchestrator reports every finished page and batch here; the coordinator
logs a summary table once the crawl drains. While a scan is in flight a
background task logs a one-line progress record every few seconds.
"""

from __future__ import annotations

import asyncio
import logging
import statistics
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Deque, Iterable, List, Tuple

logger = logging.getLogger(__name__)

PROGRESS_LOG_EVERY_SEC = 10.0
TIMING_WINDOW = 1000


@dataclass
class PageTiming:
    url: str = ""
    navigate_ms: float = 0.0
    analyze_ms: float = 0.0
    total_ms: float = 0.0
    issue_count: int = 0
    link_count: int = 0
    status: str = "ok"

    @property
    def failed(self) -> bool:
        return self.status != "ok"


@dataclass
class ScanMetrics:
    pages_scanned: int = 0
    pages_failed: int = 0
    batches: int = 0
    total_enqueued: int = 0
    total_issues: int = 0
    total_links_discovered: int = 0
    avg_page_ms: float = 0.0
    avg_navigate_ms: float = 0.0
    avg_analyze_ms: float = 0.0
    p95_page_ms: float = 0.0
    elapsed_sec: float = 0.0
    stop_reason: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        # camelCase keys to match the report wire format
        return {
            "pagesScanned": data["pages_scanned"],
            "pagesFailed": data["pages_failed"],
            "batches": data["batches"],
            "totalEnqueued": data["total_enqueued"],
            "totalIssues": data["total_issues"],
            "linksDiscovered": data["total_links_discovered"],
            "avgPageMs": data["avg_page_ms"],
            "p95PageMs": data["p95_page_ms"],
            "elapsedSec": data["elapsed_sec"],
            "stopReason": data["stop_reason"],
        }


def _positive(values: Iterable[float]) -> List[float]:
    return [v for v in values if v > 0]


def _mean_ms(values: List[float]) -> float:
    return round(statistics.fmean(values), 1) if values else 0.0


def _p95_ms(values: List[float]) -> float:
    """Nearest-rank 95th percentile; 0.0 for an empty sample."""
    if not values:
        return 0.0
    ranked = sorted(values)
    rank = min(int(len(ranked) * 0.95), len(ranked) - 1)
    return round(ranked[rank], 1)


class ScanMonitor:
    """Collects counters for one scan. Mutations are serialised by a lock."""

    def __init__(self, report_interval: float = PROGRESS_LOG_EVERY_SEC):
        self._lock = asyncio.Lock()
        self._report_interval = report_interval
        self._started_at = 0.0
        self._stop_reason = ""
        self._halt = asyncio.Event()
        self._ticker = None

        self._ok = 0
        self._failed = 0
        self._batches = 0
        self._enqueued = 0
        self._issues = 0
        self._links = 0
        self._recent: Deque[PageTiming] = deque(maxlen=TIMING_WINDOW)

    async def start(self) -> None:
        self._started_at = time.monotonic()
        self._halt.clear()
        self._ticker = asyncio.create_task(self._reporter_loop())

    async def stop(self, reason: str = "completed") -> None:
        self._stop_reason = reason
        self._halt.set()
        if self._ticker is not None:
            await self._ticker
            self._ticker = None

    async def record_page(self, timing: PageTiming) -> None:
        async with self._lock:
            if timing.failed:
                self._failed += 1
            else:
                self._ok += 1
                self._issues += timing.issue_count
            self._links += timing.link_count
            self._recent.append(timing)

    async def record_enqueue(self, count: int = 1) -> None:
        async with self._lock:
            self._enqueued += count

    async def record_batch(self) -> None:
        async with self._lock:
            self._batches += 1

    async def snapshot(self) -> ScanMetrics:
        async with self._lock:
            totals = _positive(t.total_ms for t in self._recent)
            elapsed = time.monotonic() - self._started_at if self._started_at else 0.0
            return ScanMetrics(
                pages_scanned=self._ok,
                pages_failed=self._failed,
                batches=self._batches,
                total_enqueued=self._enqueued,
                total_issues=self._issues,
                total_links_discovered=self._links,
                avg_page_ms=_mean_ms(totals),
                avg_navigate_ms=_mean_ms(_positive(t.navigate_ms for t in self._recent)),
                avg_analyze_ms=_mean_ms(_positive(t.analyze_ms for t in self._recent)),
                p95_page_ms=_p95_ms(totals),
                elapsed_sec=round(elapsed, 2),
                stop_reason=self._stop_reason,
            )

    async def _reporter_loop(self) -> None:
        while not self._halt.is_set():
            try:
                await asyncio.wait_for(self._halt.wait(), timeout=self._report_interval)
            except asyncio.TimeoutError:
                m = await self.snapshot()
                logger.info(
                    f"[MONITOR] {m.pages_scanned} ok / {m.pages_failed} failed in "
                    f"{m.batches} batches, {m.total_issues} issues, "
                    f"page avg {m.avg_page_ms:.0f}ms (p95 {m.p95_page_ms:.0f}ms), "
                    f"{m.elapsed_sec:.0f}s elapsed"
                )

    @staticmethod
    def format_summary(metrics: ScanMetrics) -> str:
        sections: List[List[Tuple[str, str]]] = [
            [
                ("Pages scanned", str(metrics.pages_scanned)),
                ("Pages failed", str(metrics.pages_failed)),
                ("Batches", str(metrics.batches)),
                ("URLs enqueued", str(metrics.total_enqueued)),
            ],
            [
                ("Mean page", f"{metrics.avg_page_ms:.0f} ms"),
                ("Mean navigation", f"{metrics.avg_navigate_ms:.0f} ms"),
                ("Mean analysis", f"{metrics.avg_analyze_ms:.0f} ms"),
                ("95th pct page", f"{metrics.p95_page_ms:.0f} ms"),
            ],
            [
                ("Raw issues", str(metrics.total_issues)),
                ("Links seen", str(metrics.total_links_discovered)),
                ("Wall clock", f"{metrics.elapsed_sec:.1f} s"),
                ("Stopped because", metrics.stop_reason or "-"),
            ],
        ]
        rule = "-" * 56
        out = [rule, "  Scan finished", rule]
        for rows in sections:
            out.extend(f"  {label:<18} {value}" for label, value in rows)
            out.append(rule)
        return "\n".join(out)
