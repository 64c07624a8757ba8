"""
Tests for scan counters and the summary table.
"""

import asyncio

from trustscan.monitor import PageTiming, ScanMonitor


async def _drive(monitor):
    await monitor.start()
    await monitor.record_enqueue(3)
    await monitor.record_page(PageTiming(url="a", navigate_ms=100, analyze_ms=50,
                                         total_ms=150, issue_count=2, link_count=4))
    await monitor.record_page(PageTiming(url="b", total_ms=20, link_count=1, status="failed"))
    await monitor.record_batch()
    await monitor.stop("Queue exhausted")
    return await monitor.snapshot()


def test_counters():
    metrics = asyncio.run(_drive(ScanMonitor(report_interval=60)))
    assert metrics.pages_scanned == 1
    assert metrics.pages_failed == 1
    assert metrics.total_issues == 2
    assert metrics.total_links_discovered == 5
    assert metrics.total_enqueued == 3
    assert metrics.batches == 1
    assert metrics.avg_page_ms == 85.0
    assert metrics.p95_page_ms == 150.0
    assert metrics.avg_navigate_ms == 100.0
    assert metrics.stop_reason == "Queue exhausted"


def test_summary_and_wire_keys():
    metrics = asyncio.run(_drive(ScanMonitor(report_interval=60)))
    summary = ScanMonitor.format_summary(metrics)
    assert "Scan finished" in summary
    assert "Queue exhausted" in summary
    assert metrics.to_dict()["linksDiscovered"] == 5


def test_empty_snapshot():
    metrics = asyncio.run(ScanMonitor().snapshot())
    assert metrics.avg_page_ms == 0.0
    assert metrics.p95_page_ms == 0.0
    assert metrics.elapsed_sec == 0.0
