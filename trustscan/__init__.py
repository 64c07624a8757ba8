"""
trustscan: website trust & hygiene scanner.

Crawls a site breadth-first with Playwright, runs page analyzers, and
turns the deduplicated findings into a weighted trust score and report.

Usage::

    from trustscan import ScanConfig, run_scan

    report = run_scan(ScanConfig(start_url="https://example.com"))
    print(report.score.total, report.trust_summary.value)
"""

__version__ = "1.0.0"

from .errors import InvalidURLError, SessionError, TrustScanError
from .models import FinalReport, Issue, PageResult
from .run_config import ScanConfig, Settings


def run_scan(*args, **kwargs):
    """Lazy wrapper for ``trustscan.coordinator.run_scan`` (imports Playwright)."""
    from .coordinator import run_scan as _run_scan
    return _run_scan(*args, **kwargs)


__all__ = [
    "__version__",
    "FinalReport",
    "InvalidURLError",
    "Issue",
    "PageResult",
    "ScanConfig",
    "SessionError",
    "Settings",
    "TrustScanError",
    "run_scan",
]
