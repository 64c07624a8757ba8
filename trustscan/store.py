"""
Report Store
============
JSON-file cache of finished reports, one file per start URL.

Layout::

    <cache_dir>/<sha256(canonical url)[:32]>.json
        {"url": ..., "savedAt": ..., "limits": {"maxPages", "maxDepth"}, "report": {...}}

A cached report is served only while the file is younger than
``max_age_hours`` (file mtime). Every I/O or decode problem is logged and
treated as a cache miss; the store never raises into a scan.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .models import FinalReport
from .utils import canonical_url

logger = logging.getLogger(__name__)

_DEFAULT_CACHE_DIR = ".trustscan_cache"
_MAX_REPORT_AGE_HOURS = 24.0


class ReportStore:
    """Persists and reuses reports across runs."""

    def __init__(
        self,
        cache_dir: str = _DEFAULT_CACHE_DIR,
        *,
        max_age_hours: float = _MAX_REPORT_AGE_HOURS,
    ):
        self.cache_dir = Path(cache_dir)
        self.max_age_hours = max_age_hours

    def path_for(self, url: str) -> Path:
        digest = hashlib.sha256(canonical_url(url).encode("utf-8")).hexdigest()[:32]
        return self.cache_dir / f"{digest}.json"

    # ── Public API ────────────────────────────────────────────────

    def get_report(
        self,
        url: str,
        limits: Optional[Dict[str, Any]] = None,
    ) -> Optional[FinalReport]:
        """Return the cached report for *url*, or None.

        Misses when the entry is absent, unreadable, older than
        ``max_age_hours``, or (when *limits* is given) was produced with
        different crawl limits.
        """
        path = self.path_for(url)
        if not path.exists():
            logger.debug(f"[STORE] No cached report for {url}")
            return None

        try:
            age_hours = (time.time() - path.stat().st_mtime) / 3600
            if age_hours > self.max_age_hours:
                logger.info(
                    f"[STORE] Cached report is {age_hours:.1f}h old — stale "
                    f"(max {self.max_age_hours}h)"
                )
                return None

            entry = json.loads(path.read_text(encoding="utf-8"))
            if limits is not None and entry.get("limits") != limits:
                logger.info(f"[STORE] Cached report used different limits {entry.get('limits')} — miss")
                return None

            report = FinalReport.from_dict(entry["report"])
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning(f"[STORE] Corrupt cache entry {path.name}: {exc}")
            return None

        logger.info(f"[STORE] Serving cached report for {url} (age {age_hours:.1f}h)")
        return report

    def save_report(
        self,
        url: str,
        report: FinalReport,
        limits: Optional[Dict[str, Any]] = None,
    ) -> Optional[Path]:
        """Write *report* for *url*. Returns the file path, or None on failure."""
        path = self.path_for(url)
        entry = {
            "url": canonical_url(url),
            "savedAt": datetime.now(timezone.utc).isoformat(),
            "limits": limits,
            "report": report.to_dict(),
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(json.dumps(entry, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning(f"[STORE] Could not save report for {url}: {exc}")
            return None

        logger.info(f"[STORE] Report saved to {path}")
        return path
