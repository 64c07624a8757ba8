"""
Base Analyzer (Abstract)
========================
Defines the contract every page analyzer implements.

To add a new check:
    1. Create a module in ``trustscan/analyzers/`` inheriting ``BaseAnalyzer``
    2. Implement ``name`` and ``analyze(page, url)``
    3. Register it in ``default_analyzers()`` (``analyzers/__init__.py``)
    4. No changes to the orchestrator are needed.

Contract:
    - ``analyze`` returns a list of ``Issue`` and should not raise; the
      pipeline isolates any exception that slips through.
    - An optional sampler ``(url) -> bool`` decides whether the analyzer
      runs on a given page at all (used to ration expensive checks).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..models import Issue

Sampler = Callable[[str], bool]


class BaseAnalyzer(ABC):
    """Abstract base for all page analyzers."""

    def __init__(self, sampler: Optional[Sampler] = None):
        self.sampler = sampler

    # ── Identity ──────────────────────────────────────────────────

    @property
    @abstractmethod
    def name(self) -> str:
        """Short label used in logs (e.g. 'content', 'semantic')."""
        ...

    # ── Analysis ──────────────────────────────────────────────────

    def should_run(self, url: str) -> bool:
        return self.sampler is None or bool(self.sampler(url))

    @abstractmethod
    async def analyze(self, page, url: str) -> List[Issue]:
        """Inspect the loaded *page* (already at *url*) and return issues."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
