"""
Page Analyzers
==============
Every analyzer implements ``analyze(page, url) -> List[Issue]``.

    - ``ContentAnalyzer``        — title, meta description, headings, alt text, anchors
    - ``UiUxAnalyzer``           — overflow, viewport meta, font size
    - ``AccessibilityAnalyzer``  — axe-core WCAG 2.x A/AA audit
    - ``SemanticAnalyzer``       — language-model trust audit (key pages)

``NetworkObserver`` is the odd one out: it listens to browser events for
the whole session instead of inspecting one page.

Usage::

    from trustscan.analyzers import AnalyzerPipeline, default_analyzers

    pipeline = AnalyzerPipeline(default_analyzers(settings))
    issues = await pipeline.run(page, url)
"""

from typing import List, Optional

from ..llm import LLMService
from ..run_config import Settings
from .accessibility import AccessibilityAnalyzer
from .base import BaseAnalyzer
from .content import ContentAnalyzer
from .network import NetworkObserver
from .pipeline import AnalyzerPipeline
from .sampling import KeyPageSampler
from .semantic import SemanticAnalyzer
from .uiux import UiUxAnalyzer


def default_analyzers(
    settings: Optional[Settings] = None,
    llm: Optional[LLMService] = None,
) -> List[BaseAnalyzer]:
    """The standard analyzer set, in reporting order."""
    settings = settings or Settings.from_env()
    return [
        ContentAnalyzer(),
        UiUxAnalyzer(),
        SemanticAnalyzer(llm=llm or LLMService(settings), sampler=KeyPageSampler()),
        AccessibilityAnalyzer(axe_js_path=settings.axe_core_js),
    ]


__all__ = [
    "AccessibilityAnalyzer",
    "AnalyzerPipeline",
    "BaseAnalyzer",
    "ContentAnalyzer",
    "KeyPageSampler",
    "NetworkObserver",
    "SemanticAnalyzer",
    "UiUxAnalyzer",
    "default_analyzers",
]
