"""
Accessibility Analyzer
======================
Injects axe-core into the page and runs the WCAG 2.0 / 2.1 A and AA rule
sets. Each violation becomes one Accessibility issue:

    impact ``critical`` / ``serious``  → High
    anything else                      → Medium

The axe script is not bundled. Its path comes from ``AXE_CORE_JS`` or a
local ``node_modules/axe-core/axe.min.js``; without it the analyzer logs
one warning and reports nothing.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..models import Category, Issue, Severity
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)

WCAG_TAGS = ['wcag2a', 'wcag2aa', 'wcag21a', 'wcag21aa']

_LOCAL_AXE = "./node_modules/axe-core/axe.min.js"

_RUN_AXE_JS = """
async (tags) => {
    const results = await axe.run(document, {runOnly: {type: 'tag', values: tags}});
    return results.violations.map(v => ({
        id: v.id,
        impact: v.impact,
        help: v.help,
        description: v.description,
        helpUrl: v.helpUrl,
        nodes: v.nodes.slice(0, 3).map(n => n.html),
    }));
}
"""


def resolve_axe_js_path(configured: Optional[str] = None) -> Optional[str]:
    """Return a usable path to ``axe.min.js`` or None.

    Priority: the configured value, then the local ``node_modules`` copy.
    """
    for candidate in (configured, _LOCAL_AXE):
        if not candidate:
            continue
        path = Path(candidate).expanduser()
        if path.is_file():
            return str(path.resolve())
    return None


class AccessibilityAnalyzer(BaseAnalyzer):

    def __init__(self, axe_js_path: Optional[str] = None, sampler=None):
        super().__init__(sampler)
        self.axe_js_path = resolve_axe_js_path(axe_js_path)
        if not self.axe_js_path:
            logger.warning(
                "[ANALYZER] axe-core not found (set AXE_CORE_JS) — accessibility audit disabled"
            )

    @property
    def name(self) -> str:
        return "accessibility"

    async def analyze(self, page, url: str) -> List[Issue]:
        if not self.axe_js_path:
            return []

        try:
            await page.add_script_tag(path=self.axe_js_path)
            violations = await page.evaluate(_RUN_AXE_JS, WCAG_TAGS)
        except Exception as e:
            logger.warning(f"[ANALYZER] axe-core scan failed on {url[:80]}: {e}")
            return []

        issues: List[Issue] = []
        for v in violations or []:
            severity = Severity.HIGH if v.get("impact") in ("critical", "serious") else Severity.MEDIUM
            issues.append(Issue(
                category=Category.ACCESSIBILITY,
                severity=severity,
                url=url,
                description=v.get("help", v.get("id", "Accessibility violation")),
                user_impact=v.get("description", ""),
                remediation=f"See: {v.get('helpUrl', '')}",
                evidence=json.dumps(v.get("nodes", [])[:3]),
            ))
        return issues
