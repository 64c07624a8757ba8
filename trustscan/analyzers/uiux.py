"""Layout and readability heuristics (UI/UX, High)."""

from __future__ import annotations

import logging
from typing import List

from ..models import Category, Issue, Severity
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)

MIN_FONT_PX = 12

_CHECKS_JS = """
(minFont) => {
    const results = [];

    if (document.body && document.body.scrollWidth > window.innerWidth) {
        results.push({
            desc: 'Horizontal Scroll detected (Content overflow)',
            impact: 'Page is wider than the screen, breaking mobile layout.',
            remediation: 'Fix CSS width constraints or overflow properties.',
        });
    }

    if (!document.querySelector('meta[name="viewport"]')) {
        results.push({
            desc: 'Missing Viewport Meta Tag',
            impact: 'Page will not scale correctly on mobile devices.',
            remediation: 'Add <meta name="viewport" content="width=device-width, initial-scale=1">',
        });
    }

    const p = document.querySelector('p');
    if (p) {
        const size = parseFloat(window.getComputedStyle(p).fontSize);
        if (size < minFont) {
            results.push({
                desc: `Font size is too small (< ${minFont}px)`,
                impact: 'Hard to read for many users.',
                remediation: 'Increase base font size.',
            });
        }
    }

    return results;
}
"""


class UiUxAnalyzer(BaseAnalyzer):

    @property
    def name(self) -> str:
        return "uiux"

    async def analyze(self, page, url: str) -> List[Issue]:
        try:
            findings = await page.evaluate(_CHECKS_JS, MIN_FONT_PX)
        except Exception as e:
            logger.warning(f"[ANALYZER] ui/ux checks failed on {url[:80]}: {e}")
            return []

        return [
            Issue(
                category=Category.UI_UX,
                severity=Severity.HIGH,
                url=url,
                description=f["desc"],
                user_impact=f.get("impact", ""),
                remediation=f.get("remediation", ""),
            )
            for f in findings or []
        ]
