"""
Content / SEO hygiene checks run inside the page.

    - ``<title>`` shorter than 5 characters
    - missing ``<meta name="description">``
    - zero or several ``<h1>`` headings
    - images without alt text (reported as UI/UX)
    - in-page ``#anchor`` links whose target does not exist (Functional)
"""

from __future__ import annotations

import logging
from typing import List

from ..models import Category, Issue, Severity
from .base import BaseAnalyzer

logger = logging.getLogger(__name__)

_CHECKS_JS = """
() => {
    const findings = [];

    if (document.title.length < 5) {
        findings.push({
            kind: 'content',
            desc: 'Page title is too short or missing',
            impact: 'Poor SEO and user context.',
            remediation: 'Add a descriptive <title> tag.',
        });
    }

    const metaDesc = document.querySelector('meta[name="description"]');
    if (!metaDesc || !metaDesc.getAttribute('content')) {
        findings.push({
            kind: 'content',
            desc: 'Missing Meta Description',
            impact: 'Search engines and social shares will look broken.',
            remediation: 'Add a <meta name="description"> tag.',
        });
    }

    const h1s = document.querySelectorAll('h1');
    if (h1s.length === 0) {
        findings.push({
            kind: 'content',
            desc: 'No <h1> heading found',
            impact: 'Poor document structure and accessibility.',
            remediation: 'Add exactly one <h1> heading per page.',
        });
    } else if (h1s.length > 1) {
        findings.push({
            kind: 'content',
            desc: 'Multiple <h1> headings found',
            impact: 'Confusing document structure.',
            remediation: 'Use only one <h1> per page.',
        });
    }

    let missingAlt = 0;
    document.querySelectorAll('img').forEach(img => {
        if (!img.alt || img.alt.trim() === '') missingAlt++;
    });
    if (missingAlt > 0) {
        findings.push({
            kind: 'alt',
            desc: `${missingAlt} images missing alt text`,
            impact: 'Screen readers cannot describe images to visually impaired users.',
            remediation: 'Add descriptive "alt" attributes to all images.',
        });
    }

    const broken = [];
    const seen = new Set();
    document.querySelectorAll('a[href^="#"]').forEach(a => {
        const href = a.getAttribute('href');
        if (!href || href.length < 2 || seen.has(href)) return;
        seen.add(href);
        const id = decodeURIComponent(href.slice(1));
        if (!document.getElementById(id) && document.getElementsByName(id).length === 0) {
            broken.push(href);
        }
    });

    return {findings, brokenAnchors: broken};
}
"""


class ContentAnalyzer(BaseAnalyzer):

    @property
    def name(self) -> str:
        return "content"

    async def analyze(self, page, url: str) -> List[Issue]:
        try:
            raw = await page.evaluate(_CHECKS_JS)
        except Exception as e:
            logger.warning(f"[ANALYZER] content checks failed on {url[:80]}: {e}")
            return []

        raw = raw or {}
        issues: List[Issue] = []
        for f in raw.get("findings", []):
            issues.append(Issue(
                category=Category.UI_UX if f.get("kind") == "alt" else Category.CONTENT,
                severity=Severity.MEDIUM,
                url=url,
                description=f["desc"],
                user_impact=f.get("impact", ""),
                remediation=f.get("remediation", ""),
            ))

        for href in raw.get("brokenAnchors", []):
            issues.append(Issue(
                category=Category.FUNCTIONAL,
                severity=Severity.LOW,
                url=url,
                description=f"Broken internal anchor link to {href}",
                user_impact="User clicks a link but nothing happens.",
                remediation=f'Ensure the element with id="{href[1:]}" exists on the page.',
                location=f'a[href="{href}"]',
            ))
        return issues
