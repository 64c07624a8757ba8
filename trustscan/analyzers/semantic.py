"""
Semantic Analyzer
=================
Language-model review of a page's visible text for trust, professionalism
and clarity problems.

Flow:
    1. Extract plain text (``ContentExtractor``); pages under 50 characters
       are skipped.
    2. Send it with the fixed audit prompt to ``LLMService``.
    3. Strip markdown fences, parse the ``{"issues": [...]}`` envelope.
    4. Locate each ``exactQuote`` in the DOM and record a CSS path.

Anything that is not the expected JSON (sentinel strings from a disabled
or failing service included) yields no issues.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional

from ..extractor import ContentExtractor
from ..llm import LLMService
from ..models import Category, Issue, Severity
from .base import BaseAnalyzer
from .sampling import KeyPageSampler

logger = logging.getLogger(__name__)

MIN_TEXT_CHARS = 50
DEFAULT_LOCATION = "Page Body"

_ALLOWED_CATEGORIES = {Category.TRUST, Category.CONTENT, Category.SEMANTIC}

AUDIT_PROMPT = """
You are an expert website quality and trust auditor. Analyze the following website text content for issues related to:
1. Trust & Legitimacy (scams, misleading claims, dark patterns)
2. Professionalism (grammar, spelling, inconsistent tone)
3. User Experience from a content perspective (confusing language, lack of clarity)

Return a JSON object with a list of specific "issues".
Each issue must have:
- "category": one of ["Trust", "Content", "Semantic"]
- "severity": "High", "Medium", or "Low"
- "description": A concise description of the issue.
- "remediation": Advice on how to fix it.
- "userImpact": How this affects the user.
- "exactQuote": The EXACT text substring from the page that triggers this issue. This is CRITICAL for highlighting. If it is a general issue, use null.

If the website seems mostly fine, return an empty list.

Example Output Format:
{
    "issues": [
        {
            "category": "Trust",
            "severity": "High",
            "description": "Detected 'Urgency' dark pattern",
            "remediation": "Remove artificial countdown timers.",
            "userImpact": "Creates false anxiety and pressure.",
            "exactQuote": "Only 2 minutes left to buy!"
        }
    ]
}

Do not include markdown formatting like ```json. Return raw JSON.
""".strip()

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

_LOCATE_JS = """
(quote) => {
    const elements = Array.from(document.querySelectorAll('body *'));
    const match = elements.find(el => Array.from(el.childNodes).some(
        n => n.nodeType === 3 && n.textContent && n.textContent.includes(quote)
    ));
    if (!match) return null;

    const getPath = (el) => {
        if (el.id) return '#' + el.id;
        if (el === document.body) return 'body';
        if (!el.parentElement) return el.tagName.toLowerCase();
        const index = Array.from(el.parentElement.children).indexOf(el) + 1;
        return getPath(el.parentElement) + ' > ' + el.tagName.toLowerCase() + ':nth-child(' + index + ')';
    };
    return getPath(match);
}
"""


def strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_llm_issues(text: str) -> List[Dict[str, Any]]:
    """Return the raw issue dicts from a model answer, or [] if unusable."""
    try:
        payload = json.loads(strip_fences(text))
    except (json.JSONDecodeError, TypeError, ValueError):
        logger.warning("[ANALYZER] Could not parse AI response as JSON")
        logger.debug(f"[ANALYZER] Raw AI response: {str(text)[:500]}")
        return []

    if not isinstance(payload, dict):
        return []
    issues = payload.get("issues")
    if not isinstance(issues, list):
        return []
    return [i for i in issues if isinstance(i, dict) and i.get("description")]


def _category(value: Any) -> Category:
    try:
        cat = Category(value)
    except ValueError:
        return Category.SEMANTIC
    return cat if cat in _ALLOWED_CATEGORIES else Category.SEMANTIC


def _severity(value: Any) -> Severity:
    try:
        return Severity(value)
    except ValueError:
        return Severity.MEDIUM


class SemanticAnalyzer(BaseAnalyzer):
    """LLM-backed trust audit; sampled to key pages by default."""

    def __init__(self, llm: Optional[LLMService] = None, sampler=None):
        super().__init__(sampler if sampler is not None else KeyPageSampler())
        self.llm = llm or LLMService()

    @property
    def name(self) -> str:
        return "semantic"

    async def analyze(self, page, url: str) -> List[Issue]:
        text = await ContentExtractor.extract(page)
        if len(text) < MIN_TEXT_CHARS:
            return []

        answer = await self.llm.analyze_context(text, AUDIT_PROMPT)
        raw_issues = parse_llm_issues(answer)
        if not raw_issues:
            return []

        locations = await asyncio.gather(
            *(self._locate(page, i.get("exactQuote")) for i in raw_issues)
        )

        return [
            Issue(
                category=_category(raw.get("category")),
                severity=_severity(raw.get("severity")),
                url=url,
                description=str(raw["description"]),
                user_impact=str(raw.get("userImpact") or ""),
                remediation=str(raw.get("remediation") or ""),
                evidence="AI Analysis",
                location=location,
                snippet=raw.get("exactQuote") if isinstance(raw.get("exactQuote"), str) else None,
            )
            for raw, location in zip(raw_issues, locations)
        ]

    async def _locate(self, page, quote: Optional[str]) -> str:
        if not quote or not isinstance(quote, str):
            return DEFAULT_LOCATION
        try:
            selector = await page.evaluate(_LOCATE_JS, quote)
        except Exception as e:
            logger.debug(f"[ANALYZER] Failed to locate quote {quote[:40]!r}: {e}")
            return DEFAULT_LOCATION
        return selector or DEFAULT_LOCATION
