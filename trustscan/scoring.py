"""
Scoring Engine
==============
Weighted hygiene score from a deduplicated issue list.

Each bucket starts at its weight (weights sum to 100). Every issue
subtracts a severity deduction from the bucket its category maps to;
buckets are clamped at zero and the total is their sum, so the total is
always an integer in ``[0, 100]``.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable

from .models import Category, HygieneScore, Issue, ScoreBucket, Severity, TrustSummary

logger = logging.getLogger(__name__)

WEIGHTS: Dict[ScoreBucket, int] = {
    ScoreBucket.FUNCTIONALITY: 15,
    ScoreBucket.PERFORMANCE: 10,
    ScoreBucket.UI_UX: 10,
    ScoreBucket.RELIABILITY: 10,
    ScoreBucket.CONTENT: 10,
    ScoreBucket.SEMANTIC: 25,
    ScoreBucket.ACCESSIBILITY: 20,
}

DEDUCTIONS: Dict[Severity, int] = {
    Severity.HIGH: 15,
    Severity.MEDIUM: 5,
    Severity.LOW: 1,
}

CATEGORY_BUCKETS: Dict[Category, ScoreBucket] = {
    Category.FUNCTIONAL: ScoreBucket.FUNCTIONALITY,
    Category.PERFORMANCE: ScoreBucket.PERFORMANCE,
    Category.UI_UX: ScoreBucket.UI_UX,
    Category.NETWORK: ScoreBucket.RELIABILITY,
    Category.CONTENT: ScoreBucket.CONTENT,
    Category.SEMANTIC: ScoreBucket.SEMANTIC,
    Category.TRUST: ScoreBucket.SEMANTIC,
    Category.ACCESSIBILITY: ScoreBucket.ACCESSIBILITY,
}

HIGH_TRUST_ABOVE = 80
MODERATE_TRUST_ABOVE = 50

# Exhaustiveness checks
_missing = (set(Category) - set(CATEGORY_BUCKETS)) | (set(ScoreBucket) - set(WEIGHTS))
if _missing:
    raise RuntimeError(f"Scoring tables are not exhaustive: {sorted(m.value for m in _missing)}")
if sum(WEIGHTS.values()) != 100:
    raise RuntimeError("Score weights must sum to 100")
del _missing


def calculate(issues: Iterable[Issue]) -> HygieneScore:
    """Pure function: issues → ``HygieneScore``."""
    breakdown: Dict[ScoreBucket, int] = dict(WEIGHTS)
    for issue in issues:
        bucket = CATEGORY_BUCKETS[issue.category]
        breakdown[bucket] -= DEDUCTIONS[issue.severity]

    for bucket, value in breakdown.items():
        if value < 0:
            breakdown[bucket] = 0

    total = sum(breakdown.values())
    logger.info(f"[SCORE] total={total} " + " ".join(
        f"{b.value}={v}/{WEIGHTS[b]}" for b, v in breakdown.items()
    ))
    return HygieneScore(total=total, breakdown=breakdown)


def trust_summary(total: int) -> TrustSummary:
    if total > HIGH_TRUST_ABOVE:
        return TrustSummary.HIGH
    if total > MODERATE_TRUST_ABOVE:
        return TrustSummary.MODERATE
    return TrustSummary.LOW
