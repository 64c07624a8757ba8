"""
Report Assembler
================
Turns page results + the merged issue list into a ``FinalReport``:

    - knowledge graph: one ``Page`` node per scanned page, edges = its links
    - recommendations: remediations bucketed by severity
    - critical issues: every High issue
    - score, trust label and a one-line closing insight
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Sequence

from . import scoring
from .models import FinalReport, GraphNode, Issue, PageResult, Recommendations, Severity
from .utils import url_path

logger = logging.getLogger(__name__)

CRITICAL_INSIGHT = "Critical trust issues detected, immediate remediation required."
HEALTHY_INSIGHT = "Site is generally trustworthy."
CRITICAL_BELOW = 50


def build_graph(page_results: Sequence[PageResult]) -> List[GraphNode]:
    return [
        GraphNode(
            id=result.url,
            label=url_path(result.url),
            properties={
                "issueCount": len(result.issues),
                "depth": result.depth,
                "scannedAt": result.scanned_at,
            },
            edges=list(result.links),
        )
        for result in page_results
    ]


def build_recommendations(issues: Sequence[Issue]) -> Recommendations:
    def remediations(severity: Severity) -> List[str]:
        return [i.remediation for i in issues if i.severity is severity]

    return Recommendations(
        immediate=remediations(Severity.HIGH),
        short_term=remediations(Severity.MEDIUM),
        long_term=remediations(Severity.LOW),
    )


def closing_insight(total: int) -> str:
    return CRITICAL_INSIGHT if total < CRITICAL_BELOW else HEALTHY_INSIGHT


class ReportAssembler:
    """Builds the final report for one scan."""

    def __init__(self, start_url: str = ""):
        self.start_url = start_url

    def assemble(self, issues: Sequence[Issue], page_results: Sequence[PageResult]) -> FinalReport:
        """``issues`` must already be deduplicated (see ``IssueAggregator``)."""
        issues = list(issues)
        score = scoring.calculate(issues)
        report = FinalReport(
            score=score,
            trust_summary=scoring.trust_summary(score.total),
            pages_scanned=len(page_results),
            issues=issues,
            critical_issues=[i for i in issues if i.severity is Severity.HIGH],
            knowledge_graph=build_graph(page_results),
            recommendations=build_recommendations(issues),
            closing_insight=closing_insight(score.total),
            start_url=self.start_url,
        )
        logger.info(
            f"[REPORT] {report.pages_scanned} pages, {len(issues)} issues "
            f"({len(report.critical_issues)} critical) → {score.total}/100 "
            f"{report.trust_summary.value}"
        )
        return report


def export_json(report: FinalReport, filepath: str) -> str:
    """Write the wire-format JSON report. Returns the absolute path."""
    output_path = Path(filepath)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
    logger.info(f"Exported JSON to {output_path.absolute()}")
    return str(output_path.absolute())
