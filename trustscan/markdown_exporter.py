"""
Markdown Report Exporter
========================
Renders a ``FinalReport`` as a single Markdown document: summary, score
breakdown, recommendations, critical issues, issues grouped by page and
the crawled page list.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from pathlib import Path
from typing import List

from .models import FinalReport, Issue
from .scoring import WEIGHTS

logger = logging.getLogger(__name__)


def _escape_cell(text: str) -> str:
    return (text or "").replace("|", "\\|").replace("\n", " ")


def _issue_lines(issue: Issue, show_url: bool) -> List[str]:
    lines = [f"- **[{issue.severity.value}] {issue.category.value}:** {issue.description}"]
    if show_url:
        lines.append(f"  - Page: {issue.url}")
    if issue.user_impact:
        lines.append(f"  - Impact: {issue.user_impact}")
    if issue.remediation:
        lines.append(f"  - Fix: {issue.remediation}")
    if issue.location:
        lines.append(f"  - Location: `{issue.location}`")
    if issue.snippet:
        lines.append(f"  - Quote: \"{issue.snippet}\"")
    return lines


def render_markdown(report: FinalReport) -> str:
    lines: List[str] = [
        "# Website Trust Report",
        "",
        f"**Site:** {report.start_url or 'N/A'}  ",
        f"**Generated:** {report.generated_at}",
        "",
        f"## {report.trust_summary.value} — {report.score.total}/100",
        "",
        f"> {report.closing_insight}",
        "",
        f"- Pages scanned: {report.pages_scanned}",
        f"- Issues found: {len(report.issues)}",
        f"- Critical issues: {len(report.critical_issues)}",
        "",
        "## Score Breakdown",
        "",
        "| Category | Score | Weight |",
        "|---|---:|---:|",
    ]
    for bucket, value in report.score.breakdown.items():
        lines.append(f"| {bucket.value} | {value} | {WEIGHTS.get(bucket, '')} |")

    lines += ["", "## Recommendations", ""]
    recs = report.recommendations
    for heading, items in (
        ("Immediate", recs.immediate),
        ("Short Term", recs.short_term),
        ("Long Term", recs.long_term),
    ):
        lines += [f"### {heading}", ""]
        unique = list(OrderedDict.fromkeys(i for i in items if i))
        lines += [f"- {item}" for item in unique] or ["_Nothing to do._"]
        lines.append("")

    if report.critical_issues:
        lines += ["## Critical Issues", ""]
        for issue in report.critical_issues:
            lines += _issue_lines(issue, show_url=True)
        lines.append("")

    lines += ["## Issues by Page", ""]
    by_page: "OrderedDict[str, List[Issue]]" = OrderedDict()
    for issue in report.issues:
        by_page.setdefault(issue.url, []).append(issue)
    if not by_page:
        lines += ["_No issues found._", ""]
    for url, issues in by_page.items():
        lines += [f"### {url}", ""]
        for issue in issues:
            lines += _issue_lines(issue, show_url=False)
        lines.append("")

    lines += [
        "## Crawled Pages",
        "",
        "| Page | Depth | Issues | Links |",
        "|---|---:|---:|---:|",
    ]
    for node in report.knowledge_graph:
        lines.append(
            f"| {_escape_cell(node.id)} | {node.properties.get('depth', '')} "
            f"| {node.properties.get('issueCount', 0)} | {len(node.edges)} |"
        )
    lines.append("")
    return "\n".join(lines)


def export_markdown(report: FinalReport, filepath: str) -> str:
    """Write the Markdown report. Returns the absolute path."""
    output_path = Path(filepath)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_markdown(report), encoding="utf-8")
    logger.info(f"Exported Markdown to {output_path.absolute()}")
    return str(output_path.absolute())
