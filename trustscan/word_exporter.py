"""
Word (.docx) rendering of a trust report.

Layout: cover summary, optional table of contents, score breakdown,
recommendations, critical issues, issues per page, crawled page table.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from docx import Document
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor

from .models import FinalReport, Issue, Severity
from .scoring import WEIGHTS

logger = logging.getLogger(__name__)

BADGE_RGB = {
    Severity.HIGH: RGBColor(0xB9, 0x1C, 0x1C),
    Severity.MEDIUM: RGBColor(0xB4, 0x53, 0x09),
    Severity.LOW: RGBColor(0x47, 0x55, 0x69),
}
SMALL = Pt(9)


def export_docx(
    report: FinalReport,
    filepath: str,
    *,
    include_toc: bool = True,
    max_issues: int = 500,
) -> str:
    """Write *report* to *filepath* as a Word document and return the absolute path.

    ``max_issues`` caps the per-page section; the remainder is summarised
    in one italic line.
    """
    target = Path(filepath)
    target.parent.mkdir(parents=True, exist_ok=True)

    doc = Document()
    normal = doc.styles["Normal"]
    normal.font.name = "Calibri"
    normal.font.size = Pt(10)
    normal.paragraph_format.space_after = Pt(4)

    _cover(doc, report)
    if include_toc:
        doc.add_heading("Table of Contents", level=1)
        _toc(doc)
        doc.add_page_break()
    _breakdown(doc, report)
    _recommendations(doc, report)
    if report.critical_issues:
        doc.add_page_break()
        doc.add_heading("Critical Issues", level=1)
        for issue in report.critical_issues:
            _issue(doc, issue, with_url=True)
    doc.add_page_break()
    _issues_by_page(doc, report.issues, max_issues)
    _crawled_pages(doc, report)

    doc.save(str(target))
    logger.info(f"[EXPORT] Wrote DOCX report {target.absolute()}")
    return str(target.absolute())


def _cover(doc, report: FinalReport) -> None:
    heading = doc.add_heading("Website Trust Report", level=0)
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER

    facts = [
        ("Site", report.start_url or "N/A"),
        ("Hygiene Score", f"{report.score.total}/100"),
        ("Trust Level", report.trust_summary.value),
        ("Pages Scanned", str(report.pages_scanned)),
        ("Issues Found", str(len(report.issues))),
        ("Critical Issues", str(len(report.critical_issues))),
        ("Generated", report.generated_at),
    ]
    table = _grid(doc, None, facts, style=None)
    table.alignment = WD_TABLE_ALIGNMENT.CENTER

    closing = doc.add_paragraph()
    closing.alignment = WD_ALIGN_PARAGRAPH.CENTER
    closing.add_run(report.closing_insight).italic = True
    doc.add_page_break()


def _breakdown(doc, report: FinalReport) -> None:
    doc.add_heading("Score Breakdown", level=1)
    rows = [
        (bucket.value, str(points), str(WEIGHTS.get(bucket, "")))
        for bucket, points in report.score.breakdown.items()
    ]
    _grid(doc, ("Category", "Score", "Weight"), rows)


def _recommendations(doc, report: FinalReport) -> None:
    doc.add_heading("Recommendations", level=1)
    recs = report.recommendations
    for title, items in (
        ("Immediate", recs.immediate),
        ("Short Term", recs.short_term),
        ("Long Term", recs.long_term),
    ):
        doc.add_heading(title, level=2)
        distinct = list(dict.fromkeys(item for item in items if item))
        if not distinct:
            doc.add_paragraph("Nothing to do.")
        for item in distinct:
            doc.add_paragraph(item, style="List Bullet")


def _issues_by_page(doc, issues: Sequence[Issue], max_issues: int) -> None:
    doc.add_heading("Issues by Page", level=1)
    grouped: Dict[str, List[Issue]] = {}
    for issue in issues[:max_issues]:
        grouped.setdefault(issue.url, []).append(issue)
    if not grouped:
        doc.add_paragraph("No issues found.")
    for url, page_issues in grouped.items():
        doc.add_heading(url[:120], level=2)
        for issue in page_issues:
            _issue(doc, issue, with_url=False)

    hidden = len(issues) - max_issues
    if hidden > 0:
        doc.add_paragraph().add_run(f"{hidden} further issues omitted.").italic = True


def _crawled_pages(doc, report: FinalReport) -> None:
    doc.add_heading("Crawled Pages", level=1)
    rows = [
        (node.id, str(node.properties.get("issueCount", 0)), str(len(node.edges)))
        for node in report.knowledge_graph
    ]
    _grid(doc, ("Page", "Issues", "Links"), rows)


def _issue(doc, issue: Issue, with_url: bool) -> None:
    head = doc.add_paragraph()
    badge = head.add_run(f"[{issue.severity.value}] ")
    badge.bold = True
    badge.font.color.rgb = BADGE_RGB[issue.severity]
    head.add_run(f"{issue.category.value}: ").bold = True
    head.add_run(issue.description)

    extra: List[Tuple[str, str]] = []
    if with_url:
        extra.append(("Page", issue.url))
    for label, value in (
        ("Impact", issue.user_impact),
        ("Fix", issue.remediation),
        ("Location", issue.location),
        ("Quote", f'"{issue.snippet}"' if issue.snippet else ""),
    ):
        if value:
            extra.append((label, value))

    for label, value in extra:
        line = doc.add_paragraph()
        line.paragraph_format.left_indent = Pt(18)
        key = line.add_run(f"{label}: ")
        key.bold = True
        key.font.size = SMALL
        line.add_run(value).font.size = SMALL


def _grid(doc, header, rows, style="Table Grid"):
    """Add a table; a header row is bolded, and for header-less tables the first column is."""
    width = len(header) if header else len(rows[0]) if rows else 2
    table = doc.add_table(rows=0, cols=width)
    if style:
        table.style = style
    if header:
        _fill(table.add_row().cells, header, bold_first=True, bold_all=True)
    for row in rows:
        _fill(table.add_row().cells, row, bold_first=header is None)
    return table


def _fill(cells, values, bold_first=False, bold_all=False) -> None:
    for index, (cell, value) in enumerate(zip(cells, values)):
        cell.text = value
        for paragraph in cell.paragraphs:
            for run in paragraph.runs:
                run.bold = bold_all or (bold_first and index == 0)
                run.font.size = SMALL


def _toc(doc) -> None:
    """Insert a TOC field; Word fills it in when the document is refreshed."""
    paragraph = doc.add_paragraph()
    field_run = paragraph.add_run()

    def char(kind):
        element = OxmlElement("w:fldChar")
        element.set(qn("w:fldCharType"), kind)
        return element

    instruction = OxmlElement("w:instrText")
    instruction.set(qn("xml:space"), "preserve")
    instruction.text = ' TOC \\o "1-2" \\h \\z \\u '

    field_run._element.append(char("begin"))
    field_run._element.append(instruction)
    field_run._element.append(char("separate"))
    paragraph.add_run("Right-click and choose Update Field to build the contents.").italic = True
    field_run._element.append(char("end"))
