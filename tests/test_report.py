"""
Tests for issue aggregation and report assembly.
"""

import asyncio

from conftest import make_issue
from trustscan.aggregator import IssueAggregator
from trustscan.models import Category, PageResult, Severity, TrustSummary
from trustscan.report import (
    CRITICAL_INSIGHT,
    HEALTHY_INSIGHT,
    ReportAssembler,
    build_recommendations,
    closing_insight,
)

HOME = "https://example.com"
ABOUT = "https://example.com/about"


class TestAggregator:

    def test_dedupe_keeps_first_occurrence(self):
        first = make_issue(description="Missing title", url=HOME, remediation="first")
        dup = make_issue(description="Missing title", url=HOME, remediation="second")
        other_page = make_issue(description="Missing title", url=ABOUT)
        unique = IssueAggregator.dedupe([first, dup, other_page])
        assert unique == [first, other_page]

    def test_global_issues_come_first(self):
        global_issue = make_issue(Category.NETWORK, Severity.HIGH, description="HTTP Error 500 for resource")
        page_issue = make_issue(description="Thin content")

        async def scenario():
            aggregator = IssueAggregator()
            await aggregator.add_page(PageResult(url=HOME, issues=(page_issue,)))
            await aggregator.add_global([global_issue])
            return await aggregator.merged()

        assert asyncio.run(scenario()) == [global_issue, page_issue]

    def test_same_issue_from_two_sources_counted_once(self):
        a = make_issue(description="JavaScript Error: boom", url=HOME)
        b = make_issue(description="JavaScript Error: boom", url=HOME)
        merged = IssueAggregator.merge([a], [PageResult(url=HOME, issues=(b,))])
        assert len(merged) == 1


class TestReportAssembler:

    def test_assemble(self):
        issues = [
            make_issue(Category.FUNCTIONAL, Severity.HIGH, description="Checkout broken", remediation="Fix checkout"),
            make_issue(Category.CONTENT, Severity.MEDIUM, description="Thin content", remediation="Write more"),
            make_issue(Category.CONTENT, Severity.LOW, description="Long title", remediation="Shorten title"),
        ]
        pages = [
            PageResult(url=HOME, issues=tuple(issues), links=(ABOUT,), depth=0),
            PageResult(url=ABOUT, depth=1),
        ]
        report = ReportAssembler(HOME).assemble(issues, pages)

        assert report.pages_scanned == 2
        assert report.score.total == 100 - 15 - 5 - 1
        assert report.trust_summary is TrustSummary.MODERATE
        assert [i.description for i in report.critical_issues] == ["Checkout broken"]
        assert report.recommendations.immediate == ["Fix checkout"]
        assert report.recommendations.short_term == ["Write more"]
        assert report.recommendations.long_term == ["Shorten title"]
        assert report.closing_insight == HEALTHY_INSIGHT

        home, about = report.knowledge_graph
        assert home.id == HOME
        assert home.label == "/"
        assert home.edges == [ABOUT]
        assert home.properties["issueCount"] == 3
        assert about.label == "/about"
        assert about.edges == []

    def test_empty_scan(self):
        report = ReportAssembler(HOME).assemble([], [])
        assert report.score.total == 100
        assert report.pages_scanned == 0
        assert report.knowledge_graph == []
        assert report.trust_summary is TrustSummary.HIGH

    def test_closing_insight_threshold(self):
        assert closing_insight(49) == CRITICAL_INSIGHT
        assert closing_insight(50) == HEALTHY_INSIGHT

    def test_recommendations_keep_order(self):
        issues = [
            make_issue(severity=Severity.HIGH, description="a", remediation="r1"),
            make_issue(severity=Severity.HIGH, description="b", remediation="r2"),
        ]
        assert build_recommendations(issues).immediate == ["r1", "r2"]
