"""
Scan Data Model
===============
Plain dataclasses shared by every stage of a scan.

    Issue        — one detected defect (category, severity, remediation)
    PageResult   — everything produced for one crawled page
    HygieneScore — weighted category breakdown + total
    GraphNode    — one page in the link knowledge graph
    FinalReport  — the assembled output of a scan

All wire-format dictionaries use the camelCase keys expected by the HTTP
clients and the stored reports (``userImpact``, ``pagesScanned`` ...).
``from_dict`` accepts exactly what ``to_dict`` produces.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Category(str, Enum):
    """What kind of defect an issue describes."""
    FUNCTIONAL = "Functional"
    UI_UX = "UI/UX"
    PERFORMANCE = "Performance"
    NETWORK = "Network"
    CONTENT = "Content"
    TRUST = "Trust"
    SEMANTIC = "Semantic"
    ACCESSIBILITY = "Accessibility"


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ScoreBucket(str, Enum):
    """Keys of the hygiene score breakdown."""
    FUNCTIONALITY = "functionality"
    PERFORMANCE = "performance"
    UI_UX = "uiUx"
    RELIABILITY = "reliability"
    CONTENT = "content"
    SEMANTIC = "semantic"
    ACCESSIBILITY = "accessibility"


class TrustSummary(str, Enum):
    HIGH = "High Trust"
    MODERATE = "Moderate Trust"
    LOW = "Low Trust"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_issue_id(prefix: str = "issue") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Issue:
    """A single detected defect.

    Two issues are the *same finding* when they share ``(description, url)``;
    see ``dedup_key``.
    """
    category: Category
    severity: Severity
    url: str
    description: str
    user_impact: str = ""
    remediation: str = ""
    evidence: Optional[str] = None
    location: Optional[str] = None   # CSS selector or "Global"
    snippet: Optional[str] = None    # exact text that triggered the issue
    id: str = field(default_factory=new_issue_id)

    @property
    def dedup_key(self) -> Tuple[str, str]:
        return (self.description, self.url)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "category": self.category.value,
            "severity": self.severity.value,
            "url": self.url,
            "description": self.description,
            "userImpact": self.user_impact,
            "remediation": self.remediation,
        }
        if self.evidence is not None:
            data["evidence"] = self.evidence
        if self.location is not None:
            data["location"] = self.location
        if self.snippet is not None:
            data["snippet"] = self.snippet
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        return cls(
            id=data.get("id") or new_issue_id(),
            category=Category(data["category"]),
            severity=Severity(data["severity"]),
            url=data["url"],
            description=data["description"],
            user_impact=data.get("userImpact", ""),
            remediation=data.get("remediation", ""),
            evidence=data.get("evidence"),
            location=data.get("location"),
            snippet=data.get("snippet"),
        )


# ---------------------------------------------------------------------------
# Per-page results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PerfMetrics:
    """Navigation Timing figures for one page, in milliseconds."""
    ttfb: float = 0.0
    fcp: float = 0.0
    dom_load: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"ttfb": self.ttfb, "fcp": self.fcp, "domLoad": self.dom_load}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PerfMetrics":
        return cls(
            ttfb=float(data.get("ttfb", 0.0)),
            fcp=float(data.get("fcp", 0.0)),
            dom_load=float(data.get("domLoad", 0.0)),
        )


@dataclass(frozen=True)
class PageLoad:
    """Outcome of one navigation. ``metrics`` can be None on a loaded page."""
    loaded: bool
    metrics: Optional[PerfMetrics] = None


@dataclass(frozen=True)
class PageResult:
    """Everything produced for one crawled page. Immutable once built."""
    url: str
    issues: Tuple[Issue, ...] = ()
    links: Tuple[str, ...] = ()       # outbound, in discovery order
    depth: int = 0
    scanned_at: str = field(default_factory=_utc_now)
    perf_metrics: Optional[PerfMetrics] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "url": self.url,
            "scannedAt": self.scanned_at,
            "depth": self.depth,
            "issues": [i.to_dict() for i in self.issues],
            "links": list(self.links),
        }
        if self.perf_metrics is not None:
            data["performanceMetrics"] = self.perf_metrics.to_dict()
        return data


# ---------------------------------------------------------------------------
# Score + report
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HygieneScore:
    total: int
    breakdown: Dict[ScoreBucket, int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "breakdown": {bucket.value: value for bucket, value in self.breakdown.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HygieneScore":
        return cls(
            total=int(data["total"]),
            breakdown={ScoreBucket(k): int(v) for k, v in data["breakdown"].items()},
        )


@dataclass
class GraphNode:
    """One page in the crawl's link graph."""
    id: str
    label: str
    type: str = "Page"
    properties: Dict[str, Any] = field(default_factory=dict)
    edges: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "properties": dict(self.properties),
            "edges": list(self.edges),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphNode":
        return cls(
            id=data["id"],
            label=data.get("label", ""),
            type=data.get("type", "Page"),
            properties=dict(data.get("properties", {})),
            edges=list(data.get("edges", [])),
        )


@dataclass
class Recommendations:
    immediate: List[str] = field(default_factory=list)    # High
    short_term: List[str] = field(default_factory=list)   # Medium
    long_term: List[str] = field(default_factory=list)    # Low

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "immediate": list(self.immediate),
            "shortTerm": list(self.short_term),
            "longTerm": list(self.long_term),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recommendations":
        return cls(
            immediate=list(data.get("immediate", [])),
            short_term=list(data.get("shortTerm", [])),
            long_term=list(data.get("longTerm", [])),
        )


@dataclass
class FinalReport:
    """The assembled output of one scan."""
    score: HygieneScore
    trust_summary: TrustSummary
    pages_scanned: int
    issues: List[Issue] = field(default_factory=list)
    critical_issues: List[Issue] = field(default_factory=list)
    knowledge_graph: List[GraphNode] = field(default_factory=list)
    recommendations: Recommendations = field(default_factory=Recommendations)
    closing_insight: str = ""
    start_url: str = ""
    generated_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startUrl": self.start_url,
            "generatedAt": self.generated_at,
            "score": self.score.to_dict(),
            "trustSummary": self.trust_summary.value,
            "pagesScanned": self.pages_scanned,
            "issues": [i.to_dict() for i in self.issues],
            "criticalIssues": [i.to_dict() for i in self.critical_issues],
            "knowledgeGraph": [n.to_dict() for n in self.knowledge_graph],
            "recommendations": self.recommendations.to_dict(),
            "closingInsight": self.closing_insight,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FinalReport":
        return cls(
            score=HygieneScore.from_dict(data["score"]),
            trust_summary=TrustSummary(data["trustSummary"]),
            pages_scanned=int(data.get("pagesScanned", 0)),
            issues=[Issue.from_dict(i) for i in data.get("issues", [])],
            critical_issues=[Issue.from_dict(i) for i in data.get("criticalIssues", [])],
            knowledge_graph=[GraphNode.from_dict(n) for n in data.get("knowledgeGraph", [])],
            recommendations=Recommendations.from_dict(data.get("recommendations", {})),
            closing_insight=data.get("closingInsight", ""),
            start_url=data.get("startUrl", ""),
            generated_at=data.get("generatedAt") or _utc_now(),
        )
