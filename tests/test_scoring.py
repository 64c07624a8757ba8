"""
Tests for the weighted hygiene score and trust labels.
"""

import pytest

from conftest import make_issue
from trustscan import scoring
from trustscan.models import Category, ScoreBucket, Severity, TrustSummary


class TestCalculate:

    def test_no_issues_is_perfect(self):
        score = scoring.calculate([])
        assert score.total == 100
        assert score.breakdown == scoring.WEIGHTS

    def test_functional_bucket_floors_at_zero(self):
        """Three High functional issues wipe the functionality bucket only."""
        issues = [
            make_issue(Category.FUNCTIONAL, Severity.HIGH, description=f"Broken {i}")
            for i in range(3)
        ]
        score = scoring.calculate(issues)
        assert score.breakdown[ScoreBucket.FUNCTIONALITY] == 0
        assert score.total == 85

    def test_bucket_clamped_at_zero(self):
        """20 - 15 - 5 - 1 would be negative."""
        issues = [
            make_issue(Category.ACCESSIBILITY, Severity.HIGH, description="a"),
            make_issue(Category.ACCESSIBILITY, Severity.MEDIUM, description="b"),
            make_issue(Category.ACCESSIBILITY, Severity.LOW, description="c"),
        ]
        score = scoring.calculate(issues)
        assert score.breakdown[ScoreBucket.ACCESSIBILITY] == 0
        assert score.total == 80

    def test_trust_and_semantic_share_a_bucket(self):
        issues = [
            make_issue(Category.TRUST, Severity.MEDIUM, description="urgency"),
            make_issue(Category.SEMANTIC, Severity.MEDIUM, description="tone"),
        ]
        assert scoring.calculate(issues).breakdown[ScoreBucket.SEMANTIC] == 15

    def test_network_maps_to_reliability(self):
        issues = [make_issue(Category.NETWORK, Severity.HIGH, description="HTTP Error 500")]
        assert scoring.calculate(issues).breakdown[ScoreBucket.RELIABILITY] == 0

    def test_total_stays_in_range(self):
        issues = [
            make_issue(category, Severity.HIGH, description=f"{category.value}-{i}")
            for category in Category
            for i in range(5)
        ]
        score = scoring.calculate(issues)
        assert score.total == 0
        assert all(v == 0 for v in score.breakdown.values())

    def test_every_category_has_a_bucket(self):
        assert set(scoring.CATEGORY_BUCKETS) == set(Category)
        assert sum(scoring.WEIGHTS.values()) == 100


class TestTrustSummary:

    @pytest.mark.parametrize("total,expected", [
        (100, TrustSummary.HIGH),
        (85, TrustSummary.HIGH),
        (81, TrustSummary.HIGH),
        (80, TrustSummary.MODERATE),
        (60, TrustSummary.MODERATE),
        (51, TrustSummary.MODERATE),
        (50, TrustSummary.LOW),
        (30, TrustSummary.LOW),
        (0, TrustSummary.LOW),
    ])
    def test_thresholds(self, total, expected):
        assert scoring.trust_summary(total) is expected
