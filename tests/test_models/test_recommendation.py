"""
Tests for dive_matcher.models.recommendation output dataclasses.
"""

from __future__ import annotations

from dive_matcher.models.recommendation import (
    ExplanationReason,
    MatchOutcome,
    MatchStats,
    NoCandidates,
    ScoreBreakdown,
)


def _breakdown(**concerns: float) -> ScoreBreakdown:
    return ScoreBreakdown(
        provider_id="p1",
        concern_scores=dict(concerns),
        matched_attributes={},
        tier_points=10.0,
        rating_points=5.0,
        review_points=0.0,
        service_quality=15.0,
        plan_bonus=0.0,
        total=15.0 + sum(concerns.values()),
    )


class TestScoreBreakdown:
    def test_concern_total(self):
        assert _breakdown(safety=4.5, solo=2.25).concern_total == 6.75

    def test_nonzero_concerns_keep_order(self):
        assert _breakdown(solo=0.0, safety=3.0, cost=1.0).nonzero_concerns() == ["safety", "cost"]

    def test_as_dict(self):
        d = _breakdown(safety=5.0).as_dict()
        assert d == {"safety": 5.0, "service_quality": 15.0, "plan_bonus": 0.0, "total": 20.0}


def test_reason_str():
    reason = ExplanationReason("safety", "safety", ("AED", "insurance"), 8.0)
    assert str(reason) == "safety -> AED, insurance"


class TestNoCandidates:
    def test_as_dict(self):
        d = NoCandidates(catalog_size=4).as_dict()
        assert d["status"] == "no_candidates"
        assert d["catalog_size"] == 4

    def test_not_equal_to_empty_list(self):
        assert NoCandidates(catalog_size=0) != []


def test_outcome_has_candidates():
    stats = MatchStats(3, 0, 0, 0.0, "v2")
    assert MatchOutcome(NoCandidates(3), stats).has_candidates is False
    assert MatchOutcome([], stats).has_candidates is True
