"""
Tests for dive_matcher.reporting.formatters.

Formatters return plain strings, so these tests assert on the presence of
key values rather than exact layout.
"""

from __future__ import annotations

import json

from dive_matcher.models.concern import ConcernProfile, ConcernSignal
from dive_matcher.models.provider import ServiceProvider
from dive_matcher.models.recommendation import (
    Explanation,
    ExplanationReason,
    MatchStats,
    NoCandidates,
    Recommendation,
    ScoreBreakdown,
)
from dive_matcher.reporting.formatters import (
    format_concern_profile,
    format_config_caps,
    format_config_table,
    format_no_candidates,
    format_recommendations,
    to_json,
)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _recommendation(rank: int = 1, name: str = "Blue Reef") -> Recommendation:
    breakdown = ScoreBreakdown(
        provider_id=f"p{rank}",
        concern_scores={"solo": 8.0},
        matched_attributes={"solo": ("solo welcome",)},
        tier_points=20.0,
        rating_points=15.0,
        review_points=10.0,
        service_quality=45.0,
        plan_bonus=12.0,
        total=65.0,
    )
    reason = ExplanationReason(
        category="solo", label="joining solo", attributes=("solo welcome",), score=8.0
    )
    return Recommendation(
        rank=rank,
        provider=ServiceProvider(provider_id=f"p{rank}", name=name, area="Okinawa"),
        breakdown=breakdown,
        explanation=Explanation(
            reasons=(reason,),
            prose="You mentioned joining solo. Have a wonderful dive!",
        ),
    )


def _stats() -> MatchStats:
    return MatchStats(
        catalog_size=12, candidate_count=5, concern_count=1,
        top_score=65.0, config_version="small",
    )


# ── format_concern_profile ─────────────────────────────────────────────────────

class TestFormatConcernProfile:
    def test_empty(self):
        assert "no concerns detected" in format_concern_profile(ConcernProfile())

    def test_rows_with_labels(self, small_config):
        profile = ConcernProfile({
            "solo": ConcernSignal(0.6, frozenset({"alone", "一人"})),
            "safety": ConcernSignal(0.5, inferred=True),
        })
        out = format_concern_profile(profile, small_config)
        assert "joining solo" in out
        assert "0.60" in out
        assert "alone, 一人" in out
        assert "inferred" in out

    def test_slug_without_config(self):
        out = format_concern_profile(ConcernProfile({"cost": ConcernSignal(0.3)}))
        assert "cost" in out


# ── format_recommendations ─────────────────────────────────────────────────────

class TestFormatRecommendations:
    def test_header_and_counters(self):
        out = format_recommendations([_recommendation()], _stats())
        assert "scoring config small" in out
        assert "Catalog: 12" in out
        assert "Candidates: 5" in out

    def test_entry_content(self, small_config):
        out = format_recommendations([_recommendation()], _stats(), small_config)
        assert "#1  Blue Reef" in out
        assert "65.00" in out
        assert "(concerns 8.00)" in out
        assert "joining solo 8.00" in out
        assert "service quality 45.00" in out
        assert "plan 12.00" in out
        assert "- joining solo -> solo welcome" in out
        assert "Have a wonderful dive!" in out

    def test_ranks_in_order(self):
        out = format_recommendations(
            [_recommendation(1, "Alpha"), _recommendation(2, "Beta")], _stats()
        )
        assert out.index("#1  Alpha") < out.index("#2  Beta")

    def test_empty_list(self):
        assert "(no recommendations)" in format_recommendations([], _stats())

    def test_version_from_config_when_no_stats(self, small_config):
        out = format_recommendations([_recommendation()], config=small_config)
        assert "scoring config small" in out


def test_format_no_candidates():
    out = format_no_candidates(NoCandidates(catalog_size=7))
    assert "No matching shops" in out
    assert "Catalog size: 7" in out


# ── Config tables ──────────────────────────────────────────────────────────────

class TestFormatConfigs:
    def test_table_marks_default(self, small_config):
        out = format_config_table([small_config], default_version="small")
        assert "small" in out
        assert "88.0" in out
        assert "Hand-checkable test scheme." in out
        assert "* default version: small" in out

    def test_table_empty(self):
        assert "no scoring configs" in format_config_table([])

    def test_caps(self, small_config):
        out = format_config_caps(small_config)
        assert "safety" in out
        assert "cap  10.0" in out
        assert "service quality" in out
        assert "plan bonus" in out


# ── JSON ───────────────────────────────────────────────────────────────────────

class TestToJson:
    def test_recommendations(self):
        doc = json.loads(to_json([_recommendation()], _stats()))
        assert doc["status"] == "ok"
        rec = doc["recommendations"][0]
        assert rec["rank"] == 1
        assert rec["provider_id"] == "p1"
        assert rec["scores"]["total"] == 65.0
        assert rec["reasons"][0]["attributes"] == ["solo welcome"]
        assert doc["stats"]["config_version"] == "small"

    def test_no_candidates(self):
        doc = json.loads(to_json(NoCandidates(catalog_size=3)))
        assert doc["status"] == "no_candidates"
        assert doc["catalog_size"] == 3
        assert "stats" not in doc

    def test_non_ascii_kept(self):
        rec = _recommendation(name="青の洞窟ダイブ")
        assert "青の洞窟ダイブ" in to_json([rec])
