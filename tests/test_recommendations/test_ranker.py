"""
Tests for dive_matcher/recommendations/ranker.py.

What we test
------------
rank():
  - Sorted by total descending.
  - Tie on total -> higher rating first (4.9 before 4.7).
  - Tie on total and rating -> more reviews first.
  - Then name ascending, then provider_id ascending.
  - Missing rating / review count sort as 0.
  - max_results boundaries: 1, exactly the candidate count, more than
    the candidate count; < 1 raises ValueError.
  - Empty input -> NoCandidates.
  - Every adjacent pair respects the tie-break chain.
  - Input order does not affect the output.
"""

import itertools

import pytest

from dive_matcher.models.provider import ServiceProvider
from dive_matcher.models.recommendation import NoCandidates, ScoreBreakdown, ScoredCandidate
from dive_matcher.recommendations.ranker import DEFAULT_MAX_RESULTS, rank, rank_key


# ── Fixtures ──────────────────────────────────────────────────────────────────

def _scored(
    provider_id: str,
    total: float,
    rating: float | None = None,
    review_count: int | None = None,
    name: str | None = None,
) -> ScoredCandidate:
    provider = ServiceProvider(
        provider_id=provider_id,
        name=name or f"Shop {provider_id}",
        area="okinawa",
        rating=rating,
        review_count=review_count,
    )
    breakdown = ScoreBreakdown(
        provider_id=provider_id,
        concern_scores={},
        matched_attributes={},
        tier_points=0.0,
        rating_points=0.0,
        review_points=0.0,
        service_quality=total,
        plan_bonus=0.0,
        total=total,
    )
    return ScoredCandidate(provider=provider, breakdown=breakdown)


def _ids(ranked) -> list[str]:
    return [c.provider.provider_id for c in ranked]


# ── Ordering ──────────────────────────────────────────────────────────────────


class TestRankOrdering:
    def test_total_descending(self):
        ranked = rank([_scored("a", 10), _scored("b", 30), _scored("c", 20)])
        assert _ids(ranked) == ["b", "c", "a"]

    def test_rating_breaks_total_tie(self):
        ranked = rank([_scored("low", 50, rating=4.7), _scored("high", 50, rating=4.9)])
        assert _ids(ranked) == ["high", "low"]

    def test_review_count_breaks_rating_tie(self):
        ranked = rank([
            _scored("few", 50, rating=4.8, review_count=10),
            _scored("many", 50, rating=4.8, review_count=200),
        ])
        assert _ids(ranked) == ["many", "few"]

    def test_name_breaks_remaining_tie(self):
        ranked = rank([
            _scored("1", 50, rating=4.8, review_count=10, name="Coral"),
            _scored("2", 50, rating=4.8, review_count=10, name="Abyss"),
        ])
        assert [c.provider.name for c in ranked] == ["Abyss", "Coral"]

    def test_provider_id_breaks_duplicate_names(self):
        ranked = rank([_scored("p2", 50, name="Same"), _scored("p1", 50, name="Same")])
        assert _ids(ranked) == ["p1", "p2"]

    def test_missing_rating_sorts_as_zero(self):
        ranked = rank([_scored("none", 50), _scored("low", 50, rating=1.0)])
        assert _ids(ranked) == ["low", "none"]

    def test_input_order_irrelevant(self):
        items = [
            _scored("a", 40, rating=4.5), _scored("b", 40, rating=4.9),
            _scored("c", 60), _scored("d", 40, rating=4.9, review_count=3),
        ]
        expected = _ids(rank(items, max_results=4))
        for perm in itertools.permutations(items):
            assert _ids(rank(perm, max_results=4)) == expected

    def test_adjacent_pairs_respect_chain(self):
        items = [
            _scored(str(i), total, rating, reviews, name)
            for i, (total, rating, reviews, name) in enumerate([
                (50, 4.9, 10, "B"), (50, 4.9, 10, "A"), (50, 4.9, 30, "C"),
                (50, 4.7, 99, "D"), (70, None, None, "E"), (50, None, 5, "F"),
                (10, 5.0, 500, "G"),
            ])
        ]
        ranked = rank(items, max_results=len(items))
        for first, second in zip(ranked, ranked[1:]):
            assert rank_key(first) < rank_key(second)


# ── Limits ────────────────────────────────────────────────────────────────────


class TestRankLimits:
    def test_default_is_three(self):
        assert DEFAULT_MAX_RESULTS == 3
        ranked = rank([_scored(str(i), i) for i in range(5)])
        assert len(ranked) == 3

    def test_max_results_one(self):
        ranked = rank([_scored("a", 1), _scored("b", 2)], max_results=1)
        assert _ids(ranked) == ["b"]

    def test_max_results_equal_to_count(self):
        assert len(rank([_scored("a", 1), _scored("b", 2)], max_results=2)) == 2

    def test_max_results_above_count_returns_all(self):
        assert _ids(rank([_scored("a", 1), _scored("b", 2)], max_results=10)) == ["b", "a"]

    @pytest.mark.parametrize("bad", [0, -1])
    def test_max_results_below_one_raises(self, bad):
        with pytest.raises(ValueError):
            rank([_scored("a", 1)], max_results=bad)

    def test_empty_input_returns_no_candidates(self):
        result = rank([])
        assert isinstance(result, NoCandidates)
        assert result.catalog_size == 0
