"""
Ephemeral scoring and recommendation outputs.

These are plain frozen dataclasses rather than pydantic models: they are
produced once per request by pure functions and never persisted by the
core.  ``as_dict()`` helpers give JSON-friendly views for the CLI and any
presentation layer.

``NoCandidates`` is the explicit empty-result signal returned when the
filter admits no provider at all.  It is a different type
from an empty list so callers can tell "nothing passed the filter, try
broadening the search" apart from "fewer good matches than requested".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dive_matcher.models.concern import ConcernProfile
from dive_matcher.models.provider import ServiceProvider


@dataclass(frozen=True)
class ScoreBreakdown:
    """All subscores for one candidate.

    Attributes:
        provider_id:        Catalog id of the scored provider.
        concern_scores:     Category slug -> capped concern subscore.  Only
                            categories present in the concern profile appear.
        matched_attributes: Category slug -> labels of satisfied attribute
                            rules (explanation evidence).
        tier_points:        Quality-tier component of service quality.
        rating_points:      Rating-bucket component of service quality.
        review_points:      Review-count component of service quality.
        service_quality:    tier + rating + review points.
        plan_bonus:         Capped subscription-tier bonus.
        total:              Σ concern_scores + service_quality + plan_bonus.
    """

    provider_id:        str
    concern_scores:     dict[str, float]
    matched_attributes: dict[str, tuple[str, ...]]
    tier_points:        float
    rating_points:      float
    review_points:      float
    service_quality:    float
    plan_bonus:         float
    total:              float

    @property
    def concern_total(self) -> float:
        return round(sum(self.concern_scores.values()), 2)

    def nonzero_concerns(self) -> list[str]:
        """Category slugs with a positive subscore, in breakdown order."""
        return [c for c, v in self.concern_scores.items() if v > 0]

    def as_dict(self) -> dict[str, float]:
        """Flat subscore-name -> value map including ``total``."""
        out: dict[str, float] = dict(self.concern_scores)
        out["service_quality"] = self.service_quality
        out["plan_bonus"] = self.plan_bonus
        out["total"] = self.total
        return out


@dataclass(frozen=True)
class ScoredCandidate:
    """A filtered provider coupled with its score breakdown."""

    provider:  ServiceProvider
    breakdown: ScoreBreakdown

    @property
    def total(self) -> float:
        return self.breakdown.total


@dataclass(frozen=True)
class ExplanationReason:
    """One concern paired with the provider attributes that address it."""

    category:   str
    label:      str
    attributes: tuple[str, ...]
    score:      float

    def __str__(self) -> str:
        return f"{self.label} -> {', '.join(self.attributes)}"


@dataclass(frozen=True)
class Explanation:
    """Structured reasons plus rendered prose for one recommendation."""

    reasons: tuple[ExplanationReason, ...]
    prose:   str


@dataclass(frozen=True)
class Recommendation:
    """Final ranked output entry (rank is 1-based)."""

    rank:        int
    provider:    ServiceProvider
    breakdown:   ScoreBreakdown
    explanation: Explanation

    def as_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "provider_id": self.provider.provider_id,
            "name": self.provider.display_name,
            "area": self.provider.area,
            "scores": self.breakdown.as_dict(),
            "reasons": [
                {
                    "category": r.category,
                    "label": r.label,
                    "attributes": list(r.attributes),
                    "score": r.score,
                }
                for r in self.explanation.reasons
            ],
            "prose": self.explanation.prose,
        }


@dataclass(frozen=True)
class NoCandidates:
    """Explicit signal that the filter removed every provider.

    Attributes:
        catalog_size: Number of providers before filtering.
        reason:       Short human-readable hint for the caller.
    """

    catalog_size: int
    reason:       str = "No provider satisfied the hard constraints."

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": "no_candidates",
            "catalog_size": self.catalog_size,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class MatchStats:
    """Counters describing one ``match()`` run."""

    catalog_size:    int
    candidate_count: int
    concern_count:   int
    top_score:       float
    config_version:  str


@dataclass(frozen=True)
class MatchOutcome:
    """``match_with_stats()`` result: the recommendations (or the
    ``NoCandidates`` signal) and run counters."""

    result:  list[Recommendation] | NoCandidates
    stats:   MatchStats
    profile: ConcernProfile = field(default_factory=ConcernProfile)

    @property
    def has_candidates(self) -> bool:
        return not isinstance(self.result, NoCandidates)
