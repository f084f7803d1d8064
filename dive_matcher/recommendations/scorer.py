"""
Recommendation scoring: converts a filtered candidate + concern profile
into a ``ScoreBreakdown`` under one versioned ``ScoringConfig``.

Score formula (additive, every term capped)
-------------------------------------------
    total = Σ concern_subscore[c]   for c in the concern profile
          + service_quality          (tier + rating + review points)
          + plan_bonus

Component explanations
----------------------
concern_subscore[c] (0 - cap[c]):
    raw    = Σ points of the category's attribute rules the provider satisfies
    scaled = raw * confidence[c]
    score  = min(scaled, cap[c])
    Rule kinds: flag (boolean is True), at_least / at_most (numeric
    threshold), scaled (points * min(value / full_at, 1)).  A rule with
    ``requires_terms`` only counts if the user's text matched one of them.
    Categories absent from the profile score exactly 0 and do not appear
    in the breakdown, which is what makes the total concern-aware.

service_quality (0 - tier_cap + rating_cap + review_cap):
    tier_points   = tier table lookup                    (ungraded -> 0)
    rating_points = bucket for the highest threshold <= rating
    review_points = bucket for the highest threshold <= review_count
    Each component capped individually.

plan_bonus (0 - plan cap):
    Subscription tier table lookup, capped.  Presets are validated so a
    higher tier never earns less.

Missing provider attributes contribute 0; nothing here raises on
incomplete catalog data.  All values are rounded to 2 decimals.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from dive_matcher.models.concern import ConcernProfile
from dive_matcher.models.provider import ServiceProvider
from dive_matcher.models.recommendation import ScoreBreakdown, ScoredCandidate
from dive_matcher.scoring.models import (
    AttributeRule,
    Bucket,
    ConcernCategoryConfig,
    ScoringConfig,
)
from dive_matcher.utils.text import normalize_text

logger = logging.getLogger(__name__)


def score_candidates(
    candidates: Iterable[ServiceProvider],
    profile: ConcernProfile,
    config: ScoringConfig,
) -> list[ScoredCandidate]:
    """Score every candidate; input order is preserved, nothing is sorted.

    Args:
        candidates: Providers that already passed the candidate filter.
        profile:    Detected concerns for this request.
        config:     Weight scheme to apply.

    Returns:
        One ``ScoredCandidate`` per input provider.
    """
    scored = [
        ScoredCandidate(provider=p, breakdown=compute_breakdown(p, profile, config))
        for p in candidates
    ]
    logger.debug("Scored %d candidate(s) with config %s", len(scored), config.version)
    return scored


def compute_breakdown(
    provider: ServiceProvider,
    profile: ConcernProfile,
    config: ScoringConfig,
) -> ScoreBreakdown:
    """Compute all subscores for one provider.

    Args:
        provider: Candidate provider.
        profile:  Detected concerns (may be empty).
        config:   Weight scheme.

    Returns:
        ``ScoreBreakdown`` with concern, service-quality and plan subscores.
    """
    user_terms = frozenset(normalize_text(t) for t in profile.all_terms())

    # ── Concern-driven subscores ──────────────────────────────────────────────
    concern_scores: dict[str, float] = {}
    matched_attributes: dict[str, tuple[str, ...]] = {}
    for category, category_cfg in config.categories.items():
        confidence = profile.confidence(category)
        if confidence <= 0.0:
            continue
        raw, labels = category_points(provider, category_cfg, user_terms)
        concern_scores[category] = _capped(raw * confidence, category_cfg.cap)
        matched_attributes[category] = labels

    # ── Service quality ───────────────────────────────────────────────────────
    sq = config.service_quality
    tier = provider.quality_tier
    tier_points = _capped(sq.tier_points.get(tier.value, 0.0) if tier else 0.0, sq.tier_cap)
    rating_points = _capped(bucket_points(provider.rating, sq.rating_buckets), sq.rating_cap)
    review_points = _capped(bucket_points(provider.review_count, sq.review_buckets), sq.review_cap)
    service_quality = round(tier_points + rating_points + review_points, 2)

    # ── Plan bonus ────────────────────────────────────────────────────────────
    plan = config.plan_bonus
    plan_bonus = _capped(plan.points.get(provider.subscription_tier.value, 0.0), plan.cap)

    total = round(sum(concern_scores.values()) + service_quality + plan_bonus, 2)

    return ScoreBreakdown(
        provider_id=provider.provider_id,
        concern_scores=concern_scores,
        matched_attributes=matched_attributes,
        tier_points=tier_points,
        rating_points=rating_points,
        review_points=review_points,
        service_quality=service_quality,
        plan_bonus=plan_bonus,
        total=total,
    )


def category_points(
    provider: ServiceProvider,
    category_cfg: ConcernCategoryConfig,
    user_terms: frozenset[str] = frozenset(),
) -> tuple[float, tuple[str, ...]]:
    """Raw (unscaled, uncapped) points for one category plus evidence labels.

    Returns:
        ``(raw_points, labels)`` where ``labels`` lists the satisfied rules
        in config order.
    """
    raw = 0.0
    labels: list[str] = []
    for rule in category_cfg.rules:
        if rule.requires_terms and not user_terms.intersection(rule.requires_terms):
            continue
        points = rule_points(provider, rule)
        if points > 0.0:
            raw += points
            if rule.label not in labels:
                labels.append(rule.label)
    return raw, tuple(labels)


def rule_points(provider: ServiceProvider, rule: AttributeRule) -> float:
    """Points one attribute rule awards ``provider`` (0.0 when unknown)."""
    value = getattr(provider, rule.attribute, None)
    if value is None:
        return 0.0

    if rule.kind == "flag":
        return rule.points if value is True else 0.0

    number = float(value)
    if not math.isfinite(number):
        return 0.0
    if rule.kind == "at_least":
        return rule.points if number >= rule.threshold else 0.0
    if rule.kind == "at_most":
        return rule.points if number <= rule.threshold else 0.0
    # scaled: linear up to full_at
    return rule.points * _clamp(number / rule.full_at, 0.0, 1.0)


def bucket_points(value: float | None, buckets: Sequence[Bucket]) -> float:
    """Points of the highest-threshold bucket that ``value`` reaches.

    ``buckets`` is sorted highest threshold first by config validation.
    """
    if value is None or not math.isfinite(value):
        return 0.0
    for bucket in buckets:
        if value >= bucket.threshold:
            return bucket.points
    return 0.0


# ── Helpers ───────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _capped(value: float, cap: float) -> float:
    return min(cap, round(_clamp(value, 0.0, cap), 2))
