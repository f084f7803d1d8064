"""
Explanation generator: structured reasons and template prose for a
ranked candidate.

Reasons
-------
One ``ExplanationReason`` per concern category that is both present in
the concern profile and has a nonzero subscore for the candidate, in
profile order (strongest concern first).  Each reason lists the attribute
labels that earned points, e.g. ``safety -> AED and emergency oxygen on
board, insurance included``.

Prose
-----
Concern template (at least one reason):
    "You mentioned safety and joining solo. <empathy line of the top
    concern> For safety, <shop> offers A and B. For joining solo, <shop>
    offers C. <closing line by experience level>"

Quality template (empty profile, or no concern scored for this shop):
    "<shop> is an S-grade certified shop, rated 4.8/5 across 120 reviews
    and a premium partner. <closing line>"

Both templates are deterministic and need nothing outside this module;
a caller that wants richer wording can post-process ``Explanation``.
"""

from __future__ import annotations

from dive_matcher.models.concern import ConcernProfile
from dive_matcher.models.recommendation import (
    Explanation,
    ExplanationReason,
    ScoredCandidate,
)
from dive_matcher.models.user import UserContext
from dive_matcher.scoring.models import ScoringConfig
from dive_matcher.taxonomy.provider_taxonomy import ExperienceLevel, SubscriptionTier

_CLOSING_BY_EXPERIENCE: dict[ExperienceLevel | None, str] = {
    ExperienceLevel.NONE:         "It's a lovely place for your very first dive.",
    ExperienceLevel.BEGINNER:     "It's a great place to build confidence underwater.",
    ExperienceLevel.INTERMEDIATE: "Enjoy making new memories in the water!",
    ExperienceLevel.ADVANCED:     "Even experienced divers find something new here.",
    None:                         "Have a wonderful dive!",
}

_PLAN_PHRASES: dict[SubscriptionTier, str] = {
    SubscriptionTier.PREMIUM:  "a premium partner",
    SubscriptionTier.STANDARD: "a recommended partner",
}


def explain(
    candidate: ScoredCandidate,
    profile: ConcernProfile,
    user_context: UserContext | None,
    config: ScoringConfig | None = None,
) -> Explanation:
    """Build reasons and prose for one ranked candidate.

    Args:
        candidate:    Scored candidate (a ``Recommendation`` works too).
        profile:      Concern profile the candidate was scored against.
        user_context: Used for the closing line and optional name.
        config:       Source of category labels and empathy lines; slugs
                      are used as labels when omitted.

    Returns:
        ``Explanation`` with a non-empty prose string.
    """
    reasons = build_reasons(candidate, profile, config)
    if reasons:
        prose = _concern_prose(candidate, reasons, user_context, config)
    else:
        prose = _quality_prose(candidate, profile, user_context, config)
    return Explanation(reasons=reasons, prose=prose)


def build_reasons(
    candidate: ScoredCandidate,
    profile: ConcernProfile,
    config: ScoringConfig | None = None,
) -> tuple[ExplanationReason, ...]:
    """Pair each scored concern with the attributes that earned its points."""
    breakdown = candidate.breakdown
    scored = set(breakdown.nonzero_concerns())
    reasons: list[ExplanationReason] = []
    for category in profile:
        attributes = breakdown.matched_attributes.get(category, ())
        if category not in scored or not attributes:
            continue
        score = breakdown.concern_scores[category]
        reasons.append(
            ExplanationReason(
                category=category,
                label=_label(category, config),
                attributes=attributes,
                score=score,
            )
        )
    return tuple(reasons)


# ── Templates ─────────────────────────────────────────────────────────────────

def _concern_prose(
    candidate: ScoredCandidate,
    reasons: tuple[ExplanationReason, ...],
    user_context: UserContext | None,
    config: ScoringConfig | None,
) -> str:
    shop = candidate.provider.display_name
    top = reasons[:2]

    sentences = [_acknowledge([r.label for r in top], user_context)]
    empathy = _empathy(top[0].category, config)
    if empathy:
        sentences.append(empathy)
    for reason in top:
        sentences.append(f"For {reason.label}, {shop} offers {_join(reason.attributes)}.")
    sentences.append(_closing(user_context))
    return " ".join(sentences)


def _quality_prose(
    candidate: ScoredCandidate,
    profile: ConcernProfile,
    user_context: UserContext | None,
    config: ScoringConfig | None,
) -> str:
    provider = candidate.provider
    shop = provider.display_name

    facts: list[str] = []
    if provider.quality_tier is not None:
        grade = provider.quality_tier.value.upper()
        article = "an" if grade in ("S", "A") else "a"
        facts.append(f"{article} {grade}-grade certified shop")
    if provider.rating is not None:
        rated = f"rated {provider.rating:.1f}/5"
        if provider.review_count:
            rated += f" across {provider.review_count} reviews"
        facts.append(rated)
    plan_phrase = _PLAN_PHRASES.get(provider.subscription_tier)
    if plan_phrase:
        facts.append(plan_phrase)

    sentences: list[str] = []
    if not profile.is_empty:
        sentences.append(_acknowledge([_label(c, config) for c in profile.top(2)], user_context))
    if facts:
        sentences.append(f"{shop} is {_join(facts)}.")
    elif provider.area:
        sentences.append(f"{shop} is a solid choice in {provider.area}.")
    else:
        sentences.append(f"{shop} is a solid choice.")
    sentences.append(_closing(user_context))
    return " ".join(sentences)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _acknowledge(labels: list[str], user_context: UserContext | None) -> str:
    name = (user_context.display_name or "").strip() if user_context else ""
    opener = f"{name}, you mentioned" if name else "You mentioned"
    return f"{opener} {_join(labels)}."


def _closing(user_context: UserContext | None) -> str:
    experience = user_context.experience if user_context else None
    return _CLOSING_BY_EXPERIENCE[experience]


def _label(category: str, config: ScoringConfig | None) -> str:
    if config is None:
        return category.replace("_", " ")
    return config.category_label(category)


def _empathy(category: str, config: ScoringConfig | None) -> str:
    if config is None or category not in config.categories:
        return ""
    return config.categories[category].empathy


def _join(items: tuple[str, ...] | list[str]) -> str:
    """Join as "a", "a and b" or "a, b and c"."""
    items = list(items)
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} and {items[-1]}"
