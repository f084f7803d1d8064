"""
Matching entry point - catalog + user context + free text to a ranked,
explained shortlist of dive shops.

Flow
----
  1. Resolve the ``ScoringConfig`` for ``config_version`` from the registry.
     An unknown version raises ``ConfigError``; there is no silent fallback.
  2. classify(free_text, user_context)      -> ConcernProfile
     merge_profiles(..., external_profile)  (only when one is supplied)
  3. filter_candidates(catalog, user_context) -> candidates
     No candidates -> ``NoCandidates`` (returned, never raised).
  4. score_candidates(candidates, profile)   -> ScoredCandidate[]
  5. rank(scored, max_results)               -> top-N
  6. explain(each top-N entry)               -> Recommendation[]

Every step is a pure function of its inputs and the (read-only) config,
so identical inputs always produce identical output.  Nothing here
performs I/O apart from the first, cached registry load.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from dive_matcher.matching.classifier import classify, merge_profiles
from dive_matcher.matching.filter import filter_candidates
from dive_matcher.models.concern import ConcernProfile
from dive_matcher.models.provider import ServiceProvider
from dive_matcher.models.recommendation import (
    MatchOutcome,
    MatchStats,
    NoCandidates,
    Recommendation,
)
from dive_matcher.models.user import UserContext
from dive_matcher.recommendations.explainer import explain
from dive_matcher.recommendations.ranker import DEFAULT_MAX_RESULTS, rank
from dive_matcher.recommendations.scorer import score_candidates
from dive_matcher.scoring.registry import ConfigRegistry, get_default_registry
from dive_matcher.taxonomy.concern_taxonomy import MergePolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_VERSION = "v2"
DEFAULT_MERGE_POLICY = MergePolicy.EXTERNAL_WINS


def match(
    catalog: Sequence[ServiceProvider],
    user_context: UserContext | None,
    free_text: Any,
    config_version: Optional[str] = None,
    max_results: Optional[int] = None,
    *,
    registry: Optional[ConfigRegistry] = None,
    external_profile: ConcernProfile | Mapping[str, Any] | None = None,
    merge_policy: MergePolicy | str | None = None,
) -> list[Recommendation] | NoCandidates:
    """Recommend dive shops for one user request.

    Args:
        catalog:          Provider catalog snapshot (read-only).
        user_context:     Structured user facts, or ``None``.
        free_text:        The user's own words; ``None`` or non-text is
                          treated as empty.
        config_version:   Weight scheme to use.  ``None`` selects the
                          registry's default version.
        max_results:      Shortlist length (default 3); must be >= 1.
        registry:         Config registry; the cached default registry
                          (``config/scoring``) when omitted.
        external_profile: Concern profile computed elsewhere (e.g. by an
                          external analyzer), merged with the keyword one.
        merge_policy:     How ``external_profile`` is merged
                          (default ``external_wins``).

    Returns:
        Ranked ``Recommendation`` list (best first, ranks from 1), or
        ``NoCandidates`` if the filter admitted no provider.

    Raises:
        ConfigError: If ``config_version`` is unknown.
        ValueError:  If ``max_results`` < 1 or ``merge_policy`` is invalid.
    """
    return match_with_stats(
        catalog,
        user_context,
        free_text,
        config_version,
        max_results,
        registry=registry,
        external_profile=external_profile,
        merge_policy=merge_policy,
    ).result


def match_with_stats(
    catalog: Sequence[ServiceProvider],
    user_context: UserContext | None,
    free_text: Any,
    config_version: Optional[str] = None,
    max_results: Optional[int] = None,
    *,
    registry: Optional[ConfigRegistry] = None,
    external_profile: ConcernProfile | Mapping[str, Any] | None = None,
    merge_policy: MergePolicy | str | None = None,
) -> MatchOutcome:
    """Same as ``match()`` but also returns the concern profile and counters."""
    limit = DEFAULT_MAX_RESULTS if max_results is None else max_results
    if limit < 1:
        raise ValueError(f"max_results must be >= 1, got {limit}.")

    if registry is None:
        registry = get_default_registry(default_version=DEFAULT_CONFIG_VERSION)
    config = registry.get(config_version)

    catalog = list(catalog)
    logger.info(
        "Matching against %d provider(s) with scoring config %s",
        len(catalog), config.version,
    )

    # ── Concerns ──────────────────────────────────────────────────────────────
    profile = classify(free_text, user_context, config)
    if external_profile is not None:
        policy = DEFAULT_MERGE_POLICY if merge_policy is None else merge_policy
        profile = merge_profiles(
            profile, external_profile, policy, known_categories=config.categories
        )
    logger.debug("Concern profile: %s", profile.as_dict())

    # ── Filter ────────────────────────────────────────────────────────────────
    candidates = filter_candidates(catalog, user_context)
    if not candidates:
        logger.info("No provider passed the filter (catalog size %d)", len(catalog))
        return MatchOutcome(
            result=NoCandidates(catalog_size=len(catalog)),
            stats=MatchStats(
                catalog_size=len(catalog),
                candidate_count=0,
                concern_count=len(profile),
                top_score=0.0,
                config_version=config.version,
            ),
            profile=profile,
        )

    # ── Score, rank, explain ──────────────────────────────────────────────────
    scored = score_candidates(candidates, profile, config)
    ranked = rank(scored, max_results=limit)

    recommendations = [
        Recommendation(
            rank=position,
            provider=candidate.provider,
            breakdown=candidate.breakdown,
            explanation=explain(candidate, profile, user_context, config),
        )
        for position, candidate in enumerate(ranked, start=1)
    ]

    stats = MatchStats(
        catalog_size=len(catalog),
        candidate_count=len(candidates),
        concern_count=len(profile),
        top_score=recommendations[0].breakdown.total,
        config_version=config.version,
    )
    logger.info(
        "Returning %d recommendation(s) from %d candidate(s); top score %.2f",
        len(recommendations), len(candidates), stats.top_score,
    )
    return MatchOutcome(result=recommendations, stats=stats, profile=profile)
