"""
Recommendation ranker: deterministic total order over scored candidates.

Sort key, evaluated left to right until decisive
------------------------------------------------
    1. total          descending
    2. rating         descending   (unknown rating sorts as 0)
    3. review_count   descending   (unknown count sorts as 0)
    4. name           ascending    (plain lexicographic)
    5. provider_id    ascending

Key 5 only matters for two catalog entries with identical names and
statistics; it makes the order strict so no two recommendations are ever
"tied" in the output.

An empty input returns the ``NoCandidates`` signal rather than ``[]``.
"""

from __future__ import annotations

from collections.abc import Iterable

from dive_matcher.models.recommendation import NoCandidates, ScoredCandidate

DEFAULT_MAX_RESULTS = 3


def rank_key(candidate: ScoredCandidate) -> tuple:
    """Sort key implementing the tie-break chain above."""
    provider = candidate.provider
    return (
        -candidate.total,
        -(provider.rating or 0.0),
        -(provider.review_count or 0),
        provider.display_name,
        provider.provider_id,
    )


def rank(
    scored: Iterable[ScoredCandidate],
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[ScoredCandidate] | NoCandidates:
    """Order candidates and keep the top ``max_results``.

    Args:
        scored:      Output of ``score_candidates()``.
        max_results: Number of entries to keep; must be >= 1.  When it
                     exceeds the candidate count, every candidate is kept.

    Returns:
        Ranked candidates (best first), or ``NoCandidates`` when ``scored``
        is empty.

    Raises:
        ValueError: If ``max_results`` < 1.
    """
    if max_results < 1:
        raise ValueError(f"max_results must be >= 1, got {max_results}.")

    items = list(scored)
    if not items:
        return NoCandidates(catalog_size=0, reason="No scored candidates to rank.")

    return sorted(items, key=rank_key)[:max_results]
