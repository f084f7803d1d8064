"""
Candidate filter: hard eligibility constraints on the provider catalog.

Rules (all must pass):
  (a) Preferred area set       -> provider area must match (case-insensitive).
  (b) Experience none/beginner -> provider must be explicitly beginner-friendly
                                  AND must not be in the lowest quality tier.
  (c) Data-quality floor       -> provider must have a non-blank name and area.
  (d) No license               -> provider must not be known to lack trial dives.

Unknown attributes never exclude a provider, with one exception: rule (b)
requires ``beginner_friendly is True``, because showing a first-timer a
shop that has not declared beginner support is the failure this filter
exists to prevent.  The lowest-tier exclusion in (b) is unconditional;
there is no review-count fallback.

The filter preserves catalog order, never mutates providers, and never
scores or ranks.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dive_matcher.models.provider import ServiceProvider
from dive_matcher.models.user import UserContext
from dive_matcher.taxonomy.provider_taxonomy import LOWEST_QUALITY_TIER, LicenseStatus

logger = logging.getLogger(__name__)


def filter_candidates(
    catalog: Iterable[ServiceProvider],
    user_context: UserContext | None,
) -> list[ServiceProvider]:
    """Return the providers that satisfy every hard constraint.

    Args:
        catalog:      Provider catalog snapshot.
        user_context: Caller-supplied user facts; ``None`` applies only the
                      data-quality rule.

    Returns:
        Eligible providers, in catalog order.
    """
    ctx = user_context or UserContext()
    wanted_area = _norm_area(ctx.preferred_area)

    candidates: list[ServiceProvider] = []
    rejected = 0
    for provider in catalog:
        if _is_eligible(provider, ctx, wanted_area):
            candidates.append(provider)
        else:
            rejected += 1

    logger.debug("Filter kept %d provider(s), rejected %d", len(candidates), rejected)
    return candidates


def _is_eligible(
    provider: ServiceProvider,
    ctx: UserContext,
    wanted_area: str | None,
) -> bool:
    # (c) data-quality floor
    area = _norm_area(provider.area)
    if not (provider.name or "").strip() or area is None:
        return False

    # (a) preferred area
    if wanted_area is not None and area != wanted_area:
        return False

    # (b) novice protection
    if ctx.is_novice:
        if provider.beginner_friendly is not True:
            return False
        if provider.quality_tier == LOWEST_QUALITY_TIER:
            return False

    # (d) unlicensed users need trial dives
    if ctx.license_status == LicenseStatus.NONE and provider.trial_dive_available is False:
        return False

    return True


def _norm_area(area: str | None) -> str | None:
    if area is None:
        return None
    norm = area.strip().casefold()
    return norm or None
