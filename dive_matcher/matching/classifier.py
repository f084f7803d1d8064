"""
Concern classifier: free text + user context -> ``ConcernProfile``.

Algorithm
---------
1. Normalize the text (NFKC, case-fold, trim).
2. For every category in the scoring config, count keyword occurrences.
   ASCII keywords match on word boundaries ("safe" does not match
   "safety"); non-ASCII keywords (Japanese) match as plain substrings,
   since those scripts do not separate words with spaces.
       confidence = min(1, match_count * increment_per_match)
3. Apply the config's profile inference rules: each matching rule raises
   its category's confidence to at least ``floor`` (e.g. first-time
   divers are assumed to worry about safety).
4. Keep only categories with confidence > 0.

``classify`` is pure and never raises on bad input: ``None`` or
non-string text is treated as empty, and a missing user context triggers
no inference.  Empty text with no inference triggers yields an empty
profile, not an error.

``merge_profiles`` combines the keyword profile with one supplied by an
external analyzer, under an explicit ``MergePolicy``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

from dive_matcher.models.concern import ConcernProfile, ConcernSignal
from dive_matcher.models.user import UserContext
from dive_matcher.scoring.models import InferenceRule, ScoringConfig
from dive_matcher.taxonomy.concern_taxonomy import MergePolicy
from dive_matcher.utils.text import normalize_text

logger = logging.getLogger(__name__)


def classify(
    text: Any,
    profile: UserContext | None,
    config: ScoringConfig,
) -> ConcernProfile:
    """Detect user concerns from free text and the user context.

    Args:
        text:    Free text from the user (chat message, survey answer).
        profile: Structured user context; ``None`` disables inference.
        config:  Scoring config holding the keyword taxonomy and
                 inference rules.

    Returns:
        ``ConcernProfile`` with one signal per detected category.
    """
    normalized = normalize_text(text)
    signals: dict[str, ConcernSignal] = {}

    if normalized:
        for category, category_cfg in config.categories.items():
            count, matched = _count_matches(normalized, category_cfg.keywords)
            confidence = min(1.0, count * config.increment_per_match)
            if confidence > 0.0:
                signals[category] = ConcernSignal(
                    confidence=confidence,
                    matched_terms=frozenset(matched),
                )

    for rule in config.inference:
        if not _rule_applies(rule, profile):
            continue
        existing = signals.get(rule.category)
        if existing is None:
            signals[rule.category] = ConcernSignal(confidence=rule.floor, inferred=True)
        elif existing.confidence < rule.floor:
            signals[rule.category] = ConcernSignal(
                confidence=rule.floor,
                matched_terms=existing.matched_terms,
                inferred=True,
            )

    result = ConcernProfile(signals)
    logger.debug("Classified concerns: %s", {c: s.confidence for c, s in result.items()})
    return result


def merge_profiles(
    base: ConcernProfile,
    external: ConcernProfile | Mapping[str, Any] | None,
    policy: MergePolicy | str = MergePolicy.EXTERNAL_WINS,
    known_categories: Iterable[str] | None = None,
) -> ConcernProfile:
    """Merge an externally supplied concern profile into ``base``.

    Policies:
        replace:        external profile only.
        external_wins:  union; on overlap the external signal replaces the
                        local one (matched terms are unioned).
        max_confidence: union; on overlap the higher confidence is kept
                        (matched terms are unioned).

    External categories not in ``known_categories`` (when given) are
    dropped, since no scoring table exists for them.

    Raises:
        ValueError: If ``policy`` is not a valid ``MergePolicy``.
    """
    policy = MergePolicy(policy)
    incoming = ConcernProfile.from_mapping(external)

    if known_categories is not None:
        known = set(known_categories)
        dropped = [c for c in incoming if c not in known]
        if dropped:
            logger.debug("Dropping unknown external concern categories: %s", dropped)
        incoming = ConcernProfile({c: s for c, s in incoming.items() if c in known})

    if policy is MergePolicy.REPLACE:
        return incoming

    merged: dict[str, ConcernSignal] = dict(base.items())
    for category, ext in incoming.items():
        local = merged.get(category)
        if local is None:
            merged[category] = ext
            continue
        terms = local.matched_terms | ext.matched_terms
        if policy is MergePolicy.EXTERNAL_WINS or ext.confidence > local.confidence:
            merged[category] = ConcernSignal(ext.confidence, terms, ext.inferred)
        else:
            merged[category] = ConcernSignal(local.confidence, terms, local.inferred)
    return ConcernProfile(merged)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _count_matches(text: str, keywords: Iterable[str]) -> tuple[int, set[str]]:
    count = 0
    matched: set[str] = set()
    for keyword in keywords:
        if keyword.isascii():
            n = len(_keyword_pattern(keyword).findall(text))
        else:
            n = text.count(keyword)
        if n:
            count += n
            matched.add(keyword)
    return count, matched


@lru_cache(maxsize=1024)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)")


def _rule_applies(rule: InferenceRule, profile: UserContext | None) -> bool:
    if profile is None:
        return False
    value = getattr(profile, rule.context_field, None)
    if value is None:
        return False
    return str(value).lower() in rule.values
