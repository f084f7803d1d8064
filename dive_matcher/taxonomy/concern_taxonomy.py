"""
Concern taxonomy for user anxiety / preference signals.

``ConcernCategory`` names the six standard anxiety types that drive
concern-aware scoring.  The keyword sets, caps and attribute point tables
for each category live in the scoring presets under ``config/scoring/``;
this module only fixes the canonical slugs so that presets, inference
rules and tests agree on spelling.

``MergePolicy`` describes how an externally supplied concern profile (for
example from an AI-assisted analyzer run by the caller) is combined with
the keyword-derived profile.

Usage example::

    from dive_matcher.taxonomy.concern_taxonomy import ConcernCategory

    if ConcernCategory.SAFETY in profile:
        ...

This module has NO imports from any other ``dive_matcher`` package.
"""

from enum import StrEnum


class ConcernCategory(StrEnum):
    """Standard user-anxiety categories."""

    SAFETY = "safety"
    """Fear of accidents, equipment failure, drowning; "is it safe?"."""

    SKILL = "skill"
    """Doubts about own ability: can't swim well, first time, low confidence."""

    SOLO = "solo"
    """Joining alone; worry about fitting in with strangers."""

    COST = "cost"
    """Budget worries: price level, hidden fees, student budgets."""

    PHYSICAL = "physical"
    """Stamina, age, fitness or health conditions."""

    COMMUNICATION = "communication"
    """Language barrier or embarrassment about asking questions."""


class MergePolicy(StrEnum):
    """How an external concern profile is merged with the keyword profile."""

    REPLACE = "replace"
    """Use the external profile only; keyword and profile inference are discarded."""

    EXTERNAL_WINS = "external_wins"
    """Union of both; on overlap the external confidence replaces the local one."""

    MAX_CONFIDENCE = "max_confidence"
    """Union of both; on overlap the higher confidence is kept."""
