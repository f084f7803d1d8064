"""
Provider and user-context enums.

Two groups of enums:
  - Provider side: ``QualityTier`` (curated shop grade) and
    ``SubscriptionTier`` (the shop's paid listing plan).
  - User side:     ``ExperienceLevel``, ``LicenseStatus``,
    ``ParticipationStyle``.

Ordering matters for both provider enums.  ``QUALITY_TIER_ORDER`` lists
tiers best-first, so its last element is the lowest defined tier (the one
hidden from beginners).  ``SUBSCRIPTION_TIER_ORDER`` lists plans
cheapest-first; scoring presets must give a higher plan at least as many
bonus points as a lower one.

This module has NO imports from any other ``dive_matcher`` package.
"""

from enum import StrEnum


class QualityTier(StrEnum):
    """Curated quality grade assigned to a shop (S best, C lowest)."""

    S = "s"
    """Top certified shop: consistently excellent safety and reviews."""

    A = "a"
    """Certified shop with strong reviews."""

    B = "b"
    """Certified shop meeting the baseline standard."""

    C = "c"
    """Listed but uncertified; not shown to first-time divers."""


class SubscriptionTier(StrEnum):
    """Paid listing plan of a shop."""

    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


class ExperienceLevel(StrEnum):
    """Self-reported diving experience of the user."""

    NONE = "none"
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class LicenseStatus(StrEnum):
    """Diving certification held by the user."""

    NONE = "none"
    OPEN_WATER = "open_water"
    ADVANCED = "advanced"
    PROFESSIONAL = "professional"


class ParticipationStyle(StrEnum):
    """Whether the user is joining alone or with a group."""

    SOLO = "solo"
    GROUP = "group"


QUALITY_TIER_ORDER: tuple[QualityTier, ...] = (
    QualityTier.S,
    QualityTier.A,
    QualityTier.B,
    QualityTier.C,
)

LOWEST_QUALITY_TIER: QualityTier = QUALITY_TIER_ORDER[-1]

SUBSCRIPTION_TIER_ORDER: tuple[SubscriptionTier, ...] = (
    SubscriptionTier.BASIC,
    SubscriptionTier.STANDARD,
    SubscriptionTier.PREMIUM,
)

NOVICE_LEVELS: frozenset[ExperienceLevel] = frozenset(
    {ExperienceLevel.NONE, ExperienceLevel.BEGINNER}
)
