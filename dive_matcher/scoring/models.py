"""
Pydantic v2 models for versioned scoring configuration.

A ``ScoringConfig`` is the complete, immutable description of one weight
scheme: the concern keyword taxonomy, per-category attribute point tables
and caps, profile inference rules, service-quality bucket tables and the
plan-bonus table.  Instances are loaded from ``config/scoring/*.toml`` by
the registry module and are frozen.

Model hierarchy
---------------
  ScoringConfig
    ├── ConcernCategoryConfig  - label, keywords, cap, attribute rules
    │     └── AttributeRule    - one provider attribute -> points
    ├── InferenceRule          - user-context field -> confidence floor
    ├── ServiceQualityConfig   - tier table, rating / review buckets
    │     └── Bucket           - threshold -> points
    └── PlanBonusConfig        - subscription tier -> points, capped

Validation
----------
All points and caps are validated to be non-negative, so every subscore
is non-negative by construction.  Attribute rules must reference a known
``ServiceProvider`` field of the right kind (boolean for ``flag``,
numeric otherwise).  Plan-bonus points must be non-decreasing from
basic to premium.  Inference rules must target a configured category.
"""

from __future__ import annotations

from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from dive_matcher.models.provider import FLAG_ATTRIBUTES, NUMERIC_ATTRIBUTES
from dive_matcher.taxonomy.provider_taxonomy import (
    SUBSCRIPTION_TIER_ORDER,
    QualityTier,
    SubscriptionTier,
)
from dive_matcher.utils.text import normalize_text

# ── Attribute rules ───────────────────────────────────────────────────────────


VALID_RULE_KINDS = frozenset({"flag", "at_least", "at_most", "scaled"})


class AttributeRule(BaseModel):
    """Points awarded when a provider satisfies one attribute condition.

    Kinds:
        flag:     boolean attribute is ``True``            -> ``points``
        at_least: numeric attribute >= ``threshold``       -> ``points``
        at_most:  numeric attribute <= ``threshold``       -> ``points``
        scaled:   ``points * min(value / full_at, 1)``     (linear up to cap)

    Attributes:
        attribute:      ``ServiceProvider`` field name.
        kind:           One of ``VALID_RULE_KINDS``.
        points:         Points for a satisfied (or fully scaled) rule.
        threshold:      Comparison value for ``at_least`` / ``at_most``.
        full_at:        Value at which ``scaled`` reaches full points.
        label:          Human-readable evidence text for explanations.
        requires_terms: If non-empty, the rule only counts when the user's
                        text matched at least one of these terms.
    """

    model_config = ConfigDict(frozen=True)

    attribute:      str
    kind:           str = "flag"
    points:         float
    threshold:      Optional[float] = None
    full_at:        Optional[float] = None
    label:          str = Field(default="", validate_default=True)
    requires_terms: list[str] = []

    @field_validator("kind")
    @classmethod
    def valid_kind(cls, v: str) -> str:
        if v not in VALID_RULE_KINDS:
            raise ValueError(
                f"AttributeRule.kind must be one of {sorted(VALID_RULE_KINDS)}, got '{v}'."
            )
        return v

    @field_validator("points")
    @classmethod
    def non_negative_points(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Rule points must be >= 0, got {v}.")
        return v

    @field_validator("label")
    @classmethod
    def default_label(cls, v: str, info: ValidationInfo) -> str:
        return v.strip() or str(info.data.get("attribute", "")).replace("_", " ")

    @field_validator("requires_terms")
    @classmethod
    def normalize_terms(cls, v: list[str]) -> list[str]:
        return [t for t in (normalize_text(term) for term in v) if t]

    @model_validator(mode="after")
    def validate_rule_shape(self) -> "AttributeRule":
        if self.kind == "flag":
            if self.attribute not in FLAG_ATTRIBUTES:
                raise ValueError(
                    f"'flag' rules need a boolean provider attribute; "
                    f"'{self.attribute}' is not one of {sorted(FLAG_ATTRIBUTES)}."
                )
        elif self.attribute not in NUMERIC_ATTRIBUTES:
            raise ValueError(
                f"'{self.kind}' rules need a numeric provider attribute; "
                f"'{self.attribute}' is not one of {sorted(NUMERIC_ATTRIBUTES)}."
            )
        if self.kind in ("at_least", "at_most") and self.threshold is None:
            raise ValueError(f"'{self.kind}' rule on '{self.attribute}' needs a threshold.")
        if self.kind == "scaled" and (self.full_at is None or self.full_at <= 0):
            raise ValueError(f"'scaled' rule on '{self.attribute}' needs full_at > 0.")
        return self


# ── Concern categories ────────────────────────────────────────────────────────


class ConcernCategoryConfig(BaseModel):
    """Keyword set, cap and point table for one concern category.

    Attributes:
        label:    Display name used in reasons and prose (e.g. "safety").
        empathy:  One-sentence acknowledgement used in prose.
        keywords: Terms whose occurrences in the user's text raise confidence.
        cap:      Maximum subscore for this category.
        rules:    Attribute rules summed into the raw category points.
    """

    model_config = ConfigDict(frozen=True)

    label:    str
    empathy:  str = ""
    keywords: list[str] = []
    cap:      float
    rules:    list[AttributeRule] = []

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, v: list[str]) -> list[str]:
        seen: dict[str, None] = {}
        for kw in v:
            norm = normalize_text(kw)
            if norm:
                seen.setdefault(norm, None)
        return list(seen)

    @field_validator("cap")
    @classmethod
    def non_negative_cap(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Category cap must be >= 0, got {v}.")
        return v


# ── Profile inference ─────────────────────────────────────────────────────────


VALID_CONTEXT_FIELDS = frozenset({"experience", "license_status", "participation_style"})


class InferenceRule(BaseModel):
    """Raise a category's confidence to ``floor`` based on the user context.

    Example: ``context_field="experience", values=["none", "beginner"],
    category="safety", floor=0.8`` means first-timers are assumed to
    worry about safety even when they did not say so.
    """

    model_config = ConfigDict(frozen=True)

    context_field: str
    values:        list[str]
    category:      str
    floor:         float

    @field_validator("context_field")
    @classmethod
    def valid_context_field(cls, v: str) -> str:
        if v not in VALID_CONTEXT_FIELDS:
            raise ValueError(
                f"InferenceRule.context_field must be one of "
                f"{sorted(VALID_CONTEXT_FIELDS)}, got '{v}'."
            )
        return v

    @field_validator("values")
    @classmethod
    def lowercase_values(cls, v: list[str]) -> list[str]:
        return [s.strip().lower() for s in v]

    @field_validator("floor")
    @classmethod
    def floor_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"Inference floor must be in (0, 1], got {v}.")
        return v


# ── Service quality ───────────────────────────────────────────────────────────


class Bucket(BaseModel):
    """``points`` awarded when a value reaches ``threshold``."""

    model_config = ConfigDict(frozen=True)

    threshold: float
    points:    float

    @field_validator("points")
    @classmethod
    def non_negative_points(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Bucket points must be >= 0, got {v}.")
        return v


def _validate_buckets(buckets: list[Bucket], name: str) -> list[Bucket]:
    thresholds = [b.threshold for b in buckets]
    if len(thresholds) != len(set(thresholds)):
        raise ValueError(f"{name} thresholds must be unique, got {thresholds}.")
    # Highest threshold first: lookup takes the first bucket the value reaches.
    return sorted(buckets, key=lambda b: b.threshold, reverse=True)


class ServiceQualityConfig(BaseModel):
    """Concern-independent quality tables.

    Attributes:
        tier_points:    Quality-tier slug -> points (ungraded = 0).
        tier_cap:       Cap on the tier component.
        rating_buckets: Average-rating thresholds (bucketed, not linear).
        rating_cap:     Cap on the rating component.
        review_buckets: Review-count thresholds.
        review_cap:     Cap on the review component.
    """

    model_config = ConfigDict(frozen=True)

    tier_points:    dict[str, float] = {"s": 20.0, "a": 15.0, "b": 10.0, "c": 5.0}
    tier_cap:       float = 20.0
    rating_buckets: list[Bucket] = [
        Bucket(threshold=4.8, points=15.0),
        Bucket(threshold=4.5, points=10.0),
        Bucket(threshold=4.0, points=5.0),
    ]
    rating_cap:     float = 15.0
    review_buckets: list[Bucket] = [
        Bucket(threshold=100, points=10.0),
        Bucket(threshold=50, points=7.0),
        Bucket(threshold=20, points=4.0),
    ]
    review_cap:     float = 10.0

    @field_validator("tier_points")
    @classmethod
    def valid_tiers(cls, v: dict[str, float]) -> dict[str, float]:
        valid = {t.value for t in QualityTier}
        normalized: dict[str, float] = {}
        for tier, points in v.items():
            slug = tier.strip().lower()
            if slug not in valid:
                raise ValueError(f"Unknown quality tier '{tier}'; expected one of {sorted(valid)}.")
            if points < 0.0:
                raise ValueError(f"Tier points must be >= 0, got {points} for '{tier}'.")
            normalized[slug] = points
        return normalized

    @field_validator("rating_buckets")
    @classmethod
    def sort_rating_buckets(cls, v: list[Bucket]) -> list[Bucket]:
        return _validate_buckets(v, "rating_buckets")

    @field_validator("review_buckets")
    @classmethod
    def sort_review_buckets(cls, v: list[Bucket]) -> list[Bucket]:
        return _validate_buckets(v, "review_buckets")

    @field_validator("tier_cap", "rating_cap", "review_cap")
    @classmethod
    def non_negative_cap(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Service quality caps must be >= 0, got {v}.")
        return v

    @property
    def max_total(self) -> float:
        return self.tier_cap + self.rating_cap + self.review_cap


# ── Plan bonus ────────────────────────────────────────────────────────────────


class PlanBonusConfig(BaseModel):
    """Additive, capped bonus per subscription tier.

    A higher tier must never score lower than a lower tier; tiers missing
    from ``points`` score 0.
    """

    model_config = ConfigDict(frozen=True)

    points: dict[str, float] = {"basic": 0.0, "standard": 12.0, "premium": 20.0}
    cap:    float = 20.0

    @field_validator("points")
    @classmethod
    def valid_plan_points(cls, v: dict[str, float]) -> dict[str, float]:
        valid = {t.value for t in SubscriptionTier}
        normalized: dict[str, float] = {}
        for tier, points in v.items():
            slug = tier.strip().lower()
            if slug not in valid:
                raise ValueError(f"Unknown subscription tier '{tier}'; expected one of {sorted(valid)}.")
            if points < 0.0:
                raise ValueError(f"Plan points must be >= 0, got {points} for '{tier}'.")
            normalized[slug] = points
        previous = 0.0
        for tier in SUBSCRIPTION_TIER_ORDER:
            current = normalized.get(tier.value, 0.0)
            if current < previous:
                raise ValueError(
                    f"Plan bonus must not decrease with tier: '{tier.value}' "
                    f"({current}) is below a lower tier ({previous})."
                )
            previous = current
        return normalized

    @field_validator("cap")
    @classmethod
    def non_negative_cap(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Plan bonus cap must be >= 0, got {v}.")
        return v


# ── Top-level config ──────────────────────────────────────────────────────────


class ScoringConfig(BaseModel):
    """One complete, versioned weight scheme.

    Attributes:
        version:             Registry key, e.g. ``"v2"``.
        description:         Free-text note on where the scheme comes from.
        increment_per_match: Confidence added per keyword occurrence.
        categories:          Ordered category slug -> config.  Order is the
                             order of subscores in every breakdown.
        inference:           Profile inference rules.
        service_quality:     Quality tables.
        plan_bonus:          Plan-bonus table.
    """

    model_config = ConfigDict(frozen=True)

    version:             str
    description:         str = ""
    increment_per_match: float = 0.3
    categories:          dict[str, ConcernCategoryConfig] = {}
    inference:           list[InferenceRule] = []
    service_quality:     ServiceQualityConfig = ServiceQualityConfig()
    plan_bonus:          PlanBonusConfig = PlanBonusConfig()

    @field_validator("version")
    @classmethod
    def version_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("ScoringConfig.version must not be empty.")
        return v

    @field_validator("increment_per_match")
    @classmethod
    def increment_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"increment_per_match must be in (0, 1], got {v}.")
        return v

    @model_validator(mode="after")
    def inference_targets_known_categories(self) -> "ScoringConfig":
        for rule in self.inference:
            if rule.category not in self.categories:
                raise ValueError(
                    f"Inference rule targets unknown category '{rule.category}'. "
                    f"Configured categories: {list(self.categories)}"
                )
        return self

    @property
    def max_total(self) -> float:
        """Upper bound on any candidate's total: the sum of all caps."""
        return (
            sum(c.cap for c in self.categories.values())
            + self.service_quality.max_total
            + self.plan_bonus.cap
        )

    def category_label(self, category: str) -> str:
        cfg = self.categories.get(category)
        return cfg.label if cfg is not None else category.replace("_", " ")
