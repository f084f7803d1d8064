"""
Service provider (dive shop) catalog model.

``ServiceProvider`` is a read-only snapshot of one bookable shop, as
delivered by the external catalog collaborator (spreadsheet sync, database
export, etc.).  The matching core never mutates it.

Every capability flag and numeric attribute is optional: ``None`` means
"unknown" and simply contributes nothing to any subscore.  Only
``provider_id`` is required; shops without a name or area are tolerated
by the model and dropped later by the candidate filter.

``FLAG_ATTRIBUTES`` and ``NUMERIC_ATTRIBUTES`` list the fields that
scoring presets may reference in their attribute rules.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from dive_matcher.taxonomy.provider_taxonomy import QualityTier, SubscriptionTier

FLAG_ATTRIBUTES: frozenset[str] = frozenset({
    "beginner_friendly",
    "solo_welcome",
    "english_support",
    "safety_equipment",
    "insurance_coverage",
    "pickup_service",
    "female_instructor",
    "private_guide_available",
    "equipment_rental_included",
    "photo_service",
    "video_service",
    "family_friendly",
    "trial_dive_available",
    "license_course_available",
    "incident_free",
    "no_additional_fees",
})

_NO_FEE_TEXT = frozenset({"", "none", "no", "0", "なし", "無し"})

RATING_ATTRIBUTES: frozenset[str] = frozenset({
    "rating",
    "safety_rating",
    "staff_rating",
    "cost_performance",
    "solo_friendliness",
    "communication_rating",
})

NUMERIC_ATTRIBUTES: frozenset[str] = RATING_ATTRIBUTES | frozenset({
    "price",
    "max_group_size",
    "experience_years",
    "review_count",
})


class ServiceProvider(BaseModel):
    """One dive shop in the catalog.

    Attributes:
        provider_id: Stable catalog identifier.
        name: Shop display name (``None`` or blank = data-quality failure).
        area: Island / region the shop operates in.
        beginner_friendly ... no_additional_fees: Capability flags; ``None`` = unknown.
        price: Typical price of a standard two-tank fun dive.
        max_group_size: Largest group one guide takes out.
        experience_years: Years the shop has operated.
        rating: Average customer rating, 0-5.
        review_count: Number of customer reviews behind ``rating``.
        safety_rating ... communication_rating: Review sub-ratings, 0-5.
        quality_tier: Curated grade; ``None`` = ungraded.
        subscription_tier: Paid listing plan (defaults to basic).
        additional_fees: Surcharge note; an empty note sets
            ``no_additional_fees``.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    provider_id: str
    name: Optional[str] = None
    area: Optional[str] = None

    # ── Capability flags ──────────────────────────────────────────────────────
    beginner_friendly:         Optional[bool] = None
    solo_welcome:              Optional[bool] = None
    english_support:           Optional[bool] = None
    safety_equipment:          Optional[bool] = None
    insurance_coverage:        Optional[bool] = None
    pickup_service:            Optional[bool] = None
    female_instructor:         Optional[bool] = None
    private_guide_available:   Optional[bool] = None
    equipment_rental_included: Optional[bool] = None
    photo_service:             Optional[bool] = None
    video_service:             Optional[bool] = None
    family_friendly:           Optional[bool] = None
    trial_dive_available:      Optional[bool] = None
    license_course_available:  Optional[bool] = None
    incident_free:             Optional[bool] = None
    no_additional_fees:        Optional[bool] = None

    # ── Numeric attributes ────────────────────────────────────────────────────
    price:            Optional[float] = None
    max_group_size:   Optional[int] = None
    experience_years: Optional[float] = None
    rating:           Optional[float] = None
    review_count:     Optional[int] = None

    # ── Review sub-ratings ────────────────────────────────────────────────────
    safety_rating:        Optional[float] = None
    staff_rating:         Optional[float] = None
    cost_performance:     Optional[float] = None
    solo_friendliness:    Optional[float] = None
    communication_rating: Optional[float] = None

    # ── Grades ────────────────────────────────────────────────────────────────
    quality_tier:      Optional[QualityTier] = None
    subscription_tier: SubscriptionTier = SubscriptionTier.BASIC

    # Free-text surcharge note from the shop sheet, e.g. "gear wash 500 yen".
    additional_fees: Optional[str] = None

    @field_validator("provider_id")
    @classmethod
    def validate_provider_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("provider_id must not be empty.")
        return v

    @field_validator(
        "rating", "safety_rating", "staff_rating",
        "cost_performance", "solo_friendliness", "communication_rating",
    )
    @classmethod
    def validate_rating_range(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 5.0:
            raise ValueError(f"Ratings must be in [0, 5], got {v}.")
        return v

    @field_validator("price", "max_group_size", "experience_years", "review_count")
    @classmethod
    def validate_non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError(f"Numeric attributes must be >= 0, got {v}.")
        return v

    @model_validator(mode="before")
    @classmethod
    def derive_no_additional_fees(cls, data: Any) -> Any:
        """Fill ``no_additional_fees`` from the surcharge note when not given.

        An empty note (or "none" / "なし") means no surcharges; an absent
        note leaves the flag unknown.
        """
        if not isinstance(data, dict) or data.get("no_additional_fees") is not None:
            return data
        note = data.get("additional_fees")
        if isinstance(note, str):
            data = {**data, "no_additional_fees": note.strip().lower() in _NO_FEE_TEXT}
        return data

    @field_validator("quality_tier", "subscription_tier", mode="before")
    @classmethod
    def normalize_tier_slug(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def display_name(self) -> str:
        """Name for user-facing text; falls back to the catalog id."""
        return (self.name or "").strip() or self.provider_id
