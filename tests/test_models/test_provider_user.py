"""
Tests for dive_matcher/models/provider.py and models/user.py.

Covers:
  - ServiceProvider: required id, optional attributes default to None,
    rating range and non-negative validation, tier slug normalization,
    frozen instances, display_name fallback
  - UserContext: all-optional construction, enum normalization, blank
    area -> None, is_novice
"""

import math

import pytest
from pydantic import ValidationError

from dive_matcher.models.provider import (
    FLAG_ATTRIBUTES,
    NUMERIC_ATTRIBUTES,
    RATING_ATTRIBUTES,
    ServiceProvider,
)
from dive_matcher.models.user import UserContext
from dive_matcher.taxonomy.provider_taxonomy import (
    ExperienceLevel,
    ParticipationStyle,
    QualityTier,
    SubscriptionTier,
)


class TestServiceProvider:
    def test_minimal_provider(self):
        p = ServiceProvider(provider_id="s1")
        assert p.name is None
        assert p.rating is None
        assert p.beginner_friendly is None
        assert p.quality_tier is None
        assert p.subscription_tier is SubscriptionTier.BASIC

    def test_blank_id_rejected(self):
        with pytest.raises(ValidationError):
            ServiceProvider(provider_id="   ")

    def test_rating_above_five_rejected(self):
        with pytest.raises(ValidationError):
            ServiceProvider(provider_id="s1", rating=5.1)

    def test_sub_rating_below_zero_rejected(self):
        with pytest.raises(ValidationError):
            ServiceProvider(provider_id="s1", safety_rating=-0.1)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ServiceProvider(provider_id="s1", price=-1)

    @pytest.mark.parametrize("field", ["price", "experience_years", "rating"])
    @pytest.mark.parametrize("value", [math.nan, math.inf])
    def test_non_finite_number_rejected(self, field, value):
        with pytest.raises(ValidationError):
            ServiceProvider(provider_id="s1", **{field: value})

    def test_tier_slugs_normalized(self):
        p = ServiceProvider(provider_id="s1", quality_tier=" S ", subscription_tier="PREMIUM")
        assert p.quality_tier is QualityTier.S
        assert p.subscription_tier is SubscriptionTier.PREMIUM

    def test_unknown_tier_rejected(self):
        with pytest.raises(ValidationError):
            ServiceProvider(provider_id="s1", quality_tier="z")

    def test_frozen(self):
        p = ServiceProvider(provider_id="s1")
        with pytest.raises(ValidationError):
            p.name = "changed"

    def test_display_name_falls_back_to_id(self):
        assert ServiceProvider(provider_id="s1", name="  ").display_name == "s1"
        assert ServiceProvider(provider_id="s1", name="Blue").display_name == "Blue"

    @pytest.mark.parametrize("note, expected", [
        ("", True), ("  なし ", True), ("None", True), ("gear wash 500 yen", False),
    ])
    def test_fee_note_sets_no_additional_fees(self, note, expected):
        p = ServiceProvider(provider_id="s1", additional_fees=note)
        assert p.no_additional_fees is expected

    def test_fee_flag_unknown_without_note(self):
        assert ServiceProvider(provider_id="s1").no_additional_fees is None

    def test_explicit_fee_flag_wins_over_note(self):
        p = ServiceProvider(provider_id="s1", additional_fees="", no_additional_fees=False)
        assert p.no_additional_fees is False

    def test_attribute_sets_match_fields(self):
        fields = set(ServiceProvider.model_fields)
        assert FLAG_ATTRIBUTES <= fields
        assert NUMERIC_ATTRIBUTES <= fields
        assert RATING_ATTRIBUTES <= NUMERIC_ATTRIBUTES
        assert not FLAG_ATTRIBUTES & NUMERIC_ATTRIBUTES


class TestUserContext:
    def test_empty_context(self):
        ctx = UserContext()
        assert ctx.experience is None
        assert ctx.is_novice is False

    def test_enum_normalization(self):
        ctx = UserContext(experience=" Beginner ", participation_style="SOLO")
        assert ctx.experience is ExperienceLevel.BEGINNER
        assert ctx.participation_style is ParticipationStyle.SOLO

    def test_blank_enum_is_none(self):
        assert UserContext(experience="").experience is None

    def test_invalid_experience_rejected(self):
        with pytest.raises(ValidationError):
            UserContext(experience="expert")

    def test_blank_area_is_none(self):
        assert UserContext(preferred_area="  ").preferred_area is None

    @pytest.mark.parametrize("level,novice", [
        ("none", True),
        ("beginner", True),
        ("intermediate", False),
        ("advanced", False),
    ])
    def test_is_novice(self, level, novice):
        assert UserContext(experience=level).is_novice is novice
