"""
User context supplied by the caller (profile store, survey answers, chat).

All fields are optional.  An unknown experience level or participation
style simply triggers no filter rule and no profile inference.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from dive_matcher.taxonomy.provider_taxonomy import (
    NOVICE_LEVELS,
    ExperienceLevel,
    LicenseStatus,
    ParticipationStyle,
)


class UserContext(BaseModel):
    """Structured facts about the user asking for a recommendation.

    Attributes:
        experience: Self-reported diving experience.
        license_status: Certification held.
        preferred_area: Area the user wants to dive in; ``None`` = anywhere.
        participation_style: Joining solo or as a group.
        display_name: Optional name used in explanation prose.
    """

    model_config = ConfigDict(frozen=True)

    experience: Optional[ExperienceLevel] = None
    license_status: Optional[LicenseStatus] = None
    preferred_area: Optional[str] = None
    participation_style: Optional[ParticipationStyle] = None
    display_name: Optional[str] = None

    @field_validator("experience", "license_status", "participation_style", mode="before")
    @classmethod
    def normalize_enum_slug(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator("preferred_area")
    @classmethod
    def blank_area_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def is_novice(self) -> bool:
        """True for users with no or beginner-level experience."""
        return self.experience in NOVICE_LEVELS
