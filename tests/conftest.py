"""
Shared pytest fixtures for the dive matcher test suite.

Provides:
  - ``small_config``: a compact three-category ``ScoringConfig`` whose
    numbers are easy to verify by hand.
  - ``v2_config`` / ``shipped_registry``: the real presets from
    ``config/scoring/``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from dive_matcher.scoring.models import ScoringConfig
from dive_matcher.scoring.registry import (
    ConfigRegistry,
    default_scoring_dir,
    load_registry,
    load_scoring_config,
)


# ── Scoring configs ───────────────────────────────────────────────────────────

SMALL_CONFIG: dict[str, Any] = {
    "version": "small",
    "description": "Hand-checkable test scheme.",
    "increment_per_match": 0.5,
    "categories": {
        "safety": {
            "label": "safety",
            "empathy": "Safety worries are normal.",
            "keywords": ["safe", "scared", "怖い"],
            "cap": 10,
            "rules": [
                {"attribute": "safety_equipment", "points": 6, "label": "oxygen on board"},
                {"attribute": "insurance_coverage", "points": 6, "label": "insurance"},
            ],
        },
        "solo": {
            "label": "joining solo",
            "empathy": "Going alone takes courage.",
            "keywords": ["alone", "一人"],
            "cap": 8,
            "rules": [
                {"attribute": "solo_welcome", "points": 8, "label": "solo welcome"},
            ],
        },
        "communication": {
            "label": "communication",
            "keywords": ["english"],
            "cap": 5,
            "rules": [
                {
                    "attribute": "english_support",
                    "points": 5,
                    "label": "English staff",
                    "requires_terms": ["english"],
                },
                {"attribute": "female_instructor", "points": 2},
            ],
        },
    },
    "inference": [
        {
            "context_field": "experience",
            "values": ["none"],
            "category": "safety",
            "floor": 0.5,
        },
    ],
}


@pytest.fixture
def small_config() -> ScoringConfig:
    """Three categories (safety cap 10, solo cap 8, communication cap 5),
    increment 0.5, default service-quality and plan tables."""
    return ScoringConfig(**SMALL_CONFIG)


@pytest.fixture
def small_registry(small_config: ScoringConfig) -> ConfigRegistry:
    registry = ConfigRegistry(default_version="small")
    registry.register("small", small_config)
    return registry


@pytest.fixture(scope="session")
def scoring_dir() -> Path:
    return default_scoring_dir()


@pytest.fixture(scope="session")
def v2_config(scoring_dir: Path) -> ScoringConfig:
    """The shipped default preset."""
    return load_scoring_config(scoring_dir / "v2.toml")


@pytest.fixture(scope="session")
def shipped_registry(scoring_dir: Path) -> ConfigRegistry:
    """All shipped presets, default version v2."""
    return load_registry(scoring_dir, default_version="v2")
