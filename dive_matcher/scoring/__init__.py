"""
Versioned scoring configuration.

  scoring/models.py   - Pydantic models for weight schemes (categories,
                        attribute rules, inference rules, quality tables).
  scoring/registry.py - Load presets from config/scoring/*.toml, look up
                        a config by version.

Every weight, cap, keyword and inference floor lives in a TOML preset, so
a new weight scheme is a new file rather than a new code path.
"""

from dive_matcher.scoring.models import (
    AttributeRule,
    Bucket,
    ConcernCategoryConfig,
    InferenceRule,
    PlanBonusConfig,
    ScoringConfig,
    ServiceQualityConfig,
)
from dive_matcher.scoring.registry import (
    ConfigError,
    ConfigRegistry,
    clear_registry_cache,
    get_default_registry,
    load_registry,
    load_scoring_config,
)

__all__ = [
    # models
    "AttributeRule",
    "Bucket",
    "ConcernCategoryConfig",
    "InferenceRule",
    "PlanBonusConfig",
    "ScoringConfig",
    "ServiceQualityConfig",
    # registry
    "ConfigError",
    "ConfigRegistry",
    "clear_registry_cache",
    "get_default_registry",
    "load_registry",
    "load_scoring_config",
]
