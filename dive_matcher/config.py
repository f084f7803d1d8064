"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      : committed static defaults
  2. ``config/local.toml``        : optional local overrides (gitignored)
  3. ``.env``                     : local env overrides (gitignored)
  4. Environment variables        : ``DIVE_MATCHER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The scoring weight schemes themselves are not part of ``AppConfig``; they
live in ``config/scoring/*.toml`` and are loaded by
``dive_matcher.scoring.registry``.  ``AppConfig.scoring`` only says where
to find them and which version is the default.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from dive_matcher.taxonomy.concern_taxonomy import MergePolicy

# ── Sub-config models ─────────────────────────────────────────────────────────


class ScoringSettings(BaseModel):
    """Where scoring presets live and which one is used by default."""

    model_config = ConfigDict(frozen=True)

    config_dir: str = "config/scoring"
    default_version: str = "v2"

    @field_validator("default_version")
    @classmethod
    def version_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("scoring.default_version must not be blank.")
        return v.strip()


class MatchingSettings(BaseModel):
    """Request-level matching defaults."""

    model_config = ConfigDict(frozen=True)

    max_results: int = 3
    external_merge_policy: str = MergePolicy.EXTERNAL_WINS.value

    @field_validator("max_results")
    @classmethod
    def validate_max_results(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"matching.max_results must be >= 1, got {v}.")
        return v

    @field_validator("external_merge_policy")
    @classmethod
    def validate_policy(cls, v: str) -> str:
        valid = {p.value for p in MergePolicy}
        v = v.strip().lower()
        if v not in valid:
            raise ValueError(
                f"matching.external_merge_policy must be one of {sorted(valid)}, got '{v}'."
            )
        return v


class CatalogSettings(BaseModel):
    """Provider catalog snapshot location used by the CLI."""

    model_config = ConfigDict(frozen=True)

    catalog_path: str = "data/catalog/shops.json"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration.

    CLI commands receive an ``AppConfig`` instance constructed by
    ``load_config()``, which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    scoring: ScoringSettings = ScoringSettings()
    matching: MatchingSettings = MatchingSettings()
    catalog: CatalogSettings = CatalogSettings()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False

    def scoring_dir(self) -> Path:
        """``scoring.config_dir`` resolved against the project root."""
        path = Path(self.scoring.config_dir)
        return path if path.is_absolute() else _find_project_root() / path


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    # Also merge local.toml if present (gitignored local overrides)
    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists() and local_config_path != config_path:
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply DIVE_MATCHER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply DIVE_MATCHER_* env vars to the raw config dict.

    Supported overrides:
      DIVE_MATCHER_SCORING_VERSION → raw["scoring"]["default_version"]
      DIVE_MATCHER_CATALOG_PATH    → raw["catalog"]["catalog_path"]
      DIVE_MATCHER_LOG_LEVEL       → raw["logging"]["level"]
      DIVE_MATCHER_DEBUG           → raw["debug"]
    """
    if version := os.environ.get("DIVE_MATCHER_SCORING_VERSION"):
        raw.setdefault("scoring", {})["default_version"] = version

    if catalog_path := os.environ.get("DIVE_MATCHER_CATALOG_PATH"):
        raw.setdefault("catalog", {})["catalog_path"] = catalog_path

    if log_level := os.environ.get("DIVE_MATCHER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("DIVE_MATCHER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        scoring=ScoringSettings(**raw.get("scoring", {})),
        matching=MatchingSettings(**raw.get("matching", {})),
        catalog=CatalogSettings(**raw.get("catalog", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
