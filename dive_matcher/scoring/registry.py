"""
Scoring config registry.

Holds one or more named ``ScoringConfig`` weight schemes so that the
engine selects a scheme by version string at call time instead of
branching on version constants in business logic.

Usage
-----
    from dive_matcher.scoring.registry import get_default_registry

    registry = get_default_registry()
    config   = registry.get("v2")
    registry.versions()          # ["lite", "v1", "v2"]

The default registry is loaded lazily from ``config/scoring/*.toml`` on
first access and then cached for the lifetime of the process.  To load a
different directory (e.g., in tests), call ``load_registry(path)`` or pass
an explicit ``scoring_dir`` to ``get_default_registry``.

Registries are populated once and only read afterwards; ``get()`` never
mutates, so any number of concurrent readers is safe without locking.

TOML structure expected in each preset file
-------------------------------------------
    version = "v2"
    description = "..."
    increment_per_match = 0.3

    [categories.safety]
    label = "safety"
    empathy = "..."
    keywords = ["safe", "scared", ...]
    cap = 25

    [[categories.safety.rules]]
    attribute = "safety_equipment"
    points = 15
    label = "AED and oxygen on board"

    [[inference]]
    context_field = "experience"
    values = ["none", "beginner"]
    category = "safety"
    floor = 0.8

    [service_quality]
    tier_points = { s = 20, a = 15, b = 10, c = 5 }
    ...

    [plan_bonus]
    points = { basic = 0, standard = 12, premium = 20 }
    cap = 20
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Iterator, Optional

from dive_matcher.scoring.models import ScoringConfig
from dive_matcher.taxonomy.concern_taxonomy import ConcernCategory

logger = logging.getLogger(__name__)


class ConfigError(LookupError):
    """Raised for caller misuse of the registry (unknown or duplicate version)."""


class ConfigRegistry:
    """Version string -> ``ScoringConfig`` lookup.

    Args:
        default_version: Version returned by ``get(None)``.  May be set
                         before the version is registered; it is only
                         resolved on lookup.
    """

    def __init__(self, default_version: Optional[str] = None) -> None:
        self._configs: dict[str, ScoringConfig] = {}
        self.default_version = default_version

    def register(self, version: str, config: ScoringConfig) -> None:
        """Add ``config`` under ``version``.

        Raises:
            ConfigError: If ``version`` is already registered, or does not
                         match ``config.version``.
        """
        if version != config.version:
            raise ConfigError(
                f"Cannot register config version '{config.version}' "
                f"under a different key '{version}'."
            )
        if version in self._configs:
            raise ConfigError(f"Scoring config '{version}' is already registered.")
        self._configs[version] = config
        custom = sorted(set(config.categories) - {c.value for c in ConcernCategory})
        if custom:
            logger.info("Scoring config %s defines non-standard categories: %s", version, custom)
        logger.debug(
            "Registered scoring config %s (%d categories)", version, len(config.categories)
        )

    def get(self, version: Optional[str] = None) -> ScoringConfig:
        """Return the config for ``version`` (or the default version).

        Raises:
            ConfigError: If the version is unknown, or no version was given
                         and no default is set.  Never falls back silently.
        """
        key = version if version is not None else self.default_version
        if key is None:
            raise ConfigError(
                "No scoring config version requested and no default configured."
            )
        try:
            return self._configs[key]
        except KeyError:
            raise ConfigError(
                f"Scoring config '{key}' not found in registry.  "
                f"Available versions: {self.versions()}"
            ) from None

    def versions(self) -> list[str]:
        """All registered versions, sorted."""
        return sorted(self._configs)

    def __contains__(self, version: object) -> bool:
        return version in self._configs

    def __len__(self) -> int:
        return len(self._configs)

    def __iter__(self) -> Iterator[ScoringConfig]:
        return iter(self._configs[v] for v in self.versions())


# ── Loading ───────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent.parent

_REGISTRY_CACHE: Optional[ConfigRegistry] = None
_CACHE_KEY: Optional[tuple[str, Optional[str]]] = None


def default_scoring_dir() -> Path:
    """Return the default preset directory, ``<project_root>/config/scoring``."""
    return _PROJECT_ROOT / "config" / "scoring"


def load_scoring_config(path: Path) -> ScoringConfig:
    """Parse and validate one preset TOML file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        tomllib.TOMLDecodeError: If the TOML is malformed.
        pydantic.ValidationError: If the preset fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Scoring preset not found: {path}")
    with open(path, "rb") as f:
        raw = tomllib.load(f)
    raw.setdefault("version", path.stem)
    return ScoringConfig(**raw)


def load_registry(
    scoring_dir: Path,
    default_version: Optional[str] = None,
) -> ConfigRegistry:
    """Load every ``*.toml`` preset in ``scoring_dir`` into a new registry.

    Files are read in name order so duplicate-version errors are
    reproducible.

    Raises:
        FileNotFoundError: If ``scoring_dir`` does not exist or holds no presets.
        ConfigError: If two presets declare the same version.
    """
    scoring_dir = Path(scoring_dir)
    if not scoring_dir.is_dir():
        raise FileNotFoundError(
            f"Scoring preset directory not found: {scoring_dir}\n"
            "Expected at config/scoring/.  "
            "Set scoring.config_dir in default.toml to override."
        )

    paths = sorted(scoring_dir.glob("*.toml"))
    if not paths:
        raise FileNotFoundError(f"No scoring presets (*.toml) in {scoring_dir}")

    registry = ConfigRegistry(default_version=default_version)
    for path in paths:
        config = load_scoring_config(path)
        registry.register(config.version, config)

    logger.info(
        "Loaded %d scoring config(s) from %s: %s",
        len(registry), scoring_dir, registry.versions(),
    )
    return registry


def get_default_registry(
    scoring_dir: Optional[str] = None,
    default_version: Optional[str] = None,
) -> ConfigRegistry:
    """Return the process-wide registry (cached after first load).

    Args:
        scoring_dir:     Override preset directory.  If None, uses
                         ``config/scoring`` relative to the project root.
        default_version: Version used when callers pass ``None``.

    Returns:
        Cached ``ConfigRegistry``; reloaded only when the arguments change.
    """
    global _REGISTRY_CACHE, _CACHE_KEY

    resolved = Path(scoring_dir) if scoring_dir else default_scoring_dir()
    key = (str(resolved), default_version)

    if _REGISTRY_CACHE is None or _CACHE_KEY != key:
        _REGISTRY_CACHE = load_registry(resolved, default_version=default_version)
        _CACHE_KEY = key

    return _REGISTRY_CACHE


def clear_registry_cache() -> None:
    """Clear the module-level registry cache.

    Useful in tests to reset state between test cases.
    """
    global _REGISTRY_CACHE, _CACHE_KEY
    _REGISTRY_CACHE = None
    _CACHE_KEY = None
