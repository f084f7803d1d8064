"""
Tests for dive_matcher.config - layered TOML + environment loading.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from dive_matcher.config import (
    AppConfig,
    LoggingConfig,
    MatchingSettings,
    ScoringSettings,
    load_config,
)

_ENV_VARS = (
    "DIVE_MATCHER_SCORING_VERSION",
    "DIVE_MATCHER_CATALOG_PATH",
    "DIVE_MATCHER_LOG_LEVEL",
    "DIVE_MATCHER_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_toml(tmp_path: Path, content: str, name: str = "default.toml") -> Path:
    p = tmp_path / name
    p.write_text(content, encoding="utf-8")
    return p


# ── Defaults ───────────────────────────────────────────────────────────────────

class TestDefaults:
    def test_model_defaults(self):
        cfg = AppConfig()
        assert cfg.scoring.default_version == "v2"
        assert cfg.matching.max_results == 3
        assert cfg.matching.external_merge_policy == "external_wins"
        assert cfg.logging.level == "INFO"
        assert cfg.debug is False

    def test_shipped_default_toml(self):
        cfg = load_config()
        assert cfg.scoring.default_version == "v2"
        assert cfg.scoring_dir().name == "scoring"
        assert (cfg.scoring_dir() / "v2.toml").exists()

    def test_frozen(self):
        with pytest.raises(ValidationError):
            AppConfig().debug = True


# ── Loading ────────────────────────────────────────────────────────────────────

class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_explicit_file(self, tmp_path):
        path = _write_toml(tmp_path, (
            "[project]\ndebug = true\n"
            "[scoring]\ndefault_version = \"lite\"\n"
            "[matching]\nmax_results = 5\n"
            "[logging]\nlevel = \"debug\"\n"
        ))
        cfg = load_config(path)
        assert cfg.scoring.default_version == "lite"
        assert cfg.matching.max_results == 5
        assert cfg.logging.level == "DEBUG"
        assert cfg.debug is True

    def test_missing_sections_use_defaults(self, tmp_path):
        cfg = load_config(_write_toml(tmp_path, "[matching]\nmax_results = 2\n"))
        assert cfg.matching.max_results == 2
        assert cfg.scoring.default_version == "v2"
        assert cfg.catalog.catalog_path == "data/catalog/shops.json"

    def test_local_toml_overrides(self, tmp_path):
        path = _write_toml(tmp_path, "[matching]\nmax_results = 2\nexternal_merge_policy = \"max_confidence\"\n")
        _write_toml(tmp_path, "[matching]\nmax_results = 7\n", name="local.toml")
        cfg = load_config(path)
        assert cfg.matching.max_results == 7
        assert cfg.matching.external_merge_policy == "max_confidence"

    def test_absolute_scoring_dir(self, tmp_path):
        path = _write_toml(tmp_path, f"[scoring]\nconfig_dir = \"{tmp_path.as_posix()}\"\n")
        assert load_config(path).scoring_dir() == tmp_path


class TestEnvOverrides:
    def test_overrides_win_over_toml(self, tmp_path, monkeypatch):
        path = _write_toml(tmp_path, "[scoring]\ndefault_version = \"v1\"\n")
        monkeypatch.setenv("DIVE_MATCHER_SCORING_VERSION", "lite")
        monkeypatch.setenv("DIVE_MATCHER_CATALOG_PATH", "/data/shops.csv")
        monkeypatch.setenv("DIVE_MATCHER_LOG_LEVEL", "warning")
        monkeypatch.setenv("DIVE_MATCHER_DEBUG", "yes")
        cfg = load_config(path)
        assert cfg.scoring.default_version == "lite"
        assert cfg.catalog.catalog_path == "/data/shops.csv"
        assert cfg.logging.level == "WARNING"
        assert cfg.debug is True

    def test_debug_false_values(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DIVE_MATCHER_DEBUG", "off")
        assert load_config(_write_toml(tmp_path, "")).debug is False


# ── Validation ─────────────────────────────────────────────────────────────────

class TestValidation:
    def test_bad_max_results(self):
        with pytest.raises(ValidationError, match="max_results"):
            MatchingSettings(max_results=0)

    def test_bad_merge_policy(self):
        with pytest.raises(ValidationError, match="external_merge_policy"):
            MatchingSettings(external_merge_policy="average")

    def test_merge_policy_normalized(self):
        assert MatchingSettings(external_merge_policy=" MAX_CONFIDENCE ").external_merge_policy == "max_confidence"

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")

    def test_blank_default_version(self):
        with pytest.raises(ValidationError):
            ScoringSettings(default_version="  ")

    def test_invalid_file_value(self, tmp_path):
        with pytest.raises(ValidationError):
            load_config(_write_toml(tmp_path, "[matching]\nmax_results = -1\n"))
