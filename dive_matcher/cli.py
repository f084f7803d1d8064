"""
Dive Matcher - CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load the scoring config registry.
  4. Execute action (classify text, match a catalog, etc.).
  5. Report result to stdout.

Install and run::

    pip install -e .
    dive-matcher --help
    dive-matcher validate-config
    dive-matcher list-configs --caps
    dive-matcher classify --text "First dive, going alone and a bit anxious"
    dive-matcher match --catalog data/catalog/shops.json \\
        --text "I'm scared of the ocean" --experience none --area okinawa
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="dive-matcher",
    help="Dive shop matching & scoring engine - local CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from dive_matcher.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from dive_matcher.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_registry_or_exit(config):
    """Load the scoring preset registry named by ``config.scoring``."""
    from dive_matcher.scoring.registry import ConfigError, load_registry

    try:
        return load_registry(
            config.scoring_dir(), default_version=config.scoring.default_version
        )
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ConfigError, ValueError) as exc:
        typer.echo(f"[ERROR] Scoring preset validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _get_scoring_config_or_exit(registry, version: Optional[str]):
    from dive_matcher.scoring.registry import ConfigError

    try:
        return registry.get(version)
    except ConfigError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _build_user_context_or_exit(**fields):
    from dive_matcher.models.user import UserContext

    try:
        return UserContext(**{k: v for k, v in fields.items() if v is not None})
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid user context: {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the app config and every scoring preset.

    Exits with code 1 if any file fails validation or the default scoring
    version is not among the loaded presets.
    """
    config = _load_config_or_exit(config_path)
    registry = _load_registry_or_exit(config)

    if config.scoring.default_version not in registry:
        typer.echo(
            f"[ERROR] Default scoring version '{config.scoring.default_version}' "
            f"not found. Available: {registry.versions()}",
            err=True,
        )
        raise typer.Exit(code=1)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Scoring presets:  {config.scoring_dir()}")
    typer.echo(f"  Versions:         {', '.join(registry.versions())}")
    typer.echo(f"  Default version:  {config.scoring.default_version}")
    typer.echo(f"  Max results:      {config.matching.max_results}")
    typer.echo(f"  Merge policy:     {config.matching.external_merge_policy}")
    typer.echo(f"  Catalog path:     {config.catalog.catalog_path}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("list-configs")
def list_configs(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file."
    ),
    show_caps: bool = typer.Option(
        False, "--caps", help="Also print per-category caps for each version."
    ),
) -> None:
    """List the registered scoring config versions."""
    from dive_matcher.reporting.formatters import format_config_caps, format_config_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    registry = _load_registry_or_exit(config)

    configs = list(registry)
    typer.echo(format_config_table(configs, default_version=registry.default_version))
    if show_caps:
        for cfg in configs:
            typer.echo("")
            typer.echo(format_config_caps(cfg))


@app.command("classify")
def classify_text(
    text: str = typer.Option(..., "--text", "-t", help="Free text from the user."),
    experience: Optional[str] = typer.Option(
        None, "--experience", help="none | beginner | intermediate | advanced"
    ),
    license_status: Optional[str] = typer.Option(
        None, "--license", help="none | open_water | advanced | professional"
    ),
    style: Optional[str] = typer.Option(None, "--style", help="solo | group"),
    version: Optional[str] = typer.Option(
        None, "--version", help="Scoring config version (default from config)."
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file."
    ),
) -> None:
    """Show the concern profile detected for a piece of text."""
    from dive_matcher.matching.classifier import classify
    from dive_matcher.reporting.formatters import format_concern_profile

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    registry = _load_registry_or_exit(config)
    scoring = _get_scoring_config_or_exit(registry, version)

    user_context = _build_user_context_or_exit(
        experience=experience,
        license_status=license_status,
        participation_style=style,
    )
    profile = classify(text, user_context, scoring)

    typer.echo(f"Concern profile (scoring config {scoring.version}):")
    typer.echo(format_concern_profile(profile, scoring))


@app.command("match")
def match_shops(
    text: str = typer.Option("", "--text", "-t", help="Free text from the user."),
    catalog_path: Optional[str] = typer.Option(
        None,
        "--catalog",
        help="Catalog snapshot (.json or .csv). Defaults to catalog.catalog_path.",
    ),
    experience: Optional[str] = typer.Option(
        None, "--experience", help="none | beginner | intermediate | advanced"
    ),
    license_status: Optional[str] = typer.Option(
        None, "--license", help="none | open_water | advanced | professional"
    ),
    area: Optional[str] = typer.Option(None, "--area", help="Preferred dive area."),
    style: Optional[str] = typer.Option(None, "--style", help="solo | group"),
    name: Optional[str] = typer.Option(None, "--name", help="User name for the prose."),
    version: Optional[str] = typer.Option(
        None, "--version", help="Scoring config version (default from config)."
    ),
    top: Optional[int] = typer.Option(
        None, "--top", min=1, help="Number of recommendations (default from config)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file."
    ),
) -> None:
    """Recommend dive shops from a catalog snapshot.

    Exits with code 1 on a missing or invalid catalog, an unknown scoring
    version, or when no shop passes the filter.
    """
    from dive_matcher.ingestion.catalog import load_catalog
    from dive_matcher.pipeline.match import match_with_stats
    from dive_matcher.reporting.formatters import (
        format_no_candidates,
        format_recommendations,
        to_json,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    registry = _load_registry_or_exit(config)
    scoring = _get_scoring_config_or_exit(registry, version)

    path = Path(catalog_path or config.catalog.catalog_path)
    try:
        catalog = load_catalog(path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] Catalog import failed: {exc}", err=True)
        raise typer.Exit(code=1)

    user_context = _build_user_context_or_exit(
        experience=experience,
        license_status=license_status,
        preferred_area=area,
        participation_style=style,
        display_name=name,
    )

    outcome = match_with_stats(
        catalog,
        user_context,
        text,
        scoring.version,
        top or config.matching.max_results,
        registry=registry,
        merge_policy=config.matching.external_merge_policy,
    )

    if as_json:
        typer.echo(to_json(outcome.result, outcome.stats))
    elif outcome.has_candidates:
        typer.echo(format_recommendations(outcome.result, outcome.stats, scoring))
    else:
        typer.echo(format_no_candidates(outcome.result))

    if not outcome.has_candidates:
        raise typer.Exit(code=1)


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
