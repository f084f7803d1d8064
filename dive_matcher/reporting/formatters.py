"""
ASCII terminal formatters for CLI commands.

All formatters accept result objects and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Recommendation block layout
---------------------------
::

  === Recommendations (scoring config v2) ===
    Catalog: 12 shop(s)   Candidates: 5   Concerns: 3

    #1  Blue Reef Okinawa  [okinawa]                          total  88.40
        safety 25.00 | joining solo 14.40 | service quality 45.00 | plan 12.00
        - safety -> AED and emergency oxygen, insurance included
        You mentioned safety and joining solo. ...
"""

from __future__ import annotations

import json
from typing import Optional

from dive_matcher.models.concern import ConcernProfile
from dive_matcher.models.recommendation import (
    MatchStats,
    NoCandidates,
    Recommendation,
)
from dive_matcher.scoring.models import ScoringConfig


# ── Helpers ───────────────────────────────────────────────────────────────────


def _label(category: str, config: Optional[ScoringConfig]) -> str:
    return config.category_label(category) if config else category


def _wrap(text: str, width: int = 72, indent: str = "      ") -> list[str]:
    """Greedy word wrap; text without spaces (e.g. Japanese) is kept whole."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        if current and len(current) + 1 + len(word) > width:
            lines.append(indent + current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        lines.append(indent + current)
    return lines


# ── Concern profile ───────────────────────────────────────────────────────────


def format_concern_profile(
    profile: ConcernProfile,
    config: Optional[ScoringConfig] = None,
) -> str:
    """Format a concern profile for `classify`.

    Columns: Category | Confidence | Source | Matched terms
    """
    if profile.is_empty:
        return "  (no concerns detected)"

    header = f"  {'Category':<16} {'Conf':>5}  {'Source':<8} Matched terms"
    sep = "  " + "-" * (len(header) - 2)
    lines = [header, sep]
    for category, signal in profile.items():
        source = "inferred" if signal.inferred else "text"
        terms = ", ".join(sorted(signal.matched_terms)) or "-"
        lines.append(
            f"  {_label(category, config):<16} {signal.confidence:>5.2f}  {source:<8} {terms}"
        )
    return "\n".join(lines)


# ── Recommendations ───────────────────────────────────────────────────────────


def format_recommendations(
    recommendations: list[Recommendation],
    stats: Optional[MatchStats] = None,
    config: Optional[ScoringConfig] = None,
) -> str:
    """Format ranked recommendations for `match`.

    Args:
        recommendations: Output of ``match()`` (non-empty list).
        stats:           Optional run counters shown in the header.
        config:          Used for category labels in the score line.

    Returns:
        Multi-line string.
    """
    lines: list[str] = [""]
    version = stats.config_version if stats else (config.version if config else "?")
    lines.append(f"=== Recommendations (scoring config {version}) ===")
    if stats:
        lines.append(
            f"  Catalog: {stats.catalog_size} shop(s)   "
            f"Candidates: {stats.candidate_count}   "
            f"Concerns: {stats.concern_count}"
        )

    if not recommendations:
        lines.append("")
        lines.append("  (no recommendations)")
        return "\n".join(lines)

    for rec in recommendations:
        provider = rec.provider
        breakdown = rec.breakdown
        title = f"#{rec.rank}  {provider.display_name}  [{provider.area or '-'}]"
        lines.append("")
        lines.append(
            f"  {title:<60} total {breakdown.total:>6.2f}"
            f"  (concerns {breakdown.concern_total:.2f})"
        )

        parts = [
            f"{_label(c, config)} {v:.2f}" for c, v in breakdown.concern_scores.items()
        ]
        parts.append(f"service quality {breakdown.service_quality:.2f}")
        parts.append(f"plan {breakdown.plan_bonus:.2f}")
        lines.append("      " + " | ".join(parts))

        for reason in rec.explanation.reasons:
            lines.append(f"      - {reason}")
        lines.extend(_wrap(rec.explanation.prose))

    return "\n".join(lines)


def format_no_candidates(result: NoCandidates) -> str:
    """Format the empty-result signal with a hint to broaden the search."""
    return "\n".join([
        "",
        "=== No matching shops ===",
        f"  {result.reason}",
        f"  Catalog size: {result.catalog_size}",
        "  Try another area, or relax the experience / license filters.",
    ])


# ── Scoring configs ───────────────────────────────────────────────────────────


def format_config_table(
    configs: list[ScoringConfig],
    default_version: Optional[str] = None,
) -> str:
    """Format registered scoring configs for `list-configs`.

    Columns: Default | Version | Categories | Max total | Description
    """
    if not configs:
        return "  (no scoring configs registered)"

    header = f"  {'':<3} {'Version':<10} {'Cats':>4} {'Max':>7}  Description"
    sep = "  " + "-" * 70
    lines = [header, sep]
    for cfg in configs:
        marker = "*" if cfg.version == default_version else ""
        lines.append(
            f"  {marker:<3} {cfg.version:<10} {len(cfg.categories):>4} "
            f"{cfg.max_total:>7.1f}  {cfg.description}"
        )
    if default_version:
        lines.append("")
        lines.append(f"  * default version: {default_version}")
    return "\n".join(lines)


def format_config_caps(config: ScoringConfig) -> str:
    """One line per category with its cap and rule count."""
    lines = [f"  {config.version}:"]
    for category, cfg in config.categories.items():
        lines.append(
            f"    {category:<16} cap {cfg.cap:>5.1f}  rules {len(cfg.rules):>2}  "
            f"keywords {len(cfg.keywords):>3}"
        )
    sq = config.service_quality
    lines.append(
        f"    {'service quality':<16} cap {sq.max_total:>5.1f}  "
        f"(tier {sq.tier_cap:g} + rating {sq.rating_cap:g} + reviews {sq.review_cap:g})"
    )
    lines.append(f"    {'plan bonus':<16} cap {config.plan_bonus.cap:>5.1f}")
    return "\n".join(lines)


# ── JSON ──────────────────────────────────────────────────────────────────────


def to_json(
    result: list[Recommendation] | NoCandidates,
    stats: Optional[MatchStats] = None,
) -> str:
    """Serialize a ``match()`` result as pretty-printed JSON."""
    if isinstance(result, NoCandidates):
        payload: dict = result.as_dict()
    else:
        payload = {
            "status": "ok",
            "recommendations": [r.as_dict() for r in result],
        }
    if stats is not None:
        payload["stats"] = {
            "catalog_size": stats.catalog_size,
            "candidate_count": stats.candidate_count,
            "concern_count": stats.concern_count,
            "top_score": stats.top_score,
            "config_version": stats.config_version,
        }
    return json.dumps(payload, indent=2, ensure_ascii=False)
