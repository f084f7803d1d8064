"""
Catalog snapshot loaders: JSON or CSV exports of the dive-shop sheet into
validated :class:`ServiceProvider` objects.

JSON format
-----------
Either a top-level array of shop objects, or an object with a
``"providers"`` array.  Keys are ``ServiceProvider`` field names; unknown
keys are ignored.

CSV format
----------
Comma delimited, with a header row.
Required columns:
  provider_id, name, area
Optional columns (empty string → None):
  any capability flag (beginner_friendly, solo_welcome, ...), any numeric
  attribute (price, rating, review_count, safety_rating, ...),
  quality_tier, subscription_tier,
  additional_fees (surcharge note; an empty cell means no surcharges)

Boolean columns:
  true/1/yes/t/y/○  → True
  false/0/no/f/n/×  → False
  empty             → None (unknown)

Both loaders validate every row before returning anything.  If **any** row
fails (bad value or duplicate ``provider_id``), a single
:class:`ValueError` is raised listing the first 10 failures.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from dive_matcher.models.provider import (
    FLAG_ATTRIBUTES,
    NUMERIC_ATTRIBUTES,
    ServiceProvider,
)

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({"provider_id", "name", "area"})

_INT_ATTRIBUTES = frozenset({"max_group_size", "review_count"})
_TEXT_COLUMNS = frozenset({"name", "area", "quality_tier", "subscription_tier"})
_NOTE_COLUMNS = frozenset({"additional_fees"})
_TRUE_VALUES = frozenset({"true", "1", "yes", "t", "y", "○"})
_FALSE_VALUES = frozenset({"false", "0", "no", "f", "n", "×"})

_MAX_SHOWN = 10


def load_catalog(path: Path) -> list[ServiceProvider]:
    """Load a catalog snapshot, choosing the parser by file extension.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the extension is not ``.json`` or ``.csv``, or the
                    file fails validation.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        return parse_catalog_json(path)
    if suffix == ".csv":
        return parse_catalog_csv(path)
    raise ValueError(
        f"Unsupported catalog format '{path.suffix}' for {path.name}. "
        "Expected .json or .csv."
    )


def parse_catalog_json(path: Path) -> list[ServiceProvider]:
    """Parse a JSON catalog export into validated providers.

    Args:
        path: Path to the JSON file (must exist).

    Returns:
        Providers in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the document shape is wrong or any entry fails
                    validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            doc = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Catalog {path.name} is not valid JSON: {exc}") from exc

    if isinstance(doc, dict):
        doc = doc.get("providers")
    if not isinstance(doc, list):
        raise ValueError(
            f"Catalog {path.name} must be a JSON array of shops "
            "or an object with a 'providers' array."
        )

    known_fields = set(ServiceProvider.model_fields)
    providers: list[ServiceProvider] = []
    errors: list[tuple[int, str]] = []
    seen_ids: set[str] = set()

    for i, entry in enumerate(doc):
        if not isinstance(entry, dict):
            errors.append((i, f"Expected an object, got {type(entry).__name__}."))
            continue
        try:
            provider = ServiceProvider(**{k: v for k, v in entry.items() if k in known_fields})
        except (ValueError, TypeError, ValidationError) as exc:
            errors.append((i, str(exc)))
            continue
        if _is_duplicate(provider, seen_ids, errors, i):
            continue
        providers.append(provider)

    _raise_if_errors(errors, path, unit="Entry")

    logger.info("Parsed %d providers from %s", len(providers), path.name)
    return providers


def parse_catalog_csv(path: Path) -> list[ServiceProvider]:
    """Parse a CSV catalog export into validated providers.

    Args:
        path: Path to the CSV file (must exist).

    Returns:
        Providers in file order.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing or any row fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with open(path, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = {c.strip() for c in reader.fieldnames}
        missing = REQUIRED_CSV_COLUMNS - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = [{(k or "").strip(): (v or "") for k, v in row.items()} for row in reader]

    if not rows:
        logger.warning("Catalog CSV is empty (header only): %s", path)
        return []

    unknown = actual_cols - _TEXT_COLUMNS - _NOTE_COLUMNS - FLAG_ATTRIBUTES - NUMERIC_ATTRIBUTES - {"provider_id"}
    if unknown:
        logger.debug("Ignoring unknown catalog columns: %s", sorted(unknown))

    providers: list[ServiceProvider] = []
    errors: list[tuple[int, str]] = []
    seen_ids: set[str] = set()

    for i, row in enumerate(rows):
        line_no = i + 2  # 1-based, skip header row
        try:
            provider = _row_to_provider(row)
        except (ValueError, ValidationError) as exc:
            errors.append((line_no, str(exc)))
            continue
        if _is_duplicate(provider, seen_ids, errors, line_no):
            continue
        providers.append(provider)

    _raise_if_errors(errors, path, unit="Row")

    logger.info("Parsed %d providers from %s", len(providers), path.name)
    return providers


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_provider(row: dict[str, str]) -> ServiceProvider:
    """Convert a CSV row dict to a validated :class:`ServiceProvider`."""
    fields: dict[str, Any] = {"provider_id": _req(row, "provider_id")}

    for key in _TEXT_COLUMNS:
        value = _opt(row, key)
        if value is not None:
            fields[key] = value
    for key in FLAG_ATTRIBUTES:
        fields[key] = _parse_flag(row, key)
    for key in _NOTE_COLUMNS:
        if key in row:
            fields[key] = row[key].strip()
    for key in NUMERIC_ATTRIBUTES:
        fields[key] = _parse_number(row, key, integer=key in _INT_ATTRIBUTES)

    return ServiceProvider(**fields)


def _req(row: dict[str, str], key: str) -> str:
    """Return a required string field, stripped; raise if empty."""
    v = row.get(key, "").strip()
    if not v:
        raise ValueError(f"Required field '{key}' is empty.")
    return v


def _opt(row: dict[str, str], key: str) -> Optional[str]:
    """Return an optional string field, or None if absent/empty."""
    v = row.get(key, "").strip()
    return v if v else None


def _parse_flag(row: dict[str, str], key: str) -> Optional[bool]:
    """Parse a yes/no cell; empty means unknown."""
    v = _opt(row, key)
    if v is None:
        return None
    lowered = v.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for '{key}': '{v}'.")


def _parse_number(row: dict[str, str], key: str, integer: bool = False) -> Optional[float]:
    """Parse a numeric cell; thousands separators are accepted."""
    v = _opt(row, key)
    if v is None:
        return None
    cleaned = v.replace(",", "")
    try:
        number = float(cleaned)
    except ValueError:
        raise ValueError(f"Invalid number for '{key}': '{v}'.") from None
    if integer:
        if not number.is_integer():
            raise ValueError(f"'{key}' must be a whole number, got '{v}'.")
        return int(number)
    return number


def _is_duplicate(
    provider: ServiceProvider,
    seen_ids: set[str],
    errors: list[tuple[int, str]],
    position: int,
) -> bool:
    """Record an error for a repeated provider_id (first occurrence wins)."""
    if provider.provider_id in seen_ids:
        errors.append((position, f"Duplicate provider_id '{provider.provider_id}'."))
        return True
    seen_ids.add(provider.provider_id)
    return False


def _raise_if_errors(errors: list[tuple[int, str]], path: Path, unit: str) -> None:
    if not errors:
        return
    detail = "\n".join(f"  {unit} {ln}: {msg}" for ln, msg in errors[:_MAX_SHOWN])
    suffix = (
        f"\n  … and {len(errors) - _MAX_SHOWN} more" if len(errors) > _MAX_SHOWN else ""
    )
    raise ValueError(
        f"{len(errors)} {unit.lower()}(s) failed validation in {path.name}:\n{detail}{suffix}"
    )
