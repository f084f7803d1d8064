"""
Concern profile: which anxieties a user expressed, and how strongly.

A ``ConcernProfile`` maps concern-category slugs to ``ConcernSignal``s.
It is computed per request by the classifier (or supplied by an external
analyzer) and discarded afterwards.

Construction normalizes the input:
  - confidences are clamped to [0, 1];
  - categories with confidence <= 0 are dropped;
  - iteration order is confidence descending, then slug ascending, so two
    profiles built from the same data always iterate identically.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ConcernSignal:
    """Strength and evidence for one detected concern.

    Attributes:
        confidence:    Detection strength in (0, 1].
        matched_terms: Keywords from the user's text that triggered it.
        inferred:      True if a profile inference rule set or raised the
                       confidence (e.g. first-time divers imply safety).
    """

    confidence:    float
    matched_terms: frozenset[str] = frozenset()
    inferred:      bool = False


@dataclass(frozen=True)
class ConcernProfile(Mapping[str, ConcernSignal]):
    """Read-only mapping of category slug -> ``ConcernSignal``."""

    signals: dict[str, ConcernSignal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned: dict[str, ConcernSignal] = {}
        for category, signal in self.signals.items():
            raw = float(signal.confidence)
            if not raw > 0.0:  # also drops NaN
                continue
            confidence = min(1.0, raw)
            cleaned[category] = ConcernSignal(
                confidence=round(confidence, 4),
                matched_terms=frozenset(signal.matched_terms),
                inferred=signal.inferred,
            )
        ordered = dict(sorted(cleaned.items(), key=lambda kv: (-kv[1].confidence, kv[0])))
        object.__setattr__(self, "signals", ordered)

    # ── Mapping protocol ──────────────────────────────────────────────────────

    def __getitem__(self, category: str) -> ConcernSignal:
        return self.signals[category]

    def __iter__(self) -> Iterator[str]:
        return iter(self.signals)

    def __len__(self) -> int:
        return len(self.signals)

    # ── Helpers ───────────────────────────────────────────────────────────────

    @property
    def is_empty(self) -> bool:
        return not self.signals

    def confidence(self, category: str) -> float:
        """Confidence for ``category``; 0.0 when absent."""
        signal = self.signals.get(category)
        return signal.confidence if signal is not None else 0.0

    def top(self, n: int = 2) -> list[str]:
        """The ``n`` strongest category slugs, strongest first."""
        return list(self.signals)[:max(n, 0)]

    def all_terms(self) -> frozenset[str]:
        """Union of matched terms across all categories."""
        terms: set[str] = set()
        for signal in self.signals.values():
            terms |= signal.matched_terms
        return frozenset(terms)

    def as_dict(self) -> dict[str, dict[str, Any]]:
        """JSON-friendly representation (matched terms sorted)."""
        return {
            category: {
                "confidence": signal.confidence,
                "matched_terms": sorted(signal.matched_terms),
                "inferred": signal.inferred,
            }
            for category, signal in self.signals.items()
        }

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "ConcernProfile":
        """Build a profile from a loosely-typed mapping.

        Accepted value shapes per category:
          - ``ConcernSignal``
          - a number (taken as the confidence)
          - a dict with ``confidence`` and optional ``matched_terms`` /
            ``inferred`` keys

        Values that cannot be interpreted are skipped rather than raising,
        so a malformed external profile degrades to "no concern".  Unusable
        ``matched_terms`` are dropped and the confidence kept; anything other
        than a mapping gives an empty profile.
        """
        if isinstance(raw, ConcernProfile):
            return raw
        if not isinstance(raw, Mapping):
            return cls()
        signals: dict[str, ConcernSignal] = {}
        for category, value in raw.items():
            signal = _coerce_signal(value)
            if signal is not None:
                signals[str(category)] = signal
        return cls(signals)


def _coerce_signal(value: Any) -> ConcernSignal | None:
    if isinstance(value, ConcernSignal):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return ConcernSignal(confidence=float(value))
    if isinstance(value, Mapping):
        try:
            confidence = float(value.get("confidence", 0.0))
        except (TypeError, ValueError):
            return None
        return ConcernSignal(
            confidence=confidence,
            matched_terms=_coerce_terms(value.get("matched_terms")),
            inferred=bool(value.get("inferred", False)),
        )
    return None


def _coerce_terms(terms: Any) -> frozenset[str]:
    """Matched terms as strings; unusable values yield no terms."""
    if not terms:
        return frozenset()
    if isinstance(terms, str):
        return frozenset({terms})
    try:
        return frozenset(str(t) for t in terms)
    except (TypeError, ValueError):
        return frozenset()
