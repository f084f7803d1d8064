"""Text normalization shared by the concern classifier and scoring presets."""

from __future__ import annotations

import unicodedata


def normalize_text(text: object) -> str:
    """NFKC-normalize, case-fold and trim.

    Non-string input (``None``, numbers, bytes, ...) normalizes to ``""``
    so that callers never have to guard against malformed free text.
    Full-width ASCII typed on Japanese keyboards is folded to half-width
    by NFKC, so "ＳＯＬＯ" and "solo" compare equal.
    """
    if not isinstance(text, str):
        return ""
    return unicodedata.normalize("NFKC", text).casefold().strip()
