"""
Bottle size normalizer — coerces any bottle size representation to one of
the canonical volumes in BOTTLE_OPTIONS.

Rules:
  - Numbers: exactly 1000 → 1000 (1 L); every other number → 750.
  - Strings matching a dropdown label (case-insensitive, whitespace-stripped)
    → that option's volume.  Labels take precedence over the digit rule,
    so "1 L" → 1000.
  - Other strings: all digits are concatenated ("1,000 ml" → 1000).  No
    digits, or a zero value → 750; 1000 → 1000; anything else → 750.

Unrecognized input always falls back to 750 ml.  Never raises.

Public API:
    normalize_bottle_ml(value) → int
    bottle_label(volume_ml) → str
"""

import logging
import re

import pandas as pd

from config.schema import BOTTLE_OPTIONS, DEFAULT_BOTTLE_ML

logger = logging.getLogger(__name__)

_LITER_ML = BOTTLE_OPTIONS["1 L"]

_NON_DIGIT_PATTERN = re.compile(r"\D")

# Case-insensitive label lookup, built once.
_LABEL_LOOKUP: dict[str, int] = {
    label.strip().lower(): volume for label, volume in BOTTLE_OPTIONS.items()
}


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def normalize_bottle_ml(value: object) -> int:
    """
    Map a bottle size of any shape to a canonical volume in ml.

    Args:
        value: Number, dropdown label, free text like "1000ml", or blank.

    Returns:
        750 or 1000.
    """
    if isinstance(value, str):
        return _normalize_text(value)

    # bool is an int subclass but never a real bottle size
    if isinstance(value, bool) or value is None:
        return DEFAULT_BOTTLE_ML

    if isinstance(value, (int, float)):
        if pd.isna(value):
            return DEFAULT_BOTTLE_ML
        return _LITER_ML if value == _LITER_ML else DEFAULT_BOTTLE_ML

    # numpy scalars and anything else number-like
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Unrecognized bottle size {value!r} — defaulting to 750 ml")
        return DEFAULT_BOTTLE_ML

    return _LITER_ML if numeric == _LITER_ML else DEFAULT_BOTTLE_ML


def bottle_label(volume_ml: object) -> str:
    """Return the dropdown label for a bottle size ("750 ml" or "1 L")."""
    canonical = normalize_bottle_ml(volume_ml)
    for label, volume in BOTTLE_OPTIONS.items():
        if volume == canonical:
            return label
    return f"{canonical} ml"


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _normalize_text(text: str) -> int:
    """Resolve a string bottle size via label lookup, then its digits."""
    label_match = _LABEL_LOOKUP.get(text.strip().lower())
    if label_match is not None:
        return label_match

    digits = _NON_DIGIT_PATTERN.sub("", text).lstrip("0")
    if not digits or len(digits) > len(str(_LITER_ML)):
        return DEFAULT_BOTTLE_ML

    return _LITER_ML if int(digits) == _LITER_ML else DEFAULT_BOTTLE_ML
