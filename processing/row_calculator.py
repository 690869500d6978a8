"""
Row calculator — derives Cost / Pour, Pour Cost %, and Suggested Menu Price
for a single cost sheet row.

Formulas:
    pour_ml          = pour_size_oz x 29.5735
    cost_per_pour    = bottle_cost x (pour_ml / bottle_volume_ml)
    pour_cost_pct    = cost_per_pour / menu_price x 100        (menu_price > 0)
    suggested_price  = cost_per_pour / (target / 100), rounded to increment

Invalid numeric input (blank, text, NaN, negative) is treated as 0 and a
zero bottle or pour volume yields all-zero derived fields.  Nothing here
raises on bad data: a half-filled sheet must always render.

Public API:
    SheetSettings
    compute_row(row, settings) → DerivedFields
    to_number(value) → float
    round_half_up(value, digits) → float
    round_to_increment(amount, increment) → float
"""

import logging
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

import pandas as pd

from config.defaults import (
    DEFAULT_ROUNDING_INCREMENT,
    DEFAULT_TARGET_POUR_COST_PERCENT,
)
from processing.bottle_normalizer import normalize_bottle_ml
from processing.unit_conversion import ounces_to_milliliters

logger = logging.getLogger(__name__)

# Same noise the numeric converter strips from spreadsheet cells.
_CURRENCY_PATTERN = re.compile(r"[£€$]")
_THOUSANDS_SEP_PATTERN = re.compile(r"(?<=\d),(?=\d{3})")

# Leading number of a cell, like a spreadsheet would read "9.50 each".
_LEADING_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SheetSettings:
    """The two user-adjustable scalars every calculation depends on."""

    target_pour_cost_percent: float = DEFAULT_TARGET_POUR_COST_PERCENT
    rounding_increment: float = DEFAULT_ROUNDING_INCREMENT

    @classmethod
    def from_inputs(cls, target: object, rounding: object) -> "SheetSettings":
        """
        Build settings from raw UI values.

        A target that is missing, non-numeric, or not positive falls back to
        the default; so does a rounding increment that is missing,
        non-numeric, or negative.  Zero rounding is kept (no rounding).
        """
        target_value = _parse_float(target)
        if target_value is None or target_value <= 0:
            target_value = DEFAULT_TARGET_POUR_COST_PERCENT

        rounding_value = _parse_float(rounding)
        if rounding_value is None or rounding_value < 0:
            rounding_value = DEFAULT_ROUNDING_INCREMENT

        return cls(
            target_pour_cost_percent=target_value,
            rounding_increment=rounding_value,
        )


@dataclass(frozen=True)
class DerivedFields:
    """Output of compute_row()."""

    cost_per_pour: float = 0.0
    pour_cost_percent: float = 0.0
    suggested_menu_price: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {
            "cost_per_pour": self.cost_per_pour,
            "pour_cost_percent": self.pour_cost_percent,
            "suggested_menu_price": self.suggested_menu_price,
        }


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def compute_row(row: dict, settings: SheetSettings) -> DerivedFields:
    """
    Compute the derived fields for one row.

    Args:
        row: Raw row dict; missing keys are treated as 0.
        settings: Target pour cost % and rounding increment.

    Returns:
        DerivedFields rounded to display precision (2 / 1 / 2 places).
    """
    bottle_ml = normalize_bottle_ml(row.get("bottle_volume_ml"))
    bottle_cost = to_number(row.get("bottle_cost"))
    pour_oz = to_number(row.get("pour_size_oz"))
    menu_price = to_number(row.get("menu_price"))

    pour_ml = ounces_to_milliliters(pour_oz)

    # Guard against division by zero
    if bottle_ml <= 0 or pour_ml <= 0:
        return DerivedFields()

    cost_per_pour = bottle_cost * (pour_ml / bottle_ml)

    pour_cost_percent = 0.0
    if menu_price > 0:
        pour_cost_percent = (cost_per_pour / menu_price) * 100

    suggested_price = 0.0
    target = settings.target_pour_cost_percent
    if target > 0:
        raw_price = cost_per_pour / (target / 100)
        suggested_price = round_to_increment(raw_price, settings.rounding_increment)

    return DerivedFields(
        cost_per_pour=round_half_up(cost_per_pour, 2),
        pour_cost_percent=round_half_up(pour_cost_percent, 1),
        suggested_menu_price=round_half_up(suggested_price, 2),
    )


def to_number(value: object) -> float:
    """
    Coerce a cell value to a non-negative float.

    Blank, NaN, infinite, unparseable, boolean, and negative values → 0.0.
    Strings may carry currency symbols and thousands separators; the
    leading number is used ("9.50 each" → 9.5).
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, str):
        number = _parse_float(value)
    else:
        try:
            if pd.isna(value):
                return 0.0
            number = float(value)
        except (TypeError, ValueError):
            return 0.0

    if number is None or not math.isfinite(number) or number < 0:
        return 0.0
    return number


def round_half_up(value: float, digits: int) -> float:
    """
    Round half away from zero to `digits` decimal places.

    Uses the shortest decimal repr of the float so 0.125 → 0.13, unlike the
    built-in round() which rounds half to even.  Non-finite values give 0.0.
    """
    if not math.isfinite(value):
        return 0.0
    number = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-digits)
    # Large amounts need more than the default 28 significant digits.
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, number.adjusted() + digits + 2)
        rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def round_to_increment(amount: float, increment: float) -> float:
    """Round `amount` to the nearest multiple of `increment` (0 = unrounded)."""
    if not increment or increment <= 0:
        return amount
    return round_half_up(amount / increment, 0) * increment


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _parse_float(value: object) -> float | None:
    """Parse a number from a cell value; None when nothing numeric is found."""
    if value is None or isinstance(value, bool):
        return None

    if not isinstance(value, str):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None

    cleaned = _CURRENCY_PATTERN.sub("", value)
    cleaned = _THOUSANDS_SEP_PATTERN.sub("", cleaned).strip()

    match = _LEADING_NUMBER_PATTERN.match(cleaned)
    if match is None:
        return None

    number = float(match.group(0))
    return number if math.isfinite(number) else None
