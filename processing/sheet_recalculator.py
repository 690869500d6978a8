"""
Sheet recalculator — applies the row calculator to every row of a sheet.

Derived fields are always recalculated; stored values are never trusted.
Rows keep their order and every non-derived key (including extension
fields and unknown keys from older saves); the input is never mutated.
Recalculating an already recalculated sheet with the same settings returns
an identical sheet.

Public API:
    recalculate_row(row, settings) → dict
    recalculate_all(rows, settings) → list[dict]
"""

import logging

from processing.bottle_normalizer import normalize_bottle_ml
from processing.row_calculator import SheetSettings, compute_row

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def recalculate_row(row: dict, settings: SheetSettings) -> dict:
    """Return a copy of `row` with a canonical bottle size and fresh derived fields."""
    derived = compute_row(row, settings)

    recalculated = dict(row)
    recalculated["bottle_volume_ml"] = normalize_bottle_ml(row.get("bottle_volume_ml"))
    recalculated.update(derived.as_dict())
    return recalculated


def recalculate_all(rows: list[dict] | None, settings: SheetSettings) -> list[dict]:
    """
    Recalculate every row of a sheet.

    Args:
        rows: Ordered row dicts (current schema).  None is treated as empty.
        settings: Target pour cost % and rounding increment.

    Returns:
        New list of the same length and order with derived fields replaced.
    """
    recalculated = [recalculate_row(row, settings) for row in rows or []]

    logger.debug(
        f"Recalculated {len(recalculated)} rows "
        f"(target={settings.target_pour_cost_percent}%, "
        f"increment={settings.rounding_increment})"
    )
    return recalculated

