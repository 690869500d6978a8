"""
Sheet summary — headline numbers shown above the grid.

Pure calculation over recalculated rows.  Unpriced rows (menu price blank
or 0) are excluded from the pour cost averages.
"""

import logging
from dataclasses import dataclass

import pandas as pd

from processing.row_calculator import SheetSettings, round_half_up, to_number

logger = logging.getLogger(__name__)


@dataclass
class SheetSummary:
    """Output of summarize_sheet()."""

    item_count: int = 0
    priced_count: int = 0
    average_pour_cost_percent: float = 0.0
    over_target_count: int = 0
    total_bottle_cost: float = 0.0


def summarize_sheet(rows: list[dict], settings: SheetSettings) -> SheetSummary:
    """
    Summarize a recalculated sheet.

    Args:
        rows: Recalculated row dicts.
        settings: Used for the over-target comparison.

    Returns:
        SheetSummary; an empty sheet gives all zeros.
    """
    if not rows:
        return SheetSummary()

    df = pd.DataFrame({
        "menu_price": [to_number(row.get("menu_price")) for row in rows],
        "pour_cost_percent": [to_number(row.get("pour_cost_percent")) for row in rows],
        "bottle_cost": [to_number(row.get("bottle_cost")) for row in rows],
    })

    priced = df[df["menu_price"] > 0]
    average_pct = priced["pour_cost_percent"].mean() if len(priced) else 0.0
    over_target = priced[priced["pour_cost_percent"] > settings.target_pour_cost_percent]

    logger.debug(
        f"Summary: {len(df)} items, {len(priced)} priced, "
        f"{len(over_target)} over {settings.target_pour_cost_percent}%"
    )

    return SheetSummary(
        item_count=len(df),
        priced_count=len(priced),
        average_pour_cost_percent=round_half_up(float(average_pct), 1),
        over_target_count=len(over_target),
        total_bottle_cost=round_half_up(float(df["bottle_cost"].sum()), 2),
    )
