"""
Cost sheet operations — everything the grid can do to a location's sheet.

Load path:  stored rows → migrate → recalculate (example rows if empty).
Save path:  recalculate → store rows + metadata.

Every operation that changes rows returns a recalculated sheet, so derived
fields are never stale.  Settings are always passed in explicitly.

Public API:
    CostSheet
    example_rows(settings) → list[dict]
    load_sheet(store, location, settings) → CostSheet
    save_sheet(store, location, sheet, settings) → list[dict]
    reset_sheet(store, location, settings) → CostSheet
    add_row(sheet, settings) → CostSheet
    delete_row(sheet, index, settings) → CostSheet
    add_extra_column(sheet) → CostSheet
    apply_edits(sheet, edits, settings) → CostSheet
    grid_columns(meta) → list[str]
    sheet_to_dataframe(sheet) → pd.DataFrame
    dataframe_to_rows(dataframe) → list[dict]
"""

import copy
import logging
from dataclasses import dataclass, field

import pandas as pd

from config.defaults import EXAMPLE_ROWS
from config.schema import (
    BASE_FIELDS,
    DEFAULT_BOTTLE_ML,
    DERIVED_FIELDS,
    extra_field_name,
    extra_field_names,
)
from processing.bottle_normalizer import normalize_bottle_ml
from processing.row_calculator import SheetSettings
from processing.schema_migrator import migrate
from processing.sheet_recalculator import recalculate_all
from storage.location_store import (
    LocationMetadata,
    LocationStore,
    load_meta,
    load_rows,
    save_meta,
    save_rows,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CostSheet:
    """A location's rows plus its grid metadata."""

    rows: list[dict] = field(default_factory=list)
    meta: LocationMetadata = field(default_factory=LocationMetadata)

    @property
    def extra_fields(self) -> list[str]:
        return extra_field_names(self.meta.extra_column_count)


# ═══════════════════════════════════════════════════════════════════════════
# Load / save / reset
# ═══════════════════════════════════════════════════════════════════════════

def example_rows(settings: SheetSettings) -> list[dict]:
    """The bundled example rows, recalculated with `settings`."""
    return recalculate_all(copy.deepcopy(EXAMPLE_ROWS), settings)


def load_sheet(
    store: LocationStore,
    location: str,
    settings: SheetSettings,
) -> CostSheet:
    """
    Load, migrate, and recalculate a location's sheet.

    Locations with nothing saved, or whose saved rows are empty or
    malformed, get the example rows.
    """
    stored = load_rows(store, location)
    meta = load_meta(store, location)

    rows = recalculate_all(migrate(stored), settings)
    if not rows:
        logger.info(f"No saved rows for '{location}' — using example rows")
        rows = example_rows(settings)

    return CostSheet(rows=rows, meta=meta)


def save_sheet(
    store: LocationStore,
    location: str,
    sheet: CostSheet,
    settings: SheetSettings,
) -> list[dict]:
    """Recalculate and persist a sheet.  Returns the rows as persisted."""
    rows = recalculate_all(sheet.rows, settings)
    save_rows(store, location, rows)
    save_meta(store, location, sheet.meta)
    return rows


def reset_sheet(
    store: LocationStore,
    location: str,
    settings: SheetSettings,
) -> CostSheet:
    """Replace a location's sheet with the example rows and no extra columns."""
    sheet = CostSheet(rows=example_rows(settings), meta=LocationMetadata())
    save_sheet(store, location, sheet, settings)
    logger.info(f"Reset '{location}' to example rows")
    return sheet


# ═══════════════════════════════════════════════════════════════════════════
# Row / column edits
# ═══════════════════════════════════════════════════════════════════════════

def add_row(sheet: CostSheet, settings: SheetSettings) -> CostSheet:
    """Append a blank row carrying every extension field."""
    blank = {
        "item": "",
        "bottle_volume_ml": DEFAULT_BOTTLE_ML,
        "bottle_cost": None,
        "pour_size_oz": None,
        "menu_price": None,
    }
    for key in sheet.extra_fields:
        blank[key] = ""

    rows = recalculate_all([*sheet.rows, blank], settings)
    return CostSheet(rows=rows, meta=sheet.meta)


def delete_row(sheet: CostSheet, index: int, settings: SheetSettings) -> CostSheet:
    """Remove the row at `index`.  Out-of-range indexes leave the sheet as is."""
    if not 0 <= index < len(sheet.rows):
        logger.warning(
            f"Cannot delete row {index}: sheet has {len(sheet.rows)} rows"
        )
        return CostSheet(rows=recalculate_all(sheet.rows, settings), meta=sheet.meta)

    remaining = sheet.rows[:index] + sheet.rows[index + 1:]
    return CostSheet(rows=recalculate_all(remaining, settings), meta=sheet.meta)


def add_extra_column(sheet: CostSheet) -> CostSheet:
    """Add the next extra_<n> field to the sheet and seed it on every row."""
    meta = LocationMetadata(extra_column_count=sheet.meta.extra_column_count + 1)
    new_key = extra_field_name(meta.extra_column_count)

    rows: list[dict] = []
    for row in sheet.rows:
        updated = dict(row)
        updated.setdefault(new_key, "")
        rows.append(updated)

    logger.info(f"Added extension column '{new_key}'")
    return CostSheet(rows=rows, meta=meta)


def apply_edits(
    sheet: CostSheet,
    edits: dict[int, dict],
    settings: SheetSettings,
) -> CostSheet:
    """
    Merge cell edits into the sheet and recalculate every row.

    Args:
        sheet: Current sheet.
        edits: {row_index: {field: new_value}}.  Edits to rows that do not
               exist and edits to derived fields are ignored.
        settings: Target pour cost % and rounding increment.
    """
    rows = [dict(row) for row in sheet.rows]

    for row_index, patch in edits.items():
        if not 0 <= row_index < len(rows):
            logger.warning(f"Ignoring edit to missing row {row_index}")
            continue
        for field_name, value in patch.items():
            if field_name in DERIVED_FIELDS:
                continue
            if field_name == "bottle_volume_ml":
                value = normalize_bottle_ml(value)
            rows[row_index][field_name] = value

    return CostSheet(rows=recalculate_all(rows, settings), meta=sheet.meta)


# ═══════════════════════════════════════════════════════════════════════════
# Grid adapters
# ═══════════════════════════════════════════════════════════════════════════

def grid_columns(meta: LocationMetadata) -> list[str]:
    """Column order of the grid: base fields, then extension fields."""
    return BASE_FIELDS + extra_field_names(meta.extra_column_count)


def sheet_to_dataframe(sheet: CostSheet) -> pd.DataFrame:
    """
    Build the grid DataFrame for a sheet.

    Columns follow grid_columns(); keys outside the grid (unknown fields
    from older saves) are not shown.
    """
    columns = grid_columns(sheet.meta)
    return pd.DataFrame(
        [{column: row.get(column) for column in columns} for row in sheet.rows],
        columns=columns,
    )


def dataframe_to_rows(dataframe: pd.DataFrame) -> list[dict]:
    """Convert an edited grid DataFrame back to row dicts (NaN → None)."""
    cleaned = dataframe.astype(object).where(dataframe.notna(), None)
    return cleaned.to_dict("records")
