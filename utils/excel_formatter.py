"""
Excel formatter — writes a location's cost sheet to a formatted workbook.

Sheet 1: "Cost Sheet" — all rows with headers, number formats, auto-filter,
         frozen header, and Pour Cost % cells filled red above the target
         and green at or below it.
Sheet 2: "Settings" — location, target pour cost %, rounding increment,
         and export time.

Public API:
    format_and_save(rows, settings, location, extra_column_count,
                    output_path) → Path
"""

import logging
from datetime import datetime
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from config.schema import (
    BASE_FIELDS,
    EXTRA_HEADER_PREFIX,
    FIELD_HEADERS,
    extra_field_names,
)
from processing.bottle_normalizer import bottle_label
from processing.row_calculator import SheetSettings, to_number
from processing.sheet_recalculator import recalculate_all

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════

_OVER_TARGET_FILL = PatternFill(start_color="FCA5A5", end_color="FCA5A5", fill_type="solid")
_ON_TARGET_FILL = PatternFill(start_color="A7F3D0", end_color="A7F3D0", fill_type="solid")
_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
_NORMAL_FONT = Font(size=10)
_BOLD_FONT = Font(bold=True, size=10)

_MAX_COL_WIDTH = 50
_MIN_COL_WIDTH = 8

_NUMBER_FORMATS: dict[str, str] = {
    "bottle_cost": "#,##0.00",
    "pour_size_oz": "#,##0.00",
    "menu_price": "#,##0.00",
    "cost_per_pour": "#,##0.00",
    "pour_cost_percent": "0.0",
    "suggested_menu_price": "#,##0.00",
}


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def format_and_save(
    rows: list[dict],
    settings: SheetSettings,
    location: str,
    extra_column_count: int,
    output_path: Path,
) -> Path:
    """
    Write a formatted cost sheet workbook.

    Rows are recalculated before writing, so the export always matches
    the settings it is labelled with.

    Args:
        rows: Sheet rows (current schema).
        settings: Settings used for the derived fields and the highlight.
        location: Location name written to the Settings sheet.
        extra_column_count: Number of extension columns to include.
        output_path: Path where the .xlsx file should be saved.

    Returns:
        The output_path.
    """
    recalculated = recalculate_all(rows, settings)
    fields = BASE_FIELDS + extra_field_names(extra_column_count)

    workbook = openpyxl.Workbook()

    sheet = workbook.active
    sheet.title = "Cost Sheet"
    _write_cost_sheet(sheet, recalculated, fields, settings)

    settings_sheet = workbook.create_sheet("Settings")
    _write_settings_sheet(settings_sheet, settings, location)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(str(output_path))
    workbook.close()

    logger.info(f"Cost sheet for '{location}' saved to '{output_path}'")
    return output_path


# ═══════════════════════════════════════════════════════════════════════════
# Sheet 1: Cost Sheet
# ═══════════════════════════════════════════════════════════════════════════

def _header_for(field_name: str) -> str:
    if field_name in FIELD_HEADERS:
        return FIELD_HEADERS[field_name]
    return EXTRA_HEADER_PREFIX + field_name.rsplit("_", 1)[-1]


def _cell_value(row: dict, field_name: str) -> object:
    value = row.get(field_name)
    if field_name == "bottle_volume_ml":
        return bottle_label(value)
    if field_name == "menu_price" and (value is None or value == ""):
        return None
    if field_name in _NUMBER_FORMATS:
        return to_number(value)
    return value


def _write_cost_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    rows: list[dict],
    fields: list[str],
    settings: SheetSettings,
) -> None:
    """Write headers, rows, number formats, and pour cost highlighting."""
    for col_idx, field_name in enumerate(fields, start=1):
        cell = worksheet.cell(row=1, column=col_idx, value=_header_for(field_name))
        cell.fill = _HEADER_FILL
        cell.font = _HEADER_FONT
        cell.alignment = Alignment(horizontal="center")

    for row_offset, row in enumerate(rows):
        excel_row = row_offset + 2

        for col_idx, field_name in enumerate(fields, start=1):
            cell = worksheet.cell(
                row=excel_row, column=col_idx, value=_cell_value(row, field_name)
            )
            cell.font = _NORMAL_FONT

            number_format = _NUMBER_FORMATS.get(field_name)
            if number_format is not None:
                cell.number_format = number_format

            if field_name == "pour_cost_percent":
                fill = _pour_cost_fill(row.get(field_name), settings)
                if fill is not None:
                    cell.fill = fill

    _auto_fit_column_widths(worksheet)

    last_col_letter = get_column_letter(len(fields))
    worksheet.auto_filter.ref = f"A1:{last_col_letter}{len(rows) + 1}"
    worksheet.freeze_panes = "A2"


def _pour_cost_fill(value: object, settings: SheetSettings) -> PatternFill | None:
    """Red above target, green at/below target, nothing for unpriced rows."""
    pct = to_number(value)
    if pct <= 0:
        return None
    if pct > settings.target_pour_cost_percent:
        return _OVER_TARGET_FILL
    return _ON_TARGET_FILL


# ═══════════════════════════════════════════════════════════════════════════
# Sheet 2: Settings
# ═══════════════════════════════════════════════════════════════════════════

def _write_settings_sheet(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
    settings: SheetSettings,
    location: str,
) -> None:
    items = [
        ("Location", location),
        ("Target Pour Cost %", settings.target_pour_cost_percent),
        ("Rounding Increment ($)", settings.rounding_increment),
        ("Exported", datetime.now().strftime("%Y-%m-%d %H:%M")),
    ]

    for row_idx, (label, value) in enumerate(items, start=1):
        worksheet.cell(row=row_idx, column=1, value=label).font = _BOLD_FONT
        worksheet.cell(row=row_idx, column=2, value=value).font = _NORMAL_FONT

    _auto_fit_column_widths(worksheet)


# ═══════════════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════════════

def _auto_fit_column_widths(
    worksheet: openpyxl.worksheet.worksheet.Worksheet,
) -> None:
    """Set each column width to its longest value, clamped to min/max."""
    for column_cells in worksheet.columns:
        max_length = _MIN_COL_WIDTH
        col_letter = get_column_letter(column_cells[0].column)

        for cell in column_cells:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))

        worksheet.column_dimensions[col_letter].width = min(max_length + 2, _MAX_COL_WIDTH)
