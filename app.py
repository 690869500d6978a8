"""
Streamlit entry point — BevCost Sheet UI.

User flow:
  1. Sidebar: location, target pour cost %, rounding increment
  2. Summary metrics for the location's sheet
  3. Editable grid (derived columns read-only)
  4. Row / column actions: add row, delete row, add extra column
  5. Save, reset to example rows, download formatted Excel

Contains NO business logic — only calls processing modules and displays
results.  Settings are read fresh from the sidebar on every run.
"""

import logging
import tempfile
from datetime import datetime
from pathlib import Path

import streamlit as st

from analysis.sheet_summary import summarize_sheet
from config.app_config import get_data_dir, get_locations
from config.defaults import DEFAULT_ROUNDING_INCREMENT, DEFAULT_TARGET_POUR_COST_PERCENT
from config.schema import BOTTLE_OPTIONS, EXTRA_HEADER_PREFIX, FIELD_HEADERS
from processing.bottle_normalizer import bottle_label
from processing.cost_sheet import (
    CostSheet,
    add_extra_column,
    add_row,
    apply_edits,
    dataframe_to_rows,
    delete_row,
    load_sheet,
    reset_sheet,
    save_sheet,
    sheet_to_dataframe,
)
from processing.row_calculator import SheetSettings
from processing.sheet_recalculator import recalculate_all
from storage.location_store import JsonFileStore
from utils.excel_formatter import format_and_save

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Page configuration
# ═══════════════════════════════════════════════════════════════════════════

st.set_page_config(
    page_title="BevCost Sheet",
    page_icon="🍸",
    layout="wide",
    initial_sidebar_state="expanded",
)

store = JsonFileStore(get_data_dir())


# ═══════════════════════════════════════════════════════════════════════════
# Sidebar: Settings
# ═══════════════════════════════════════════════════════════════════════════

st.sidebar.title("⚙️ Settings")

location = st.sidebar.selectbox("Location", options=get_locations())

target_input = st.sidebar.number_input(
    "Target Pour Cost %",
    min_value=0.1,
    max_value=100.0,
    value=DEFAULT_TARGET_POUR_COST_PERCENT,
    step=0.5,
    format="%.1f",
)

rounding_input = st.sidebar.number_input(
    "Round Suggested Price To ($)",
    min_value=0.0,
    max_value=10.0,
    value=DEFAULT_ROUNDING_INCREMENT,
    step=0.05,
    format="%.2f",
    help="0 = no rounding.",
)

settings = SheetSettings.from_inputs(target_input, rounding_input)


# ═══════════════════════════════════════════════════════════════════════════
# Session state
# ═══════════════════════════════════════════════════════════════════════════

def _set_sheet(sheet: CostSheet) -> None:
    st.session_state["sheet"] = sheet
    # New editor key drops any pending grid edits from the old sheet
    st.session_state["grid_version"] = st.session_state.get("grid_version", 0) + 1


# Switching location saves the sheet being left, like the grid always has.
if st.session_state.get("location") != location:
    previous_location = st.session_state.get("location")
    if previous_location is not None and "sheet" in st.session_state:
        save_sheet(store, previous_location, st.session_state["sheet"], settings)
    st.session_state["location"] = location
    _set_sheet(load_sheet(store, location, settings))

sheet: CostSheet = st.session_state["sheet"]

# Settings changes recalculate the whole sheet.
sheet = CostSheet(rows=recalculate_all(sheet.rows, settings), meta=sheet.meta)
st.session_state["sheet"] = sheet


# ═══════════════════════════════════════════════════════════════════════════
# Main area: Title and summary
# ═══════════════════════════════════════════════════════════════════════════

st.title("🍸 BevCost Sheet")
st.caption(
    "Bottle cost, pour size, and menu price in — cost per pour, pour cost %, "
    "and a suggested menu price out."
)

summary = summarize_sheet(sheet.rows, settings)

metric_cols = st.columns(4)
with metric_cols[0]:
    st.metric("Items", summary.item_count)
with metric_cols[1]:
    st.metric("Priced Items", summary.priced_count)
with metric_cols[2]:
    st.metric("Avg Pour Cost %", f"{summary.average_pour_cost_percent}%")
with metric_cols[3]:
    st.metric(f"Over {settings.target_pour_cost_percent}% Target", summary.over_target_count)


# ═══════════════════════════════════════════════════════════════════════════
# Grid
# ═══════════════════════════════════════════════════════════════════════════

grid_df = sheet_to_dataframe(sheet)
grid_df["bottle_volume_ml"] = grid_df["bottle_volume_ml"].map(bottle_label)

column_config: dict = {
    "item": st.column_config.TextColumn(FIELD_HEADERS["item"]),
    "bottle_volume_ml": st.column_config.SelectboxColumn(
        FIELD_HEADERS["bottle_volume_ml"],
        options=list(BOTTLE_OPTIONS),
        required=True,
    ),
    "bottle_cost": st.column_config.NumberColumn(
        FIELD_HEADERS["bottle_cost"], min_value=0.0, format="%.2f"
    ),
    "pour_size_oz": st.column_config.NumberColumn(
        FIELD_HEADERS["pour_size_oz"], min_value=0.0, format="%.2f"
    ),
    "menu_price": st.column_config.NumberColumn(
        FIELD_HEADERS["menu_price"], min_value=0.0, format="%.2f"
    ),
    "cost_per_pour": st.column_config.NumberColumn(
        FIELD_HEADERS["cost_per_pour"], format="%.2f"
    ),
    "pour_cost_percent": st.column_config.NumberColumn(
        FIELD_HEADERS["pour_cost_percent"], format="%.1f%%"
    ),
    "suggested_menu_price": st.column_config.NumberColumn(
        FIELD_HEADERS["suggested_menu_price"], format="%.2f"
    ),
}
for position, key in enumerate(sheet.extra_fields, start=1):
    column_config[key] = st.column_config.TextColumn(f"{EXTRA_HEADER_PREFIX}{position}")

edited_df = st.data_editor(
    grid_df,
    column_config=column_config,
    disabled=["cost_per_pour", "pour_cost_percent", "suggested_menu_price"],
    num_rows="fixed",
    use_container_width=True,
    key=f"grid_{location}_{st.session_state['grid_version']}",
)

# Grid rows map 1:1 onto sheet rows, so every grid row is an edit patch.
if dataframe_to_rows(edited_df) != dataframe_to_rows(grid_df):
    edits = dict(enumerate(dataframe_to_rows(edited_df)))
    st.session_state["sheet"] = apply_edits(sheet, edits, settings)
    st.rerun()


# ═══════════════════════════════════════════════════════════════════════════
# Actions
# ═══════════════════════════════════════════════════════════════════════════

action_cols = st.columns(4)

with action_cols[0]:
    if st.button("➕ Add Row", use_container_width=True):
        _set_sheet(add_row(sheet, settings))
        st.rerun()

with action_cols[1]:
    if st.button("➕ Add Column", use_container_width=True):
        extended = add_extra_column(sheet)
        save_sheet(store, location, extended, settings)
        _set_sheet(extended)
        st.rerun()

with action_cols[2]:
    if st.button("💾 Save", type="primary", use_container_width=True):
        try:
            save_sheet(store, location, sheet, settings)
        except OSError as exc:
            logger.error(f"Failed to save '{location}': {exc}")
            st.error(f"Could not save {location}: {exc}")
        else:
            st.success(f"Saved locally for: {location}")

with action_cols[3]:
    confirm_reset = st.checkbox("Confirm reset")
    if st.button("↺ Reset to Examples", disabled=not confirm_reset, use_container_width=True):
        _set_sheet(reset_sheet(store, location, settings))
        st.rerun()

if sheet.rows:
    with st.expander("🗑️ Delete a row"):
        row_number = st.number_input(
            "Row number",
            min_value=1,
            max_value=len(sheet.rows),
            value=len(sheet.rows),
            step=1,
        )
        label = sheet.rows[int(row_number) - 1].get("item") or "(blank)"
        if st.button(f"Delete row {int(row_number)}: {label}"):
            _set_sheet(delete_row(sheet, int(row_number) - 1, settings))
            st.rerun()


# ═══════════════════════════════════════════════════════════════════════════
# Download
# ═══════════════════════════════════════════════════════════════════════════

st.divider()

with tempfile.TemporaryDirectory() as download_temp_dir:
    output_path = Path(download_temp_dir) / "cost_sheet.xlsx"
    format_and_save(
        rows=sheet.rows,
        settings=settings,
        location=location,
        extra_column_count=sheet.meta.extra_column_count,
        output_path=output_path,
    )
    excel_bytes = output_path.read_bytes()

timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
safe_location = "".join(ch if ch.isalnum() else "_" for ch in location)

st.download_button(
    label="📥 Download Excel",
    data=excel_bytes,
    file_name=f"bevcost_{safe_location}_{timestamp}.xlsx",
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    use_container_width=True,
)

st.caption(f"{len(sheet.rows)} rows · target {settings.target_pour_cost_percent}% · "
           f"rounding ${settings.rounding_increment:.2f}")
