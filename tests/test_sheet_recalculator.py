"""
Tests for processing/sheet_recalculator.py

Covers: order and length preservation, stale derived values replaced,
extension and unknown fields kept, no input mutation, idempotence.
"""

import copy

import pytest

from processing.row_calculator import SheetSettings
from processing.sheet_recalculator import (
    recalculate_all,
    recalculate_row,
)


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _make_rows() -> list[dict]:
    return [
        {"item": "Vodka", "bottle_volume_ml": "750 ml", "bottle_cost": 14.75,
         "pour_size_oz": 1.5, "menu_price": 9, "extra_1": "Well"},
        {"item": "Tequila Blanco", "bottle_volume_ml": 1000, "bottle_cost": 21.00,
         "pour_size_oz": 1.5, "menu_price": 11, "extra_1": ""},
        {"item": "", "bottle_volume_ml": None, "bottle_cost": None,
         "pour_size_oz": None, "menu_price": None, "extra_1": ""},
    ]


DEFAULT_SETTINGS = SheetSettings()


# ═══════════════════════════════════════════════════════════════════════════
# recalculate_all
# ═══════════════════════════════════════════════════════════════════════════

class TestRecalculateAll:
    def test_same_length_and_order(self):
        result = recalculate_all(_make_rows(), DEFAULT_SETTINGS)
        assert [row["item"] for row in result] == ["Vodka", "Tequila Blanco", ""]

    def test_bottle_size_normalized(self):
        result = recalculate_all(_make_rows(), DEFAULT_SETTINGS)
        assert [row["bottle_volume_ml"] for row in result] == [750, 1000, 750]

    def test_derived_fields_filled(self):
        result = recalculate_all(_make_rows(), DEFAULT_SETTINGS)
        assert result[0]["cost_per_pour"] == 0.87
        assert result[0]["pour_cost_percent"] == 9.7
        assert result[0]["suggested_menu_price"] == 7.50
        assert result[1]["pour_cost_percent"] == 8.5

    def test_blank_row_gets_zero_derived(self):
        result = recalculate_all(_make_rows(), DEFAULT_SETTINGS)
        assert result[2]["cost_per_pour"] == 0
        assert result[2]["pour_cost_percent"] == 0
        assert result[2]["suggested_menu_price"] == 0

    def test_stale_derived_values_replaced(self):
        rows = _make_rows()
        rows[0]["cost_per_pour"] = 99.99
        rows[0]["pour_cost_percent"] = 50.0
        result = recalculate_all(rows, DEFAULT_SETTINGS)
        assert result[0]["cost_per_pour"] == 0.87
        assert result[0]["pour_cost_percent"] == 9.7

    def test_extension_and_unknown_fields_kept(self):
        rows = _make_rows()
        rows[1]["supplier_note"] = "case price"
        result = recalculate_all(rows, DEFAULT_SETTINGS)
        assert result[0]["extra_1"] == "Well"
        assert result[1]["supplier_note"] == "case price"

    def test_input_not_mutated(self):
        rows = _make_rows()
        snapshot = copy.deepcopy(rows)
        recalculate_all(rows, DEFAULT_SETTINGS)
        assert rows == snapshot

    def test_none_gives_empty(self):
        assert recalculate_all(None, DEFAULT_SETTINGS) == []

    @pytest.mark.parametrize(
        "settings",
        [
            SheetSettings(),
            SheetSettings(target_pour_cost_percent=18, rounding_increment=0),
            SheetSettings(target_pour_cost_percent=0, rounding_increment=1),
        ],
    )
    def test_idempotent(self, settings):
        once = recalculate_all(_make_rows(), settings)
        twice = recalculate_all(once, settings)
        assert twice == once

    def test_settings_change_updates_suggested_price(self):
        once = recalculate_all(_make_rows(), DEFAULT_SETTINGS)
        again = recalculate_all(once, SheetSettings(rounding_increment=1))
        assert again[0]["suggested_menu_price"] == 8.00


class TestRecalculateRow:
    def test_returns_new_dict(self):
        row = _make_rows()[0]
        result = recalculate_row(row, DEFAULT_SETTINGS)
        assert result is not row
        assert "cost_per_pour" not in row
