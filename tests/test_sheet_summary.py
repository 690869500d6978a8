"""
Tests for analysis/sheet_summary.py
"""

import pytest

from analysis.sheet_summary import SheetSummary, summarize_sheet
from processing.cost_sheet import example_rows
from processing.row_calculator import SheetSettings

DEFAULT_SETTINGS = SheetSettings()


class TestSummarizeSheet:
    def test_example_rows(self):
        summary = summarize_sheet(example_rows(DEFAULT_SETTINGS), DEFAULT_SETTINGS)
        assert summary.item_count == 3
        assert summary.priced_count == 3
        assert summary.average_pour_cost_percent == 10.1  # (9.7 + 8.5 + 12.2) / 3
        assert summary.over_target_count == 1             # Limoncello
        assert summary.total_bottle_cost == pytest.approx(60.45)

    def test_unpriced_rows_excluded_from_average(self):
        rows = example_rows(DEFAULT_SETTINGS)
        rows.append({"item": "New", "bottle_cost": 10, "menu_price": None,
                     "pour_cost_percent": 0})
        summary = summarize_sheet(rows, DEFAULT_SETTINGS)
        assert summary.item_count == 4
        assert summary.priced_count == 3
        assert summary.average_pour_cost_percent == 10.1

    def test_target_changes_over_count(self):
        settings = SheetSettings(target_pour_cost_percent=9)
        summary = summarize_sheet(example_rows(settings), settings)
        assert summary.over_target_count == 2

    def test_empty(self):
        assert summarize_sheet([], DEFAULT_SETTINGS) == SheetSummary()

    def test_no_priced_rows(self):
        rows = [{"item": "A", "bottle_cost": "abc", "menu_price": ""}]
        summary = summarize_sheet(rows, DEFAULT_SETTINGS)
        assert summary.priced_count == 0
        assert summary.average_pour_cost_percent == 0.0
        assert summary.total_bottle_cost == 0.0
