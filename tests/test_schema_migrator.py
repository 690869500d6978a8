"""
Tests for processing/schema_migrator.py

Covers: generation detection precedence, legacy upgrade defaults, current
collections passing through unchanged, mixed collections, malformed input,
and the step pipeline.
"""

import copy

import pytest

from config.schema import SchemaGeneration
from processing.schema_migrator import (
    MIGRATION_STEPS,
    MigrationStep,
    detect_generation,
    migrate,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _legacy_record(item: str = "Vodka 750ml", unit_cost: float = 14.75) -> dict:
    return {"item": item, "unit_cost": unit_cost, "quantity": 6, "total": unit_cost * 6}


def _current_record(item: str = "Vodka") -> dict:
    return {
        "item": item,
        "bottle_volume_ml": 750,
        "bottle_cost": 14.75,
        "pour_size_oz": 1.5,
        "menu_price": 9,
        "cost_per_pour": 0.87,
        "pour_cost_percent": 9.7,
        "suggested_menu_price": 7.5,
        "extra_1": "Well",
    }


# ═══════════════════════════════════════════════════════════════════════════
# Detection
# ═══════════════════════════════════════════════════════════════════════════

class TestDetectGeneration:
    def test_current_collection(self):
        assert detect_generation([_current_record()]) == SchemaGeneration.CURRENT

    def test_generation_one_counts_as_current(self):
        record = {"item": "Gin", "bottle_volume_ml": 750, "bottle_cost": 18,
                  "pour_size_oz": 1.5, "menu_price": 10}
        assert detect_generation([record]) == SchemaGeneration.CURRENT

    def test_single_marker_is_enough(self):
        assert detect_generation([{"item": "Rum", "menu_price": 8}]) == SchemaGeneration.CURRENT

    def test_legacy_collection(self):
        assert detect_generation([_legacy_record()]) == SchemaGeneration.LEGACY

    def test_legacy_qty_key(self):
        record = {"item": "Rum", "unit_cost": 12, "qty": 2}
        assert detect_generation([record]) == SchemaGeneration.LEGACY

    def test_total_alone_is_legacy(self):
        assert detect_generation([{"item": "Rum", "total": 40}]) == SchemaGeneration.LEGACY

    def test_quantity_with_pour_fields_is_not_legacy(self):
        record = {"item": "Rum", "quantity": 2, "pour_size_oz": 1.5}
        assert detect_generation([record]) == SchemaGeneration.CURRENT

    def test_empty_is_current(self):
        assert detect_generation([]) == SchemaGeneration.CURRENT

    def test_unrecognized_is_current(self):
        assert detect_generation([{"name": "x"}, {"foo": 1}]) == SchemaGeneration.CURRENT

    def test_mixed_collection_with_legacy_rows_is_legacy(self):
        records = [_current_record(), _legacy_record()]
        assert detect_generation(records) == SchemaGeneration.LEGACY


# ═══════════════════════════════════════════════════════════════════════════
# Legacy upgrade
# ═══════════════════════════════════════════════════════════════════════════

class TestLegacyUpgrade:
    def test_legacy_record_upgraded(self):
        result = migrate([{"item": "Vodka 750ml", "unit_cost": 14.75,
                           "quantity": 6, "total": 88.50}])
        assert result == [{
            "item": "Vodka 750ml",
            "bottle_volume_ml": 750,
            "bottle_cost": 14.75,
            "pour_size_oz": 1.5,
            "menu_price": None,
        }]

    def test_quantity_and_total_dropped(self):
        result = migrate([_legacy_record()])
        assert "quantity" not in result[0]
        assert "total" not in result[0]
        assert "unit_cost" not in result[0]

    def test_string_unit_cost_coerced(self):
        result = migrate([{"item": "Gin", "unit_cost": "$18.50", "qty": 1}])
        assert result[0]["bottle_cost"] == 18.5

    def test_missing_item_and_cost(self):
        result = migrate([{"quantity": 3}])
        assert result[0]["item"] == ""
        assert result[0]["bottle_cost"] == 0.0

    def test_order_preserved(self):
        records = [_legacy_record("A"), _legacy_record("B"), _legacy_record("C")]
        assert [row["item"] for row in migrate(records)] == ["A", "B", "C"]

    def test_every_row_of_mixed_collection_upgraded(self):
        priced = {"item": "Priced", "bottle_volume_ml": 1000, "bottle_cost": 21,
                  "pour_size_oz": 1.0, "menu_price": 11}
        result = migrate([priced, _legacy_record("Old")])
        assert result[0] == {
            "item": "Priced",
            "bottle_volume_ml": 750,
            "bottle_cost": 0.0,
            "pour_size_oz": 1.5,
            "menu_price": None,
        }
        assert result[1]["bottle_cost"] == 14.75
        assert "quantity" not in result[1]

    def test_migrated_collection_is_current(self):
        migrated = migrate([_legacy_record()])
        assert detect_generation(migrated) == SchemaGeneration.CURRENT
        assert migrate(migrated) == migrated

    def test_input_not_mutated(self):
        records = [_legacy_record()]
        snapshot = copy.deepcopy(records)
        migrate(records)
        assert records == snapshot


# ═══════════════════════════════════════════════════════════════════════════
# Pass-through and malformed input
# ═══════════════════════════════════════════════════════════════════════════

class TestPassThrough:
    def test_current_collection_unchanged(self):
        records = [_current_record("A"), _current_record("B")]
        assert migrate(copy.deepcopy(records)) == records

    def test_unknown_fields_preserved(self):
        records = [{"item": "x", "menu_price": 5, "colour": "amber"}]
        assert migrate(records) == records

    def test_empty(self):
        assert migrate([]) == []

    def test_none(self):
        assert migrate(None) == []

    def test_non_list_logs_warning(self, caplog):
        with caplog.at_level("WARNING"):
            assert migrate({"item": "x"}) == []
        assert "Expected a list of rows" in caplog.text

    def test_non_mapping_records_dropped(self, caplog):
        records = [_current_record(), "garbage", 42, None]
        with caplog.at_level("WARNING"):
            result = migrate(records)
        assert result == [_current_record()]
        assert "Dropped 3" in caplog.text


# ═══════════════════════════════════════════════════════════════════════════
# Step pipeline
# ═══════════════════════════════════════════════════════════════════════════

class TestStepPipeline:
    def test_default_steps_are_ordered_by_generation(self):
        sources = [int(step.source) for step in MIGRATION_STEPS]
        assert sources == sorted(sources)

    def test_custom_steps_applied_until_fixed_point(self):
        steps = [
            MigrationStep(
                name="add_a",
                source=SchemaGeneration.LEGACY,
                target=SchemaGeneration.POUR_COST,
                applies=lambda rows: any("a" not in row for row in rows),
                transform=lambda rows: [{**row, "a": 1} for row in rows],
            ),
            MigrationStep(
                name="add_b",
                source=SchemaGeneration.POUR_COST,
                target=SchemaGeneration.CURRENT,
                applies=lambda rows: all("a" in row for row in rows)
                and any("b" not in row for row in rows),
                transform=lambda rows: [{**row, "b": 2} for row in rows],
            ),
        ]
        assert migrate([{"item": "x"}], steps=steps) == [{"item": "x", "a": 1, "b": 2}]

    def test_step_that_never_settles_is_bounded(self):
        calls = []

        def transform(rows):
            calls.append(1)
            return rows

        steps = [
            MigrationStep(
                name="loop",
                source=SchemaGeneration.LEGACY,
                target=SchemaGeneration.CURRENT,
                applies=lambda rows: True,
                transform=transform,
            ),
        ]
        migrate([{"item": "x"}], steps=steps)
        assert len(calls) == 1

    def test_migration_logged(self, caplog):
        with caplog.at_level("INFO"):
            migrate([_legacy_record()])
        assert "legacy_quantity_to_pour_costing" in caplog.text
