"""
Schema migrator — upgrades saved row collections to the current schema.

Saved sheets come in three generations (see SchemaGeneration):
  0. LEGACY     — item, unit_cost, quantity (or qty), total.
  1. POUR_COST  — bottle size, bottle cost, pour size, menu price.
  2. CURRENT    — adds suggested menu price and per-location extra columns.

Generations 1 and 2 share a row shape; missing derived fields are filled by
the next recalculation, so both are treated as current.

The collection is classified once, as a whole:
  1. Every record has pour_size_oz, menu_price, or suggested_menu_price
     → current, returned unchanged.
  2. Any record is legacy-shaped (quantity / qty / total and neither
     pour_size_oz nor menu_price) → legacy.
  3. Anything else (empty, unrecognized) → current, returned unchanged.

A legacy collection is upgraded record by record, including any records
that already had pour fields.

Upgrades are an ordered list of MigrationStep objects, each with a
precondition and a transform.  Steps are applied until none applies.
Migration is one-way: quantity and total have no forward equivalent and are
dropped.  Nothing here raises on malformed records.

Public API:
    detect_generation(records) → SchemaGeneration
    migrate(records) → list[dict]
    MIGRATION_STEPS
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from config.defaults import DEFAULT_POUR_SIZE_OZ
from config.schema import (
    CURRENT_MARKER_FIELDS,
    DEFAULT_BOTTLE_ML,
    LEGACY_MARKER_FIELDS,
    SchemaGeneration,
)
from processing.row_calculator import to_number

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MigrationStep:
    """One upgrade from `source` to `target` generation."""

    name: str
    source: SchemaGeneration
    target: SchemaGeneration
    applies: Callable[[list[dict]], bool]
    transform: Callable[[list[dict]], list[dict]]


# ═══════════════════════════════════════════════════════════════════════════
# Generation detection
# ═══════════════════════════════════════════════════════════════════════════

def _is_current_record(record: Mapping) -> bool:
    return any(key in record for key in CURRENT_MARKER_FIELDS)


def _is_legacy_record(record: Mapping) -> bool:
    has_legacy = any(key in record for key in LEGACY_MARKER_FIELDS)
    has_pour_fields = "pour_size_oz" in record or "menu_price" in record
    return has_legacy and not has_pour_fields


def detect_generation(records: list[dict]) -> SchemaGeneration:
    """
    Classify a whole saved collection by its dominant shape.

    Args:
        records: Saved row dicts (non-mappings are ignored).

    Returns:
        SchemaGeneration.LEGACY or SchemaGeneration.CURRENT.
    """
    mappings = [record for record in records if isinstance(record, Mapping)]

    if mappings and all(_is_current_record(record) for record in mappings):
        return SchemaGeneration.CURRENT

    if any(_is_legacy_record(record) for record in mappings):
        return SchemaGeneration.LEGACY

    return SchemaGeneration.CURRENT


# ═══════════════════════════════════════════════════════════════════════════
# Migration steps
# ═══════════════════════════════════════════════════════════════════════════

def _upgrade_legacy_record(record: Mapping) -> dict:
    """quantity/total record → pour costing record with default pour fields."""
    return {
        "item": record.get("item") or "",
        "bottle_volume_ml": DEFAULT_BOTTLE_ML,
        "bottle_cost": to_number(record.get("unit_cost")),
        "pour_size_oz": DEFAULT_POUR_SIZE_OZ,
        "menu_price": None,
    }


def _upgrade_legacy_collection(records: list[dict]) -> list[dict]:
    """
    Upgrade every record of a legacy collection.

    The collection was classified as a whole, so records that already carry
    pour fields are rewritten too and lose their pour values.
    """
    return [_upgrade_legacy_record(record) for record in records]


MIGRATION_STEPS: list[MigrationStep] = [
    MigrationStep(
        name="legacy_quantity_to_pour_costing",
        source=SchemaGeneration.LEGACY,
        target=SchemaGeneration.CURRENT,
        applies=lambda records: detect_generation(records) == SchemaGeneration.LEGACY,
        transform=_upgrade_legacy_collection,
    ),
]


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def migrate(
    records: list | None,
    steps: list[MigrationStep] | None = None,
) -> list[dict]:
    """
    Upgrade a saved collection to the current schema.

    Args:
        records: Saved records as loaded from storage.  Non-list input
                 yields an empty list; non-mapping records are dropped.
        steps: Migration steps to apply, defaults to MIGRATION_STEPS.

    Returns:
        Current-schema row dicts in the original order.  Current
        collections come back field-for-field unchanged.
    """
    if not isinstance(records, list):
        if records is not None:
            logger.warning(
                f"Expected a list of rows, got {type(records).__name__} — "
                "treating as empty"
            )
        return []

    rows = [dict(record) for record in records if isinstance(record, Mapping)]
    dropped = len(records) - len(rows)
    if dropped:
        logger.warning(f"Dropped {dropped} saved record(s) that were not rows")

    active_steps = MIGRATION_STEPS if steps is None else steps

    # Each step moves the collection forward, so at most len(steps) passes.
    for _ in range(len(active_steps)):
        step = next((s for s in active_steps if s.applies(rows)), None)
        if step is None:
            break
        rows = step.transform(rows)
        logger.info(
            f"Applied migration '{step.name}' "
            f"(generation {int(step.source)} → {int(step.target)}) "
            f"to {len(rows)} rows"
        )

    return rows
