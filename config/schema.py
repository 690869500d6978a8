"""
Cost sheet schema definitions.

Defines the persisted row fields, the grid column order and headers, the
canonical bottle sizes, the historical schema generations, and the storage
namespaces used to key per-location data.
"""

from enum import IntEnum

# Editable input fields in grid order.
INPUT_FIELDS: list[str] = [
    "item",
    "bottle_volume_ml",
    "bottle_cost",
    "pour_size_oz",
    "menu_price",
]

# Derived fields are always recomputed, never trusted from storage.
DERIVED_FIELDS: list[str] = [
    "cost_per_pour",
    "pour_cost_percent",
    "suggested_menu_price",
]

# Every row ends up with these fields, in this order, before any extension
# fields.
BASE_FIELDS: list[str] = INPUT_FIELDS + DERIVED_FIELDS

# Grid / export header for each base field.
FIELD_HEADERS: dict[str, str] = {
    "item": "Item",
    "bottle_volume_ml": "Bottle Size",
    "bottle_cost": "Bottle Cost ($)",
    "pour_size_oz": "Pour Size (oz)",
    "menu_price": "Menu Price ($)",
    "cost_per_pour": "Cost / Pour ($)",
    "pour_cost_percent": "Pour Cost %",
    "suggested_menu_price": "Suggested Menu Price ($)",
}

# Canonical bottle sizes: dropdown label → volume in ml.
BOTTLE_OPTIONS: dict[str, int] = {
    "750 ml": 750,
    "1 L": 1000,
}

# Unrecognized bottle sizes always fall back to this volume.
DEFAULT_BOTTLE_ML: int = 750

# Extension fields are named extra_1, extra_2, ... per location.
EXTRA_FIELD_PREFIX: str = "extra_"
EXTRA_HEADER_PREFIX: str = "Extra "


class SchemaGeneration(IntEnum):
    """Historical shapes of the persisted row collection."""

    LEGACY = 0      # item, unit_cost, quantity, total
    POUR_COST = 1   # bottle / pour / menu price, cost per pour, pour cost %
    CURRENT = 2     # + suggested menu price and extension fields


# Fields whose presence marks a record as pour-costing (generation 1 or 2).
CURRENT_MARKER_FIELDS: set[str] = {
    "pour_size_oz",
    "menu_price",
    "suggested_menu_price",
}

# Fields whose presence marks a record as a legacy quantity/total record.
# Early sheets stored the quantity as "qty".
LEGACY_MARKER_FIELDS: set[str] = {"quantity", "qty", "total"}

# Storage namespaces. The location id is appended to form the key.
ROWS_KEY_PREFIX: str = "bevcost_demo_"
META_KEY_PREFIX: str = "bevcost_meta_"


def extra_field_name(position: int) -> str:
    """Return the extension field key for a 1-based column position."""
    return f"{EXTRA_FIELD_PREFIX}{position}"


def extra_field_names(count: int) -> list[str]:
    """Return the extension field keys for a location with `count` extras."""
    return [extra_field_name(i) for i in range(1, count + 1)]
