"""
Default sheet settings and the bundled example dataset.

The example rows are used whenever a location has no saved data or is
explicitly reset.  Derived fields are left out; they are always
computed from the current settings.
"""

# Target pour cost percentage used for the suggested menu price.
DEFAULT_TARGET_POUR_COST_PERCENT: float = 11.5

# Suggested prices are rounded to this currency increment (0 = no rounding).
DEFAULT_ROUNDING_INCREMENT: float = 0.25

# Pour size assumed for migrated legacy records.
DEFAULT_POUR_SIZE_OZ: float = 1.5

EXAMPLE_ROWS: list[dict] = [
    {
        "item": "Vodka",
        "bottle_volume_ml": 750,
        "bottle_cost": 14.75,
        "pour_size_oz": 1.5,
        "menu_price": 9,
    },
    {
        "item": "Tequila Blanco",
        "bottle_volume_ml": 1000,
        "bottle_cost": 21.00,
        "pour_size_oz": 1.5,
        "menu_price": 11,
    },
    {
        "item": "Limoncello",
        "bottle_volume_ml": 750,
        "bottle_cost": 24.70,
        "pour_size_oz": 1.0,
        "menu_price": 8,
    },
]
