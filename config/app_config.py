"""
Runtime configuration read from the environment.

BEVCOST_DATA_DIR   — directory holding the per-location JSON files.
BEVCOST_LOCATIONS  — comma-separated list of locations shown in the sidebar.
"""

import os
from pathlib import Path

DEFAULT_DATA_DIR: str = ".bevcost_data"

DEFAULT_LOCATIONS: list[str] = ["Main Bar", "Patio", "Rooftop"]


def get_data_dir() -> Path:
    """Return the storage directory (not created here)."""
    return Path(os.environ.get("BEVCOST_DATA_DIR", DEFAULT_DATA_DIR))


def get_locations() -> list[str]:
    """Return the configured locations, falling back to DEFAULT_LOCATIONS."""
    raw = os.environ.get("BEVCOST_LOCATIONS", "")
    locations = [part.strip() for part in raw.split(",") if part.strip()]
    return locations or list(DEFAULT_LOCATIONS)
