"""
Location store — key-value persistence of cost sheets, one entry per location.

Two keys per location:
    bevcost_demo_<location>  → JSON array of row dicts
    bevcost_meta_<location>  → JSON object {"extra_column_count": n}

Stored values are JSON strings.  Malformed content is treated as missing
(rows → [], metadata → no extra columns) and logged, never raised.

Public API:
    LocationStore, JsonFileStore, MemoryStore
    LocationMetadata
    rows_key(location), meta_key(location)
    load_rows(store, location) → list | None
    save_rows(store, location, rows)
    load_meta(store, location) → LocationMetadata
    save_meta(store, location, meta)
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from config.schema import META_KEY_PREFIX, ROWS_KEY_PREFIX

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class LocationMetadata:
    """Per-location grid extensions."""

    extra_column_count: int = 0

    def as_dict(self) -> dict[str, int]:
        return {"extra_column_count": self.extra_column_count}


# ═══════════════════════════════════════════════════════════════════════════
# Stores
# ═══════════════════════════════════════════════════════════════════════════

class LocationStore(ABC):
    """String key → string value store.  Subclasses provide the backing."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key`; a missing key is not an error."""


class MemoryStore(LocationStore):
    """Dict-backed store for tests and sessions without a data directory."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStore(LocationStore):
    """
    One file per key under `directory`.

    Keys are percent-encoded into file names, so locations may contain
    spaces or slashes.  The directory is created on the first write.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Failed to read '{path}': {exc} — treating as missing")
            return None

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path_for(key).write_text(value, encoding="utf-8")

    def delete(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)


# ═══════════════════════════════════════════════════════════════════════════
# Keys
# ═══════════════════════════════════════════════════════════════════════════

def rows_key(location: str) -> str:
    return ROWS_KEY_PREFIX + location


def meta_key(location: str) -> str:
    return META_KEY_PREFIX + location


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def load_rows(store: LocationStore, location: str) -> list | None:
    """
    Load the saved row collection for a location.

    Returns:
        None when nothing is saved, [] when the saved content is malformed,
        otherwise the decoded list exactly as stored (not yet migrated).
    """
    raw = store.get(rows_key(location))
    if raw is None or raw == "":
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning(
            f"Saved rows for '{location}' are not valid JSON: {exc} — starting empty"
        )
        return []

    if not isinstance(data, list):
        logger.warning(
            f"Saved rows for '{location}' are not a JSON array — starting empty"
        )
        return []

    return data


def save_rows(store: LocationStore, location: str, rows: list[dict]) -> None:
    """Persist a row collection (callers recalculate first)."""
    store.set(rows_key(location), json.dumps(rows, ensure_ascii=False))
    logger.info(f"Saved {len(rows)} rows for '{location}'")


def load_meta(store: LocationStore, location: str) -> LocationMetadata:
    """Load location metadata; missing or malformed → no extra columns."""
    raw = store.get(meta_key(location))
    if not raw:
        return LocationMetadata()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning(f"Metadata for '{location}' is not valid JSON: {exc}")
        return LocationMetadata()

    if not isinstance(data, dict):
        logger.warning(f"Metadata for '{location}' is not a JSON object")
        return LocationMetadata()

    # Early saves used "extraCols"
    count = data.get("extra_column_count", data.get("extraCols", 0))
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        logger.warning(f"Invalid extra column count {count!r} for '{location}'")
        return LocationMetadata()

    return LocationMetadata(extra_column_count=count)


def save_meta(
    store: LocationStore,
    location: str,
    meta: LocationMetadata | None,
) -> None:
    """Persist location metadata (None is saved as no extra columns)."""
    meta = meta or LocationMetadata()
    store.set(meta_key(location), json.dumps(meta.as_dict()))
