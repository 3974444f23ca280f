"""
JSON file storage for the catalog, saved lists, and pricing settings.

Three files in one data directory:
  catalog.json      — list of products
  saved_lists.json  — list of snapshots
  settings.json     — pricing configuration

A missing file loads as empty / defaults.  A corrupt file is logged and
also loads as empty, so a bad write never locks the operator out of the app.
Writes go to a temporary file first and are then renamed into place.

Public API:
    CatalogStore(data_dir)
"""

import json
import logging
import os
from pathlib import Path

from processing.models import CatalogProduct, PricingConfiguration, SavedList

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("data")

CATALOG_FILENAME = "catalog.json"
SAVED_LISTS_FILENAME = "saved_lists.json"
SETTINGS_FILENAME = "settings.json"


class CatalogStore:
    """Durable slots for the catalog, the saved-list history, and settings."""

    def __init__(self, data_dir: Path = DEFAULT_DATA_DIR):
        self.data_dir = Path(data_dir)

    # ── Catalog ───────────────────────────────────────────────────────

    def load_catalog(self) -> list[CatalogProduct]:
        raw = self._read_json(CATALOG_FILENAME, default=[])
        return [CatalogProduct.from_dict(item) for item in _as_list(raw, CATALOG_FILENAME)]

    def save_catalog(self, catalog: list[CatalogProduct]) -> None:
        self._write_json(CATALOG_FILENAME, [product.to_dict() for product in catalog])

    # ── Saved lists ───────────────────────────────────────────────────

    def load_saved_lists(self) -> list[SavedList]:
        raw = self._read_json(SAVED_LISTS_FILENAME, default=[])
        return [SavedList.from_dict(item) for item in _as_list(raw, SAVED_LISTS_FILENAME)]

    def save_saved_lists(self, saved_lists: list[SavedList]) -> None:
        self._write_json(SAVED_LISTS_FILENAME, [saved.to_dict() for saved in saved_lists])

    # ── Settings ──────────────────────────────────────────────────────

    def load_settings(self) -> PricingConfiguration:
        raw = self._read_json(SETTINGS_FILENAME, default={})
        if not isinstance(raw, dict):
            logger.warning(f"'{SETTINGS_FILENAME}' is not an object — using defaults")
            raw = {}
        return PricingConfiguration.from_dict(raw)

    def save_settings(self, config: PricingConfiguration) -> None:
        self._write_json(SETTINGS_FILENAME, config.to_dict())

    # ── Internal ──────────────────────────────────────────────────────

    def _read_json(self, filename: str, default: object) -> object:
        path = self.data_dir / filename
        if not path.exists():
            return default

        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(f"Cannot read '{path}': {exc} — starting empty")
            return default

    def _write_json(self, filename: str, payload: object) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.data_dir / filename
        temp_path = path.with_suffix(path.suffix + ".tmp")

        with temp_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
        os.replace(temp_path, path)

        logger.debug(f"Wrote '{path}'")


def _as_list(raw: object, filename: str) -> list[dict]:
    if not isinstance(raw, list):
        logger.warning(f"'{filename}' does not hold a list — starting empty")
        return []
    return [item for item in raw if isinstance(item, dict)]
