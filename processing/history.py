"""
Saved-list history — named snapshots of the catalog.

A snapshot is a frozen copy of the catalog at save time.  Restoring one
replaces the whole current catalog with a copy of the snapshot's items.

Public API:
    save_list(saved_lists, catalog, name, now) → (SavedList, list[SavedList])
    delete_saved_list(saved_lists, list_id) → list[SavedList]
    clear_saved_lists() → list[SavedList]
    restore_saved_list(saved_list) → list[CatalogProduct]
"""

import logging
from dataclasses import replace
from datetime import datetime

from processing.models import CatalogProduct, SavedList, generate_id, utc_now_iso

logger = logging.getLogger(__name__)


def save_list(
    saved_lists: list[SavedList],
    catalog: list[CatalogProduct],
    name: str | None = None,
    now: str | None = None,
) -> tuple[SavedList, list[SavedList]]:
    """
    Snapshot *catalog* into a new saved list, placed first in the history.

    Args:
        saved_lists: Current history.
        catalog: Catalog to snapshot.
        name: List name; blank → "List <date> <time>".
        now: ISO timestamp for the snapshot (defaults to current UTC).

    Returns:
        (new_saved_list, updated_history)

    Raises:
        ValueError: The catalog is empty.
    """
    if not catalog:
        raise ValueError("Nothing to save: the catalog is empty")

    timestamp = now or utc_now_iso()
    list_name = (name or "").strip() or _default_list_name(timestamp)

    snapshot = SavedList(
        id=generate_id(),
        name=list_name,
        date=timestamp,
        items=tuple(replace(product) for product in catalog),
    )

    logger.info(f"Saved list '{list_name}' with {len(catalog)} products")
    return snapshot, [snapshot] + list(saved_lists)


def delete_saved_list(saved_lists: list[SavedList], list_id: str) -> list[SavedList]:
    """Remove one saved list by id."""
    return [saved for saved in saved_lists if saved.id != list_id]


def clear_saved_lists() -> list[SavedList]:
    logger.info("Saved-list history cleared")
    return []


def restore_saved_list(saved_list: SavedList) -> list[CatalogProduct]:
    """Return a copy of the snapshot's items to use as the new catalog."""
    logger.info(
        f"Restoring saved list '{saved_list.name}' ({len(saved_list.items)} products)"
    )
    return [replace(product) for product in saved_list.items]


def _default_list_name(timestamp: str) -> str:
    try:
        moment = datetime.fromisoformat(timestamp)
    except ValueError:
        return "List"
    return f"List {moment:%Y-%m-%d %H:%M}"
