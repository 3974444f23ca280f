"""
Tests for processing/history.py

Covers: saving snapshots (naming, ordering, empty catalog), restoring, and
deleting saved lists.
"""

import pytest

from processing.catalog import update_product, upsert_products
from processing.history import (
    clear_saved_lists,
    delete_saved_list,
    restore_saved_list,
    save_list,
)
from processing.models import SOURCE_FILE, RawProductRecord

_NOW = "2024-05-01T10:30:00+00:00"


def _make_catalog():
    records = [
        RawProductRecord(name="Widget", original_price=10.0),
        RawProductRecord(name="Gadget", original_price=20.0),
    ]
    return upsert_products([], records, SOURCE_FILE, now=_NOW).catalog


class TestSaveList:
    def test_named_snapshot(self):
        catalog = _make_catalog()

        saved, history = save_list([], catalog, name="  Spring prices ", now=_NOW)

        assert saved.name == "Spring prices"
        assert saved.date == _NOW
        assert list(saved.items) == catalog
        assert history == [saved]

    def test_default_name_from_timestamp(self):
        saved, _ = save_list([], _make_catalog(), now=_NOW)
        assert saved.name == "List 2024-05-01 10:30"

    def test_newest_first(self):
        catalog = _make_catalog()
        first, history = save_list([], catalog, name="first", now=_NOW)
        second, history = save_list(history, catalog, name="second", now=_NOW)

        assert [s.name for s in history] == ["second", "first"]

    def test_empty_catalog_rejected(self):
        with pytest.raises(ValueError):
            save_list([], [], name="nothing")

    def test_snapshot_unaffected_by_later_edits(self):
        catalog = _make_catalog()
        saved, _ = save_list([], catalog, now=_NOW)

        update_product(catalog, catalog[0].id, name="Renamed")

        assert saved.items[0].name == "Widget"


class TestRestoreAndDelete:
    def test_restore_returns_copy_of_items(self):
        catalog = _make_catalog()
        saved, _ = save_list([], catalog, now=_NOW)

        restored = restore_saved_list(saved)

        assert restored == catalog
        assert isinstance(restored, list)

    def test_delete_saved_list(self):
        catalog = _make_catalog()
        first, history = save_list([], catalog, name="first", now=_NOW)
        _, history = save_list(history, catalog, name="second", now=_NOW)

        history = delete_saved_list(history, first.id)

        assert [s.name for s in history] == ["second"]

    def test_clear_saved_lists(self):
        assert clear_saved_lists() == []
