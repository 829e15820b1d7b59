"""Tests for the in-memory month snapshot store."""

from profitboard.models.imported_data import ImportedData
from profitboard.models.records import Store
from profitboard.storage.snapshot_store import SnapshotStore


class TestSnapshotStore:
    def test_save_and_load_same_object(self):
        store = SnapshotStore()
        data = ImportedData(stores={"1": Store(id="1", code="001", name="Main")})
        meta = store.save(2026, 2, data)
        assert (meta.year, meta.month) == (2026, 2)
        assert store.load(2026, 2) is data
        assert store.load(2026, 3) is None

    def test_load_slice(self):
        store = SnapshotStore()
        data = ImportedData()
        store.save(2025, 2, data)
        assert store.load_slice(2025, 2, "discount") == {}
        assert store.load_slice(2025, 3, "discount") is None

    def test_latest_meta_follows_save_order(self):
        store = SnapshotStore()
        assert store.get_latest_meta() is None
        store.save(2026, 3, ImportedData())
        store.save(2026, 1, ImportedData())
        assert store.get_latest_meta().month == 1
        store.save(2026, 3, ImportedData())
        assert store.get_latest_meta().month == 3

    def test_list_and_clear_months(self):
        store = SnapshotStore()
        store.save(2026, 2, ImportedData())
        store.save(2025, 12, ImportedData())
        assert store.list_months() == [(2025, 12), (2026, 2)]

        store.clear_month(2026, 2)
        assert store.list_months() == [(2025, 12)]
        assert store.get_latest_meta().month == 12

        store.clear_all()
        assert store.list_months() == []
        assert store.get_latest_meta() is None
