"""
Tests for read-only inventory queries.
"""

import random

import pytest

from stockroom.exceptions import InvalidQuantityError
from stockroom.services import InventoryStore, QueryEngine


@pytest.fixture
def engine(store):
    store.add(1, "Apple", "Fruits", 0)
    store.add(2, "Orange Juice", "Beverages", 3)
    store.add(3, "Cheddar", "Dairy", 15)
    store.add(4, "Green Apple", "Fruits", 14)
    return QueryEngine(store)


class TestLowStock:
    """Partitioning by stock level."""

    def test_partition_at_default_threshold(self, engine):
        report = engine.low_stock_alert()

        assert report.threshold == 15
        assert [i.product_id for i in report.out_of_stock] == [1]
        assert [i.product_id for i in report.low_stock] == [2, 4]
        assert report.has_alerts()

    def test_threshold_is_exclusive(self, engine):
        report = engine.low_stock_alert(threshold=16)
        assert [i.product_id for i in report.low_stock] == [2, 3, 4]

    def test_zero_threshold_only_reports_out_of_stock(self, engine):
        report = engine.low_stock_alert(threshold=0)
        assert report.low_stock == []
        assert len(report.out_of_stock) == 1

    def test_negative_threshold_rejected(self, engine):
        with pytest.raises(InvalidQuantityError):
            engine.low_stock_alert(threshold=-1)

    def test_no_alerts(self):
        store = InventoryStore()
        store.add(1, "Rice", "Other", 100)
        assert not QueryEngine(store).low_stock_alert().has_alerts()

    def test_partition_property(self):
        rng = random.Random(99)
        store = InventoryStore()
        for n in range(1, 80):
            store.add(n, f"Item {n}", "Other", rng.randint(0, 30))
        threshold = rng.randint(0, 30)

        report = QueryEngine(store).low_stock_alert(threshold)
        out_ids = {i.product_id for i in report.out_of_stock}
        low_ids = {i.product_id for i in report.low_stock}

        assert not out_ids & low_ids
        for item in store.all():
            if item.quantity == 0:
                assert item.product_id in out_ids
            elif item.quantity < threshold:
                assert item.product_id in low_ids
            else:
                assert item.product_id not in out_ids | low_ids

    def test_stock_status_labels(self, engine, store):
        assert [engine.stock_status(i) for i in store.all()] == ["OUT", "LOW", "OK", "LOW"]


class TestSearch:
    """Substring search."""

    def test_matches_name_case_insensitively(self, engine):
        assert [i.product_id for i in engine.search("APPLE")] == [1, 4]

    def test_matches_category(self, engine):
        assert [i.product_id for i in engine.search("dairy")] == [3]

    def test_no_match(self, engine):
        assert engine.search("bread") == []


class TestStatistics:
    """Aggregate figures."""

    def test_statistics(self, engine):
        stats = engine.statistics()

        assert stats.item_count == 4
        assert stats.total_quantity == 32
        assert stats.per_category_counts == {"Fruits": 2, "Beverages": 1, "Dairy": 1}
        assert stats.low_count == 2
        assert stats.out_count == 1

    def test_empty_inventory(self):
        stats = QueryEngine(InventoryStore()).statistics()
        assert stats.item_count == 0
        assert stats.per_category_counts == {}
