"""
Tests for the application operations: persistence, history and restart.
"""

import hashlib
import json
from decimal import Decimal

import pytest

from stockroom.app import StockroomApplication
from stockroom.exceptions import (
    ItemNotFoundError,
    PersistenceWriteError,
    StateInconsistencyError,
)
from stockroom.models import ActionType, ItemUpdate
from stockroom.storage import RecoveryAction


def restart(config, data_dir):
    app = StockroomApplication(config, data_dir=str(data_dir))
    app.initialize()
    return app


class TestStartup:
    """Initialization against the data directory."""

    def test_fresh_start(self, app):
        assert len(app.ctx.store) == 0
        assert app.ledger_total == Decimal("0")
        assert app.ctx.recovery == RecoveryAction.NONE
        assert app.ctx.action_log.recent(1)[0].message == "Stock data loaded successfully (0 items)"

    def test_uses_configured_categories(self, write_config, data_dir):
        config = write_config({"inventory": {"categories": ["Tools", "Paint"]}})
        app = restart(config, data_dir)
        assert app.categories == ["Tools", "Paint"]

    def test_uses_configured_threshold(self, write_config, data_dir):
        config = write_config({"inventory": {"low_stock_threshold": 5}})
        app = restart(config, data_dir)
        app.add_item(1, "Nails", "Other", 6)
        assert app.low_stock_alert().low_stock == []

    def test_replays_interrupted_commit(self, config, data_dir):
        inventory = "101\nApple\nFruits\n40\n2.00\n1700000000\n"
        ledger = "20.00\n"
        checksum = hashlib.sha256(f"{inventory}\0{ledger}".encode("utf-8")).hexdigest()
        (data_dir / "stock.journal").write_text(json.dumps({
            "version": 1, "inventory": inventory, "ledger": ledger, "checksum": checksum,
        }))

        app = restart(config, data_dir)

        assert app.ctx.recovery == RecoveryAction.REPLAYED
        assert app.ctx.store.get(101).quantity == 40
        assert app.ledger_total == Decimal("20.00")
        messages = [e.message for e in app.ctx.action_log.all()]
        assert "Recovered interrupted save from journal" in messages

    def test_refuses_corrupt_journal(self, config, data_dir):
        (data_dir / "stock.journal").write_text("garbage")
        app = StockroomApplication(config, data_dir=str(data_dir))
        with pytest.raises(StateInconsistencyError):
            app.initialize()

    def test_uninitialized_app(self, config):
        with pytest.raises(RuntimeError):
            StockroomApplication(config).ctx


class TestOperations:
    """Each operation persists and is recorded."""

    def test_add_item_persists_and_logs(self, app, config, data_dir):
        app.add_item(101, "Apple", "Fruits", 50, "0.40")

        entry = app.ctx.action_log.recent(1)[0]
        assert entry.action_type == ActionType.ADD
        assert entry.message == "Added Apple (ID: 101, Category: Fruits, Qty: 50)"

        reloaded = restart(config, data_dir)
        assert reloaded.ctx.store.get(101).last_price == Decimal("0.40")

    def test_unusual_name_survives_restart(self, app, config, data_dir):
        app.add_item(1, "Crisps\x0cSalted", "Snacks", 5)
        app.add_item(2, "Line\u2028Sep", "Snacks", 2)
        app.add_item(3, "Milk", "Dairy", 3)
        history_before = len(app.ctx.action_log)

        reloaded = restart(config, data_dir)

        assert [i.name for i in reloaded.ctx.store.all()] == ["Crisps\x0cSalted", "Line\u2028Sep", "Milk"]
        # Previous entries plus the new startup event
        assert len(reloaded.ctx.action_log) == history_before + 1

    def test_restock(self, app, config, data_dir):
        app.add_item(101, "Apple", "Fruits", 50)
        item = app.restock_item(101, 25)

        assert item.quantity == 75
        assert app.ctx.action_log.recent(1)[0].message == "Added 25 units to Apple (New total: 75)"
        assert restart(config, data_dir).ctx.store.get(101).quantity == 75

    def test_update_item(self, app, config, data_dir):
        app.add_item(101, "Apple", "Fruits", 50)
        app.update_item(101, ItemUpdate(product_id=202, quantity=3))

        entry = app.ctx.action_log.recent(1)[0]
        assert entry.action_type == ActionType.UPDATE
        assert entry.message == "Apple (ID:101) -> Updated product_id, quantity"

        reloaded = restart(config, data_dir)
        assert 101 not in reloaded.ctx.store
        assert reloaded.ctx.store.get(202).quantity == 3

    def test_delete_item(self, app, config, data_dir):
        app.add_item(101, "Apple", "Fruits", 5)
        app.add_item(102, "Pear", "Fruits", 0)
        app.delete_item(101)

        assert app.ctx.action_log.recent(1)[0].message == "Removed Apple (ID: 101, Had 5 units)"
        assert [i.product_id for i in restart(config, data_dir).ctx.store.all()] == [102]

    def test_find_item_by_exact_name(self, app):
        app.add_item(1, "Apple", "Fruits")
        app.add_item(2, "Apple", "Fruits")
        assert app.find_item(" Apple ").product_id == 1
        with pytest.raises(ItemNotFoundError):
            app.find_item("apple")

    def test_failed_save_rolls_back(self, app, monkeypatch):
        app.add_item(1, "Apple", "Fruits", 5)
        entries_before = len(app.ctx.action_log)

        def broken_save(items):
            raise PersistenceWriteError(app.ctx.gateway.inventory_path, OSError("disk full"))

        monkeypatch.setattr(app.ctx.gateway, "save_inventory", broken_save)

        with pytest.raises(PersistenceWriteError):
            app.add_item(2, "Pear", "Fruits", 1)
        with pytest.raises(PersistenceWriteError):
            app.delete_item(1)

        assert [i.product_id for i in app.ctx.store.all()] == [1]
        assert len(app.ctx.action_log) == entries_before

    def test_view_all(self, app):
        app.add_item(1, "Apple", "Fruits", 0)
        app.add_item(2, "Milk", "Dairy", 40)
        overview = app.view_all()

        assert [i.product_id for i in overview.items] == [1, 2]
        assert overview.statistics.out_count == 1
        assert overview.ledger_total == Decimal("0")

    def test_view_history_limit(self, app, write_config):
        write_config({"history": {"recent_limit": 2}})
        for n in range(3):
            app.add_item(n + 1, f"Item {n}", "Other")

        view = app.view_history()
        assert len(view.recent) == 2
        assert view.summary.additions == 3
        assert len(app.view_history(limit=10).recent) == 4


class TestSalesAndExit:
    """Sales through the application and a clean shutdown."""

    def test_sale_survives_restart(self, app, config, data_dir):
        app.add_item(101, "Apple", "Fruits", 50)
        session = app.start_sale_session()
        app.sell(101, 10, "2.00", session=session)

        assert session.summary().sales_count == 1

        reloaded = restart(config, data_dir)
        assert reloaded.ctx.store.get(101).quantity == 40
        assert reloaded.ledger_total == Decimal("20.00")

    def test_exit_saves_and_records(self, app, data_dir):
        app.add_item(101, "Apple", "Fruits", 50)

        assert app.exit() == 0
        assert (data_dir / "grand_total.dat").read_text().strip() == "0"
        assert app.ctx.action_log.recent(1)[0].message == "Program exited successfully"
        assert not (data_dir / "stock.journal").exists()

    def test_history_persists_across_restarts(self, app, config, data_dir):
        app.add_item(101, "Apple", "Fruits", 50)
        app.exit()

        reloaded = restart(config, data_dir)
        kinds = [e.action_type for e in reloaded.ctx.action_log.all()]
        assert kinds == [
            ActionType.SYSTEM_EVENT,
            ActionType.ADD,
            ActionType.SYSTEM_EVENT,
            ActionType.SYSTEM_EVENT,
        ]
