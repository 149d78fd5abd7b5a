"""
Tests for configuration management.
"""

import json

from stockroom.config import ConfigManager, get_config_manager, reset_config_manager
from stockroom.models import DEFAULT_CATEGORIES


class TestConfigManager:
    """JSON-backed settings with dot-notation access."""

    def test_first_run_writes_defaults(self, tmp_path):
        config = ConfigManager(str(tmp_path / "cfg"))

        stored = json.loads((tmp_path / "cfg" / "app_config.json").read_text())
        assert stored["storage"]["inventory_file"] == "stock.dat"
        assert config.get("inventory.low_stock_threshold") == 15
        assert config.get_categories() == DEFAULT_CATEGORIES

    def test_get_with_default(self, tmp_path):
        config = ConfigManager(str(tmp_path / "cfg"))
        assert config.get("storage.missing", "fallback") == "fallback"
        assert config.get("storage.data_dir.deeper", 7) == 7

    def test_stored_values_survive_reload(self, tmp_path):
        cfg = tmp_path / "cfg"
        ConfigManager(str(cfg))
        stored = json.loads((cfg / "app_config.json").read_text())
        stored["history"]["recent_limit"] = 50
        (cfg / "app_config.json").write_text(json.dumps(stored))

        assert ConfigManager(str(cfg)).get("history.recent_limit") == 50

    def test_partial_file_is_merged_with_defaults(self, tmp_path):
        cfg = tmp_path / "cfg"
        cfg.mkdir()
        (cfg / "app_config.json").write_text(json.dumps({"storage": {"data_dir": "shop"}}))

        config = ConfigManager(str(cfg))

        assert str(config.get_data_dir()) == "shop"
        assert config.get("storage.ledger_file") == "grand_total.dat"
        assert config.get("logging.backup_count") == 3

    def test_empty_category_list_falls_back_to_defaults(self, write_config):
        config = write_config({"inventory": {"categories": []}})
        assert config.get_categories() == DEFAULT_CATEGORIES

    def test_global_instance(self, tmp_path):
        first = get_config_manager(str(tmp_path / "cfg"))
        assert get_config_manager() is first
        reset_config_manager()
        assert get_config_manager(str(tmp_path / "other")) is not first
