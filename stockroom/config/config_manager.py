"""
Configuration management for Stockroom.

Handles application settings: storage locations, the category list,
the low-stock threshold and logging options.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.inventory import DEFAULT_CATEGORIES


class ConfigManager:
    """
    Manages application configuration and settings.

    Settings are kept in a JSON file and merged over built-in defaults, so a
    config file written by an older version still gets new keys.
    """

    def __init__(self, config_dir: str = "config") -> None:
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory for configuration files
        """
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "app_config.json"

        # In-memory configuration
        self.config: Dict[str, Any] = {}

        self.load_config()

    def load_config(self) -> None:
        """Load configuration from file, writing defaults on first run."""
        if self.config_file.exists():
            with open(self.config_file, 'r', encoding='utf-8') as f:
                stored = json.load(f)
            self.config = self._merge(self._get_default_config(), stored)
        else:
            self.config = self._get_default_config()
            self.save_config()

    def save_config(self) -> None:
        """Save configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self.config, f, indent=2)

    @staticmethod
    def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively overlay ``override`` on ``base``."""
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = ConfigManager._merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app_version": "0.1.0",
            "storage": {
                "data_dir": ".",
                "inventory_file": "stock.dat",
                "ledger_file": "grand_total.dat",
                "history_file": "history.log",
                "journal_file": "stock.journal",
                "write_retries": 1
            },
            "inventory": {
                "categories": list(DEFAULT_CATEGORIES),
                "low_stock_threshold": 15
            },
            "history": {
                "recent_limit": 20
            },
            "logging": {
                "level": "INFO",
                "console_level": "WARNING",
                "log_dir": "logs",
                "max_file_size_mb": 5,
                "backup_count": 3
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key (supports dot notation, e.g., "storage.data_dir")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_categories(self) -> List[str]:
        """
        Get the configured category list.

        Returns:
            Category names in menu order
        """
        categories = self.get("inventory.categories") or list(DEFAULT_CATEGORIES)
        return [str(c) for c in categories]

    def get_data_dir(self) -> Path:
        """
        Get the directory holding the stock, ledger and history files.

        Returns:
            Data directory path
        """
        return Path(self.get("storage.data_dir", "."))


# Global configuration instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[str] = None) -> ConfigManager:
    """
    Get global configuration manager instance.

    Args:
        config_dir: Configuration directory, only used on first call

    Returns:
        ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_dir or "config")
    return _config_manager


def reset_config_manager() -> None:
    """Reset global configuration manager (mainly for testing)."""
    global _config_manager
    _config_manager = None
