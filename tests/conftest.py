"""
Shared fixtures for Stockroom tests.

Every test runs inside its own temporary directory with fresh global
configuration and logger instances.
"""

import json

import pytest

from stockroom.app import StockroomApplication
from stockroom.config import get_config_manager, reset_config_manager
from stockroom.services import ActionLog, InventoryStore, SalesLedger, SaleTransaction
from stockroom.storage import PersistenceGateway
from stockroom.utils import reset_loggers


@pytest.fixture(autouse=True)
def isolated_workdir(tmp_path, monkeypatch):
    """Run each test in a clean working directory."""
    monkeypatch.chdir(tmp_path)
    reset_loggers()
    reset_config_manager()
    yield tmp_path
    reset_loggers()
    reset_config_manager()


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path):
    return get_config_manager(str(tmp_path / "config"))


@pytest.fixture
def write_config(config):
    """Store overrides in app_config.json and reload them."""
    def _write(overrides):
        with open(config.config_file, 'w', encoding='utf-8') as f:
            json.dump(overrides, f)
        config.load_config()
        return config

    return _write


@pytest.fixture
def store():
    return InventoryStore()


@pytest.fixture
def gateway(data_dir):
    return PersistenceGateway(data_dir=str(data_dir))


@pytest.fixture
def action_log(data_dir):
    return ActionLog(str(data_dir / "history.log"))


@pytest.fixture
def ledger():
    return SalesLedger()


@pytest.fixture
def sales(store, ledger, gateway, action_log):
    return SaleTransaction(store, ledger, gateway, action_log)


@pytest.fixture
def app(config, data_dir):
    application = StockroomApplication(config, data_dir=str(data_dir))
    application.initialize()
    return application
