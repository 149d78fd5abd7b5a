"""
Process-owned context for Stockroom.

Bundles every component the operations need, so nothing relies on
module-level state.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import ConfigManager
from .services.action_log_service import ActionLog
from .services.inventory_service import InventoryStore
from .services.query_service import QueryEngine
from .services.sales_service import SalesLedger, SaleTransaction
from .storage import PersistenceGateway, RecoveryAction
from .utils import get_logger


@dataclass
class StockroomContext:
    """All components of one running Stockroom process."""

    config: ConfigManager
    store: InventoryStore
    ledger: SalesLedger
    gateway: PersistenceGateway
    action_log: ActionLog
    sales: SaleTransaction
    queries: QueryEngine
    recovery: RecoveryAction = RecoveryAction.NONE


def create_context(config: ConfigManager, data_dir: Optional[str] = None) -> StockroomContext:
    """
    Build the context: recover storage, then load inventory, ledger and history.

    Args:
        config: Configuration manager
        data_dir: Overrides ``storage.data_dir`` when given

    Returns:
        Ready-to-use StockroomContext

    Raises:
        StateInconsistencyError: If storage cannot be brought to a committed state
        PersistenceReadError: If the ledger or stock file cannot be read
    """
    logger = get_logger("context")
    categories = config.get_categories()
    base_dir = Path(data_dir) if data_dir else config.get_data_dir()

    gateway = PersistenceGateway(
        data_dir=str(base_dir),
        inventory_file=config.get("storage.inventory_file", "stock.dat"),
        ledger_file=config.get("storage.ledger_file", "grand_total.dat"),
        journal_file=config.get("storage.journal_file", "stock.journal"),
        categories=categories,
        write_retries=config.get("storage.write_retries", 1),
    )
    action_log = ActionLog(str(base_dir / config.get("storage.history_file", "history.log")))
    action_log.load()

    recovery = gateway.recover()
    if recovery == RecoveryAction.REPLAYED:
        action_log.record_system_event("Recovered interrupted save from journal")
    elif recovery == RecoveryAction.DISCARDED:
        action_log.record_system_event("Discarded unfinished save")

    store = InventoryStore(categories)
    store.load(gateway.load_inventory())
    ledger = SalesLedger(gateway.load_ledger_total())

    context = StockroomContext(
        config=config,
        store=store,
        ledger=ledger,
        gateway=gateway,
        action_log=action_log,
        sales=SaleTransaction(store, ledger, gateway, action_log),
        queries=QueryEngine(store, config.get("inventory.low_stock_threshold", 15)),
        recovery=recovery,
    )

    action_log.record_system_event(f"Stock data loaded successfully ({len(store)} items)")
    logger.info(f"Context ready: {len(store)} items, ledger total {ledger.total}")
    return context
