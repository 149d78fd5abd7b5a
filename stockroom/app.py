"""
Operation surface for Stockroom.

One method per operator action. Each validates through the store, persists
through the gateway, then records the action in the history.
"""

from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .config import ConfigManager
from .context import StockroomContext, create_context
from .exceptions import ItemNotFoundError, PersistenceWriteError
from .models import (
    ActionLogEntry,
    ActionType,
    HistorySummary,
    InventoryStatistics,
    ItemUpdate,
    LowStockReport,
    SaleResult,
    StockItem,
)
from .services.sales_service import SaleSession
from .utils import get_logger


class InventoryOverview(BaseModel):
    """Everything the "view all" screen shows."""

    items: List[StockItem] = Field(default_factory=list)
    statistics: InventoryStatistics
    ledger_total: Decimal = Decimal("0")


class HistoryView(BaseModel):
    """Summary plus the most recent history entries."""

    summary: HistorySummary
    recent: List[ActionLogEntry] = Field(default_factory=list)


class StockroomApplication:
    """Main application controller."""

    def __init__(self, config: ConfigManager, data_dir: Optional[str] = None) -> None:
        """
        Initialize the application.

        Args:
            config: Configuration manager
            data_dir: Overrides the configured data directory
        """
        self.config = config
        self.data_dir = data_dir
        self.logger = get_logger("app")
        self.context: Optional[StockroomContext] = None

    def initialize(self) -> StockroomContext:
        """
        Recover storage and load all state.

        Returns:
            The process context
        """
        self.logger.info("=" * 60)
        self.logger.info(f"Stockroom {self.config.get('app_version', '0.1.0')} starting")
        self.context = create_context(self.config, self.data_dir)
        return self.context

    @property
    def ctx(self) -> StockroomContext:
        if self.context is None:
            raise RuntimeError("Application not initialized")
        return self.context

    @property
    def categories(self) -> List[str]:
        return self.ctx.store.categories

    @property
    def ledger_total(self) -> Decimal:
        return self.ctx.ledger.total

    def _persist_inventory(self, snapshot: List[StockItem]) -> None:
        """Save the stock file; put memory back the way it was if that fails."""
        try:
            self.ctx.gateway.save_inventory(self.ctx.store.all())
        except PersistenceWriteError:
            self.ctx.store.restore(snapshot)
            raise

    # Sell

    def start_sale_session(self) -> SaleSession:
        """Begin a run of sales with its own subtotal."""
        return SaleSession()

    def sell(
        self,
        product_id: int,
        quantity: int,
        unit_price: Any,
        session: Optional[SaleSession] = None,
    ) -> SaleResult:
        """Record a sale. See SaleTransaction.sell."""
        return self.ctx.sales.sell(product_id, quantity, unit_price, session=session)

    # Add / restock

    def add_item(
        self,
        product_id: int,
        name: str,
        category: str,
        quantity: int = 0,
        last_price: Any = Decimal("0"),
    ) -> StockItem:
        """
        Add a new item and save the stock file.

        Returns:
            The new StockItem
        """
        snapshot = self.ctx.store.snapshot()
        item = self.ctx.store.add(product_id, name, category, quantity, last_price)
        self._persist_inventory(snapshot)
        self.ctx.action_log.append(
            ActionType.ADD,
            product_id=item.product_id,
            name=item.name,
            category=item.category,
            quantity=item.quantity,
        )
        return item

    def restock_item(self, product_id: int, extra_quantity: int) -> StockItem:
        """
        Add units to an existing item and save the stock file.

        Returns:
            The updated StockItem
        """
        snapshot = self.ctx.store.snapshot()
        item = self.ctx.store.restock(product_id, extra_quantity)
        self._persist_inventory(snapshot)
        self.ctx.action_log.append(
            ActionType.RESTOCK,
            product_id=item.product_id,
            name=item.name,
            added=extra_quantity,
            quantity=item.quantity,
        )
        return item

    # View

    def view_all(self) -> InventoryOverview:
        """All items with their statistics."""
        return InventoryOverview(
            items=self.ctx.store.all(),
            statistics=self.ctx.queries.statistics(),
            ledger_total=self.ctx.ledger.total,
        )

    def find_item(self, name: str) -> StockItem:
        """
        Look up an item by exact name (first match).

        Raises:
            ItemNotFoundError: If no item has this name
        """
        matches = self.ctx.store.find_by_name(name.strip())
        if not matches:
            raise ItemNotFoundError(name)
        return matches[0]

    # Update

    def update_item(self, product_id: int, changes: ItemUpdate) -> StockItem:
        """
        Change fields of an item and save the stock file.

        Returns:
            The updated StockItem
        """
        before = self.ctx.store.get(product_id)
        snapshot = self.ctx.store.snapshot()
        item = self.ctx.store.update(product_id, changes)
        self._persist_inventory(snapshot)
        fields = ", ".join(sorted(changes.changed_fields())) or "nothing"
        self.ctx.action_log.append(
            ActionType.UPDATE,
            product_id=before.product_id,
            name=before.name,
            fields=fields,
            new_product_id=item.product_id,
        )
        return item

    # Delete

    def delete_item(self, product_id: int) -> StockItem:
        """
        Remove an item and save the stock file. Confirmation is the caller's job.

        Returns:
            The removed StockItem
        """
        snapshot = self.ctx.store.snapshot()
        item = self.ctx.store.remove(product_id)
        self._persist_inventory(snapshot)
        self.ctx.action_log.append(
            ActionType.DELETE,
            product_id=item.product_id,
            name=item.name,
            quantity=item.quantity,
        )
        return item

    # Queries

    def search(self, term: str) -> List[StockItem]:
        """Items whose name or category contains ``term``."""
        return self.ctx.queries.search(term)

    def low_stock_alert(self, threshold: Optional[int] = None) -> LowStockReport:
        """Out-of-stock and low-stock items for the given threshold."""
        return self.ctx.queries.low_stock_alert(threshold)

    def stock_status(self, item: StockItem, threshold: Optional[int] = None) -> str:
        """OUT / LOW / OK label for an item."""
        return self.ctx.queries.stock_status(item, threshold)

    def view_history(self, limit: Optional[int] = None) -> HistoryView:
        """
        History summary and recent entries.

        Args:
            limit: Number of recent entries (default ``history.recent_limit``)
        """
        if limit is None:
            limit = self.config.get("history.recent_limit", 20)
        return HistoryView(
            summary=self.ctx.action_log.summary(),
            recent=self.ctx.action_log.recent(limit),
        )

    # Exit

    def exit(self) -> int:
        """
        Save everything and record the exit.

        Returns:
            Process exit status (0)

        Raises:
            PersistenceWriteError: If the final save fails
        """
        self.ctx.gateway.commit(self.ctx.store.all(), self.ctx.ledger.total)
        self.ctx.action_log.record_system_event("Program exited successfully")
        self.logger.info("Data saved; exiting")
        return 0
