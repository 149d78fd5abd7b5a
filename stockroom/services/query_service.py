"""
Query service: read-only views over the inventory.
"""

from typing import Dict, List, Optional

from ..exceptions import InvalidQuantityError
from ..models import InventoryStatistics, LowStockReport, StockItem
from .inventory_service import InventoryStore

DEFAULT_LOW_STOCK_THRESHOLD = 15


class QueryEngine:
    """Search, low-stock partitioning and statistics. Never mutates the store."""

    def __init__(
        self,
        store: InventoryStore,
        default_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        """
        Initialize query engine.

        Args:
            store: Inventory store to read from
            default_threshold: Low-stock threshold used when none is given
        """
        self.store = store
        self.default_threshold = self._check_threshold(default_threshold)

    @staticmethod
    def _check_threshold(threshold: int) -> int:
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
            raise InvalidQuantityError(threshold, "threshold must be a non-negative integer")
        return threshold

    def _resolve(self, threshold: Optional[int]) -> int:
        if threshold is None:
            return self.default_threshold
        return self._check_threshold(threshold)

    def search(self, term: str) -> List[StockItem]:
        """
        Case-insensitive substring search on name or category.

        Args:
            term: Text to look for

        Returns:
            Matching items in store order
        """
        needle = term.strip().lower()
        return [
            item for item in self.store.all()
            if needle in item.name.lower() or needle in item.category.lower()
        ]

    def low_stock_alert(self, threshold: Optional[int] = None) -> LowStockReport:
        """
        Partition items into out-of-stock and low-stock.

        Items with quantity 0 are out of stock; items with
        ``0 < quantity < threshold`` are low; the rest appear in neither.

        Args:
            threshold: Low-stock boundary for this call (default from config)

        Returns:
            LowStockReport
        """
        threshold = self._resolve(threshold)
        out_of_stock = []
        low_stock = []
        for item in self.store.all():
            if item.quantity == 0:
                out_of_stock.append(item)
            elif item.quantity < threshold:
                low_stock.append(item)
        return LowStockReport(threshold=threshold, out_of_stock=out_of_stock, low_stock=low_stock)

    def stock_status(self, item: StockItem, threshold: Optional[int] = None) -> str:
        """Status label for tables: OUT, LOW or OK."""
        threshold = self._resolve(threshold)
        if item.quantity == 0:
            return "OUT"
        if item.quantity < threshold:
            return "LOW"
        return "OK"

    def statistics(self, threshold: Optional[int] = None) -> InventoryStatistics:
        """
        Aggregate figures over the current inventory.

        Args:
            threshold: Low-stock boundary (default from config)

        Returns:
            InventoryStatistics
        """
        report = self.low_stock_alert(threshold)
        items = self.store.all()
        per_category: Dict[str, int] = {}
        for item in items:
            per_category[item.category] = per_category.get(item.category, 0) + 1

        return InventoryStatistics(
            item_count=len(items),
            total_quantity=sum(item.quantity for item in items),
            per_category_counts=per_category,
            low_count=len(report.low_stock),
            out_count=len(report.out_of_stock),
            threshold=report.threshold,
        )
