"""
Services for Stockroom.
"""

from .action_log_service import ActionLog
from .inventory_service import InventoryStore
from .query_service import QueryEngine
from .sales_service import SaleSession, SaleTransaction, SalesLedger

__all__ = [
    "ActionLog",
    "InventoryStore",
    "QueryEngine",
    "SaleSession",
    "SaleTransaction",
    "SalesLedger",
]
