"""
Data models for Stockroom.

This module exports all data models for easy import.
"""

from .audit_log import (
    ActionLogEntry,
    ActionType,
    HistorySummary,
    create_action_entry,
)
from .inventory import (
    DEFAULT_CATEGORIES,
    FieldParseResult,
    InventoryStatistics,
    ItemUpdate,
    LowStockReport,
    StockItem,
)
from .sales import (
    SaleResult,
    SaleSessionSummary,
)

__all__ = [
    # Inventory models
    "DEFAULT_CATEGORIES",
    "StockItem",
    "ItemUpdate",
    "LowStockReport",
    "InventoryStatistics",
    "FieldParseResult",
    # Sales models
    "SaleResult",
    "SaleSessionSummary",
    # Action log models
    "ActionLogEntry",
    "ActionType",
    "HistorySummary",
    "create_action_entry",
]
