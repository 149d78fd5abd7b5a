"""
Inventory data models.

Defines stock records and the read-only views derived from them.
"""

import time
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


DEFAULT_CATEGORIES = [
    "Fruits",
    "Vegetables",
    "Snacks",
    "Beverages",
    "Dairy",
    "Meat",
    "Bakery",
    "Frozen Foods",
    "Other",
]


class StockItem(BaseModel):
    """Represents a single stock record."""

    product_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    quantity: int = Field(default=0, ge=0)
    last_price: Decimal = Field(default=Decimal("0"), ge=0)
    date_added: int = Field(default_factory=lambda: int(time.time()), ge=0)

    @field_validator('name', 'category')
    @classmethod
    def validate_single_line(cls, v: str) -> str:
        """Each text field occupies exactly one line in the stock file."""
        if '\n' in v or '\r' in v:
            raise ValueError('must not contain line breaks')
        return v

    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "product_id": 101,
                "name": "Apple",
                "category": "Fruits",
                "quantity": 50,
                "last_price": "2.00",
                "date_added": 1760710991
            }
        }


class ItemUpdate(BaseModel):
    """Partial set of fields to change on an existing item. ``None`` means keep."""

    product_id: Optional[int] = None
    name: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[int] = None
    last_price: Optional[Decimal] = None

    def changed_fields(self) -> Dict[str, Any]:
        """Return only the fields that were supplied."""
        return {k: v for k, v in self.model_dump().items() if v is not None}

    def is_empty(self) -> bool:
        """True when no field was supplied."""
        return not self.changed_fields()


class LowStockReport(BaseModel):
    """Partition of the inventory by stock level."""

    threshold: int = Field(..., ge=0)
    out_of_stock: List[StockItem] = Field(default_factory=list)
    low_stock: List[StockItem] = Field(default_factory=list)

    def has_alerts(self) -> bool:
        """True when any item is out of stock or below the threshold."""
        return bool(self.out_of_stock or self.low_stock)


class InventoryStatistics(BaseModel):
    """Aggregate figures over the current inventory."""

    item_count: int = 0
    total_quantity: int = 0
    per_category_counts: Dict[str, int] = Field(default_factory=dict)
    low_count: int = 0
    out_count: int = 0
    threshold: int = 15


class FieldParseResult(BaseModel):
    """Outcome of parsing one operator-supplied field."""

    field: str
    raw: str = ""
    value: Optional[Any] = None
    error: Optional[str] = None
    supplied: bool = True

    @property
    def ok(self) -> bool:
        """True when the field parsed (or was left blank)."""
        return self.error is None
