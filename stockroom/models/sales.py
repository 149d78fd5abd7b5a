"""
Sales data models.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class SaleResult(BaseModel):
    """Outcome of one recorded sale."""

    product_id: int
    name: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    line_total: Decimal = Field(..., ge=0)
    remaining_quantity: int = Field(..., ge=0)
    ledger_total: Decimal = Field(..., ge=0)
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "product_id": 101,
                "name": "Apple",
                "quantity": 10,
                "unit_price": "2.00",
                "line_total": "20.00",
                "remaining_quantity": 40,
                "ledger_total": "20.00"
            }
        }


class SaleSessionSummary(BaseModel):
    """Running figures for one sale session."""

    sales_count: int = 0
    subtotal: Decimal = Decimal("0")
