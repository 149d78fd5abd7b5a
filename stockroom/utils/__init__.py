"""
Utility functions for Stockroom.
"""

from .field_parsing import (
    parse_category_field,
    parse_int_field,
    parse_item_update,
    parse_price_field,
    parse_text_field,
    to_decimal,
)
from .logger import (
    StockroomLogger,
    get_logger,
    reset_loggers,
)

__all__ = [
    # Field parsing
    "to_decimal",
    "parse_int_field",
    "parse_price_field",
    "parse_category_field",
    "parse_text_field",
    "parse_item_update",
    # Logging
    "StockroomLogger",
    "get_logger",
    "reset_loggers",
]
