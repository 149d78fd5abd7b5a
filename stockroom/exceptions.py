"""
Typed exception hierarchy for Stockroom.

Every error carries a machine-readable ``code`` and the structured values
that caused it, so callers catch by type instead of matching messages.

    StockroomError
    |
    +-- InventoryValidationError
    |   +-- DuplicateProductIdError
    |   +-- InvalidProductIdError
    |   +-- EmptyNameError
    |   +-- InvalidNameError
    |   +-- UnknownCategoryError
    |   +-- InvalidQuantityError
    |   +-- InvalidPriceError
    |
    +-- ItemNotFoundError
    +-- InsufficientStockError
    |
    +-- PersistenceError
    |   +-- PersistenceReadError
    |   +-- PersistenceWriteError
    |
    +-- StateInconsistencyError
    +-- InputClosedError
"""

from pathlib import Path
from typing import Any, Optional, Sequence


class StockroomError(Exception):
    """Base exception for all Stockroom errors."""

    code: str = "STOCKROOM_ERROR"


# Validation errors: always raised before any state is touched


class InventoryValidationError(StockroomError):
    """Base exception for rejected field values."""

    code: str = "VALIDATION_ERROR"


class DuplicateProductIdError(InventoryValidationError):
    """Product ID is already used by another item."""

    code: str = "DUPLICATE_ID"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product ID {product_id} is already in use")


class InvalidProductIdError(InventoryValidationError):
    """Product ID is not a positive integer."""

    code: str = "INVALID_PRODUCT_ID"

    def __init__(self, product_id: Any):
        self.product_id = product_id
        super().__init__(f"Product ID must be a positive integer, got {product_id!r}")


class EmptyNameError(InventoryValidationError):
    """Item name is blank."""

    code: str = "EMPTY_NAME"

    def __init__(self):
        super().__init__("Item name cannot be empty")


class InvalidNameError(InventoryValidationError):
    """Item name cannot be stored on a single line."""

    code: str = "INVALID_NAME"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Item name must not contain line breaks: {name!r}")


class UnknownCategoryError(InventoryValidationError):
    """Category is not one of the configured categories."""

    code: str = "UNKNOWN_CATEGORY"

    def __init__(self, category: Any, allowed: Sequence[str]):
        self.category = category
        self.allowed = list(allowed)
        super().__init__(
            f"Unknown category {category!r}. Must be one of: {', '.join(self.allowed)}"
        )


class InvalidQuantityError(InventoryValidationError):
    """Quantity is negative, zero where a positive amount is required, or not a whole number."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: Any, reason: str = "must be a non-negative integer"):
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Invalid quantity {quantity!r}: {reason}")


class InvalidPriceError(InventoryValidationError):
    """Price is negative or not a number."""

    code: str = "INVALID_PRICE"

    def __init__(self, price: Any):
        self.price = price
        super().__init__(f"Invalid price {price!r}: must be a non-negative number")


# Lookup and stock errors


class ItemNotFoundError(StockroomError):
    """No item matches the given reference."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, reference: Any):
        self.reference = reference
        super().__init__(f"Item {reference!r} not found")


class InsufficientStockError(StockroomError):
    """Sale quantity exceeds what is on hand."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot sell {requested} of item {product_id}: only {available} available"
        )


# Persistence errors


class PersistenceError(StockroomError):
    """Base exception for durable storage failures."""

    code: str = "PERSISTENCE_ERROR"


class PersistenceReadError(PersistenceError):
    """A durable artifact exists but cannot be read or trusted."""

    code: str = "PERSISTENCE_READ_FAILED"

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read {self.path}: {reason}")


class PersistenceWriteError(PersistenceError):
    """
    A durable artifact could not be written, even after retrying.

    ``committed`` is True when the failure happened after the write-ahead
    journal was in place: the change is durable and will be replayed on the
    next start, but the artifacts themselves are not yet up to date.
    """

    code: str = "PERSISTENCE_WRITE_FAILED"

    def __init__(self, path: Path, cause: Optional[BaseException] = None, committed: bool = False):
        self.path = Path(path)
        self.cause = cause
        self.committed = committed
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to write {self.path}{detail}")


class StateInconsistencyError(StockroomError):
    """Startup found evidence of a partial write that cannot be resolved safely."""

    code: str = "STATE_INCONSISTENCY"

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(
            f"Inconsistent stored state ({self.path}): {reason}. "
            "Manual intervention required."
        )


class InputClosedError(StockroomError):
    """Interactive input reached end of file."""

    code: str = "INPUT_CLOSED"

    def __init__(self):
        super().__init__("Input stream closed")
