"""
Inventory store for stock records.

Owns the ordered collection of StockItems and enforces its invariants:
unique positive IDs, non-negative quantities and prices, known categories.
Items are immutable; every mutation replaces the item in its slot.
"""

from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from ..exceptions import (
    DuplicateProductIdError,
    EmptyNameError,
    InvalidNameError,
    InvalidPriceError,
    InvalidProductIdError,
    InvalidQuantityError,
    ItemNotFoundError,
    UnknownCategoryError,
)
from ..models import DEFAULT_CATEGORIES, ItemUpdate, StockItem
from ..utils import get_logger, to_decimal


class InventoryStore:
    """In-memory collection of stock items with invariant checks."""

    def __init__(self, categories: Optional[Sequence[str]] = None) -> None:
        """
        Initialize inventory store.

        Args:
            categories: Allowed categories (defaults to the built-in list)
        """
        self.categories: List[str] = list(categories or DEFAULT_CATEGORIES)
        self._items: List[StockItem] = []
        self.logger = get_logger("inventory_store")

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, product_id: object) -> bool:
        return self._index_of(product_id) is not None

    # Validation helpers

    def _index_of(self, product_id: object) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.product_id == product_id:
                return index
        return None

    def _require_index(self, product_id: int) -> int:
        index = self._index_of(product_id)
        if index is None:
            raise ItemNotFoundError(product_id)
        return index

    def _check_product_id(self, product_id: Any, exclude_index: Optional[int] = None) -> int:
        if isinstance(product_id, bool) or not isinstance(product_id, int) or product_id <= 0:
            raise InvalidProductIdError(product_id)
        for index, item in enumerate(self._items):
            if index != exclude_index and item.product_id == product_id:
                raise DuplicateProductIdError(product_id)
        return product_id

    @staticmethod
    def _check_name(name: Any) -> str:
        if not isinstance(name, str) or not name.strip():
            raise EmptyNameError()
        name = name.strip()
        if '\n' in name or '\r' in name:
            raise InvalidNameError(name)
        return name

    def _check_category(self, category: Any) -> str:
        if category not in self.categories:
            raise UnknownCategoryError(category, self.categories)
        return category

    @staticmethod
    def _check_quantity(quantity: Any) -> int:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise InvalidQuantityError(quantity)
        return quantity

    @staticmethod
    def _check_price(price: Any) -> Decimal:
        value = to_decimal(price)
        if value is None or value < 0:
            raise InvalidPriceError(price)
        return value

    def _warn_duplicate_name(self, name: str, exclude_index: Optional[int] = None) -> None:
        for index, item in enumerate(self._items):
            if index != exclude_index and item.name == name:
                self.logger.warning(
                    f"Item name '{name}' is also used by product {item.product_id}"
                )
                return

    # Mutations

    def add(
        self,
        product_id: int,
        name: str,
        category: str,
        quantity: int = 0,
        last_price: Any = Decimal("0"),
    ) -> StockItem:
        """
        Add a new item at the end of the store.

        Args:
            product_id: Unique positive ID
            name: Item name
            category: One of the configured categories
            quantity: Initial quantity
            last_price: Initial price

        Returns:
            The stored StockItem

        Raises:
            InventoryValidationError: If any field is rejected
        """
        product_id = self._check_product_id(product_id)
        name = self._check_name(name)
        category = self._check_category(category)
        quantity = self._check_quantity(quantity)
        price = self._check_price(last_price)

        self._warn_duplicate_name(name)

        item = StockItem(
            product_id=product_id,
            name=name,
            category=category,
            quantity=quantity,
            last_price=price,
        )
        self._items.append(item)
        self.logger.debug(f"Added item {item.product_id} ({item.name})")
        return item

    def restock(self, product_id: int, extra_quantity: int) -> StockItem:
        """
        Increase an item's quantity.

        Args:
            product_id: Item to restock
            extra_quantity: Units to add (0 or more)

        Returns:
            The updated StockItem
        """
        extra_quantity = self._check_quantity(extra_quantity)
        index = self._require_index(product_id)
        item = self._items[index]
        updated = item.model_copy(update={"quantity": item.quantity + extra_quantity})
        self._items[index] = updated
        return updated

    def update(self, product_id: int, changes: ItemUpdate) -> StockItem:
        """
        Apply the supplied fields to an item.

        All supplied fields are validated before any is applied.

        Args:
            product_id: Item to update
            changes: Fields to change; unset fields are left untouched

        Returns:
            The updated StockItem
        """
        index = self._require_index(product_id)
        fields = changes.changed_fields()
        validated = {}

        if "product_id" in fields:
            validated["product_id"] = self._check_product_id(fields["product_id"], exclude_index=index)
        if "name" in fields:
            validated["name"] = self._check_name(fields["name"])
            self._warn_duplicate_name(validated["name"], exclude_index=index)
        if "category" in fields:
            validated["category"] = self._check_category(fields["category"])
        if "quantity" in fields:
            validated["quantity"] = self._check_quantity(fields["quantity"])
        if "last_price" in fields:
            validated["last_price"] = self._check_price(fields["last_price"])

        updated = self._items[index].model_copy(update=validated)
        self._items[index] = updated
        return updated

    def remove(self, product_id: int) -> StockItem:
        """
        Remove an item.

        Args:
            product_id: Item to remove

        Returns:
            The removed StockItem
        """
        index = self._require_index(product_id)
        return self._items.pop(index)

    def apply_sale(self, product_id: int, quantity: int, unit_price: Decimal) -> StockItem:
        """
        Decrement stock and record the sale price.

        Preconditions are checked by the sale transaction; this only guards
        the store invariants.

        Returns:
            The updated StockItem
        """
        index = self._require_index(product_id)
        item = self._items[index]
        if quantity <= 0 or quantity > item.quantity:
            raise InvalidQuantityError(quantity, f"must be between 1 and {item.quantity}")
        price = self._check_price(unit_price)
        updated = item.model_copy(
            update={"quantity": item.quantity - quantity, "last_price": price}
        )
        self._items[index] = updated
        return updated

    def load(self, items: Iterable[StockItem]) -> None:
        """
        Replace the store contents with items read from storage.

        Raises:
            InventoryValidationError: If the items break an invariant
        """
        previous = self._items
        self._items = []
        try:
            for item in items:
                self._check_product_id(item.product_id)
                self._check_category(item.category)
                self._items.append(item)
        except Exception:
            self._items = previous
            raise

    def snapshot(self) -> List[StockItem]:
        """Capture the current contents for a later restore."""
        return list(self._items)

    def restore(self, snapshot: List[StockItem]) -> None:
        """Put back contents captured by snapshot()."""
        self._items = list(snapshot)

    # Queries

    def get(self, product_id: int) -> StockItem:
        """
        Get an item by ID.

        Raises:
            ItemNotFoundError: If no item has this ID
        """
        return self._items[self._require_index(product_id)]

    def find(self, product_id: int) -> Optional[StockItem]:
        """Get an item by ID, or None."""
        index = self._index_of(product_id)
        return self._items[index] if index is not None else None

    def find_by_name(self, name: str) -> List[StockItem]:
        """Items whose name matches exactly, in store order."""
        return [item for item in self._items if item.name == name]

    def find_by_text(self, text: str, case_insensitive: bool = True) -> List[StockItem]:
        """Items whose name contains ``text``, in store order."""
        if case_insensitive:
            needle = text.lower()
            return [item for item in self._items if needle in item.name.lower()]
        return [item for item in self._items if text in item.name]

    def all(self) -> List[StockItem]:
        """All items in store order, as a new list."""
        return list(self._items)
