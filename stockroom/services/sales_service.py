"""
Sales service: the revenue ledger and the sale transaction.

A sale is the one operation that changes inventory, ledger and history
together. It validates first, mutates memory, commits both files through the
persistence gateway, and only then writes the history entry.
"""

from decimal import Decimal
from typing import Any, Optional

from ..exceptions import (
    InsufficientStockError,
    InvalidPriceError,
    InvalidQuantityError,
    PersistenceWriteError,
)
from ..models import ActionType, SaleResult, SaleSessionSummary
from ..storage import PersistenceGateway
from ..utils import get_logger, to_decimal
from .action_log_service import ActionLog
from .inventory_service import InventoryStore


class SalesLedger:
    """Running total of recorded revenue. Never decreases."""

    def __init__(self, total: Decimal = Decimal("0")) -> None:
        if total < 0:
            raise ValueError(f"Ledger total cannot be negative: {total}")
        self._total = Decimal(total)

    @property
    def total(self) -> Decimal:
        return self._total

    def credit(self, amount: Decimal) -> Decimal:
        """
        Add revenue from a sale.

        Args:
            amount: Non-negative line total

        Returns:
            New total
        """
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        self._total += amount
        return self._total

    def _reset_to(self, total: Decimal) -> None:
        # Only used to undo a credit whose commit never reached disk
        self._total = total


class SaleSession:
    """Per-session sale counters shown to the operator. Not persisted."""

    def __init__(self) -> None:
        self.sales_count = 0
        self.subtotal = Decimal("0")

    def record(self, result: SaleResult) -> None:
        """Add a completed sale to the session figures."""
        self.sales_count += 1
        self.subtotal += result.line_total

    def summary(self) -> SaleSessionSummary:
        """Current session figures."""
        return SaleSessionSummary(sales_count=self.sales_count, subtotal=self.subtotal)


class SaleTransaction:
    """Records sales against the inventory and the ledger."""

    def __init__(
        self,
        store: InventoryStore,
        ledger: SalesLedger,
        gateway: PersistenceGateway,
        action_log: ActionLog,
    ) -> None:
        """
        Initialize sale transaction.

        Args:
            store: Inventory store
            ledger: Sales ledger
            gateway: Persistence gateway used to commit each sale
            action_log: History the sale is recorded in
        """
        self.store = store
        self.ledger = ledger
        self.gateway = gateway
        self.action_log = action_log
        self.logger = get_logger("sales")

    def sell(
        self,
        product_id: int,
        quantity: int,
        unit_price: Any,
        session: Optional[SaleSession] = None,
    ) -> SaleResult:
        """
        Sell units of one item.

        Args:
            product_id: Item to sell
            quantity: Units sold, between 1 and the quantity on hand
            unit_price: Non-negative price per unit
            session: Optional session whose counters are updated

        Returns:
            SaleResult describing the recorded sale

        Raises:
            InvalidQuantityError: If quantity is not a positive integer
            InvalidPriceError: If the price is negative or not a number
            ItemNotFoundError: If the item does not exist
            InsufficientStockError: If quantity exceeds the stock on hand
            PersistenceWriteError: If the sale could not be persisted
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError(quantity, "must be a positive integer")
        price = to_decimal(unit_price)
        if price is None or price < 0:
            raise InvalidPriceError(unit_price)

        item = self.store.get(product_id)
        if quantity > item.quantity:
            raise InsufficientStockError(product_id, quantity, item.quantity)

        line_total = price * quantity
        snapshot = self.store.snapshot()
        previous_total = self.ledger.total

        updated = self.store.apply_sale(product_id, quantity, price)
        self.ledger.credit(line_total)

        try:
            self.gateway.commit(self.store.all(), self.ledger.total)
        except PersistenceWriteError as e:
            if not e.committed:
                self.store.restore(snapshot)
                self.ledger._reset_to(previous_total)
                self.logger.critical(f"Sale of {quantity}x {item.name} rolled back: {e}")
                raise
            # Journal is durable; the sale stands and is finished on restart
            self.logger.critical(
                f"Sale of {quantity}x {item.name} committed but files not updated: {e}"
            )
            self._record(updated.name, product_id, quantity, price, line_total, updated.quantity)
            raise

        self._record(updated.name, product_id, quantity, price, line_total, updated.quantity)

        result = SaleResult(
            product_id=product_id,
            name=updated.name,
            quantity=quantity,
            unit_price=price,
            line_total=line_total,
            remaining_quantity=updated.quantity,
            ledger_total=self.ledger.total,
        )
        if session is not None:
            session.record(result)

        self.logger.info(
            f"Sold {quantity}x {updated.name} @ {price} = {line_total}; "
            f"remaining {updated.quantity}, ledger {self.ledger.total}"
        )
        return result

    def _record(
        self,
        name: str,
        product_id: int,
        quantity: int,
        unit_price: Decimal,
        line_total: Decimal,
        remaining: int,
    ) -> None:
        self.action_log.append(
            ActionType.SALE,
            product_id=product_id,
            name=name,
            quantity=quantity,
            unit_price=f"{unit_price:.2f}",
            line_total=f"{line_total:.2f}",
            remaining=remaining,
        )
