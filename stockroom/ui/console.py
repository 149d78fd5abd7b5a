"""
Console front end for Stockroom.

Renders menus and tables and runs the prompt loops. All rules live in
StockroomApplication; this module only translates keystrokes into calls and
errors into messages.
"""

from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from ..app import StockroomApplication
from ..exceptions import (
    InputClosedError,
    InsufficientStockError,
    InventoryValidationError,
    ItemNotFoundError,
)
from ..models import StockItem
from ..utils import parse_category_field, parse_int_field, parse_item_update, parse_price_field

MENU_OPTIONS = [
    "Make a Sale",
    "Add New Item",
    "View All Items",
    "Update Item",
    "Delete Item",
    "Search Items",
    "Low Stock Alert",
    "View Stock History",
    "Exit",
]


def format_price(price: Decimal) -> str:
    """Dollar amount with two decimals."""
    return f"${price:.2f}"


class ConsoleMenu:
    """
    Interactive menu around a StockroomApplication.

    Input and output are injectable so the menu can be driven from tests.
    """

    def __init__(
        self,
        app: StockroomApplication,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        """
        Initialize console menu.

        Args:
            app: Initialized application
            input_func: Reads one line given a prompt
            output_func: Writes one line
        """
        self.app = app
        self._input = input_func
        self._output = output_func

    # Low-level prompts

    def say(self, text: str = "") -> None:
        self._output(text)

    def ask(self, prompt: str) -> str:
        """Read one line. End of input raises InputClosedError."""
        try:
            return self._input(prompt)
        except EOFError:
            raise InputClosedError()

    def ask_int(self, prompt: str, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
        """Keep asking until a whole number in range is entered."""
        while True:
            result = parse_int_field("value", self.ask(prompt), minimum=minimum)
            if not result.ok:
                self.say(f"Invalid input: {result.error}.")
                continue
            if not result.supplied:
                self.say("Please enter a number.")
                continue
            if maximum is not None and result.value > maximum:
                self.say(f"Invalid input: must be at most {maximum}.")
                continue
            return result.value

    def ask_price(self, prompt: str) -> Decimal:
        """Keep asking until a non-negative price is entered."""
        while True:
            result = parse_price_field("price", self.ask(prompt))
            if result.ok and result.supplied:
                return result.value
            self.say(f"Please enter a valid price{': ' + result.error if result.error else ''}.")

    def confirm(self, message: str) -> bool:
        """Yes/no question; only Y or y counts as yes."""
        return self.ask(f"{message} (Y/N): ").strip().upper().startswith("Y")

    # Rendering

    def show_table(self, items: Sequence[StockItem], threshold: Optional[int] = None) -> None:
        """Print items as a fixed-width table."""
        if not items:
            self.say("No items to display.")
            return

        self.say(f"{'ID':<8}{'Product Name':<25}{'Category':<15}{'Qty':<8}{'Last Price':<12}Status")
        self.say("-" * 80)
        for item in items:
            name = item.name if len(item.name) <= 23 else item.name[:22] + "..."
            category = item.category if len(item.category) <= 13 else item.category[:12] + "..."
            price = format_price(item.last_price) if item.last_price > 0 else "Not Set"
            self.say(
                f"{item.product_id:<8}{name:<25}{category:<15}{item.quantity:<8}{price:<12}"
                f"{self.app.stock_status(item, threshold)}"
            )
        self.say("-" * 80)

    def show_menu(self) -> None:
        self.say()
        self.say("=== STOCK MANAGEMENT SYSTEM ===")
        for number, label in enumerate(MENU_OPTIONS, 1):
            self.say(f"{number}. {label}")
        self.say("=" * 31)
        self.say(
            f"Total Revenue: {format_price(self.app.ledger_total)} | "
            f"Items in Stock: {len(self.app.ctx.store)}"
        )
        self.say("=" * 31)

    def choose_category(self) -> str:
        """Numbered category picker."""
        categories = self.app.categories
        self.say("Select category:")
        for number, category in enumerate(categories, 1):
            self.say(f"  {number}. {category}")
        while True:
            result = parse_category_field("category", self.ask(f"Enter category (1-{len(categories)}): "), categories)
            if result.ok and result.supplied:
                return result.value
            self.say("Invalid choice.")

    # Main loop

    def run(self) -> int:
        """
        Show the menu until the operator exits.

        Returns:
            Exit status from StockroomApplication.exit()
        """
        actions: List[Callable[[], None]] = [
            self.make_sale,
            self.add_item,
            self.view_all,
            self.update_item,
            self.delete_item,
            self.search,
            self.low_stock_alert,
            self.view_history,
        ]
        while True:
            self.show_menu()
            choice = self.ask_int("Enter your choice: ", minimum=1, maximum=len(MENU_OPTIONS))
            if choice == len(MENU_OPTIONS):
                status = self.app.exit()
                self.say("Data saved successfully. Good Bye.....")
                return status
            try:
                actions[choice - 1]()
            except (InventoryValidationError, ItemNotFoundError, InsufficientStockError) as e:
                self.say(f"Error: {e}")

    # Actions

    def make_sale(self) -> None:
        store = self.app.ctx.store
        if not len(store):
            self.say("No items in stock to sell.")
            return

        session = self.app.start_sale_session()
        while True:
            summary = session.summary()
            self.say(f"\n=== MAKE A SALE === Session Total: {format_price(summary.subtotal)} "
                     f"| Sales Made: {summary.sales_count}")
            items = store.all()
            self.show_table(items)
            choice = self.ask_int("Select item number to sell (0 to finish): ", minimum=0, maximum=len(items))
            if choice == 0:
                break

            item = items[choice - 1]
            if item.quantity == 0:
                self.say(f"{item.name} is out of stock!")
                continue

            self.say(f"Selected: {item.name} (Available: {item.quantity})")
            quantity = self.ask_int("Enter quantity to sell (0 to cancel): ", minimum=0, maximum=item.quantity)
            if quantity == 0:
                self.say("Sale cancelled.")
                continue

            hint = f" (last: {format_price(item.last_price)})" if item.last_price > 0 else ""
            price = self.ask_price(f"Enter price per unit{hint}: $")

            result = self.app.sell(item.product_id, quantity, price, session=session)
            self.say("Sale recorded successfully!")
            self.say(f"Sale amount: {format_price(result.line_total)} | "
                     f"Remaining stock: {result.remaining_quantity}")
            if not self.confirm("Continue selling?"):
                break

        summary = session.summary()
        if summary.sales_count:
            self.say(f"Sale session completed! Items sold: {summary.sales_count} | "
                     f"Session total: {format_price(summary.subtotal)}")
        else:
            self.say("No sales made.")

    def add_item(self) -> None:
        added = 0
        while True:
            product_id = self.ask_int("Enter product ID: ", minimum=1)
            if product_id in self.app.ctx.store:
                self.say("Product ID must be positive and unique.")
                continue

            name = self.ask("Enter item name: ").strip()
            if not name:
                self.say("Item name cannot be empty.")
                continue

            existing = self.app.ctx.store.find_by_name(name)
            if existing:
                self.say(f"Item '{name}' already exists!")
                if self.confirm("Add more quantity to existing item?"):
                    self.say(f"Current stock: {existing[0].quantity}")
                    extra = self.ask_int("Enter quantity to add: ", minimum=0)
                    item = self.app.restock_item(existing[0].product_id, extra)
                    self.say(f"Stock updated! New quantity: {item.quantity}")
                    added += 1
                    if not self.confirm("Add another item?"):
                        break
                    continue
                if not self.confirm(f"Add a second item named '{name}'?"):
                    continue

            category = self.choose_category()
            price = self.ask_price("Enter initial price: $")
            quantity = self.ask_int("Enter initial quantity: ", minimum=0)

            item = self.app.add_item(product_id, name, category, quantity, price)
            self.say(f"Item '{item.name}' added successfully!")
            added += 1
            if not self.confirm("Add another item?"):
                break

        self.say(f"Session complete! Total items added/updated: {added}")

    def view_all(self) -> None:
        overview = self.app.view_all()
        if not overview.items:
            self.say("No items in stock.")
            return
        stats = overview.statistics
        self.say(f"OVERVIEW: {stats.item_count} items | Total Qty: {stats.total_quantity} | "
                 f"Out of Stock: {stats.out_count} | Low Stock: {stats.low_count}")
        self.say("=" * 80)
        self.show_table(overview.items)
        for category, count in stats.per_category_counts.items():
            self.say(f"  {category}: {count}")

    def update_item(self) -> None:
        item = self.app.find_item(self.ask("Enter item name to update: "))
        self.say("CURRENT DETAILS:")
        self.say(f"  Product ID: {item.product_id}")
        self.say(f"  Name: {item.name}")
        self.say(f"  Category: {item.category}")
        self.say(f"  Quantity: {item.quantity}")
        self.say(f"  Last Price: {format_price(item.last_price)}")
        self.say("Enter new details (leave blank to keep current).")

        categories = self.app.categories
        raw = {
            "product_id": self.ask(f"Product ID [{item.product_id}]: "),
            "name": self.ask(f"Name [{item.name}]: "),
            "category": self.ask(
                f"Category [{item.category}] ({', '.join(f'{n}={c}' for n, c in enumerate(categories, 1))}): "
            ),
            "quantity": self.ask(f"Quantity [{item.quantity}]: "),
            "last_price": self.ask(f"Last Price [{format_price(item.last_price)}]: "),
        }
        changes, failures = parse_item_update(raw, categories)
        if failures:
            for failure in failures:
                self.say(f"Invalid {failure.field}: {failure.error}")
            self.say("Nothing was changed.")
            return
        if changes.is_empty():
            self.say("Nothing to update.")
            return

        self.app.update_item(item.product_id, changes)
        self.say("Item updated successfully!")

    def delete_item(self) -> None:
        item = self.app.find_item(self.ask("Enter item name to delete: "))
        self.say("ITEM TO DELETE:")
        self.say(f"  Name: {item.name}")
        self.say(f"  ID: {item.product_id}")
        self.say(f"  Category: {item.category}")
        self.say(f"  Quantity: {item.quantity}")
        if item.quantity > 0:
            self.say(f"WARNING: This item has {item.quantity} units in stock!")
        if self.confirm("Are you sure you want to delete this item?"):
            self.app.delete_item(item.product_id)
            self.say(f"Item '{item.name}' deleted successfully!")
        else:
            self.say("Deletion cancelled.")

    def search(self) -> None:
        while True:
            term = self.ask("Enter search term (name or category): ")
            results = self.app.search(term)
            self.say(f"SEARCH RESULTS for '{term.strip()}':")
            if results:
                self.say(f"Found {len(results)} item(s)")
                self.show_table(results)
            else:
                self.say("No items found matching your search.")
            if not self.confirm("Search for another item?"):
                return

    def low_stock_alert(self) -> None:
        threshold = self.app.ctx.queries.default_threshold
        self.say(f"Current threshold: {threshold} units")
        if self.confirm("Change threshold?"):
            threshold = self.ask_int("Enter new threshold: ", minimum=0)

        report = self.app.low_stock_alert(threshold)
        self.say(f"ITEMS WITH STOCK BELOW {report.threshold} UNITS:")
        if report.out_of_stock:
            self.say(f"CRITICAL - OUT OF STOCK ({len(report.out_of_stock)} items):")
            self.show_table(report.out_of_stock, report.threshold)
        if report.low_stock:
            self.say(f"LOW STOCK ({len(report.low_stock)} items):")
            self.show_table(report.low_stock, report.threshold)
        if not report.has_alerts():
            self.say("All items are sufficiently stocked.")

    def view_history(self) -> None:
        view = self.app.view_history()
        if not view.summary.total:
            self.say("No history recorded.")
            return
        s = view.summary
        self.say(f"SUMMARY: {s.total} total actions | {s.sales} sales | {s.additions} additions | "
                 f"{s.updates} updates | {s.deletions} deletions")
        self.say("-" * 80)
        self.say(f"Recent Activities (last {len(view.recent)} entries):")
        for entry in view.recent:
            self.say(entry.to_readable_string())
