"""
Flat-file persistence for the inventory and the sales ledger.

The inventory file holds six lines per item (ID, name, category, quantity,
last price, date added). The ledger file holds one decimal number.

Every file is replaced atomically: written to a temp file, fsynced, renamed
over the target. A sale touches both files, so ``commit`` first writes a
journal holding both new contents; once the journal is renamed into place the
change is committed, and ``recover`` replays it if the process died before
both files were rewritten.
"""

import hashlib
import json
import os
import shutil
import time
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple

from pydantic import ValidationError

from ..exceptions import (
    PersistenceReadError,
    PersistenceWriteError,
    StateInconsistencyError,
)
from ..models import DEFAULT_CATEGORIES, StockItem
from ..utils import get_logger

RECORD_LINES = 6
TEMP_SUFFIX = ".tmp"
JOURNAL_VERSION = 1


class RecoveryAction(str, Enum):
    """What startup recovery had to do."""
    NONE = "none"
    REPLAYED = "replayed"
    DISCARDED = "discarded"


def encode_inventory(items: Iterable[StockItem]) -> str:
    """
    Serialize items to the stock file format.

    Args:
        items: Items in store order

    Returns:
        File contents
    """
    lines = []
    for item in items:
        lines.extend([
            str(item.product_id),
            item.name,
            item.category,
            str(item.quantity),
            str(item.last_price),
            str(item.date_added),
        ])
    return "".join(f"{line}\n" for line in lines)


def decode_inventory(
    text: str,
    categories: Optional[Sequence[str]] = None
) -> Tuple[List[StockItem], Optional[int]]:
    """
    Parse the stock file format.

    Loading stops at the first record that cannot be parsed in full or that
    breaks a store invariant; everything before it is returned.

    Args:
        text: File contents
        categories: Allowed categories; None accepts any

    Returns:
        Tuple of (items, 1-based line number where loading stopped or None)
    """
    # Only "\n" separates records; names may hold other line-boundary characters
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    items: List[StockItem] = []
    seen_ids = set()

    for start in range(0, len(lines), RECORD_LINES):
        record = lines[start:start + RECORD_LINES]
        if len(record) < RECORD_LINES:
            # A lone trailing blank line is not a record
            if all(not line.strip() for line in record):
                break
            return items, start + 1
        try:
            item = StockItem(
                product_id=int(record[0].strip()),
                name=record[1],
                category=record[2],
                quantity=int(record[3].strip()),
                last_price=Decimal(record[4].strip()),
                date_added=int(record[5].strip()),
            )
        except (ValueError, InvalidOperation, ValidationError):
            return items, start + 1

        if item.product_id in seen_ids:
            return items, start + 1
        if categories is not None and item.category not in categories:
            return items, start + 1

        seen_ids.add(item.product_id)
        items.append(item)

    return items, None


def _checksum(inventory: str, ledger: str) -> str:
    return hashlib.sha256(f"{inventory}\0{ledger}".encode("utf-8")).hexdigest()


class PersistenceGateway:
    """
    Reads and writes the inventory and ledger artifacts.

    Provides crash-safe replacement of each file and a journaled commit for
    changes that touch both.
    """

    def __init__(
        self,
        data_dir: str = ".",
        inventory_file: str = "stock.dat",
        ledger_file: str = "grand_total.dat",
        journal_file: str = "stock.journal",
        categories: Optional[Sequence[str]] = None,
        write_retries: int = 1,
    ) -> None:
        """
        Initialize persistence gateway.

        Args:
            data_dir: Directory holding the artifacts
            inventory_file: Stock file name
            ledger_file: Ledger file name
            journal_file: Write-ahead journal file name
            categories: Allowed categories for loaded records
            write_retries: Extra attempts after a failed write
        """
        self.data_dir = Path(data_dir)
        self.inventory_path = self.data_dir / inventory_file
        self.ledger_path = self.data_dir / ledger_file
        self.journal_path = self.data_dir / journal_file
        self.categories = list(categories or DEFAULT_CATEGORIES)
        self.write_retries = max(0, int(write_retries))
        self.logger = get_logger("persistence")

    # Low-level file helpers

    @staticmethod
    def _temp_path(path: Path) -> Path:
        return path.with_name(path.name + TEMP_SUFFIX)

    def _fsync_dir(self) -> None:
        """Make a rename durable. Not supported on Windows."""
        if os.name == 'nt':
            return
        fd = os.open(str(self.data_dir), os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)

    @contextmanager
    def _atomic_file(self, path: Path) -> Iterator[TextIO]:
        """
        Context manager for replacing a file atomically.

        Yields:
            Writable text handle on a temp file; renamed over ``path`` on success
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        temp_path = self._temp_path(path)
        handle = open(temp_path, 'w', encoding='utf-8', newline='\n')
        try:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
            handle.close()
            os.replace(temp_path, path)
            self._fsync_dir()
        except BaseException:
            handle.close()
            temp_path.unlink(missing_ok=True)
            raise

    def _write_text(self, path: Path, text: str, committed: bool = False) -> None:
        """Atomically write ``text`` to ``path``, retrying on failure."""
        last_error: Optional[OSError] = None
        for attempt in range(1 + self.write_retries):
            try:
                with self._atomic_file(path) as handle:
                    handle.write(text)
                return
            except OSError as e:
                last_error = e
                self.logger.warning(f"Write to {path} failed (attempt {attempt + 1}): {e}")

        self.logger.critical(f"Giving up writing {path}: {last_error}")
        raise PersistenceWriteError(path, last_error, committed=committed)

    def _read_text(self, path: Path) -> Optional[str]:
        """Read a file, or None if it does not exist."""
        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceReadError(path, str(e))

    # Inventory

    def load_inventory(self) -> List[StockItem]:
        """
        Load items from the stock file.

        A missing file yields an empty list. If a record cannot be read, the
        items before it are returned and the file is copied aside so the
        unread records survive the next save.

        Returns:
            Items in file order
        """
        text = self._read_text(self.inventory_path)
        if text is None:
            self.logger.info(f"No stock file at {self.inventory_path}; starting empty")
            return []

        items, stopped_at = decode_inventory(text, self.categories)
        if stopped_at is not None:
            preserved = self._preserve_corrupt(self.inventory_path)
            self.logger.warning(
                f"Stock file {self.inventory_path} is malformed at line {stopped_at}; "
                f"loaded {len(items)} items, original kept at {preserved}"
            )
        else:
            self.logger.info(f"Loaded {len(items)} items from {self.inventory_path}")
        return items

    def _preserve_corrupt(self, path: Path) -> Path:
        target = path.with_name(f"{path.name}.corrupt-{int(time.time())}")
        try:
            shutil.copy2(path, target)
        except OSError as e:
            raise PersistenceReadError(path, f"could not preserve malformed file: {e}")
        return target

    def save_inventory(self, items: Iterable[StockItem]) -> None:
        """
        Rewrite the stock file from the given items.

        Raises:
            PersistenceWriteError: If the file cannot be written after retrying
        """
        items = list(items)
        self._write_text(self.inventory_path, encode_inventory(items))
        self.logger.debug(f"Saved {len(items)} items to {self.inventory_path}")

    # Ledger

    def load_ledger_total(self) -> Decimal:
        """
        Load the accumulated sales total.

        Returns:
            Stored total, or 0 if no ledger file exists

        Raises:
            PersistenceReadError: If the file holds something other than a
                non-negative number
        """
        text = self._read_text(self.ledger_path)
        if text is None:
            return Decimal("0")

        value = text.strip()
        if not value:
            self.logger.warning(f"Ledger file {self.ledger_path} is empty; using 0")
            return Decimal("0")
        try:
            total = Decimal(value)
        except InvalidOperation:
            raise PersistenceReadError(self.ledger_path, f"not a number: {value!r}")
        if not total.is_finite() or total < 0:
            raise PersistenceReadError(self.ledger_path, f"invalid total: {value!r}")
        return total

    def save_ledger_total(self, value: Decimal) -> None:
        """
        Overwrite the ledger file.

        Raises:
            PersistenceWriteError: If the file cannot be written after retrying
        """
        self._write_text(self.ledger_path, f"{value}\n")

    # Two-artifact transaction

    def commit(self, items: Iterable[StockItem], total: Decimal) -> None:
        """
        Persist inventory and ledger together.

        The journal rename is the commit point. A failure before it leaves
        both files untouched; a failure after it raises with
        ``committed=True`` and the next ``recover`` completes the write.

        Raises:
            PersistenceWriteError: If either stage fails after retrying
        """
        inventory_text = encode_inventory(items)
        ledger_text = f"{total}\n"
        journal = {
            "version": JOURNAL_VERSION,
            "inventory": inventory_text,
            "ledger": ledger_text,
            "checksum": _checksum(inventory_text, ledger_text),
        }

        self._write_text(self.journal_path, json.dumps(journal))
        self._apply_journal(inventory_text, ledger_text)
        self.logger.debug(f"Committed inventory and ledger total {total}")

    def _apply_journal(self, inventory_text: str, ledger_text: str) -> None:
        self._write_text(self.inventory_path, inventory_text, committed=True)
        self._write_text(self.ledger_path, ledger_text, committed=True)
        try:
            self.journal_path.unlink(missing_ok=True)
            self._fsync_dir()
        except OSError as e:
            raise PersistenceWriteError(self.journal_path, e, committed=True)

    def has_pending_journal(self) -> bool:
        """True if a committed change has not yet been applied to both files."""
        return self.journal_path.exists()

    def recover(self) -> RecoveryAction:
        """
        Bring the artifacts to the last committed state.

        Must run before the inventory or ledger is loaded.

        Returns:
            RecoveryAction describing what was done

        Raises:
            StateInconsistencyError: If a journal exists but cannot be trusted
        """
        action = RecoveryAction.NONE

        for path in (self.inventory_path, self.ledger_path, self.journal_path):
            temp_path = self._temp_path(path)
            if temp_path.exists():
                self.logger.warning(f"Discarding unfinished write {temp_path}")
                temp_path.unlink()
                action = RecoveryAction.DISCARDED

        if not self.journal_path.exists():
            return action

        try:
            with open(self.journal_path, 'r', encoding='utf-8') as f:
                journal = json.load(f)
            inventory_text = journal["inventory"]
            ledger_text = journal["ledger"]
            checksum = journal["checksum"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StateInconsistencyError(self.journal_path, f"unreadable journal ({e})")

        if journal.get("version") != JOURNAL_VERSION:
            raise StateInconsistencyError(
                self.journal_path, f"unsupported journal version {journal.get('version')!r}"
            )
        if _checksum(inventory_text, ledger_text) != checksum:
            raise StateInconsistencyError(self.journal_path, "journal checksum mismatch")

        self.logger.warning("Replaying interrupted commit from journal")
        self._apply_journal(inventory_text, ledger_text)
        return RecoveryAction.REPLAYED
