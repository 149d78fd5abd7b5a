"""
Action log data models.

Defines structured history entries. Text is rendered from the entry's kind and
fields only when it is displayed or written out.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Y"

LINE_PATTERN = re.compile(r"^\[(?P<timestamp>[^\]]+)\] (?:(?P<kind>[A-Z]+): )?(?P<text>.*)$")


class ActionType(str, Enum):
    """Kinds of actions recorded in the history."""
    SALE = "SALE"
    ADD = "ADD"
    RESTOCK = "RESTOCK"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SYSTEM_EVENT = "SYSTEM"


MESSAGE_TEMPLATES = {
    ActionType.SALE: (
        "{quantity}x {name} @ ${unit_price} each = ${line_total} (Remaining: {remaining})"
    ),
    ActionType.ADD: "Added {name} (ID: {product_id}, Category: {category}, Qty: {quantity})",
    ActionType.RESTOCK: "Added {added} units to {name} (New total: {quantity})",
    ActionType.UPDATE: "{name} (ID:{product_id}) -> Updated {fields}",
    ActionType.DELETE: "Removed {name} (ID: {product_id}, Had {quantity} units)",
    ActionType.SYSTEM_EVENT: "{event}",
}


class ActionLogEntry(BaseModel):
    """Represents a single history entry."""

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now().replace(microsecond=0)
    )
    action_type: ActionType
    details: Dict[str, Any] = Field(default_factory=dict)
    text: Optional[str] = None  # Set when read back from the log file

    @property
    def message(self) -> str:
        """Human-readable description of the action."""
        if self.text is not None:
            return self.text
        template = MESSAGE_TEMPLATES[self.action_type]
        try:
            return template.format(**self.details)
        except (KeyError, IndexError):
            return ", ".join(f"{k}={v}" for k, v in self.details.items())

    def to_readable_string(self) -> str:
        """Convert entry to its one-line log representation."""
        timestamp_str = self.timestamp.strftime(TIMESTAMP_FORMAT)
        return f"[{timestamp_str}] {self.action_type.value}: {self.message}"

    @classmethod
    def from_line(cls, line: str) -> Optional["ActionLogEntry"]:
        """
        Parse a log file line back into an entry.

        Lines written before entries were tagged are kept as system events
        with their original text.

        Args:
            line: One line of the log file, without trailing newline

        Returns:
            ActionLogEntry, or None for blank or unrecognisable lines
        """
        line = line.rstrip("\r\n")
        match = LINE_PATTERN.match(line)
        if not match:
            return None

        try:
            timestamp = datetime.strptime(match.group("timestamp"), TIMESTAMP_FORMAT)
        except ValueError:
            return None

        kind = match.group("kind")
        text = match.group("text")
        try:
            action_type = ActionType(kind)
        except ValueError:
            # Untagged or unknown prefix: keep the whole text as-is
            action_type = ActionType.SYSTEM_EVENT
            if kind:
                text = f"{kind}: {text}"

        return cls(timestamp=timestamp, action_type=action_type, text=text)


class HistorySummary(BaseModel):
    """Counts of recorded actions by kind."""

    total: int = 0
    sales: int = 0
    additions: int = 0
    updates: int = 0
    deletions: int = 0
    system_events: int = 0


def create_action_entry(action_type: ActionType, **details: Any) -> ActionLogEntry:
    """
    Factory function to create history entries.

    Args:
        action_type: Kind of action
        **details: Structured fields rendered into the entry text

    Returns:
        ActionLogEntry instance
    """
    return ActionLogEntry(action_type=action_type, details=details)
