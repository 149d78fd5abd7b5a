"""
Action log service.

Keeps the append-only history of operator actions, both in the history file
and in memory for the life of the process.
"""

from collections import Counter
from pathlib import Path
from typing import Any, Dict, List

from ..models import ActionLogEntry, ActionType, HistorySummary, create_action_entry
from ..utils import get_logger


class ActionLog:
    """Append-only chronological record of mutating operations."""

    def __init__(self, log_path: str = "history.log") -> None:
        """
        Initialize action log.

        Args:
            log_path: Path of the durable history file
        """
        self.log_path = Path(log_path)
        self.entries: List[ActionLogEntry] = []
        self.write_failures = 0
        self.logger = get_logger("action_log")

    def load(self) -> int:
        """
        Read existing history from the log file into memory.

        Returns:
            Number of entries read
        """
        if not self.log_path.exists():
            return 0

        loaded = []
        skipped = 0
        try:
            with open(self.log_path, 'r', encoding='utf-8', errors='replace') as f:
                for line in f:
                    if not line.strip():
                        continue
                    entry = ActionLogEntry.from_line(line)
                    if entry is None:
                        skipped += 1
                        continue
                    loaded.append(entry)
        except OSError as e:
            self.logger.warning(f"Could not read history file {self.log_path}: {e}")
            return 0

        if skipped:
            self.logger.warning(f"Skipped {skipped} unreadable lines in {self.log_path}")

        self.entries = loaded + self.entries
        return len(loaded)

    def append(self, action_type: ActionType, **details: Any) -> ActionLogEntry:
        """
        Record an action.

        The entry is always kept in memory. A failed file write is reported
        as a warning and counted in ``write_failures``.

        Args:
            action_type: Kind of action
            **details: Structured fields describing the action

        Returns:
            The recorded ActionLogEntry
        """
        entry = create_action_entry(action_type, **details)
        self.entries.append(entry)

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, 'a', encoding='utf-8') as f:
                f.write(entry.to_readable_string() + "\n")
        except OSError as e:
            self.write_failures += 1
            self.logger.warning(
                f"History entry not written to {self.log_path}: {e} "
                f"({entry.to_readable_string()})"
            )

        return entry

    def record_system_event(self, event: str) -> ActionLogEntry:
        """Record a system event such as startup or exit."""
        return self.append(ActionType.SYSTEM_EVENT, event=event)

    def recent(self, limit: int) -> List[ActionLogEntry]:
        """
        Get the most recent entries.

        Args:
            limit: Maximum number of entries

        Returns:
            Up to ``limit`` entries, oldest first
        """
        if limit <= 0:
            return []
        return list(self.entries[-limit:])

    def all(self) -> List[ActionLogEntry]:
        """All entries, oldest first."""
        return list(self.entries)

    def by_type(self, action_type: ActionType) -> List[ActionLogEntry]:
        """Entries of one kind, oldest first."""
        return [entry for entry in self.entries if entry.action_type == action_type]

    def classify(self) -> Dict[ActionType, int]:
        """
        Count entries by kind.

        Returns:
            Count for every ActionType, zero included
        """
        counts = Counter(entry.action_type for entry in self.entries)
        return {action_type: counts.get(action_type, 0) for action_type in ActionType}

    def summary(self) -> HistorySummary:
        """Summarize the history for display."""
        counts = self.classify()
        return HistorySummary(
            total=len(self.entries),
            sales=counts[ActionType.SALE],
            additions=counts[ActionType.ADD] + counts[ActionType.RESTOCK],
            updates=counts[ActionType.UPDATE],
            deletions=counts[ActionType.DELETE],
            system_events=counts[ActionType.SYSTEM_EVENT],
        )

    def __len__(self) -> int:
        return len(self.entries)
