"""Mutation records for topic operations.

This module provides dataclasses for tracking committed topic mutations,
used for auditing, change notification and undo bookkeeping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4


@dataclass
class MutationEntry:
    """Single committed mutation.

    Attributes:
        operation: Operation name (e.g., "add_node", "set_score").
        target_id: Primary target of the mutation (node, edge or diagram id).
        diagram_id: Diagram that was active when the mutation ran.
        before_state: Relevant state before the mutation.
        after_state: Relevant state after the mutation, including any
            allocated ids.
        relayout: Whether the mutation recomputed a layout.
        id: Unique mutation ID (UUID4 hex).
        timestamp: When the mutation was committed.
    """

    operation: str
    target_id: str
    diagram_id: str
    before_state: dict[str, Any] = field(default_factory=dict)
    after_state: dict[str, Any] = field(default_factory=dict)
    relayout: bool = False
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"[{self.id[:8]}] {self.operation}({self.target_id})"


class MutationLog:
    """Chronological history of committed mutations.

    Entries are stored in chronological order. Undo removes the most recent
    entry with ``pop``. When ``max_entries`` is set, the oldest entries are
    dropped once the log grows past it.

    Example:
        >>> log = MutationLog()
        >>> log.append(MutationEntry("set_node_label", "0", "root"))
        >>> len(log)
        1
    """

    def __init__(self, max_entries: int | None = None) -> None:
        """Initialize an empty mutation log.

        Args:
            max_entries: Number of most recent entries to keep; unbounded if None.
        """
        self._entries: list[MutationEntry] = []
        self._max_entries = max_entries

    def append(self, entry: MutationEntry) -> None:
        self._entries.append(entry)
        if self._max_entries is not None and len(self._entries) > self._max_entries:
            del self._entries[0]

    def __len__(self) -> int:
        """Return the number of entries in the log."""
        return len(self._entries)

    def last(self) -> MutationEntry | None:
        """Return the most recent entry, or None if empty."""
        return self._entries[-1] if self._entries else None

    def pop(self) -> MutationEntry | None:
        """Remove and return the most recent entry.

        Used by undo. Does not log the removal.

        Returns:
            The removed entry, or None if log is empty.
        """
        return self._entries.pop() if self._entries else None


__all__ = ["MutationEntry", "MutationLog"]
