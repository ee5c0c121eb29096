"""TopicStore - Atomic, undoable state container for a topic.

All writes go through ``transaction``: the operation edits a deep copy of
the committed topic, and the copy replaces the committed topic only when the
operation finishes without raising. Readers of ``store.topic`` therefore
never observe a partially applied mutation, and a failed operation leaves
no trace (not even consumed ids).
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable

import structlog

from topicmap.graph.errors import InvariantViolationError, ReadOnlyTopicError
from topicmap.graph.mutations import MutationEntry, MutationLog
from topicmap.graph.topic import ROOT_DIAGRAM_ID, Topic, new_topic

logger = structlog.get_logger(__name__)

Listener = Callable[[MutationEntry, Topic], None]

DEFAULT_HISTORY_LIMIT = 100


@dataclass
class PendingMutation:
    """A mutation being built inside a transaction.

    Attributes:
        topic: Draft topic to edit. May be replaced wholesale.
        operation: Operation name recorded on commit.
        target_id: Primary target recorded on commit.
        before_state: State to record as before the mutation.
        after_state: State to record as after the mutation.
        relayout: Set when the operation recomputed a layout.
    """

    topic: Topic
    operation: str
    target_id: str
    before_state: dict[str, Any] = field(default_factory=dict)
    after_state: dict[str, Any] = field(default_factory=dict)
    relayout: bool = False
    _abandoned: bool = field(default=False, repr=False)

    def abandon(self) -> None:
        """Drop the draft without committing; the call becomes a no-op."""
        self._abandoned = True

    @property
    def abandoned(self) -> bool:
        return self._abandoned


class TopicStore:
    """Holds the committed topic of one editing session.

    Args:
        topic: Initial topic. It is copied, so two stores never share state.
        readonly: Reject every mutation with ReadOnlyTopicError.
        history_limit: Maximum number of undoable mutations kept.
    """

    def __init__(
        self,
        topic: Topic | None = None,
        readonly: bool = False,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._topic = copy.deepcopy(topic) if topic is not None else new_topic()
        self._readonly = readonly
        self._history_limit = history_limit
        self._log = MutationLog(max_entries=history_limit)
        self._undo_stack: list[tuple[Topic, MutationEntry]] = []
        self._redo_stack: list[tuple[Topic, MutationEntry]] = []
        self._listeners: list[Listener] = []
        self._in_transaction = False

    @property
    def topic(self) -> Topic:
        """The committed topic. Treat as read-only."""
        return self._topic

    @property
    def readonly(self) -> bool:
        return self._readonly

    @property
    def mutation_log(self) -> MutationLog:
        return self._log

    def snapshot(self) -> Topic:
        """Return an independent copy of the committed topic."""
        return copy.deepcopy(self._topic)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every commit, undo and redo.

        Returns:
            A function that unregisters the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _check_writable(self, operation: str) -> None:
        if self._readonly:
            raise ReadOnlyTopicError(f"Cannot {operation}: topic is read-only")

    @contextmanager
    def transaction(self, operation: str, target_id: str) -> Iterator[PendingMutation]:
        """Run one atomic read-modify-write against a draft of the topic.

        Args:
            operation: Operation name for the mutation log.
            target_id: Primary target for the mutation log.

        Yields:
            The pending mutation whose ``topic`` is the draft to edit.

        Raises:
            ReadOnlyTopicError: If the store is read-only.
            InvariantViolationError: If a transaction is already open.
        """
        self._check_writable(operation)
        if self._in_transaction:
            raise InvariantViolationError(f"Cannot {operation}: another mutation is in progress")

        pending = PendingMutation(
            topic=copy.deepcopy(self._topic),
            operation=operation,
            target_id=target_id,
        )
        self._in_transaction = True
        try:
            yield pending
        finally:
            self._in_transaction = False

        if pending.abandoned:
            logger.debug("mutation_abandoned", operation=operation, target_id=target_id)
            return

        entry = MutationEntry(
            operation=operation,
            target_id=target_id,
            diagram_id=self._topic.active_diagram_id,
            before_state=pending.before_state,
            after_state=pending.after_state,
            relayout=pending.relayout,
        )
        self._commit(pending.topic, entry)

    def _commit(self, topic: Topic, entry: MutationEntry) -> None:
        self._undo_stack.append((self._topic, entry))
        if len(self._undo_stack) > self._history_limit:
            del self._undo_stack[0]
        self._redo_stack.clear()
        self._topic = topic
        self._log.append(entry)
        logger.debug("mutation_committed", operation=entry.operation, target_id=entry.target_id)
        self._notify(entry)

    def _notify(self, entry: MutationEntry) -> None:
        for listener in list(self._listeners):
            listener(entry, self._topic)

    def last_entry(self) -> MutationEntry | None:
        return self._log.last()

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def undo(self) -> MutationEntry | None:
        """Revert the most recent committed mutation.

        Returns:
            The undone entry, or None if there is nothing to undo.
        """
        self._check_writable("undo")
        if not self._undo_stack:
            return None
        previous, entry = self._undo_stack.pop()
        self._redo_stack.append((self._topic, entry))
        self._topic = previous
        self._log.pop()
        logger.debug("mutation_undone", operation=entry.operation, target_id=entry.target_id)
        self._notify(
            MutationEntry(
                operation="undo", target_id=entry.id, diagram_id=previous.active_diagram_id
            )
        )
        return entry

    def redo(self) -> MutationEntry | None:
        """Re-apply the most recently undone mutation.

        Returns:
            The redone entry, or None if there is nothing to redo.
        """
        self._check_writable("redo")
        if not self._redo_stack:
            return None
        following, entry = self._redo_stack.pop()
        self._undo_stack.append((self._topic, entry))
        self._topic = following
        self._log.append(entry)
        logger.debug("mutation_redone", operation=entry.operation, target_id=entry.target_id)
        self._notify(
            MutationEntry(
                operation="redo", target_id=entry.id, diagram_id=following.active_diagram_id
            )
        )
        return entry

    def reset(self, problem_label: str = "") -> MutationEntry | None:
        """Replace the whole topic with a fresh one holding a single problem.

        This is the only operation that removes claim diagrams. It can be undone.
        """
        with self.transaction("reset_topic", ROOT_DIAGRAM_ID) as pending:
            pending.before_state = {"diagram_count": len(pending.topic.diagrams)}
            pending.topic = new_topic(problem_label)
            pending.after_state = {"diagram_count": 1}
        return self._log.last()


__all__ = ["PendingMutation", "TopicStore", "Listener", "DEFAULT_HISTORY_LIMIT"]
