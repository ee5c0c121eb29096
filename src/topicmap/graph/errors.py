"""Error taxonomy for topic graph operations.

- NotFoundError: a referenced node, edge or diagram is not where the caller
  expected it. Signals the caller acted on stale state.
- InvalidTransitionError: an edge would violate the schema, duplicate an
  existing edge, self-loop or close a cycle.
- InvariantViolationError: an operation's precondition on entity kind or
  structure does not hold. Signals a logic defect in the caller.
- TopicLoadError: a snapshot could not be turned into a consistent topic.
- ReadOnlyTopicError: a mutation was attempted on a read-only session.

The builtin bases keep ``except KeyError`` / ``except ValueError`` callers working.
"""

from __future__ import annotations


class TopicError(Exception):
    """Base class for all topic graph errors."""


class NotFoundError(TopicError, KeyError):
    """A referenced id does not exist in the expected scope."""

    def __str__(self) -> str:
        # KeyError.__str__ quotes its argument; keep plain messages.
        return str(self.args[0]) if self.args else ""


class InvalidTransitionError(TopicError, ValueError):
    """An edge or connection is not allowed."""


class InvariantViolationError(TopicError, ValueError):
    """An operation precondition on the topic structure was violated."""


class TopicLoadError(TopicError, ValueError):
    """A topic snapshot is malformed or inconsistent."""


class ReadOnlyTopicError(TopicError):
    """A mutation was attempted against a read-only topic."""


__all__ = [
    "TopicError",
    "NotFoundError",
    "InvalidTransitionError",
    "InvariantViolationError",
    "TopicLoadError",
    "ReadOnlyTopicError",
]
