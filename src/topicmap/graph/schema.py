"""TypeSchema - Legal relations between node types.

This module defines the static typed-graph schema of a topic:
- NodeType: Closed set of node types
- RelationDirection: Whether a new node is added as parent or child
- Relation: A licensed (parent type, child type, name) triple
- TypeSchema: Queries over the relation table
- Restricted / Unrestricted: Explicit edit mode threaded through validation

Edges always point parent -> child, and a relation reads as
"<child> <name> <parent>" (e.g. "solution solves problem").
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

from topicmap.graph.errors import InvalidTransitionError

if TYPE_CHECKING:
    from topicmap.graph.GraphNode import GraphNode
    from topicmap.graph.topic import Diagram


class NodeType(Enum):
    """Types of nodes in a topic."""

    PROBLEM = "problem"
    SOLUTION = "solution"
    SOLUTION_COMPONENT = "solutionComponent"
    CRITERION = "criterion"
    EFFECT = "effect"
    ROOT_CLAIM = "rootClaim"
    SUPPORT = "support"
    CRITIQUE = "critique"


class RelationDirection(Enum):
    """Role the new node plays relative to the node it extends."""

    PARENT = "parent"
    CHILD = "child"


FALLBACK_RELATION_NAME = "relatesTo"
EMBODIES = "embodies"
SOLVES = "solves"
CRITERION_FOR = "criterion for"


@dataclass(frozen=True)
class Relation:
    """A licensed relation between two node types.

    Attributes:
        parent: Node type at the edge source.
        child: Node type at the edge target.
        name: Relation name, used as the edge label.
        addable: Whether the relation is offered when extending a node.
            Relations maintained automatically are not.
    """

    parent: NodeType
    child: NodeType
    name: str
    addable: bool = True


@dataclass(frozen=True)
class AddableRelation:
    """A way to extend a node: the type of the new node and the relation used."""

    to_node_type: NodeType
    relation: Relation


RELATIONS: tuple[Relation, ...] = (
    Relation(NodeType.PROBLEM, NodeType.PROBLEM, "causes"),
    Relation(NodeType.PROBLEM, NodeType.SOLUTION, SOLVES),
    Relation(NodeType.PROBLEM, NodeType.CRITERION, CRITERION_FOR),
    Relation(NodeType.PROBLEM, NodeType.EFFECT, "causes"),
    Relation(NodeType.CRITERION, NodeType.SOLUTION, EMBODIES, addable=False),
    Relation(NodeType.CRITERION, NodeType.EFFECT, EMBODIES),
    Relation(NodeType.SOLUTION, NodeType.SOLUTION_COMPONENT, "component of"),
    Relation(NodeType.EFFECT, NodeType.SOLUTION, "creates"),
    Relation(NodeType.EFFECT, NodeType.SOLUTION_COMPONENT, "creates"),
    Relation(NodeType.ROOT_CLAIM, NodeType.SUPPORT, "supports"),
    Relation(NodeType.ROOT_CLAIM, NodeType.CRITIQUE, "critiques"),
    Relation(NodeType.SUPPORT, NodeType.SUPPORT, "supports"),
    Relation(NodeType.SUPPORT, NodeType.CRITIQUE, "critiques"),
    Relation(NodeType.CRITIQUE, NodeType.SUPPORT, "supports"),
    Relation(NodeType.CRITIQUE, NodeType.CRITIQUE, "critiques"),
)


class TypeSchema:
    """Indexed view over a table of relations.

    At most one relation may exist per ordered (parent, child) type pair.

    Example:
        >>> schema = TypeSchema()
        >>> schema.get_relation(NodeType.PROBLEM, NodeType.SOLUTION).name
        'solves'
    """

    def __init__(self, relations: tuple[Relation, ...] = RELATIONS) -> None:
        self._relations = relations
        self._by_pair: dict[tuple[NodeType, NodeType], Relation] = {}
        for relation in relations:
            pair = (relation.parent, relation.child)
            if pair in self._by_pair:
                raise ValueError(
                    f"Duplicate relation for {relation.parent.value} -> {relation.child.value}"
                )
            self._by_pair[pair] = relation

    @property
    def relations(self) -> tuple[Relation, ...]:
        """All relations in declaration order."""
        return self._relations

    def get_relation(self, source_type: NodeType, target_type: NodeType) -> Relation | None:
        """Return the relation licensed for an ordered type pair, if any."""
        return self._by_pair.get((source_type, target_type))

    def addable_relations_from(
        self, node_type: NodeType, direction: RelationDirection
    ) -> list[AddableRelation]:
        """List the ways a node of ``node_type`` can be extended.

        Args:
            node_type: Type of the node being extended.
            direction: Whether the new node becomes its parent or its child.

        Returns:
            Addable relations in declaration order; empty if none exist.
        """
        result: list[AddableRelation] = []
        for relation in self._relations:
            if not relation.addable:
                continue
            if direction == RelationDirection.PARENT and relation.child == node_type:
                result.append(AddableRelation(relation.parent, relation))
            elif direction == RelationDirection.CHILD and relation.parent == node_type:
                result.append(AddableRelation(relation.child, relation))
        return result


DEFAULT_SCHEMA = TypeSchema()


@dataclass(frozen=True)
class Restricted:
    """Edit mode in which every edge must be licensed by ``schema``."""

    schema: TypeSchema = DEFAULT_SCHEMA


@dataclass(frozen=True)
class Unrestricted:
    """Edit mode in which any two node types may be related.

    ``schema`` still supplies canonical names for licensed pairs.
    """

    schema: TypeSchema = DEFAULT_SCHEMA


EditMode = Union[Restricted, Unrestricted]

RESTRICTED = Restricted()
UNRESTRICTED = Unrestricted()


def edit_mode(unrestricted: bool, schema: TypeSchema = DEFAULT_SCHEMA) -> EditMode:
    """Build an edit mode from a boolean setting."""
    return Unrestricted(schema) if unrestricted else Restricted(schema)


def get_relation(source_type: NodeType, target_type: NodeType, mode: EditMode) -> Relation | None:
    """Return the relation to use for a new edge between two node types.

    Unrestricted mode falls back to a generic relation for unlicensed pairs.
    """
    relation = mode.schema.get_relation(source_type, target_type)
    if relation is None and isinstance(mode, Unrestricted):
        return Relation(source_type, target_type, FALLBACK_RELATION_NAME)
    return relation


def addable_relations_from(
    node_type: NodeType, direction: RelationDirection, mode: EditMode
) -> list[AddableRelation]:
    """List addable relations for a node, honoring the edit mode.

    Unrestricted mode offers every node type through the fallback relation.
    """
    if isinstance(mode, Restricted):
        return mode.schema.addable_relations_from(node_type, direction)

    result = []
    for other in NodeType:
        if direction == RelationDirection.PARENT:
            relation = Relation(other, node_type, FALLBACK_RELATION_NAME)
        else:
            relation = Relation(node_type, other, FALLBACK_RELATION_NAME)
        result.append(AddableRelation(other, relation))
    return result


def _reaches(diagram: Diagram, start_id: str, goal_id: str, ignore_edge_id: str | None) -> bool:
    """Check whether a directed path leads from start_id to goal_id."""
    children: dict[str, list[str]] = {}
    for edge in diagram.edges:
        if edge.id == ignore_edge_id:
            continue
        children.setdefault(edge.source, []).append(edge.target)

    visited: set[str] = set()
    queue: deque[str] = deque([start_id])
    while queue:
        node_id = queue.popleft()
        if node_id == goal_id:
            return True
        if node_id in visited:
            continue
        visited.add(node_id)
        queue.extend(children.get(node_id, []))
    return False


def edge_rejection_reason(
    diagram: Diagram,
    source: GraphNode,
    target: GraphNode,
    mode: EditMode,
    ignore_edge_id: str | None = None,
) -> str | None:
    """Explain why an edge from source to target cannot be created.

    Args:
        diagram: Diagram the edge would be added to.
        source: Candidate parent node.
        target: Candidate child node.
        mode: Edit mode to validate against.
        ignore_edge_id: Edge being re-pointed, excluded from duplicate and
            cycle checks.

    Returns:
        A short reason, or None if the edge is allowed.
    """
    if source.id == target.id:
        return "self-loop"

    for edge in diagram.edges:
        if edge.id != ignore_edge_id and edge.source == source.id and edge.target == target.id:
            return "duplicate edge"

    if get_relation(source.type, target.type, mode) is None:
        return f"no relation from {source.type.value} to {target.type.value}"

    if _reaches(diagram, target.id, source.id, ignore_edge_id):
        return "edge would create a cycle"

    return None


def can_create_edge(
    diagram: Diagram,
    source: GraphNode,
    target: GraphNode,
    mode: EditMode,
    ignore_edge_id: str | None = None,
) -> bool:
    """Check whether an edge from source to target may be created."""
    return edge_rejection_reason(diagram, source, target, mode, ignore_edge_id) is None


def validate_edge(
    diagram: Diagram,
    source: GraphNode,
    target: GraphNode,
    mode: EditMode,
    ignore_edge_id: str | None = None,
) -> Relation:
    """Return the relation for a new edge, or fail if it cannot be created.

    Raises:
        InvalidTransitionError: If the edge is a self-loop, a duplicate,
            unlicensed in restricted mode, or would close a cycle.
    """
    reason = edge_rejection_reason(diagram, source, target, mode, ignore_edge_id)
    if reason is not None:
        raise InvalidTransitionError(f"Cannot connect '{source.id}' to '{target.id}': {reason}")
    relation = get_relation(source.type, target.type, mode)
    assert relation is not None  # edge_rejection_reason checked the relation
    return relation


__all__ = [
    "NodeType",
    "RelationDirection",
    "Relation",
    "AddableRelation",
    "RELATIONS",
    "FALLBACK_RELATION_NAME",
    "EMBODIES",
    "SOLVES",
    "CRITERION_FOR",
    "TypeSchema",
    "DEFAULT_SCHEMA",
    "Restricted",
    "Unrestricted",
    "EditMode",
    "RESTRICTED",
    "UNRESTRICTED",
    "edit_mode",
    "get_relation",
    "addable_relations_from",
    "edge_rejection_reason",
    "can_create_edge",
    "validate_edge",
]
