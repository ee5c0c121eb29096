"""Topic - The aggregate root holding every diagram of a problem map.

A topic owns one root problem diagram plus zero or more claim diagrams,
created lazily to argue for the score of a node or edge. Node and edge id
counters are shared by all diagrams so ids never collide within a topic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Union

from topicmap.graph.errors import InvariantViolationError, NotFoundError
from topicmap.graph.GraphNode import GraphNode, build_node
from topicmap.graph.relations import Edge
from topicmap.graph.schema import NodeType

ROOT_DIAGRAM_ID = "root"


class DiagramKind(Enum):
    """Kinds of diagrams in a topic."""

    PROBLEM = "Problem"
    CLAIM = "Claim"


class ArguableKind(Enum):
    """Whether an arguable is a node or an edge."""

    NODE = "node"
    EDGE = "edge"


Scorable = Union[GraphNode, Edge]


@dataclass
class Diagram:
    """A set of nodes and the edges between them.

    Attributes:
        id: Diagram id; "root" or a claim diagram id.
        kind: Problem or Claim.
        nodes: Nodes in insertion order.
        edges: Edges in insertion order.
    """

    id: str
    kind: DiagramKind
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Edge | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def iter_nodes_by_type(self, node_type: NodeType) -> Iterator[GraphNode]:
        """Iterate nodes of one type."""
        for node in self.nodes:
            if node.type == node_type:
                yield node

    def iter_outgoing_edges(self, node_id: str) -> Iterator[Edge]:
        """Iterate edges whose parent is node_id."""
        for edge in self.edges:
            if edge.source == node_id:
                yield edge

    def iter_incoming_edges(self, node_id: str) -> Iterator[Edge]:
        """Iterate edges whose child is node_id."""
        for edge in self.edges:
            if edge.target == node_id:
                yield edge

    def root_claim(self) -> GraphNode:
        """Return the single rootClaim of a claim diagram.

        Raises:
            InvariantViolationError: If the diagram does not hold exactly one.
        """
        claims = list(self.iter_nodes_by_type(NodeType.ROOT_CLAIM))
        if len(claims) != 1:
            raise InvariantViolationError(
                f"Diagram '{self.id}' has {len(claims)} root claims, expected 1"
            )
        return claims[0]


@dataclass
class Topic:
    """Mutable aggregate of all diagrams of a topic.

    Attributes:
        diagrams: Mapping of diagram id to diagram.
        active_diagram_id: Diagram currently being viewed and edited.
        next_node_id: Next node id to allocate, shared by all diagrams.
        next_edge_id: Next edge id to allocate, shared by all diagrams.
    """

    diagrams: dict[str, Diagram] = field(default_factory=dict)
    active_diagram_id: str = ROOT_DIAGRAM_ID
    next_node_id: int = 0
    next_edge_id: int = 0

    @property
    def root_diagram(self) -> Diagram:
        return self.get_diagram(ROOT_DIAGRAM_ID)

    @property
    def active_diagram(self) -> Diagram:
        return self.get_diagram(self.active_diagram_id)

    def has_diagram(self, diagram_id: str) -> bool:
        return diagram_id in self.diagrams

    def get_diagram(self, diagram_id: str) -> Diagram:
        """Look up a diagram by id.

        Raises:
            NotFoundError: If no such diagram exists.
        """
        diagram = self.diagrams.get(diagram_id)
        if diagram is None:
            raise NotFoundError(f"Diagram '{diagram_id}' not found")
        return diagram

    def iter_diagrams(self) -> Iterator[Diagram]:
        """Iterate diagrams, root first."""
        yield from self.diagrams.values()

    def all_nodes(self) -> Iterator[GraphNode]:
        for diagram in self.diagrams.values():
            yield from diagram.nodes

    def all_edges(self) -> Iterator[Edge]:
        for diagram in self.diagrams.values():
            yield from diagram.edges


def find_node(diagram: Diagram, node_id: str) -> GraphNode:
    """Find a node in a diagram.

    Raises:
        NotFoundError: If the node is not in the diagram.
    """
    node = diagram.get_node(node_id)
    if node is None:
        raise NotFoundError(f"Node '{node_id}' not found in diagram '{diagram.id}'")
    return node


def find_edge(diagram: Diagram, edge_id: str) -> Edge:
    """Find an edge in a diagram.

    Raises:
        NotFoundError: If the edge is not in the diagram.
    """
    edge = diagram.get_edge(edge_id)
    if edge is None:
        raise NotFoundError(f"Edge '{edge_id}' not found in diagram '{diagram.id}'")
    return edge


def find_scorable(diagram: Diagram, scorable_id: str, kind: ArguableKind) -> Scorable:
    """Find a node or edge by id and kind.

    Node and edge ids come from separate counters, so the kind decides
    which list is searched.

    Raises:
        NotFoundError: If nothing of that kind has the id.
    """
    if kind == ArguableKind.NODE:
        return find_node(diagram, scorable_id)
    return find_edge(diagram, scorable_id)


def new_topic(problem_label: str = "") -> Topic:
    """Create a topic holding a root diagram with a single problem node."""
    root = Diagram(id=ROOT_DIAGRAM_ID, kind=DiagramKind.PROBLEM)
    root.nodes.append(build_node("0", NodeType.PROBLEM, ROOT_DIAGRAM_ID, label=problem_label))
    return Topic(
        diagrams={ROOT_DIAGRAM_ID: root},
        active_diagram_id=ROOT_DIAGRAM_ID,
        next_node_id=1,
        next_edge_id=0,
    )


__all__ = [
    "ROOT_DIAGRAM_ID",
    "DiagramKind",
    "ArguableKind",
    "Scorable",
    "Diagram",
    "Topic",
    "find_node",
    "find_edge",
    "find_scorable",
    "new_topic",
]
