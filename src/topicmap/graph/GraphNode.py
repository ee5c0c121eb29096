"""GraphNode - Node representation for topic diagrams.

This module provides the node data structures:
- Position: Layout coordinates assigned by the layout function
- NodeData: User-editable payload (label, score, criteria visibility)
- GraphNode: A typed node owned by one diagram
"""

from __future__ import annotations

from dataclasses import dataclass, field

from topicmap.graph.schema import NodeType
from topicmap.graph.scores import Score


@dataclass(frozen=True)
class Position:
    """A point in diagram coordinates."""

    x: float
    y: float

    def __str__(self) -> str:
        """Return string representation for display."""
        return f"({self.x:g}, {self.y:g})"


@dataclass
class NodeData:
    """Payload of a node.

    Attributes:
        label: Display text.
        score: Current score of the node as an arguable.
        show_criteria: Whether criteria under this problem are shown.
            Only meaningful on problem nodes; None elsewhere.
    """

    label: str = ""
    score: Score = Score.NONE
    show_criteria: bool | None = None


@dataclass
class GraphNode:
    """A node in a topic diagram.

    The ``type`` field determines which relations the node may take part in
    and whether ``data.show_criteria`` applies.

    Attributes:
        id: Identifier, unique across the whole topic.
        type: The node type (problem, solution, ...).
        diagram_id: Id of the diagram owning this node.
        data: Label, score and view flags.
        selected: Interactive selection flag.
        hidden: True when the node is filtered out of the visible subgraph.
        position: Coordinates from the last layout, if any.
    """

    id: str
    type: NodeType
    diagram_id: str
    data: NodeData = field(default_factory=NodeData)
    selected: bool = False
    hidden: bool = False
    position: Position | None = None


def build_node(
    node_id: str,
    node_type: NodeType,
    diagram_id: str,
    label: str = "",
    score: Score = Score.NONE,
) -> GraphNode:
    """Build a fresh node with type-appropriate defaults.

    Problem nodes start with criteria hidden.
    """
    show_criteria = False if node_type == NodeType.PROBLEM else None
    return GraphNode(
        id=node_id,
        type=node_type,
        diagram_id=diagram_id,
        data=NodeData(label=label, score=score, show_criteria=show_criteria),
    )


__all__ = ["Position", "NodeData", "GraphNode", "build_node"]
