"""Relations - Edges between topic nodes.

This module defines the typed edges of a diagram:
- EdgeData: User-editable payload (score)
- Edge: A labelled parent -> child edge
"""

from __future__ import annotations

from dataclasses import dataclass, field

from topicmap.graph.GraphNode import Position
from topicmap.graph.schema import FALLBACK_RELATION_NAME
from topicmap.graph.scores import Score


@dataclass
class EdgeData:
    """Payload of an edge."""

    score: Score = Score.NONE


@dataclass
class Edge:
    """A labelled edge between two nodes of the same diagram.

    Edges point from parent to child. The label is the relation name the
    schema licenses for the endpoint types, or the fallback relation when the
    edge was created with unrestricted editing.

    Attributes:
        id: Identifier, unique across the whole topic.
        source: Id of the parent node.
        target: Id of the child node.
        label: Relation name.
        data: Score payload.
        selected: Interactive selection flag.
        hidden: True when an endpoint is filtered out of the visible subgraph.
        routing: Points from the last layout, source end first.
    """

    id: str
    source: str
    target: str
    label: str
    data: EdgeData = field(default_factory=EdgeData)
    selected: bool = False
    hidden: bool = False
    routing: list[Position] = field(default_factory=list)

    @property
    def score(self) -> Score:
        return self.data.score

    @property
    def is_fallback(self) -> bool:
        """True if the edge carries the generic unrestricted relation."""
        return self.label == FALLBACK_RELATION_NAME

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.source} --[{self.label}]--> {self.target}"


def build_edge(edge_id: str, source_id: str, target_id: str, label: str) -> Edge:
    """Build a fresh unscored edge."""
    return Edge(id=edge_id, source=source_id, target=target_id, label=label)


__all__ = ["EdgeData", "Edge", "build_edge"]
