"""Layout - Positioning of the visible part of a diagram.

The layout algorithm itself is injected: any callable honoring
``LayoutFunction`` can be used. It receives only the visible subgraph and
must return a position for every node and a route for every edge it was
given, deterministically. ``layered_layout`` is the default implementation.

LayoutTrigger applies a layout to a diagram after a structural or
visibility change and hands back the complete node and edge lists with
hidden flags and positions updated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import partial
from typing import Any, Callable

import networkx as nx
import structlog

from topicmap.graph.errors import InvariantViolationError
from topicmap.graph.GraphNode import GraphNode, Position
from topicmap.graph.relations import Edge
from topicmap.graph.schema import CRITERION_FOR, NodeType
from topicmap.graph.topic import Diagram, DiagramKind

logger = structlog.get_logger(__name__)

DEFAULT_NODE_SPACING = 160.0
DEFAULT_RANK_SPACING = 120.0


class Orientation(Enum):
    """Direction in which layers grow."""

    DOWN = "DOWN"
    RIGHT = "RIGHT"


@dataclass
class LayoutResult:
    """Output of a layout function.

    Attributes:
        positions: Position per node id.
        routes: Routing points per edge id, source end first.
    """

    positions: dict[str, Position] = field(default_factory=dict)
    routes: dict[str, list[Position]] = field(default_factory=dict)


@dataclass
class LayoutedDiagram:
    """Every node and edge of a diagram after layout."""

    nodes: list[GraphNode]
    edges: list[Edge]


LayoutFunction = Callable[[list[GraphNode], list[Edge], Orientation], LayoutResult]


def hidden_node_ids(diagram: Diagram) -> set[str]:
    """Return ids of nodes filtered out by the current view flags.

    A criterion is hidden when every problem it is a criterion for has
    ``show_criteria`` switched off. Criteria not attached to any problem
    stay visible.
    """
    nodes = {node.id: node for node in diagram.nodes}
    hidden: set[str] = set()
    for criterion in diagram.iter_nodes_by_type(NodeType.CRITERION):
        problems = [
            nodes[edge.source]
            for edge in diagram.iter_incoming_edges(criterion.id)
            if edge.label == CRITERION_FOR
            and edge.source in nodes
            and nodes[edge.source].type == NodeType.PROBLEM
        ]
        if problems and not any(problem.data.show_criteria for problem in problems):
            hidden.add(criterion.id)
    return hidden


def visible_subgraph(diagram: Diagram) -> tuple[list[GraphNode], list[Edge]]:
    """Return the nodes and edges eligible for layout.

    Edges are visible only when both endpoints are.
    """
    hidden = hidden_node_ids(diagram)
    nodes = [node for node in diagram.nodes if node.id not in hidden]
    edges = [
        edge for edge in diagram.edges if edge.source not in hidden and edge.target not in hidden
    ]
    return nodes, edges


def _id_key(node_id: str) -> tuple[int, int, str]:
    """Sort key ordering numeric ids numerically, others after them."""
    if node_id.isdigit():
        return (0, int(node_id), "")
    return (1, 0, node_id)


def _layers(nodes: list[GraphNode], edges: list[Edge]) -> list[list[str]]:
    """Assign nodes to layers by longest path from the sources.

    Strongly connected components share a layer, so the layering is defined
    even for graphs loaded with cycles.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(node.id for node in nodes)
    graph.add_edges_from((edge.source, edge.target) for edge in edges)

    condensed = nx.condensation(graph)
    mapping = condensed.graph["mapping"]
    depth_of: dict[int, int] = {}
    for depth, generation in enumerate(nx.topological_generations(condensed)):
        for component in generation:
            depth_of[component] = depth

    layers: dict[int, list[str]] = {}
    for node in nodes:
        layers.setdefault(depth_of[mapping[node.id]], []).append(node.id)
    return [layers[depth] for depth in sorted(layers)]


def layered_layout(
    nodes: list[GraphNode],
    edges: list[Edge],
    orientation: Orientation,
    node_spacing: float = DEFAULT_NODE_SPACING,
    rank_spacing: float = DEFAULT_RANK_SPACING,
) -> LayoutResult:
    """Default layout: layered placement with barycentric ordering.

    Layers follow edge direction. Within a layer, nodes are ordered by the
    mean slot of their parents in earlier layers, ties broken by id, and
    centered around the axis.

    Args:
        nodes: Visible nodes.
        edges: Visible edges between those nodes.
        orientation: DOWN grows layers along y, RIGHT along x.
        node_spacing: Distance between neighbours in a layer.
        rank_spacing: Distance between layers.

    Returns:
        Positions for every node and a straight route for every edge.
    """
    if not nodes:
        return LayoutResult()

    parents: dict[str, list[str]] = {}
    for edge in edges:
        parents.setdefault(edge.target, []).append(edge.source)

    slot: dict[str, int] = {}
    positions: dict[str, Position] = {}
    for depth, layer in enumerate(_layers(nodes, edges)):

        def barycenter(node_id: str) -> float:
            placed = [slot[p] for p in parents.get(node_id, []) if p in slot]
            return sum(placed) / len(placed) if placed else float("inf")

        ordered = sorted(layer, key=lambda node_id: (barycenter(node_id), _id_key(node_id)))
        middle = (len(ordered) - 1) / 2
        for index, node_id in enumerate(ordered):
            slot[node_id] = index
            offset = (index - middle) * node_spacing
            along = depth * rank_spacing
            if orientation == Orientation.DOWN:
                positions[node_id] = Position(offset, along)
            else:
                positions[node_id] = Position(along, offset)

    routes = {edge.id: [positions[edge.source], positions[edge.target]] for edge in edges}
    return LayoutResult(positions=positions, routes=routes)


DEFAULT_ORIENTATIONS: dict[DiagramKind, Orientation] = {
    DiagramKind.PROBLEM: Orientation.DOWN,
    DiagramKind.CLAIM: Orientation.RIGHT,
}


class LayoutTrigger:
    """Recompute positions for the visible subgraph of a diagram.

    Args:
        layout: Injected layout function; defaults to ``layered_layout``.
        orientations: Orientation per diagram kind.
    """

    def __init__(
        self,
        layout: LayoutFunction | None = None,
        orientations: Mapping[DiagramKind, Orientation] | None = None,
    ) -> None:
        self._layout: LayoutFunction = layout or layered_layout
        self._orientations = dict(DEFAULT_ORIENTATIONS)
        if orientations:
            self._orientations.update(orientations)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> LayoutTrigger:
        """Build a trigger using the default layout and ``[layout]`` settings."""
        layout_config = config.get("layout", {})
        layout = partial(
            layered_layout,
            node_spacing=float(layout_config.get("node_spacing", DEFAULT_NODE_SPACING)),
            rank_spacing=float(layout_config.get("rank_spacing", DEFAULT_RANK_SPACING)),
        )
        orientations = {
            DiagramKind.PROBLEM: Orientation(
                str(layout_config.get("problem_orientation", "DOWN")).upper()
            ),
            DiagramKind.CLAIM: Orientation(
                str(layout_config.get("claim_orientation", "RIGHT")).upper()
            ),
        }
        return cls(layout, orientations)

    def orientation_for(self, diagram: Diagram) -> Orientation:
        return self._orientations[diagram.kind]

    def layout_visible_components(self, diagram: Diagram) -> LayoutedDiagram:
        """Lay out the visible subgraph of a diagram.

        The input diagram is not modified. Hidden nodes keep their previous
        position; hidden edges keep their previous route.

        Returns:
            All nodes and edges of the diagram, in their original order,
            with ``hidden``, ``position`` and ``routing`` updated.

        Raises:
            InvariantViolationError: If the layout function does not return
                exactly the node and edge ids it was given.
        """
        visible_nodes, visible_edges = visible_subgraph(diagram)
        result = self._layout(visible_nodes, visible_edges, self.orientation_for(diagram))

        node_ids = {node.id for node in visible_nodes}
        edge_ids = {edge.id for edge in visible_edges}
        if set(result.positions) != node_ids or set(result.routes) != edge_ids:
            raise InvariantViolationError(
                f"Layout of diagram '{diagram.id}' did not preserve node and edge identity"
            )

        nodes = [
            replace(
                node,
                hidden=node.id not in node_ids,
                position=result.positions.get(node.id, node.position),
            )
            for node in diagram.nodes
        ]
        edges = [
            replace(
                edge,
                hidden=edge.id not in edge_ids,
                routing=list(result.routes.get(edge.id, edge.routing)),
            )
            for edge in diagram.edges
        ]

        logger.debug(
            "diagram_layouted",
            diagram_id=diagram.id,
            visible_nodes=len(node_ids),
            hidden_nodes=len(diagram.nodes) - len(node_ids),
            visible_edges=len(edge_ids),
        )
        return LayoutedDiagram(nodes=nodes, edges=edges)


__all__ = [
    "Orientation",
    "LayoutResult",
    "LayoutedDiagram",
    "LayoutFunction",
    "hidden_node_ids",
    "visible_subgraph",
    "layered_layout",
    "DEFAULT_ORIENTATIONS",
    "LayoutTrigger",
]
