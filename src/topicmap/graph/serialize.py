"""Topic Serialization - Snapshots and outlines of a topic.

This module converts a Topic to and from the JSON-compatible snapshot used by
persistence, and renders a markdown outline for display.

Snapshot layout::

    {
      "diagrams": {"<id>": {"id", "type", "nodes": [...], "edges": [...]}},
      "activeDiagramId": "root",
      "nextNodeId": 3,
      "nextEdgeId": 2
    }

``deserialize_topic`` validates the whole snapshot before returning, so a
malformed or inconsistent snapshot never yields a usable topic.
"""

from __future__ import annotations

from typing import Any

from topicmap.graph.claims import is_claim_diagram_id, parse_claim_diagram_id
from topicmap.graph.errors import InvariantViolationError, NotFoundError, TopicLoadError
from topicmap.graph.GraphNode import GraphNode, NodeData, Position
from topicmap.graph.relations import Edge, EdgeData
from topicmap.graph.schema import NodeType
from topicmap.graph.scores import Score
from topicmap.graph.topic import ROOT_DIAGRAM_ID, Diagram, DiagramKind, Topic, find_scorable


def _serialize_position(position: Position | None) -> dict[str, float] | None:
    if position is None:
        return None
    return {"x": position.x, "y": position.y}


def serialize_node(node: GraphNode) -> dict[str, Any]:
    """Serialize a GraphNode to a JSON-compatible dict."""
    data: dict[str, Any] = {"label": node.data.label, "score": node.data.score.value}
    if node.data.show_criteria is not None:
        data["showCriteria"] = node.data.show_criteria

    return {
        "id": node.id,
        "type": node.type.value,
        "diagramId": node.diagram_id,
        "data": data,
        "selected": node.selected,
        "hidden": node.hidden,
        "position": _serialize_position(node.position),
    }


def serialize_edge(edge: Edge) -> dict[str, Any]:
    """Serialize an Edge to a JSON-compatible dict."""
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "label": edge.label,
        "data": {"score": edge.data.score.value},
        "selected": edge.selected,
        "hidden": edge.hidden,
        "routing": [{"x": point.x, "y": point.y} for point in edge.routing],
    }


def serialize_diagram(diagram: Diagram) -> dict[str, Any]:
    return {
        "id": diagram.id,
        "type": diagram.kind.value,
        "nodes": [serialize_node(node) for node in diagram.nodes],
        "edges": [serialize_edge(edge) for edge in diagram.edges],
    }


def serialize_topic(topic: Topic) -> dict[str, Any]:
    """Serialize a Topic to a JSON-compatible snapshot.

    Args:
        topic: The topic to serialize.

    Returns:
        Dict with diagrams, the active diagram pointer and both id counters.
    """
    return {
        "diagrams": {
            diagram_id: serialize_diagram(diagram) for diagram_id, diagram in topic.diagrams.items()
        },
        "activeDiagramId": topic.active_diagram_id,
        "nextNodeId": topic.next_node_id,
        "nextEdgeId": topic.next_edge_id,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Deserialization
# ─────────────────────────────────────────────────────────────────────────────


def _require(data: dict[str, Any], key: str, expected: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(data, dict) or key not in data:
        raise TopicLoadError(f"{where}: missing '{key}'")
    value = data[key]
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise TopicLoadError(f"{where}: '{key}' has unexpected type {type(value).__name__}")
    return value


def _optional_bool(data: dict[str, Any], key: str, where: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise TopicLoadError(f"{where}: '{key}' must be a boolean")
    return value


def _deserialize_position(value: Any, where: str) -> Position | None:
    if value is None:
        return None
    x = _require(value, "x", (int, float), where)
    y = _require(value, "y", (int, float), where)
    return Position(float(x), float(y))


def _deserialize_route_point(value: Any, where: str) -> Position:
    position = _deserialize_position(value, where)
    if position is None:
        raise TopicLoadError(f"{where}: routing point must not be null")
    return position


def _deserialize_score(value: Any, where: str) -> Score:
    try:
        return Score.parse(value)
    except ValueError:
        raise TopicLoadError(f"{where}: invalid score {value!r}") from None


def deserialize_node(data: dict[str, Any]) -> GraphNode:
    """Build a GraphNode from its serialized form.

    Raises:
        TopicLoadError: If a field is missing or invalid.
    """
    node_id = _require(data, "id", str, "node")
    where = f"node '{node_id}'"
    type_value = _require(data, "type", str, where)
    try:
        node_type = NodeType(type_value)
    except ValueError:
        raise TopicLoadError(f"{where}: unknown node type {type_value!r}") from None

    payload = _require(data, "data", dict, where)
    show_criteria = payload.get("showCriteria")
    if show_criteria is not None and not isinstance(show_criteria, bool):
        raise TopicLoadError(f"{where}: 'showCriteria' must be a boolean")

    return GraphNode(
        id=node_id,
        type=node_type,
        diagram_id=_require(data, "diagramId", str, where),
        data=NodeData(
            label=_require(payload, "label", str, where),
            score=_deserialize_score(payload.get("score", Score.NONE.value), where),
            show_criteria=show_criteria,
        ),
        selected=_optional_bool(data, "selected", where),
        hidden=_optional_bool(data, "hidden", where),
        position=_deserialize_position(data.get("position"), where),
    )


def deserialize_edge(data: dict[str, Any]) -> Edge:
    """Build an Edge from its serialized form.

    Raises:
        TopicLoadError: If a field is missing or invalid.
    """
    edge_id = _require(data, "id", str, "edge")
    where = f"edge '{edge_id}'"
    payload = _require(data, "data", dict, where)
    routing = data.get("routing") or []
    if not isinstance(routing, list):
        raise TopicLoadError(f"{where}: 'routing' must be a list")

    return Edge(
        id=edge_id,
        source=_require(data, "source", str, where),
        target=_require(data, "target", str, where),
        label=_require(data, "label", str, where),
        data=EdgeData(score=_deserialize_score(payload.get("score", Score.NONE.value), where)),
        selected=_optional_bool(data, "selected", where),
        hidden=_optional_bool(data, "hidden", where),
        routing=[_deserialize_route_point(point, where) for point in routing],
    )


def deserialize_diagram(diagram_id: str, data: dict[str, Any]) -> Diagram:
    where = f"diagram '{diagram_id}'"
    kind_value = _require(data, "type", str, where)
    try:
        kind = DiagramKind(kind_value)
    except ValueError:
        raise TopicLoadError(f"{where}: unknown diagram type {kind_value!r}") from None
    if _require(data, "id", str, where) != diagram_id:
        raise TopicLoadError(f"{where}: 'id' does not match its key")

    return Diagram(
        id=diagram_id,
        kind=kind,
        nodes=[deserialize_node(node) for node in _require(data, "nodes", list, where)],
        edges=[deserialize_edge(edge) for edge in _require(data, "edges", list, where)],
    )


def _max_numeric_id(ids: list[str]) -> int:
    numeric = [int(i) for i in ids if i.isdigit()]
    return max(numeric) if numeric else -1


def validate_topic(topic: Topic) -> None:
    """Check the structural invariants a loaded topic must satisfy.

    Raises:
        TopicLoadError: On the first violated invariant.
    """
    if ROOT_DIAGRAM_ID not in topic.diagrams:
        raise TopicLoadError("topic has no root diagram")
    if topic.root_diagram.kind != DiagramKind.PROBLEM:
        raise TopicLoadError("root diagram must be a problem diagram")
    if topic.active_diagram_id not in topic.diagrams:
        raise TopicLoadError(f"active diagram '{topic.active_diagram_id}' does not exist")

    node_ids: list[str] = []
    edge_ids: list[str] = []
    for diagram_id, diagram in topic.diagrams.items():
        if diagram_id != ROOT_DIAGRAM_ID:
            if diagram.kind != DiagramKind.CLAIM or not is_claim_diagram_id(diagram_id):
                raise TopicLoadError(f"diagram '{diagram_id}' is not a valid claim diagram")
            try:
                root_claim = diagram.root_claim()
            except InvariantViolationError as exc:
                raise TopicLoadError(str(exc)) from exc
            key = parse_claim_diagram_id(diagram_id)
            try:
                arguable = find_scorable(topic.root_diagram, key.arguable_id, key.kind)
            except NotFoundError:
                raise TopicLoadError(
                    f"diagram '{diagram_id}' argues about a {key.kind.value} "
                    "missing from the root diagram"
                ) from None
            if root_claim.data.score != arguable.data.score:
                raise TopicLoadError(
                    f"diagram '{diagram_id}': root claim score differs from its arguable"
                )

        local_ids = {node.id for node in diagram.nodes}
        for node in diagram.nodes:
            if node.diagram_id != diagram_id:
                raise TopicLoadError(f"node '{node.id}' claims diagram '{node.diagram_id}'")
        for edge in diagram.edges:
            if edge.source not in local_ids or edge.target not in local_ids:
                raise TopicLoadError(f"edge '{edge.id}' has an endpoint outside '{diagram_id}'")
        node_ids.extend(node.id for node in diagram.nodes)
        edge_ids.extend(edge.id for edge in diagram.edges)

    if len(node_ids) != len(set(node_ids)) or len(edge_ids) != len(set(edge_ids)):
        raise TopicLoadError("node or edge ids are not unique across the topic")
    if topic.next_node_id <= _max_numeric_id(node_ids):
        raise TopicLoadError("nextNodeId would reuse an existing node id")
    if topic.next_edge_id <= _max_numeric_id(edge_ids):
        raise TopicLoadError("nextEdgeId would reuse an existing edge id")


def deserialize_topic(data: dict[str, Any]) -> Topic:
    """Build a Topic from a snapshot, validating it completely.

    Args:
        data: Snapshot as produced by ``serialize_topic``.

    Returns:
        A consistent Topic.

    Raises:
        TopicLoadError: If the snapshot is malformed or inconsistent.
    """
    if not isinstance(data, dict):
        raise TopicLoadError("topic snapshot must be an object")

    diagrams_data = _require(data, "diagrams", dict, "topic")
    topic = Topic(
        diagrams={
            diagram_id: deserialize_diagram(diagram_id, diagram_data)
            for diagram_id, diagram_data in diagrams_data.items()
        },
        active_diagram_id=_require(data, "activeDiagramId", str, "topic"),
        next_node_id=_require(data, "nextNodeId", int, "topic"),
        next_edge_id=_require(data, "nextEdgeId", int, "topic"),
    )
    validate_topic(topic)
    return topic


# ─────────────────────────────────────────────────────────────────────────────
# Outline
# ─────────────────────────────────────────────────────────────────────────────


def _outline_lines(diagram: Diagram) -> list[str]:
    nodes = {node.id: node for node in diagram.nodes}
    children: dict[str, list[tuple[str, str]]] = {}
    has_parent: set[str] = set()
    for edge in diagram.edges:
        children.setdefault(edge.source, []).append((edge.label, edge.target))
        has_parent.add(edge.target)

    lines: list[str] = []
    seen: set[str] = set()

    def visit(node_id: str, relation: str | None, depth: int) -> None:
        node = nodes[node_id]
        score = f" [{node.data.score.value}]" if node.data.score.is_scored else ""
        via = f"({relation}) " if relation else ""
        hidden = " (hidden)" if node.hidden else ""
        repeat = " ..." if node_id in seen else ""
        label = node.data.label or "(untitled)"
        indent = "  " * depth
        lines.append(f"{indent}- {via}{node.type.value} #{node.id}: {label}{score}{hidden}{repeat}")
        if node_id in seen:
            return
        seen.add(node_id)
        for child_relation, child_id in children.get(node_id, []):
            visit(child_id, child_relation, depth + 1)

    for node in diagram.nodes:
        if node.id not in has_parent:
            visit(node.id, None, 0)
    for node in diagram.nodes:
        if node.id not in seen:
            visit(node.id, None, 0)
    return lines


def to_markdown(topic: Topic, diagram_id: str | None = None) -> str:
    """Render diagrams as markdown outlines.

    Nodes reached through more than one parent are expanded once and
    marked with "..." afterwards.

    Args:
        topic: The topic to render.
        diagram_id: Render only this diagram; all diagrams when None.

    Returns:
        Markdown text.
    """
    diagrams = [topic.get_diagram(diagram_id)] if diagram_id else list(topic.iter_diagrams())
    sections: list[str] = []
    for diagram in diagrams:
        active = " (active)" if diagram.id == topic.active_diagram_id else ""
        sections.append(f"## {diagram.kind.value} diagram `{diagram.id}`{active}")
        sections.append("")
        sections.extend(_outline_lines(diagram) or ["(empty)"])
        sections.append("")
    return "\n".join(sections).rstrip() + "\n"


__all__ = [
    "serialize_node",
    "serialize_edge",
    "serialize_diagram",
    "serialize_topic",
    "deserialize_node",
    "deserialize_edge",
    "deserialize_diagram",
    "deserialize_topic",
    "validate_topic",
    "to_markdown",
]
